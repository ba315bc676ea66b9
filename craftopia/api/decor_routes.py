"""Decor (product) endpoints.

Create / update take multipart form data so images can travel with the record.
List-valued fields (tags, materials) accept a JSON array string or a
comma-separated string; dimensions is a JSON object string.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Tuple

from bson import ObjectId
from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from pymongo.errors import DuplicateKeyError

from craftopia.auth.deps import get_db, get_optional_user, require_admin
from craftopia.catalog.categories import get_category
from craftopia.catalog.decors import (
    MAX_IMAGES,
    InvalidCategory,
    build_decor,
    build_decor_update,
    build_filter,
    create_decor,
    decor_stats,
    decor_view,
    delete_decor,
    featured_decors,
    get_decor,
    get_decor_detail,
    list_decors,
    search_decors,
    update_decor,
    update_stock,
)
from craftopia.db import Database, object_id_or_none
from craftopia.media.cloudinary import CloudinaryClient
from craftopia.models import DECOR_STATUSES, STATUS_ACTIVE, AuthUser
from craftopia.util.normalization import parse_json_object, parse_list_field
from craftopia.util.response import success_response

from .common import bad_request, get_media, not_found, paged_response, path_id
from .schemas import StockUpdateRequest


router = APIRouter(prefix="/decors", tags=["decors"])

_REQUIRED = ("name", "description", "category", "price", "stock", "materials")


def _debug(msg: str) -> None:
    print(f"[api] {msg}")


# -----------------------------
# Form helpers
# -----------------------------


def _form_bool(raw: Optional[str]) -> Optional[bool]:
    if raw is None or str(raw).strip() == "":
        return None
    return str(raw).strip().lower() in ("true", "1", "yes", "on")


def _form_fields(
    *,
    name: Optional[str],
    description: Optional[str],
    category: Optional[str],
    price: Optional[str],
    originalPrice: Optional[str],
    stock: Optional[str],
    status: Optional[str],
    featured: Optional[str],
    tags: Optional[str],
    materials: Optional[str],
    careInstructions: Optional[str],
    dimensions: Optional[str],
) -> Dict[str, Any]:
    """Normalize the multipart fields into the store's input dict (absent -> omitted)."""
    try:
        fields: Dict[str, Any] = {
            "name": name,
            "description": description,
            "category": (category or "").strip() or None,
            "price": price,
            "originalPrice": originalPrice,
            "stock": stock,
            "status": (status or "").strip() or None,
            "featured": _form_bool(featured),
            "tags": parse_list_field(tags),
            "materials": parse_list_field(materials),
            "careInstructions": careInstructions,
            "dimensions": parse_json_object(dimensions),
        }
    except ValueError as e:
        raise bad_request(e)
    return {k: v for k, v in fields.items() if v is not None}


def _check_category(db: Database, category: Optional[str]) -> None:
    if category is None:
        return
    if object_id_or_none(category) is None:
        raise HTTPException(status_code=400, detail="Invalid category ID format")
    if get_category(db, category) is None:
        raise HTTPException(status_code=400, detail="Invalid category")


def _read_files(images: Optional[Sequence[UploadFile]]) -> List[Tuple[str, bytes]]:
    out: List[Tuple[str, bytes]] = []
    for f in images or []:
        if f is None or not f.filename:
            continue
        out.append((f.filename, f.file.read()))
    return out


def _upload(media: CloudinaryClient, files: List[Tuple[str, bytes]]) -> List[str]:
    if not files:
        return []
    return [img.url for img in media.upload_many(files)]


def _discard(media: CloudinaryClient, urls: List[str]) -> None:
    if urls:
        _debug(f"Discarding {len(urls)} uploaded image(s)")
        media.delete_urls(urls)


# -----------------------------
# Public
# -----------------------------


@router.get("")
@router.get("/active")
def get_active_decors(
    page: Optional[int] = Query(None, ge=1),
    limit: Optional[int] = None,
    sort: Optional[str] = None,
    search: Optional[str] = None,
    category: Optional[str] = None,
    featured: Optional[bool] = None,
    minPrice: Optional[float] = Query(None, ge=0),
    maxPrice: Optional[float] = Query(None, ge=0),
    db: Database = Depends(get_db),
) -> Dict[str, Any]:
    try:
        flt = build_filter(
            search=search,
            category=category,
            status=STATUS_ACTIVE,
            featured=featured,
            min_price=minPrice,
            max_price=maxPrice,
            search_materials=False,
        )
    except InvalidCategory as e:
        raise bad_request(e)
    rows, pg = list_decors(db, flt, page=page, limit=limit, sort=sort, default_limit=12, creators=False)
    return paged_response(
        "Active decors retrieved successfully",
        key="decors",
        rows=rows,
        pg=pg,
        total_key="totalDecors",
        view=decor_view,
    )


@router.get("/featured")
def get_featured_decors(
    limit: int = 8,
    db: Database = Depends(get_db),
) -> Dict[str, Any]:
    rows = featured_decors(db, limit=limit)
    return success_response("Featured decors retrieved successfully", [decor_view(r) for r in rows])


@router.get("/search")
def search(
    q: Optional[str] = None,
    category: Optional[str] = Query(None, pattern="^[0-9a-fA-F]{24}$"),
    minPrice: Optional[float] = Query(None, ge=0),
    maxPrice: Optional[float] = Query(None, ge=0),
    materials: Optional[str] = None,
    tags: Optional[str] = None,
    sortBy: Optional[str] = Query(None, pattern="^(name|price|createdAt|rating)$"),
    order: Optional[str] = Query(None, pattern="^(asc|desc)$"),
    page: int = Query(1, ge=1),
    limit: int = 12,
    db: Database = Depends(get_db),
) -> Dict[str, Any]:
    q = (q or "").strip() or None
    try:
        rows, pg = search_decors(
            db,
            q=q,
            category=category,
            min_price=minPrice,
            max_price=maxPrice,
            materials=parse_list_field(materials),
            tags=parse_list_field(tags),
            sort_by=sortBy,
            order=order,
            page=page,
            limit=limit,
        )
    except InvalidCategory as e:
        raise bad_request(e)

    echoed = {
        "query": q,
        "category": category,
        "minPrice": minPrice,
        "maxPrice": maxPrice,
        "materials": materials,
        "tags": tags,
        "sortBy": sortBy,
        "order": order,
    }
    return paged_response(
        "Search completed successfully",
        key="decors",
        rows=rows,
        pg=pg,
        total_key="totalDecors",
        view=decor_view,
        extra={"searchParams": {k: v for k, v in echoed.items() if v is not None}},
    )


# -----------------------------
# Admin reads
# -----------------------------


# Declared before /{id} so "admin" is not parsed as an id.
@router.get("/admin/stats")
def get_decor_stats(
    _: AuthUser = Depends(require_admin),
    db: Database = Depends(get_db),
) -> Dict[str, Any]:
    return success_response("Decor statistics retrieved successfully", decor_stats(db))


@router.get("/admin/all")
def get_all_decors(
    page: Optional[int] = Query(None, ge=1),
    limit: Optional[int] = None,
    sort: Optional[str] = None,
    search: Optional[str] = None,
    category: Optional[str] = None,
    status: Optional[str] = None,
    featured: Optional[bool] = None,
    minPrice: Optional[float] = Query(None, ge=0),
    maxPrice: Optional[float] = Query(None, ge=0),
    _: AuthUser = Depends(require_admin),
    db: Database = Depends(get_db),
) -> Dict[str, Any]:
    if status is not None and status not in DECOR_STATUSES:
        raise HTTPException(status_code=400, detail="Invalid status")
    try:
        flt = build_filter(
            search=search,
            category=category,
            status=status,
            featured=featured,
            min_price=minPrice,
            max_price=maxPrice,
        )
    except InvalidCategory as e:
        raise bad_request(e)
    rows, pg = list_decors(db, flt, page=page, limit=limit, sort=sort)
    return paged_response(
        "Decors retrieved successfully",
        key="decors",
        rows=rows,
        pg=pg,
        total_key="totalDecors",
        view=decor_view,
    )


@router.get("/{id}")
def get_one_decor(
    includeInactive: bool = False,
    _: Optional[AuthUser] = Depends(get_optional_user),
    decor_id: ObjectId = Depends(path_id),
    db: Database = Depends(get_db),
) -> Dict[str, Any]:
    row = get_decor_detail(db, decor_id, include_inactive=includeInactive)
    if row is None:
        raise not_found("Decor")
    return success_response("Decor retrieved successfully", decor_view(row))


# -----------------------------
# Admin writes
# -----------------------------


@router.post("", status_code=201)
def post_decor(
    name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    originalPrice: Optional[str] = Form(None),
    stock: Optional[str] = Form(None),
    status: Optional[str] = Form(None),
    featured: Optional[str] = Form(None),
    tags: Optional[str] = Form(None),
    materials: Optional[str] = Form(None),
    careInstructions: Optional[str] = Form(None),
    dimensions: Optional[str] = Form(None),
    images: Optional[List[UploadFile]] = File(None),
    user: AuthUser = Depends(require_admin),
    db: Database = Depends(get_db),
    media: CloudinaryClient = Depends(get_media),
) -> Dict[str, Any]:
    fields = _form_fields(
        name=name,
        description=description,
        category=category,
        price=price,
        originalPrice=originalPrice,
        stock=stock,
        status=status,
        featured=featured,
        tags=tags,
        materials=materials,
        careInstructions=careInstructions,
        dimensions=dimensions,
    )
    missing = [k for k in _REQUIRED if fields.get(k) in (None, "", [])]
    if missing:
        raise HTTPException(
            status_code=400,
            detail="Missing required fields: name, description, category, price, stock, materials",
        )
    try:
        float(fields["price"])
        float(fields["stock"])
    except (TypeError, ValueError):
        raise HTTPException(status_code=400, detail="Price and stock must be valid numbers")
    _check_category(db, fields["category"])

    files = _read_files(images)
    if len(files) > MAX_IMAGES:
        raise HTTPException(status_code=400, detail=f"Maximum {MAX_IMAGES} images allowed")
    try:
        build_decor(fields, created_by=user.id)
    except ValueError as e:
        raise bad_request(e)

    urls = _upload(media, files)
    fields["images"] = urls
    try:
        doc = create_decor(db, fields, created_by=user.id)
    except ValueError as e:
        _discard(media, urls)
        raise bad_request(e)
    except DuplicateKeyError:
        _discard(media, urls)
        raise

    row = get_decor_detail(db, doc["_id"], include_inactive=True)
    return success_response("Decor created successfully", decor_view(row))


@router.put("/{id}")
def put_decor(
    name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    originalPrice: Optional[str] = Form(None),
    stock: Optional[str] = Form(None),
    status: Optional[str] = Form(None),
    featured: Optional[str] = Form(None),
    tags: Optional[str] = Form(None),
    materials: Optional[str] = Form(None),
    careInstructions: Optional[str] = Form(None),
    dimensions: Optional[str] = Form(None),
    replaceImages: Optional[str] = Form(None),
    images: Optional[List[UploadFile]] = File(None),
    _: AuthUser = Depends(require_admin),
    decor_id: ObjectId = Depends(path_id),
    db: Database = Depends(get_db),
    media: CloudinaryClient = Depends(get_media),
) -> Dict[str, Any]:
    current = get_decor(db, decor_id, include_inactive=True)
    if current is None:
        raise not_found("Decor")

    fields = _form_fields(
        name=name,
        description=description,
        category=category,
        price=price,
        originalPrice=originalPrice,
        stock=stock,
        status=status,
        featured=featured,
        tags=tags,
        materials=materials,
        careInstructions=careInstructions,
        dimensions=dimensions,
    )
    _check_category(db, fields.get("category"))

    files = _read_files(images)
    replace = bool(_form_bool(replaceImages))
    old_images: List[str] = list(current.get("images") or [])
    if files:
        kept = 0 if replace else len(old_images)
        if kept + len(files) > MAX_IMAGES:
            raise HTTPException(status_code=400, detail=f"Maximum {MAX_IMAGES} images allowed")
    try:
        build_decor_update(current, fields)
    except ValueError as e:
        raise bad_request(e)

    urls = _upload(media, files)
    if urls:
        fields["images"] = urls if replace else old_images + urls
    try:
        row = update_decor(db, decor_id, fields)
    except ValueError as e:
        _discard(media, urls)
        raise bad_request(e)
    except DuplicateKeyError:
        _discard(media, urls)
        raise
    if row is None:
        _discard(media, urls)
        raise not_found("Decor")

    if urls and replace and old_images:
        media.delete_urls(old_images)

    detail = get_decor_detail(db, decor_id, include_inactive=True)
    return success_response("Decor updated successfully", decor_view(detail))


@router.patch("/{id}/stock")
def patch_stock(
    payload: StockUpdateRequest,
    _: AuthUser = Depends(require_admin),
    decor_id: ObjectId = Depends(path_id),
    db: Database = Depends(get_db),
) -> Dict[str, Any]:
    try:
        row = update_stock(db, decor_id, payload.stock)
    except ValueError as e:
        raise bad_request(e)
    if row is None:
        raise not_found("Decor")
    return success_response(
        "Stock updated successfully",
        {"id": str(row["_id"]), "stock": row["stock"], "status": row["status"]},
    )


@router.delete("/{id}")
def remove_decor(
    _: AuthUser = Depends(require_admin),
    decor_id: ObjectId = Depends(path_id),
    db: Database = Depends(get_db),
    media: CloudinaryClient = Depends(get_media),
) -> Dict[str, Any]:
    removed = delete_decor(db, decor_id)
    if removed is None:
        raise not_found("Decor")
    if removed.get("images"):
        media.delete_urls(list(removed["images"]))
    return success_response("Decor deleted successfully")
