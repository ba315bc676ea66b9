from __future__ import annotations

from typing import Any, Dict, Optional

from bson import ObjectId
from fastapi import APIRouter, Depends, Query

from craftopia.auth.deps import get_db, get_optional_user, require_admin
from craftopia.catalog.categories import (
    category_stats,
    create_category,
    delete_category,
    get_category,
    get_category_detail,
    list_active_categories,
    list_categories,
    update_category,
)
from craftopia.catalog.decors import decor_view, list_category_decors
from craftopia.db import Database
from craftopia.models import AuthUser
from craftopia.util.response import serialize_doc, success_response

from .common import bad_request, not_found, paged_response, path_id
from .schemas import CategoryCreateRequest, CategoryUpdateRequest


router = APIRouter(prefix="/categories", tags=["categories"])


# -----------------------------
# Public / optional auth
# -----------------------------


@router.get("/active")
def get_active_categories(db: Database = Depends(get_db)) -> Dict[str, Any]:
    rows = list_active_categories(db)
    return success_response("Active categories retrieved successfully", [serialize_doc(r) for r in rows])


@router.get("")
def get_categories(
    page: Optional[int] = Query(None, ge=1),
    limit: Optional[int] = None,
    sort: Optional[str] = None,
    search: Optional[str] = None,
    isActive: Optional[bool] = None,
    _: Optional[AuthUser] = Depends(get_optional_user),
    db: Database = Depends(get_db),
) -> Dict[str, Any]:
    rows, pg = list_categories(db, page=page, limit=limit, sort=sort, search=search, is_active=isActive)
    return paged_response(
        "Categories retrieved successfully",
        key="categories",
        rows=rows,
        pg=pg,
        total_key="totalCategories",
    )


# Declared before /{id} so "admin" is not parsed as an id.
@router.get("/admin/stats")
def get_category_stats(
    _: AuthUser = Depends(require_admin),
    db: Database = Depends(get_db),
) -> Dict[str, Any]:
    return success_response("Category statistics retrieved successfully", serialize_doc(category_stats(db)))


@router.get("/{id}")
def get_one_category(
    _: Optional[AuthUser] = Depends(get_optional_user),
    category_id: ObjectId = Depends(path_id),
    db: Database = Depends(get_db),
) -> Dict[str, Any]:
    row = get_category_detail(db, category_id)
    if row is None:
        raise not_found("Category")
    return success_response("Category retrieved successfully", serialize_doc(row))


@router.get("/{id}/decors")
def get_category_decors(
    page: Optional[int] = Query(None, ge=1),
    limit: Optional[int] = None,
    sort: Optional[str] = None,
    _: Optional[AuthUser] = Depends(get_optional_user),
    category_id: ObjectId = Depends(path_id),
    db: Database = Depends(get_db),
) -> Dict[str, Any]:
    category = get_category(db, category_id)
    if category is None:
        raise not_found("Category")
    rows, pg = list_category_decors(db, category, page=page, limit=limit, sort=sort)
    summary = {
        "id": str(category["_id"]),
        "name": category.get("name"),
        "description": category.get("description"),
    }
    return paged_response(
        "Category decors retrieved successfully",
        key="decors",
        rows=rows,
        pg=pg,
        total_key="totalDecors",
        view=decor_view,
        extra={"category": summary},
    )


# -----------------------------
# Admin
# -----------------------------


@router.post("", status_code=201)
def post_category(
    payload: CategoryCreateRequest,
    user: AuthUser = Depends(require_admin),
    db: Database = Depends(get_db),
) -> Dict[str, Any]:
    try:
        row = create_category(
            db,
            name=payload.name,
            description=payload.description,
            icon=payload.icon,
            created_by=user.id,
        )
    except ValueError as e:
        raise bad_request(e)
    return success_response("Category created successfully", serialize_doc(row))


@router.put("/{id}")
def put_category(
    payload: CategoryUpdateRequest,
    _: AuthUser = Depends(require_admin),
    category_id: ObjectId = Depends(path_id),
    db: Database = Depends(get_db),
) -> Dict[str, Any]:
    try:
        row = update_category(db, category_id, payload.model_dump(exclude_none=True))
    except ValueError as e:
        raise bad_request(e)
    if row is None:
        raise not_found("Category")
    return success_response("Category updated successfully", serialize_doc(row))


@router.delete("/{id}")
def remove_category(
    _: AuthUser = Depends(require_admin),
    category_id: ObjectId = Depends(path_id),
    db: Database = Depends(get_db),
) -> Dict[str, Any]:
    try:
        deleted = delete_category(db, category_id)
    except ValueError as e:
        raise bad_request(e)
    if not deleted:
        raise not_found("Category")
    return success_response("Category deleted successfully")
