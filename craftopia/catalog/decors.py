"""Decor (product) store.

The document rules live here as plain functions, applied explicitly on every
write instead of as save hooks:

- slug derived from the name
- price / originalPrice rounded to cents; originalPrice kept only when it is a
  real discount (strictly greater than price)
- status follows stock: 0 -> out_of_stock (unless discontinued),
  restocked out_of_stock -> active
- after a write, the owning category's decorCount is adjusted explicitly
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional, Tuple

from pymongo import ReturnDocument

from craftopia.db import Database, object_id_or_none
from craftopia.models import (
    DECOR_STATUSES,
    STATUS_ACTIVE,
    STATUS_DISCONTINUED,
    STATUS_INACTIVE,
    STATUS_OUT_OF_STOCK,
)
from craftopia.util.normalization import generate_slug
from craftopia.util.pagination import Pagination, paginate, parse_sort
from craftopia.util.response import serialize_doc
from craftopia.util.time import utcnow

from .categories import adjust_decor_count, get_category
from .refs import populate, populate_one


DECOR_SORT_FIELDS = ("name", "price", "createdAt", "updatedAt", "stock", "salesCount", "views", "rating.average")
SEARCH_SORT_FIELDS = {
    "name": "name",
    "price": "price",
    "createdAt": "createdAt",
    "rating": "rating.average",
}

NAME_MAX = 200
DESCRIPTION_MAX = 2000
CARE_MAX = 1000
MAX_IMAGES = 10
MAX_TAGS = 20
MAX_MATERIALS = 15
DIMENSION_KEYS = ("length", "width", "height", "weight")


class InvalidCategory(ValueError):
    pass


def _debug(msg: str) -> None:
    print(f"[catalog] {msg}")


# -----------------------------
# Field rules
# -----------------------------


def round_price(value: Any) -> float:
    return round(float(value) * 100) / 100


def status_for_stock(stock: int, status: str) -> str:
    """Status after a stock edit."""
    if stock == 0 and status != STATUS_DISCONTINUED:
        return STATUS_OUT_OF_STOCK
    if stock > 0 and status == STATUS_OUT_OF_STOCK:
        return STATUS_ACTIVE
    return status


def effective_original_price(price: float, original_price: Optional[float]) -> Optional[float]:
    """originalPrice only survives when it is strictly above price."""
    if original_price is None or not original_price:
        return None
    if original_price <= price:
        return None
    return original_price


def _clean_dimensions(raw: Optional[Dict[str, Any]]) -> Optional[Dict[str, float]]:
    if raw is None:
        return None
    out: Dict[str, float] = {}
    for key in DIMENSION_KEYS:
        v = raw.get(key)
        if v is None or v == "":
            continue
        try:
            n = float(v)
        except (TypeError, ValueError):
            raise ValueError(f"{key.capitalize()} must be a number")
        if n < 0:
            raise ValueError(f"{key.capitalize()} must be positive")
        out[key] = n
    return out or None


def _check_text(value: Optional[str], label: str, maximum: int, *, required: bool) -> Optional[str]:
    v = (value or "").strip()
    if not v:
        if required:
            raise ValueError(f"{label} is required")
        return None
    if len(v) > maximum:
        raise ValueError(f"{label} cannot exceed {maximum} characters")
    return v


def _check_list(values: Optional[List[str]], label: str, maximum: int, *, minimum: int = 0) -> List[str]:
    items = list(values or [])
    if len(items) < minimum or len(items) > maximum:
        if minimum:
            raise ValueError(f"Between {minimum} and {maximum} {label} required")
        raise ValueError(f"Maximum {maximum} {label} allowed")
    return items


def _check_number(value: Any, label: str) -> float:
    try:
        n = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{label} must be a valid number")
    if n < 0:
        raise ValueError(f"{label} must be positive")
    return n


def _check_stock(value: Any) -> int:
    try:
        n = float(value)
    except (TypeError, ValueError):
        raise ValueError("Stock must be a valid number")
    if n < 0:
        raise ValueError("Stock cannot be negative")
    if n != int(n):
        raise ValueError("Stock must be a whole number")
    return int(n)


def build_decor(fields: Dict[str, Any], *, created_by: Any) -> Dict[str, Any]:
    """Validate create input and return a ready-to-insert document."""
    name = _check_text(fields.get("name"), "Decor name", NAME_MAX, required=True)
    description = _check_text(fields.get("description"), "Description", DESCRIPTION_MAX, required=True)
    care = _check_text(fields.get("careInstructions"), "Care instructions", CARE_MAX, required=False)

    if fields.get("price") is None:
        raise ValueError("Price is required")
    price = round_price(_check_number(fields["price"], "Price"))
    original = fields.get("originalPrice")
    original_price = round_price(_check_number(original, "Original price")) if original not in (None, "") else None

    stock = _check_stock(fields.get("stock", 0))

    status = fields.get("status") or STATUS_ACTIVE
    if status not in DECOR_STATUSES:
        raise ValueError("Invalid status")

    if not generate_slug(name or ""):
        raise ValueError("Decor name must contain letters or digits")

    now = utcnow()
    return {
        "name": name,
        "slug": generate_slug(name or ""),
        "description": description,
        "category": object_id_or_none(fields.get("category")),
        "price": price,
        "originalPrice": effective_original_price(price, original_price),
        "stock": stock,
        "status": status_for_stock(stock, status),
        "featured": bool(fields.get("featured", False)),
        "images": _check_list(fields.get("images"), "images", MAX_IMAGES),
        "tags": _check_list(fields.get("tags"), "tags", MAX_TAGS),
        "materials": _check_list(fields.get("materials"), "materials", MAX_MATERIALS, minimum=1),
        "dimensions": _clean_dimensions(fields.get("dimensions")),
        "careInstructions": care,
        "rating": {"average": 0, "count": 0},
        "views": 0,
        "salesCount": 0,
        "createdBy": object_id_or_none(created_by),
        "createdAt": now,
        "updatedAt": now,
    }


def build_decor_update(current: Dict[str, Any], fields: Dict[str, Any]) -> Dict[str, Any]:
    """Validate a partial update against the current document; return the $set."""
    sets: Dict[str, Any] = {}

    if fields.get("name") is not None:
        name = _check_text(fields["name"], "Decor name", NAME_MAX, required=True)
        if not generate_slug(name or ""):
            raise ValueError("Decor name must contain letters or digits")
        sets["name"] = name
        sets["slug"] = generate_slug(name or "")
    if fields.get("description") is not None:
        sets["description"] = _check_text(fields["description"], "Description", DESCRIPTION_MAX, required=True)
    if fields.get("careInstructions") is not None:
        sets["careInstructions"] = _check_text(fields["careInstructions"], "Care instructions", CARE_MAX, required=False)
    if fields.get("category") is not None:
        sets["category"] = object_id_or_none(fields["category"])
    if fields.get("featured") is not None:
        sets["featured"] = bool(fields["featured"])
    if fields.get("images") is not None:
        sets["images"] = _check_list(fields["images"], "images", MAX_IMAGES)
    if fields.get("tags") is not None:
        sets["tags"] = _check_list(fields["tags"], "tags", MAX_TAGS)
    if fields.get("materials") is not None:
        sets["materials"] = _check_list(fields["materials"], "materials", MAX_MATERIALS, minimum=1)
    if fields.get("dimensions") is not None:
        sets["dimensions"] = _clean_dimensions(fields["dimensions"])

    status = current.get("status") or STATUS_ACTIVE
    if fields.get("status") is not None:
        if fields["status"] not in DECOR_STATUSES:
            raise ValueError("Invalid status")
        status = fields["status"]
        sets["status"] = status
    if fields.get("stock") is not None:
        stock = _check_stock(fields["stock"])
        sets["stock"] = stock
        sets["status"] = status_for_stock(stock, status)

    price = float(current.get("price") or 0)
    if fields.get("price") is not None:
        price = round_price(_check_number(fields["price"], "Price"))
        sets["price"] = price
    original = current.get("originalPrice")
    if fields.get("originalPrice") not in (None, ""):
        original = round_price(_check_number(fields["originalPrice"], "Original price"))
    if "price" in sets or fields.get("originalPrice") not in (None, ""):
        sets["originalPrice"] = effective_original_price(price, original)

    sets["updatedAt"] = utcnow()
    return sets


def decor_view(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Serialize a decor and add the derived sale / stock fields."""
    if doc is None:
        return None
    out = serialize_doc(doc)
    if out is None or "price" not in out:
        return out
    price = float(out.get("price") or 0)
    original = out.get("originalPrice")
    on_sale = bool(original) and float(original) > price
    out["isOnSale"] = on_sale
    out["discountPercentage"] = int(round((float(original) - price) / float(original) * 100)) if on_sale else 0
    if "stock" in out:
        out["isInStock"] = int(out.get("stock") or 0) > 0
    return out


# -----------------------------
# Writes
# -----------------------------


def _require_category(db: Database, category_id: Any) -> Dict[str, Any]:
    category = get_category(db, category_id)
    if category is None:
        raise InvalidCategory("Invalid category")
    return category


def create_decor(db: Database, fields: Dict[str, Any], *, created_by: Any) -> Dict[str, Any]:
    _require_category(db, fields.get("category"))
    doc = build_decor(fields, created_by=created_by)
    doc["_id"] = db.decors.insert_one(doc).inserted_id
    adjust_decor_count(db, doc["category"], +1)
    _debug(f"Created decor {doc['slug']} ({doc['_id']})")
    return doc


def update_decor(db: Database, decor_id: Any, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    current = get_decor(db, decor_id, include_inactive=True)
    if current is None:
        return None
    if fields.get("category") is not None:
        _require_category(db, fields["category"])

    sets = build_decor_update(current, fields)
    updated = db.decors.find_one_and_update(
        {"_id": current["_id"]},
        {"$set": sets},
        return_document=ReturnDocument.AFTER,
    )

    old_cat, new_cat = current.get("category"), sets.get("category", current.get("category"))
    if updated is not None and old_cat != new_cat:
        adjust_decor_count(db, old_cat, -1)
        adjust_decor_count(db, new_cat, +1)
    return updated


def update_stock(db: Database, decor_id: Any, stock: int) -> Optional[Dict[str, Any]]:
    current = get_decor(db, decor_id, include_inactive=True)
    if current is None:
        return None
    stock = _check_stock(stock)
    status = status_for_stock(stock, current.get("status") or STATUS_ACTIVE)
    return db.decors.find_one_and_update(
        {"_id": current["_id"]},
        {"$set": {"stock": stock, "status": status, "updatedAt": utcnow()}},
        return_document=ReturnDocument.AFTER,
    )


def delete_decor(db: Database, decor_id: Any) -> Optional[Dict[str, Any]]:
    """Delete a decor and return the removed document (None if missing)."""
    oid = object_id_or_none(decor_id)
    if oid is None:
        return None
    removed = db.decors.find_one_and_delete({"_id": oid})
    if removed is not None:
        adjust_decor_count(db, removed.get("category"), -1)
        _debug(f"Deleted decor {removed.get('slug')} ({oid})")
    return removed


# -----------------------------
# Reads
# -----------------------------


def get_decor(db: Database, decor_id: Any, *, include_inactive: bool = False) -> Optional[Dict[str, Any]]:
    oid = object_id_or_none(decor_id)
    if oid is None:
        return None
    flt: Dict[str, Any] = {"_id": oid}
    if not include_inactive:
        flt["status"] = STATUS_ACTIVE
    return db.decors.find_one(flt)


def get_decor_detail(db: Database, decor_id: Any, *, include_inactive: bool = False) -> Optional[Dict[str, Any]]:
    return populate_one(db, get_decor(db, decor_id, include_inactive=include_inactive))


def _regex(q: str) -> Dict[str, str]:
    return {"$regex": re.escape(q), "$options": "i"}


def build_filter(
    *,
    search: str | None = None,
    category: str | None = None,
    status: str | None = None,
    featured: bool | None = None,
    min_price: float | None = None,
    max_price: float | None = None,
    search_materials: bool = True,
) -> Dict[str, Any]:
    flt: Dict[str, Any] = {}
    q = (search or "").strip()
    if q:
        ors = [{"name": _regex(q)}, {"description": _regex(q)}, {"tags": _regex(q)}]
        if search_materials:
            ors.append({"materials": _regex(q)})
        flt["$or"] = ors
    if category:
        oid = object_id_or_none(category)
        if oid is None:
            raise InvalidCategory("Invalid category ID format")
        flt["category"] = oid
    if status:
        flt["status"] = status
    if featured is not None:
        flt["featured"] = bool(featured)
    if min_price is not None or max_price is not None:
        rng: Dict[str, float] = {}
        if min_price is not None:
            rng["$gte"] = float(min_price)
        if max_price is not None:
            rng["$lte"] = float(max_price)
        flt["price"] = rng
    return flt


def list_decors(
    db: Database,
    flt: Dict[str, Any],
    *,
    page: int | None,
    limit: int | None,
    sort: str | None = None,
    default_limit: int = 10,
    max_limit: int = 100,
    creators: bool = True,
) -> Tuple[List[Dict[str, Any]], Pagination]:
    total = db.decors.count_documents(flt)
    pg = paginate(page, limit, total, default_limit=default_limit, max_limit=max_limit)
    projection = None if creators else {"createdBy": 0}
    rows = list(
        db.decors.find(flt, projection)
        .sort(parse_sort(sort, allowed=DECOR_SORT_FIELDS, default="-createdAt"))
        .skip(pg.skip)
        .limit(pg.limit)
    )
    return populate(db, rows, creators=creators), pg


def list_category_decors(
    db: Database,
    category: Dict[str, Any],
    *,
    page: int | None,
    limit: int | None,
    sort: str | None = None,
) -> Tuple[List[Dict[str, Any]], Pagination]:
    """Active decors within one category, newest first by default."""
    flt = {"category": category["_id"], "status": STATUS_ACTIVE}
    return list_decors(db, flt, page=page, limit=limit, sort=sort, creators=False)


def featured_decors(db: Database, *, limit: int = 8) -> List[Dict[str, Any]]:
    rows = list(
        db.decors.find({"status": STATUS_ACTIVE, "featured": True}, {"createdBy": 0})
        .sort([("createdAt", -1)])
        .limit(max(1, min(int(limit), 50)))
    )
    return populate(db, rows, creators=False)


def search_decors(
    db: Database,
    *,
    q: str | None = None,
    category: str | None = None,
    min_price: float | None = None,
    max_price: float | None = None,
    materials: List[str] | None = None,
    tags: List[str] | None = None,
    sort_by: str | None = None,
    order: str | None = None,
    page: int | None = None,
    limit: int | None = None,
) -> Tuple[List[Dict[str, Any]], Pagination]:
    """Aggregation-pipeline search over active decors."""
    match = build_filter(
        search=q,
        category=category,
        status=STATUS_ACTIVE,
        min_price=min_price,
        max_price=max_price,
    )
    if materials:
        match["materials"] = {"$in": list(materials)}
    if tags:
        match["tags"] = {"$in": list(tags)}

    pipeline: List[Dict[str, Any]] = [
        {"$match": match},
        {
            "$lookup": {
                "from": db.categories.name,
                "localField": "category",
                "foreignField": "_id",
                "as": "category",
            }
        },
        {"$unwind": "$category"},
        {"$project": {"createdBy": 0}},
    ]

    sort_field = SEARCH_SORT_FIELDS.get(sort_by or "", "createdAt")
    direction = 1 if (order or "").lower() == "asc" else -1
    pipeline.append({"$sort": {sort_field: direction, "_id": direction}})

    counted = list(db.decors.aggregate(pipeline + [{"$count": "total"}]))
    total = int(counted[0]["total"]) if counted else 0

    pg = paginate(page, limit, total, default_limit=12, max_limit=50)
    rows = list(db.decors.aggregate(pipeline + [{"$skip": pg.skip}, {"$limit": pg.limit}]))
    return rows, pg


def decor_stats(db: Database) -> Dict[str, Any]:
    total = db.decors.count_documents({})
    active = db.decors.count_documents({"status": STATUS_ACTIVE})
    inactive = db.decors.count_documents({"status": STATUS_INACTIVE})
    out_of_stock = db.decors.count_documents({"status": STATUS_OUT_OF_STOCK})
    featured = db.decors.count_documents({"featured": True, "status": STATUS_ACTIVE})

    grouped = list(
        db.decors.aggregate(
            [
                {"$match": {"status": STATUS_ACTIVE}},
                {
                    "$group": {
                        "_id": None,
                        "averagePrice": {"$avg": "$price"},
                        "minPrice": {"$min": "$price"},
                        "maxPrice": {"$max": "$price"},
                        "totalValue": {"$sum": {"$multiply": ["$price", "$stock"]}},
                    }
                },
            ]
        )
    )
    if grouped:
        g = grouped[0]
        price_stats = {
            "averagePrice": round(float(g.get("averagePrice") or 0), 2),
            "minPrice": float(g.get("minPrice") or 0),
            "maxPrice": float(g.get("maxPrice") or 0),
            "totalValue": round(float(g.get("totalValue") or 0), 2),
        }
    else:
        price_stats = {"averagePrice": 0, "minPrice": 0, "maxPrice": 0, "totalValue": 0}

    recent = list(
        db.decors.find({}, {"name": 1, "price": 1, "stock": 1, "status": 1, "category": 1, "createdAt": 1})
        .sort([("createdAt", -1)])
        .limit(5)
    )
    populate(db, recent, creators=False)

    return {
        "stats": {
            "totalDecors": total,
            "activeDecors": active,
            "inactiveDecors": inactive,
            "outOfStockDecors": out_of_stock,
            "featuredDecors": featured,
            "priceStats": price_stats,
        },
        "recentDecors": [decor_view(d) for d in recent],
    }
