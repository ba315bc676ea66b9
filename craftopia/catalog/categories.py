from __future__ import annotations

import re
from typing import Any, Dict, List, Optional, Tuple

from bson import ObjectId
from pymongo import ReturnDocument

from craftopia.db import Database, object_id_or_none
from craftopia.util.normalization import generate_slug
from craftopia.util.pagination import Pagination, paginate, parse_sort
from craftopia.util.time import utcnow

from .refs import populate, populate_one


CATEGORY_SORT_FIELDS = ("name", "createdAt", "updatedAt", "decorCount")

NAME_MAX = 100
DESCRIPTION_MAX = 500

DUPLICATE_NAME = "Category with this name already exists"


def _debug(msg: str) -> None:
    print(f"[catalog] {msg}")


def _validate(name: Optional[str], description: Optional[str]) -> None:
    if name is not None:
        if not name.strip():
            raise ValueError("Category name is required")
        if len(name.strip()) > NAME_MAX:
            raise ValueError(f"Category name cannot exceed {NAME_MAX} characters")
        if not generate_slug(name):
            raise ValueError("Category name must contain letters or digits")
    if description is not None and len(description.strip()) > DESCRIPTION_MAX:
        raise ValueError(f"Description cannot exceed {DESCRIPTION_MAX} characters")


def name_taken(db: Database, name: str, *, exclude_id: ObjectId | None = None) -> bool:
    """Case-insensitive exact-name check ("Lighting" == "lighting")."""
    flt: Dict[str, Any] = {"name": {"$regex": f"^{re.escape(name.strip())}$", "$options": "i"}}
    if exclude_id is not None:
        flt["_id"] = {"$ne": exclude_id}
    return db.categories.find_one(flt, {"_id": 1}) is not None


def get_category(db: Database, category_id: Any) -> Optional[Dict[str, Any]]:
    oid = object_id_or_none(category_id)
    if oid is None:
        return None
    return db.categories.find_one({"_id": oid})


def get_category_detail(db: Database, category_id: Any) -> Optional[Dict[str, Any]]:
    return populate_one(db, get_category(db, category_id), categories=False)


def create_category(
    db: Database,
    *,
    name: str,
    created_by: Any,
    description: str | None = None,
    icon: str | None = None,
) -> Dict[str, Any]:
    _validate(name, description)
    name = name.strip()
    if name_taken(db, name):
        raise ValueError(DUPLICATE_NAME)

    now = utcnow()
    doc: Dict[str, Any] = {
        "name": name,
        "slug": generate_slug(name),
        "description": (description or "").strip() or None,
        "icon": (icon or "").strip() or None,
        "isActive": True,
        "decorCount": 0,
        "createdBy": object_id_or_none(created_by),
        "createdAt": now,
        "updatedAt": now,
    }
    doc["_id"] = db.categories.insert_one(doc).inserted_id
    _debug(f"Created category {doc['slug']} ({doc['_id']})")
    return doc


def update_category(db: Database, category_id: Any, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Partial update. Renaming re-derives the slug and re-checks uniqueness."""
    current = get_category(db, category_id)
    if current is None:
        return None

    name = fields.get("name")
    description = fields.get("description")
    _validate(name, description)

    sets: Dict[str, Any] = {}
    if name is not None and name.strip() != current.get("name"):
        if name_taken(db, name, exclude_id=current["_id"]):
            raise ValueError(DUPLICATE_NAME)
        sets["name"] = name.strip()
        sets["slug"] = generate_slug(name)
    if description is not None:
        sets["description"] = description.strip()
    if fields.get("icon") is not None:
        sets["icon"] = str(fields["icon"]).strip()
    if fields.get("isActive") is not None:
        sets["isActive"] = bool(fields["isActive"])

    sets["updatedAt"] = utcnow()
    return db.categories.find_one_and_update(
        {"_id": current["_id"]},
        {"$set": sets},
        return_document=ReturnDocument.AFTER,
    )


def delete_category(db: Database, category_id: Any) -> bool:
    """Delete a category that no decor references.

    Raises ValueError while decors still point at it. Returns False if missing.
    """
    current = get_category(db, category_id)
    if current is None:
        return False
    if db.decors.count_documents({"category": current["_id"]}) > 0:
        raise ValueError(
            "Cannot delete category that has associated decors. Please move or delete the decors first."
        )
    db.categories.delete_one({"_id": current["_id"]})
    _debug(f"Deleted category {current.get('slug')} ({current['_id']})")
    return True


def list_categories(
    db: Database,
    *,
    page: int | None,
    limit: int | None,
    sort: str | None = None,
    search: str | None = None,
    is_active: bool | None = None,
) -> Tuple[List[Dict[str, Any]], Pagination]:
    flt: Dict[str, Any] = {}
    q = (search or "").strip()
    if q:
        rx = {"$regex": re.escape(q), "$options": "i"}
        flt["$or"] = [{"name": rx}, {"description": rx}]
    if is_active is not None:
        flt["isActive"] = bool(is_active)

    total = db.categories.count_documents(flt)
    pg = paginate(page, limit, total, default_limit=10, max_limit=100)
    rows = list(
        db.categories.find(flt)
        .sort(parse_sort(sort, allowed=CATEGORY_SORT_FIELDS, default="name"))
        .skip(pg.skip)
        .limit(pg.limit)
    )
    return populate(db, rows, categories=False), pg


def list_active_categories(db: Database) -> List[Dict[str, Any]]:
    projection = {"name": 1, "slug": 1, "description": 1, "icon": 1, "decorCount": 1}
    return list(db.categories.find({"isActive": True}, projection).sort([("name", 1)]))


def adjust_decor_count(db: Database, category_id: Any, delta: int) -> None:
    """Apply a +/- change to a category's denormalized decorCount.

    Called explicitly by the decor store after each write. It is a separate
    single-document `$inc`, so a crash between the two writes can leave the
    counter off by one; `recount_decor_counts` repairs that.
    """
    oid = object_id_or_none(category_id)
    if oid is None or not delta:
        return
    db.categories.update_one({"_id": oid}, {"$inc": {"decorCount": int(delta)}})


def live_decor_counts(db: Database) -> Dict[Any, int]:
    rows = db.decors.aggregate([{"$group": {"_id": "$category", "n": {"$sum": 1}}}])
    return {r["_id"]: int(r["n"]) for r in rows}


def recount_decor_counts(db: Database) -> int:
    """Recompute every category's decorCount from the decors collection.

    Returns the number of categories whose stored count was wrong.
    """
    counts = live_decor_counts(db)
    fixed = 0
    for cat in db.categories.find({}, {"decorCount": 1, "name": 1}):
        actual = counts.get(cat["_id"], 0)
        if int(cat.get("decorCount") or 0) != actual:
            db.categories.update_one({"_id": cat["_id"]}, {"$set": {"decorCount": actual}})
            _debug(f"decorCount drift on {cat.get('name')}: {cat.get('decorCount')} -> {actual}")
            fixed += 1
    return fixed


def category_stats(db: Database) -> Dict[str, Any]:
    total = db.categories.count_documents({})
    active = db.categories.count_documents({"isActive": True})
    inactive = db.categories.count_documents({"isActive": False})

    # Top categories by live decor count (not the denormalized counter).
    counts = live_decor_counts(db)
    top: List[Dict[str, Any]] = []
    for cat in db.categories.find({}, {"name": 1, "isActive": 1}):
        top.append(
            {
                "_id": cat["_id"],
                "name": cat.get("name"),
                "isActive": cat.get("isActive"),
                "decorCount": counts.get(cat["_id"], 0),
            }
        )
    top.sort(key=lambda c: (-c["decorCount"], str(c.get("name") or "")))

    return {
        "stats": {
            "totalCategories": total,
            "activeCategories": active,
            "inactiveCategories": inactive,
        },
        "topCategories": top[:5],
    }

