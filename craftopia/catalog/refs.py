"""Resolve ObjectId references into small embedded summaries (a manual populate)."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from craftopia.db import Database


USER_SUMMARY = {"firstName": 1, "lastName": 1, "email": 1}
CATEGORY_SUMMARY = {"name": 1, "description": 1, "slug": 1}


def _lookup(coll: Any, ids: Iterable[Any], projection: Dict[str, int]) -> Dict[Any, Dict[str, Any]]:
    wanted = list({i for i in ids if i is not None})
    if not wanted:
        return {}
    return {row["_id"]: row for row in coll.find({"_id": {"$in": wanted}}, projection)}


def populate(
    db: Database,
    docs: List[Dict[str, Any]],
    *,
    creators: bool = True,
    categories: bool = True,
) -> List[Dict[str, Any]]:
    """Replace `createdBy` / `category` ids with summaries, in place.

    Dangling references are left as the raw id.
    """
    if categories:
        found = _lookup(db.categories, (d.get("category") for d in docs), CATEGORY_SUMMARY)
        for d in docs:
            ref = found.get(d.get("category"))
            if ref is not None:
                d["category"] = ref
    if creators:
        found = _lookup(db.users, (d.get("createdBy") for d in docs), USER_SUMMARY)
        for d in docs:
            ref = found.get(d.get("createdBy"))
            if ref is not None:
                d["createdBy"] = ref
    return docs


def populate_one(db: Database, doc: Optional[Dict[str, Any]], **kwargs: Any) -> Optional[Dict[str, Any]]:
    if doc is None:
        return None
    return populate(db, [doc], **kwargs)[0]
