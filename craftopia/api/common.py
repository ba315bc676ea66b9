from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, Optional

from bson import ObjectId
from fastapi import HTTPException, Path, Request

from craftopia.db import object_id_or_none
from craftopia.util.pagination import Pagination
from craftopia.util.response import serialize_doc, success_response


def parse_id(value: str) -> ObjectId:
    oid = object_id_or_none(value)
    if oid is None:
        raise HTTPException(status_code=400, detail="Invalid ID format")
    return oid


def path_id(id: str = Path(...)) -> ObjectId:
    """Dependency for routes declared with an `{id}` path segment."""
    return parse_id(id)


def get_media(request: Request) -> Any:
    media = getattr(request.app.state, "media", None)
    if media is None:
        raise HTTPException(status_code=500, detail="Image hosting not configured")
    return media


def not_found(thing: str) -> HTTPException:
    return HTTPException(status_code=404, detail=f"{thing} not found")


def bad_request(err: Exception) -> HTTPException:
    return HTTPException(status_code=400, detail=str(err))


def paged_response(
    message: str,
    *,
    key: str,
    rows: Iterable[Dict[str, Any]],
    pg: Pagination,
    total_key: str,
    view: Callable[[Dict[str, Any]], Any] = serialize_doc,
    extra: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    data: Dict[str, Any] = dict(extra or {})
    data[key] = [view(r) for r in rows]
    data["pagination"] = pg.summary(total_key)
    return success_response(message, data, pg.envelope())
