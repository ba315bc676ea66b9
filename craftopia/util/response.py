"""Uniform JSON envelope and document serialization.

Every endpoint answers with:

    {"success": bool, "message": str, "data"?: ..., "error"?: str, "pagination"?: {...}}
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from bson import ObjectId

from craftopia.util.time import to_iso


def success_response(
    message: str,
    data: Any = None,
    pagination: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    out: Dict[str, Any] = {"success": True, "message": message}
    if data is not None:
        out["data"] = data
    if pagination:
        out["pagination"] = pagination
    return out


def error_response(message: str, error: Optional[str] = None) -> Dict[str, Any]:
    out: Dict[str, Any] = {"success": False, "message": message}
    if error is not None:
        out["error"] = error
    return out


def _plain(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        return to_iso(value)
    if isinstance(value, dict):
        return serialize_doc(value)
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


def serialize_doc(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Make a Mongo document JSON-safe.

    - `_id` becomes `id` (string)
    - ObjectId refs become strings, datetimes ISO-8601
    - password hashes and `__v` never leave the server
    """
    if doc is None:
        return None
    d = dict(doc)
    d.pop("password_hash", None)
    d.pop("__v", None)
    out: Dict[str, Any] = {}
    if "_id" in d:
        out["id"] = _plain(d.pop("_id"))
    for k, v in d.items():
        out[k] = _plain(v)
    return out
