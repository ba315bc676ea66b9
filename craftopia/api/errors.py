"""Exception -> envelope mapping.

Every error leaves the server as `{"success": false, "message": ..., "error"?: ...}`.
"""

from __future__ import annotations

import re
import traceback
from typing import Any, Dict, List, Optional

import jwt
from bson.errors import InvalidId
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pymongo.errors import DuplicateKeyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from craftopia.config import Config
from craftopia.media.cloudinary import MediaUploadError
from craftopia.util.response import error_response


_DUP_KEY_FIELD = re.compile(r"dup key: \{\s*\"?([A-Za-z_][\w.]*)\"?\s*:")


def _debug(msg: str) -> None:
    print(f"[api] {msg}")


def _json(status_code: int, message: str, error: Optional[str] = None, headers: Optional[Dict[str, str]] = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=error_response(message, error), headers=headers)


def duplicate_key_field(err: DuplicateKeyError) -> str:
    """Best guess at the field behind a unique-index violation."""
    details = getattr(err, "details", None) or {}
    key_value = details.get("keyValue") or {}
    if key_value:
        return str(next(iter(key_value)))
    m = _DUP_KEY_FIELD.search(str(err))
    return m.group(1) if m else "field"


def validation_messages(errors: List[Dict[str, Any]]) -> List[str]:
    out: List[str] = []
    for e in errors:
        msg = str(e.get("msg") or "Invalid value")
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        loc = [str(p) for p in (e.get("loc") or ()) if p not in ("body", "query", "path", "form")]
        if loc and e.get("type") != "value_error":
            msg = f"{'.'.join(loc)}: {msg}"
        out.append(msg)
    return out


def install_error_handlers(app: FastAPI, cfg: Config) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == 404 and exc.detail == "Not Found":
            return _json(
                404,
                f"Route {request.url.path} not found",
                "The requested route does not exist on this server",
            )
        return _json(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        messages = validation_messages(list(exc.errors()))
        return _json(400, "Validation Error", ", ".join(messages))

    @app.exception_handler(DuplicateKeyError)
    async def _duplicate_key(request: Request, exc: DuplicateKeyError) -> JSONResponse:
        return _json(400, f"{duplicate_key_field(exc)} already exists")

    @app.exception_handler(InvalidId)
    async def _invalid_id(request: Request, exc: InvalidId) -> JSONResponse:
        return _json(400, "Invalid ID format")

    @app.exception_handler(jwt.ExpiredSignatureError)
    async def _expired(request: Request, exc: jwt.ExpiredSignatureError) -> JSONResponse:
        return _json(401, "Token expired")

    @app.exception_handler(jwt.InvalidTokenError)
    async def _invalid_token(request: Request, exc: jwt.InvalidTokenError) -> JSONResponse:
        return _json(401, "Invalid token")

    @app.exception_handler(MediaUploadError)
    async def _upload_failed(request: Request, exc: MediaUploadError) -> JSONResponse:
        _debug(f"upload failed on {request.method} {request.url.path}: {exc}")
        return _json(500, "Failed to upload images", str(exc) if cfg.is_development else None)

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception) -> JSONResponse:
        _debug(f"unhandled error on {request.method} {request.url.path}: {exc!r}")
        if cfg.is_development:
            traceback.print_exc()
            return _json(500, "Internal server error", str(exc))
        return _json(500, "Internal server error")
