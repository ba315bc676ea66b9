from __future__ import annotations

from typing import Callable, Optional, Tuple

import jwt
from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from craftopia.config import Config
from craftopia.db import Database
from craftopia.models import ADMIN_ROLES, ROLE_SUPER_ADMIN, AuthUser

from .crud import get_user_by_id
from .security import decode_token


_bearer = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=401, detail=detail, headers={"WWW-Authenticate": "Bearer"})


def get_cfg(request: Request) -> Config:
    cfg = getattr(request.app.state, "cfg", None)
    if cfg is None:
        raise HTTPException(status_code=500, detail="Server configuration missing")
    return cfg


def get_db(request: Request) -> Database:
    db = getattr(request.app.state, "db", None)
    if db is None:
        raise HTTPException(status_code=500, detail="Database not configured")
    return db


def _extract_token(
    request: Request,
    cfg: Config,
    credentials: Optional[HTTPAuthorizationCredentials],
) -> Optional[str]:
    # Prefer Bearer token when explicitly provided.
    if credentials is not None and credentials.credentials:
        return credentials.credentials
    # Fall back to cookie.
    return request.cookies.get(cfg.AUTH_COOKIE_NAME) or None


def _resolve_user(db: Database, cfg: Config, token: str) -> Tuple[Optional[AuthUser], str]:
    """Verify a token and load its (active) user.

    Returns (user, "") on success, else (None, reason) with the 401 message.
    """
    try:
        payload = decode_token(token=token, secret=cfg.JWT_SECRET)
    except jwt.InvalidTokenError:
        return None, "Access denied. Invalid token."

    row = get_user_by_id(db, payload.get("id"))
    if row is None or not row.get("isActive", False):
        return None, "Access denied. User not found or inactive."
    return AuthUser(id=str(row["_id"]), email=str(row["email"]), role=str(row["role"])), ""


def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
) -> AuthUser:
    """Authenticate a request.

    Supports both:
      - Authorization: Bearer <jwt>
      - the access-token cookie (AUTH_COOKIE_NAME)

    One user lookup per request; deactivated accounts are rejected even with a
    token that is still valid.
    """
    cfg = get_cfg(request)
    db = get_db(request)

    token = _extract_token(request, cfg, credentials)
    if not token:
        raise _unauthorized("Access denied. No token provided.")

    user, reason = _resolve_user(db, cfg, token)
    if user is None:
        raise _unauthorized(reason)
    request.state.user = user
    return user


def get_optional_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
) -> Optional[AuthUser]:
    """Like get_current_user, but anonymous instead of 401 on any failure."""
    cfg = get_cfg(request)
    token = _extract_token(request, cfg, credentials)
    if not token:
        return None
    user, _ = _resolve_user(get_db(request), cfg, token)
    request.state.user = user
    return user


def require_roles(*roles: str) -> Callable[..., AuthUser]:
    allowed = frozenset(roles)

    def _dep(user: Optional[AuthUser] = Depends(get_current_user)) -> AuthUser:
        if user is None:
            raise _unauthorized("Access denied. Please authenticate first.")
        if user.role not in allowed:
            raise HTTPException(
                status_code=403,
                detail="Access denied. You do not have permission to perform this action.",
            )
        return user

    return _dep


require_admin = require_roles(*ADMIN_ROLES)
require_super_admin = require_roles(ROLE_SUPER_ADMIN)
