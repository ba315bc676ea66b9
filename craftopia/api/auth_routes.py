from __future__ import annotations

from typing import Any, Dict

import jwt
from fastapi import APIRouter, Depends, HTTPException, Request, Response

from craftopia.auth.crud import (
    check_credentials,
    create_user,
    get_user_by_id,
    public_user,
    set_password,
    touch_last_login,
    update_user,
)
from craftopia.auth.deps import get_cfg, get_current_user, get_db
from craftopia.auth.security import (
    REFRESH,
    REFRESH_TOKEN_DAYS,
    create_token_pair,
    decode_token,
    verify_password,
)
from craftopia.config import Config
from craftopia.db import Database
from craftopia.models import AuthUser
from craftopia.util.response import success_response

from .common import not_found
from .schemas import ChangePasswordRequest, LoginRequest, ProfileUpdateRequest, RegisterRequest


router = APIRouter(prefix="/auth", tags=["auth"])


def _debug(msg: str) -> None:
    print(f"[auth] {msg}")


# -----------------------------
# Cookies
# -----------------------------


def _set_refresh_cookie(response: Response, *, token: str, cfg: Config) -> None:
    """Refresh token cookie: httpOnly, SameSite=strict, 7 days."""
    response.set_cookie(
        key=cfg.REFRESH_COOKIE_NAME,
        value=str(token),
        httponly=True,
        samesite="strict",
        secure=bool(cfg.AUTH_COOKIE_SECURE),
        max_age=REFRESH_TOKEN_DAYS * 24 * 60 * 60,
        path=cfg.AUTH_COOKIE_PATH or "/",
    )


def _clear_refresh_cookie(response: Response, cfg: Config) -> None:
    response.delete_cookie(key=cfg.REFRESH_COOKIE_NAME, path=cfg.AUTH_COOKIE_PATH or "/")


def _issue(response: Response, row: Dict[str, Any], cfg: Config) -> str:
    """Set the refresh cookie and return the access token."""
    pair = create_token_pair(
        secret=cfg.JWT_SECRET,
        user_id=str(row["_id"]),
        email=str(row["email"]),
        role=str(row["role"]),
        expires_minutes=int(cfg.JWT_EXPIRE_MINUTES),
    )
    _set_refresh_cookie(response, token=pair["refreshToken"], cfg=cfg)
    return pair["accessToken"]


# -----------------------------
# Session
# -----------------------------


@router.post("/register", status_code=201)
def register(
    payload: RegisterRequest,
    response: Response,
    db: Database = Depends(get_db),
    cfg: Config = Depends(get_cfg),
) -> Dict[str, Any]:
    try:
        row = create_user(
            db,
            email=payload.email,
            password=payload.password,
            first_name=payload.firstName,
            last_name=payload.lastName,
            phone_number=payload.phoneNumber,
        )
    except ValueError as e:
        if str(e) == "email_exists":
            raise HTTPException(status_code=400, detail="User already exists with this email")
        raise HTTPException(status_code=400, detail=str(e))

    _debug(f"Registered user {row['_id']}")
    token = _issue(response, row, cfg)
    return success_response("User registered successfully", {"user": public_user(row), "accessToken": token})


@router.post("/login")
def login(
    payload: LoginRequest,
    response: Response,
    db: Database = Depends(get_db),
    cfg: Config = Depends(get_cfg),
) -> Dict[str, Any]:
    row = check_credentials(db, payload.email, payload.password)
    if row is None:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    if not row.get("isActive", False):
        raise HTTPException(status_code=403, detail="Account is deactivated. Please contact support.")

    row = touch_last_login(db, row["_id"]) or row
    token = _issue(response, row, cfg)
    return success_response("Login successful", {"user": public_user(row), "accessToken": token})


@router.post("/refresh-token")
def refresh_token(
    request: Request,
    response: Response,
    db: Database = Depends(get_db),
    cfg: Config = Depends(get_cfg),
) -> Dict[str, Any]:
    token = request.cookies.get(cfg.REFRESH_COOKIE_NAME)
    if not token:
        raise HTTPException(status_code=401, detail="Refresh token not provided")

    try:
        claims = decode_token(token=token, secret=cfg.JWT_SECRET, expected_type=REFRESH)
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail="Invalid refresh token")

    row = get_user_by_id(db, claims.get("id"))
    if row is None or not row.get("isActive", False):
        raise HTTPException(status_code=401, detail="Invalid refresh token")

    access = _issue(response, row, cfg)
    return success_response("Token refreshed successfully", {"accessToken": access})


@router.post("/logout")
def logout(response: Response, cfg: Config = Depends(get_cfg)) -> Dict[str, Any]:
    _clear_refresh_cookie(response, cfg)
    return success_response("Logged out successfully")


# -----------------------------
# Profile
# -----------------------------


@router.get("/profile")
def get_profile(
    user: AuthUser = Depends(get_current_user),
    db: Database = Depends(get_db),
) -> Dict[str, Any]:
    row = get_user_by_id(db, user.id)
    if row is None:
        raise not_found("User")
    return success_response("Profile retrieved successfully", public_user(row))


@router.put("/profile")
def update_profile(
    payload: ProfileUpdateRequest,
    user: AuthUser = Depends(get_current_user),
    db: Database = Depends(get_db),
) -> Dict[str, Any]:
    row = update_user(db, user.id, payload.model_dump(exclude_none=True))
    if row is None:
        raise not_found("User")
    return success_response("Profile updated successfully", public_user(row))


@router.put("/change-password")
def change_password(
    payload: ChangePasswordRequest,
    user: AuthUser = Depends(get_current_user),
    db: Database = Depends(get_db),
) -> Dict[str, Any]:
    row = get_user_by_id(db, user.id)
    if row is None:
        raise not_found("User")
    if not verify_password(payload.currentPassword, str(row.get("password_hash") or "")):
        raise HTTPException(status_code=400, detail="Current password is incorrect")

    set_password(db, row["_id"], payload.newPassword)
    _debug(f"Password changed for user {row['_id']}")
    return success_response("Password changed successfully")
