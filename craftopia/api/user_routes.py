"""User administration.

Every route requires an admin; promote / demote require the super admin. The
super admin protections are enforced by `craftopia.auth.policy`.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from bson import ObjectId
from fastapi import APIRouter, Depends, HTTPException, Query

from craftopia.auth import policy
from craftopia.auth.crud import delete_user, get_user_by_id, list_users, public_user, update_user, user_stats
from craftopia.auth.deps import get_db, require_admin, require_super_admin
from craftopia.db import Database
from craftopia.models import ROLE_ADMIN, ROLE_USER, AuthUser
from craftopia.util.response import success_response

from .common import not_found, paged_response, path_id
from .schemas import UserUpdateRequest


router = APIRouter(prefix="/users", tags=["users"])


def _debug(msg: str) -> None:
    print(f"[api] {msg}")


def _load(db: Database, user_id: ObjectId) -> Dict[str, Any]:
    row = get_user_by_id(db, user_id)
    if row is None:
        raise not_found("User")
    return row


def _apply(db: Database, user_id: ObjectId, fields: Dict[str, Any]) -> Dict[str, Any]:
    try:
        row = update_user(db, user_id, fields)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if row is None:
        raise not_found("User")
    return row


@router.get("/stats")
def get_user_stats(
    _: AuthUser = Depends(require_admin),
    db: Database = Depends(get_db),
) -> Dict[str, Any]:
    return success_response("User stats retrieved successfully", user_stats(db))


@router.get("")
def get_users(
    page: Optional[int] = Query(None, ge=1),
    limit: Optional[int] = None,
    sort: Optional[str] = None,
    search: Optional[str] = None,
    role: Optional[str] = Query(None, pattern="^(user|admin|super_admin)$"),
    isActive: Optional[bool] = None,
    _: AuthUser = Depends(require_admin),
    db: Database = Depends(get_db),
) -> Dict[str, Any]:
    rows, pg = list_users(db, page=page, limit=limit, sort=sort, search=search, role=role, is_active=isActive)
    return paged_response(
        "Users retrieved successfully",
        key="users",
        rows=rows,
        pg=pg,
        total_key="totalUsers",
        view=public_user,
    )


@router.get("/{id}")
def get_user(
    _: AuthUser = Depends(require_admin),
    user_id: ObjectId = Depends(path_id),
    db: Database = Depends(get_db),
) -> Dict[str, Any]:
    return success_response("User retrieved successfully", public_user(_load(db, user_id)))


@router.put("/{id}")
def put_user(
    payload: UserUpdateRequest,
    actor: AuthUser = Depends(require_admin),
    user_id: ObjectId = Depends(path_id),
    db: Database = Depends(get_db),
) -> Dict[str, Any]:
    target = _load(db, user_id)
    changes = payload.model_dump(exclude_none=True)
    policy.check_user_action(actor, target, policy.UPDATE, changes=changes)
    row = _apply(db, user_id, changes)
    _debug(f"User {user_id} updated by {actor.id}: {sorted(changes)}")
    return success_response("User updated successfully", public_user(row))


@router.delete("/{id}")
def remove_user(
    actor: AuthUser = Depends(require_admin),
    user_id: ObjectId = Depends(path_id),
    db: Database = Depends(get_db),
) -> Dict[str, Any]:
    target = _load(db, user_id)
    policy.check_user_action(actor, target, policy.DELETE)
    delete_user(db, user_id)
    _debug(f"User {user_id} deleted by {actor.id}")
    return success_response("User deleted successfully")


@router.patch("/{id}/deactivate")
def deactivate_user(
    actor: AuthUser = Depends(require_admin),
    user_id: ObjectId = Depends(path_id),
    db: Database = Depends(get_db),
) -> Dict[str, Any]:
    policy.check_user_action(actor, _load(db, user_id), policy.DEACTIVATE)
    row = _apply(db, user_id, {"isActive": False})
    return success_response("User deactivated successfully", public_user(row))


@router.patch("/{id}/activate")
def activate_user(
    actor: AuthUser = Depends(require_admin),
    user_id: ObjectId = Depends(path_id),
    db: Database = Depends(get_db),
) -> Dict[str, Any]:
    policy.check_user_action(actor, _load(db, user_id), policy.ACTIVATE)
    row = _apply(db, user_id, {"isActive": True})
    return success_response("User activated successfully", public_user(row))


@router.patch("/{id}/promote")
def promote_user(
    actor: AuthUser = Depends(require_super_admin),
    user_id: ObjectId = Depends(path_id),
    db: Database = Depends(get_db),
) -> Dict[str, Any]:
    policy.check_user_action(actor, _load(db, user_id), policy.PROMOTE)
    row = _apply(db, user_id, {"role": ROLE_ADMIN})
    _debug(f"User {user_id} promoted to admin by {actor.id}")
    return success_response("User promoted to admin successfully", public_user(row))


@router.patch("/{id}/demote")
def demote_user(
    actor: AuthUser = Depends(require_super_admin),
    user_id: ObjectId = Depends(path_id),
    db: Database = Depends(get_db),
) -> Dict[str, Any]:
    policy.check_user_action(actor, _load(db, user_id), policy.DEMOTE)
    row = _apply(db, user_id, {"role": ROLE_USER})
    _debug(f"User {user_id} demoted to user by {actor.id}")
    return success_response("Admin demoted to user successfully", public_user(row))
