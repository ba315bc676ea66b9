"""Who may do what to which user account.

Every user-management endpoint calls `check_user_action` before writing, so the
super admin protection lives in exactly one place:

- a super_admin can never be deleted, deactivated, demoted or have its role changed
- promoting / demoting (and role changes through a plain update) need a super_admin
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import HTTPException

from craftopia.models import ADMIN_ROLES, ROLE_SUPER_ADMIN, ROLE_USER, AuthUser


DELETE = "delete"
DEACTIVATE = "deactivate"
ACTIVATE = "activate"
UPDATE = "update"
PROMOTE = "promote"
DEMOTE = "demote"

_PROTECTED_MESSAGES = {
    DELETE: "Cannot delete super admin",
    DEACTIVATE: "Cannot deactivate super admin",
    DEMOTE: "Cannot demote super admin",
    UPDATE: "Cannot change the role or status of super admin",
}


def check_user_action(
    actor: AuthUser,
    target: Dict[str, Any],
    action: str,
    *,
    changes: Optional[Dict[str, Any]] = None,
) -> None:
    """Raise HTTPException(403/400) when `actor` may not perform `action` on `target`."""
    target_role = str(target.get("role") or ROLE_USER)
    changes = changes or {}

    if target_role == ROLE_SUPER_ADMIN:
        if action in (DELETE, DEACTIVATE, DEMOTE):
            raise HTTPException(status_code=403, detail=_PROTECTED_MESSAGES[action])
        if action == UPDATE:
            role_change = changes.get("role") is not None and changes.get("role") != ROLE_SUPER_ADMIN
            if role_change or changes.get("isActive") is False:
                raise HTTPException(status_code=403, detail=_PROTECTED_MESSAGES[UPDATE])

    if action in (PROMOTE, DEMOTE) and not actor.is_super_admin:
        raise HTTPException(
            status_code=403,
            detail="Access denied. You do not have permission to perform this action.",
        )

    if action == UPDATE and changes.get("role") is not None and changes.get("role") != target_role:
        if not actor.is_super_admin:
            raise HTTPException(status_code=403, detail="Only a super admin can change user roles")

    if action == PROMOTE and target_role in ADMIN_ROLES:
        raise HTTPException(status_code=400, detail="User is already an admin")

    if action == DEMOTE and target_role == ROLE_USER:
        raise HTTPException(status_code=400, detail="User is not an admin")
