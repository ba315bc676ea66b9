from __future__ import annotations

import re
from typing import Any, Dict, List, Optional, Tuple

from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from craftopia.config import Config
from craftopia.db import Database, object_id_or_none
from craftopia.models import ADMIN_ROLES, ROLE_SUPER_ADMIN, ROLE_USER, ROLES
from craftopia.util.normalization import normalize_email
from craftopia.util.pagination import Pagination, paginate, parse_sort
from craftopia.util.response import serialize_doc
from craftopia.util.time import utcnow

from .security import hash_password, verify_password


USER_SORT_FIELDS = ("firstName", "lastName", "email", "createdAt", "role")

# Fields a profile / admin update may touch.
_UPDATABLE = ("firstName", "lastName", "phoneNumber", "role", "isActive")


def _debug(msg: str) -> None:
    print(f"[auth] {msg}")


def public_user(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Serialize a user document without its password hash."""
    return serialize_doc(doc)


def get_user_by_email(db: Database, email: str) -> Optional[Dict[str, Any]]:
    e = normalize_email(email)
    if not e:
        return None
    return db.users.find_one({"email": e})


def get_user_by_id(db: Database, user_id: Any) -> Optional[Dict[str, Any]]:
    oid = object_id_or_none(user_id)
    if oid is None:
        return None
    return db.users.find_one({"_id": oid})


def create_user(
    db: Database,
    *,
    email: str,
    password: str,
    first_name: str,
    last_name: str,
    phone_number: str | None = None,
    role: str = ROLE_USER,
    is_active: bool = True,
) -> Dict[str, Any]:
    e = normalize_email(email)
    if not e:
        raise ValueError("email_blank")
    if role not in ROLES:
        raise ValueError("invalid_role")

    if db.users.find_one({"email": e}, {"_id": 1}) is not None:
        raise ValueError("email_exists")

    now = utcnow()
    doc: Dict[str, Any] = {
        "firstName": (first_name or "").strip(),
        "lastName": (last_name or "").strip(),
        "email": e,
        "phoneNumber": (phone_number or "").strip() or None,
        "password_hash": hash_password(password),
        "role": role,
        "isActive": bool(is_active),
        "emailVerified": False,
        "lastLogin": None,
        "createdAt": now,
        "updatedAt": now,
    }
    try:
        res = db.users.insert_one(doc)
    except DuplicateKeyError:
        # Lost a race with a concurrent registration.
        raise ValueError("email_exists")
    doc["_id"] = res.inserted_id
    return doc


def check_credentials(db: Database, email: str, password: str) -> Optional[Dict[str, Any]]:
    """Return the user document when the password matches, else None.

    The caller decides what to do with deactivated accounts.
    """
    row = get_user_by_email(db, email)
    if row is None:
        return None
    if not verify_password(password, str(row.get("password_hash") or "")):
        return None
    return row


def touch_last_login(db: Database, user_id: Any) -> Optional[Dict[str, Any]]:
    now = utcnow()
    return db.users.find_one_and_update(
        {"_id": object_id_or_none(user_id)},
        {"$set": {"lastLogin": now, "updatedAt": now}},
        return_document=ReturnDocument.AFTER,
    )


def update_user(db: Database, user_id: Any, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Apply a partial update. Keys outside the updatable set are ignored."""
    oid = object_id_or_none(user_id)
    if oid is None:
        return None
    sets = {k: v for k, v in fields.items() if k in _UPDATABLE and v is not None}
    if "role" in sets and sets["role"] not in ROLES:
        raise ValueError("invalid_role")
    sets["updatedAt"] = utcnow()
    return db.users.find_one_and_update(
        {"_id": oid},
        {"$set": sets},
        return_document=ReturnDocument.AFTER,
    )


def set_password(db: Database, user_id: Any, new_password: str) -> None:
    db.users.update_one(
        {"_id": object_id_or_none(user_id)},
        {"$set": {"password_hash": hash_password(new_password), "updatedAt": utcnow()}},
    )


def delete_user(db: Database, user_id: Any) -> bool:
    oid = object_id_or_none(user_id)
    if oid is None:
        return False
    return db.users.delete_one({"_id": oid}).deleted_count > 0


def list_users(
    db: Database,
    *,
    page: int | None,
    limit: int | None,
    sort: str | None = None,
    search: str | None = None,
    role: str | None = None,
    is_active: bool | None = None,
) -> Tuple[List[Dict[str, Any]], Pagination]:
    flt: Dict[str, Any] = {}

    q = (search or "").strip()
    if q:
        rx = {"$regex": re.escape(q), "$options": "i"}
        flt["$or"] = [{"firstName": rx}, {"lastName": rx}, {"email": rx}]
    if role:
        flt["role"] = role
    if is_active is not None:
        flt["isActive"] = bool(is_active)

    total = db.users.count_documents(flt)
    pg = paginate(page, limit, total, default_limit=10, max_limit=100)
    cursor = (
        db.users.find(flt, {"password_hash": 0})
        .sort(parse_sort(sort, allowed=USER_SORT_FIELDS, default="-createdAt"))
        .skip(pg.skip)
        .limit(pg.limit)
    )
    return list(cursor), pg


def user_stats(db: Database) -> Dict[str, Any]:
    total = db.users.count_documents({})
    active = db.users.count_documents({"isActive": True})
    inactive = db.users.count_documents({"isActive": False})
    admins = db.users.count_documents({"role": {"$in": list(ADMIN_ROLES)}})
    recent = list(db.users.find({}, {"password_hash": 0}).sort([("createdAt", -1)]).limit(5))
    return {
        "stats": {
            "totalUsers": total,
            "activeUsers": active,
            "inactiveUsers": inactive,
            "adminUsers": admins,
            "regularUsers": total - admins,
        },
        "recentUsers": [public_user(u) for u in recent],
    }


def bootstrap_super_admin(db: Database, cfg: Config) -> Optional[Dict[str, Any]]:
    """Create the super admin if none exists.

    Controlled via environment variables:

    - SUPER_ADMIN_EMAIL / SUPER_ADMIN_PASSWORD
    - SUPER_ADMIN_FIRST_NAME / SUPER_ADMIN_LAST_NAME

    Returns None when a super admin is already present.
    """
    existing = db.users.find_one({"role": ROLE_SUPER_ADMIN})
    if existing is not None:
        _debug(f"Super admin already exists: {existing.get('email')}")
        return None

    email = normalize_email(cfg.SUPER_ADMIN_EMAIL)
    password = cfg.SUPER_ADMIN_PASSWORD
    if not email or not password:
        return None

    return create_user(
        db,
        email=email,
        password=password,
        first_name=cfg.SUPER_ADMIN_FIRST_NAME,
        last_name=cfg.SUPER_ADMIN_LAST_NAME,
        role=ROLE_SUPER_ADMIN,
    )
