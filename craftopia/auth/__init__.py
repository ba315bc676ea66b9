"""Authentication / authorization helpers.

- Users collection (email + bcrypt password hash + role)
- JWT access tokens (24h default) and refresh tokens (7 days)

The API accepts the access token from either:

- `Authorization: Bearer <token>` (useful for scripts / API clients)
- the access-token cookie

The refresh token only ever travels in an httpOnly, SameSite=strict cookie.
"""

from .deps import (
    get_current_user,
    get_db,
    get_optional_user,
    require_admin,
    require_roles,
    require_super_admin,
)
from .crud import bootstrap_super_admin, create_user

__all__ = [
    "get_current_user",
    "get_db",
    "get_optional_user",
    "require_admin",
    "require_roles",
    "require_super_admin",
    "bootstrap_super_admin",
    "create_user",
]
