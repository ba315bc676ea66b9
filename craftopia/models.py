from __future__ import annotations

from dataclasses import dataclass


# Roles
ROLE_USER = "user"
ROLE_ADMIN = "admin"
ROLE_SUPER_ADMIN = "super_admin"

ROLES = (ROLE_USER, ROLE_ADMIN, ROLE_SUPER_ADMIN)
ADMIN_ROLES = (ROLE_ADMIN, ROLE_SUPER_ADMIN)

# Decor status
STATUS_ACTIVE = "active"
STATUS_INACTIVE = "inactive"
STATUS_OUT_OF_STOCK = "out_of_stock"
STATUS_DISCONTINUED = "discontinued"

DECOR_STATUSES = (STATUS_ACTIVE, STATUS_INACTIVE, STATUS_OUT_OF_STOCK, STATUS_DISCONTINUED)


@dataclass(frozen=True)
class AuthUser:
    """Identity attached to an authenticated request."""

    id: str
    email: str
    role: str

    @property
    def is_super_admin(self) -> bool:
        return self.role == ROLE_SUPER_ADMIN
