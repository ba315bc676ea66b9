"""MongoDB collections and indexes for the Craftopia catalog.

Documents use camelCase field names (they are served to the frontend as-is).
Only `users.email` and the slugs are unique at the database level; category
name uniqueness is case-insensitive and is checked by the store instead.
"""

from __future__ import annotations

from typing import Any, Dict, List, Tuple

from pymongo import ASCENDING, DESCENDING


USERS = "users"
CATEGORIES = "categories"
DECORS = "decors"

IndexSpec = Tuple[List[Tuple[str, int]], Dict[str, Any]]


INDEXES: Dict[str, List[IndexSpec]] = {
    USERS: [
        ([("email", ASCENDING)], {"unique": True, "name": "uniq_users_email"}),
        ([("role", ASCENDING), ("isActive", ASCENDING)], {"name": "idx_users_role_active"}),
        ([("createdAt", DESCENDING)], {"name": "idx_users_created"}),
    ],
    CATEGORIES: [
        ([("slug", ASCENDING)], {"unique": True, "name": "uniq_categories_slug"}),
        ([("name", ASCENDING)], {"name": "idx_categories_name"}),
        ([("isActive", ASCENDING)], {"name": "idx_categories_active"}),
        ([("createdBy", ASCENDING)], {"name": "idx_categories_created_by"}),
    ],
    DECORS: [
        ([("slug", ASCENDING)], {"unique": True, "name": "uniq_decors_slug"}),
        ([("category", ASCENDING), ("status", ASCENDING), ("featured", ASCENDING)], {"name": "idx_decors_cat_status_featured"}),
        ([("status", ASCENDING), ("price", ASCENDING)], {"name": "idx_decors_status_price"}),
        ([("rating.average", DESCENDING)], {"name": "idx_decors_rating"}),
        ([("salesCount", DESCENDING)], {"name": "idx_decors_sales"}),
        ([("createdAt", DESCENDING)], {"name": "idx_decors_created"}),
        ([("tags", ASCENDING)], {"name": "idx_decors_tags"}),
        ([("materials", ASCENDING)], {"name": "idx_decors_materials"}),
    ],
}


def get_index_specs() -> Dict[str, List[IndexSpec]]:
    return INDEXES
