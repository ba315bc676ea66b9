"""Load sample categories, an admin user and decor items.

Usage:
  python scripts/seed_data.py [--keep]

WARNING: without --keep this clears the users, categories and decors
collections first. Intended for local/dev databases only.
"""

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from craftopia.auth.crud import create_user, get_user_by_email
from craftopia.auth.security import set_bcrypt_rounds
from craftopia.catalog.categories import create_category
from craftopia.catalog.decors import create_decor
from craftopia.config import load_config
from craftopia.db import collection_counts, get_database, init_db
from craftopia.models import ROLE_ADMIN


SAMPLE_ADMIN = {
    "email": "john@craftopia.com",
    "password": "Password123",
    "first_name": "John",
    "last_name": "Artisan",
}

CATEGORIES = [
    ("Wall Art & Decor", "Beautiful handcrafted wall decorations and art pieces"),
    ("Home Accessories", "Elegant accessories for your home"),
    ("Handmade Jewelry", "Unique jewelry pieces crafted by artisans"),
    ("Furniture & Storage", "Functional and beautiful furniture pieces"),
    ("Textiles & Fabrics", "Soft furnishings and textile art"),
]

# (category index, fields)
DECORS = [
    (0, {
        "name": "Artisan Diamond Halo Collection",
        "description": "Handcrafted with precision and featuring elegant diamond-inspired patterns.",
        "price": 269, "originalPrice": 299, "stock": 15, "featured": True,
        "materials": ["brass", "glass"],
        "tags": ["handmade", "diamond pattern", "wall art", "modern"],
        "images": [
            "https://images.unsplash.com/photo-1578662996442-48f60103fc96?w=400",
            "https://images.unsplash.com/photo-1586023492125-27b2c045efd7?w=400",
        ],
    }),
    (2, {
        "name": "Elegant Halo Stud Earrings",
        "description": "Sophisticated jewelry pieces perfect for special occasions.",
        "price": 472, "stock": 8, "featured": True,
        "materials": ["sterling silver"],
        "tags": ["jewelry", "earrings", "elegant", "handmade"],
        "images": ["https://images.unsplash.com/photo-1515562141207-7a88fb7ce338?w=400"],
    }),
    (3, {
        "name": "Rustic Wooden Accent Piece",
        "description": "Unique reclaimed wood creation with natural finish.",
        "price": 459, "stock": 5, "featured": True,
        "materials": ["reclaimed wood"],
        "tags": ["wood", "rustic", "furniture", "sustainable"],
        "dimensions": {"length": 60, "width": 30, "height": 45, "weight": 7.5},
        "images": ["https://images.unsplash.com/photo-1586023492125-27b2c045efd7?w=400"],
    }),
    (1, {
        "name": "Custom Ceramic Vase Set",
        "description": "Hand-thrown ceramics with glazed finish in earth tones.",
        "price": 359, "originalPrice": 399, "stock": 12,
        "materials": ["ceramic"],
        "tags": ["ceramic", "vase", "handmade", "earth tones"],
        "careInstructions": "Hand wash only.",
        "images": ["https://images.unsplash.com/photo-1578749556568-bc2c40e68b61?w=400"],
    }),
    (4, {
        "name": "Woven Textile Wall Hanging",
        "description": "Traditional weaving techniques meet modern design.",
        "price": 189, "stock": 0,
        "materials": ["cotton", "wool"],
        "tags": ["textile", "weaving", "wall hanging", "traditional"],
        "images": ["https://images.unsplash.com/photo-1567538096630-e0c55bd6374c?w=400"],
    }),
    (1, {
        "name": "Carved Wooden Sculpture",
        "description": "Intricate hand-carved piece featuring traditional motifs.",
        "price": 625, "stock": 3, "featured": True,
        "materials": ["teak"],
        "tags": ["sculpture", "carved", "wood", "traditional", "art"],
        "images": ["https://images.unsplash.com/photo-1612198188060-c7c2a3b66eae?w=400"],
    }),
]


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--keep", action="store_true", help="do not clear existing data first")
    args = ap.parse_args()

    cfg = load_config()
    set_bcrypt_rounds(cfg.BCRYPT_ROUNDS)

    db = get_database(cfg)
    try:
        db.connect()
        if not args.keep:
            db.users.delete_many({})
            db.categories.delete_many({})
            db.decors.delete_many({})
            print("Cleared users, categories and decors")
        init_db(db)

        admin = get_user_by_email(db, SAMPLE_ADMIN["email"]) or create_user(db, role=ROLE_ADMIN, **SAMPLE_ADMIN)
        cats = [
            create_category(db, name=name, description=desc, created_by=admin["_id"])
            for name, desc in CATEGORIES
        ]
        for idx, fields in DECORS:
            create_decor(db, dict(fields, category=cats[idx]["_id"]), created_by=admin["_id"])

        counts = collection_counts(db)
    finally:
        db.close()

    print("Seeding complete:")
    for name, n in counts.items():
        print(f"  {name}: {n}")
    print(f"Admin login: {SAMPLE_ADMIN['email']} / {SAMPLE_ADMIN['password']}")


if __name__ == "__main__":
    main()
