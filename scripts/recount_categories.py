"""Recompute every category's decorCount from the decors collection.

Usage:
  python scripts/recount_categories.py
"""

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from craftopia.catalog.categories import recount_decor_counts
from craftopia.config import load_config
from craftopia.db import get_database


def main() -> None:
    cfg = load_config()
    db = get_database(cfg)
    try:
        db.connect()
        fixed = recount_decor_counts(db)
    finally:
        db.close()
    print(f"Recount done: {fixed} categor{'y' if fixed == 1 else 'ies'} corrected")


if __name__ == "__main__":
    main()
