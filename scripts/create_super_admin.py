"""Create the super admin account if none exists.

Usage:
  SUPER_ADMIN_EMAIL=... SUPER_ADMIN_PASSWORD=... python scripts/create_super_admin.py

Safe to re-run: an existing super admin is left untouched.
"""

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from craftopia.auth.crud import bootstrap_super_admin
from craftopia.auth.security import set_bcrypt_rounds
from craftopia.config import load_config
from craftopia.db import get_database, init_db


def main() -> None:
    cfg = load_config()
    set_bcrypt_rounds(cfg.BCRYPT_ROUNDS)

    db = get_database(cfg)
    try:
        db.connect()
        init_db(db)
        u = bootstrap_super_admin(db, cfg)
    finally:
        db.close()

    if u is None:
        print("Super admin already exists (or SUPER_ADMIN_EMAIL / SUPER_ADMIN_PASSWORD unset); nothing to do.")
        return

    print("Created super admin:")
    print(f"  email: {u['email']}")
    print(f"  name:  {u['firstName']} {u['lastName']}")
    print("Change the password after the first login.")


if __name__ == "__main__":
    main()
