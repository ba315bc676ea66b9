"""Serve the Craftopia API with uvicorn.

Pings MongoDB first and exits with status 1 when it is unreachable.
"""

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

import uvicorn
from pymongo.errors import PyMongoError

from craftopia.config import load_config
from craftopia.db import get_database


def main() -> None:
    cfg = load_config()

    db = get_database(cfg)
    try:
        db.connect()
    except PyMongoError as e:
        print(f"[api] MongoDB unreachable: {e}")
        sys.exit(1)
    finally:
        db.close()

    uvicorn.run(
        "craftopia.api.server:create_app",
        factory=True,
        host=cfg.API_HOST,
        port=int(cfg.API_PORT),
        reload=False,
    )


if __name__ == "__main__":
    main()
