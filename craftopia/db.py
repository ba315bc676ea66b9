from __future__ import annotations

from typing import Any, Optional

from bson import ObjectId
from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from craftopia.config import Config
from craftopia.schema import CATEGORIES, DECORS, USERS, get_index_specs


def _debug(msg: str) -> None:
    print(f"[db] {msg}")


def _redact_uri(uri: str) -> str:
    """Hide credentials in a mongodb:// URI before it is logged."""
    s = (uri or "").strip()
    if "@" not in s or "://" not in s:
        return s
    scheme, rest = s.split("://", 1)
    return f"{scheme}://***@{rest.split('@', 1)[1]}"


class Database:
    """An explicitly constructed MongoDB handle.

    Built once at startup and passed to the stores via `app.state.db`; nothing
    in the package reaches for a global connection.

    `client` may be any pymongo-compatible client (tests pass a mongomock one).
    """

    def __init__(self, client: Any, name: str, *, uri: str = "") -> None:
        self._client = client
        self._db = client[name]
        self.name = name
        self.uri = uri

    @classmethod
    def from_config(cls, cfg: Config) -> "Database":
        client = MongoClient(
            cfg.MONGODB_URI,
            maxPoolSize=int(cfg.MONGODB_MAX_POOL_SIZE),
            serverSelectionTimeoutMS=int(cfg.MONGODB_SERVER_SELECTION_TIMEOUT_MS),
            socketTimeoutMS=int(cfg.MONGODB_SOCKET_TIMEOUT_MS),
        )
        name = client.get_default_database(default=cfg.MONGODB_DB_NAME).name
        return cls(client, name, uri=cfg.MONGODB_URI)

    # -----------------
    # Lifecycle
    # -----------------

    def connect(self) -> None:
        """Verify the server is reachable. Raises on failure."""
        self._client.admin.command("ping")
        _debug(f"MongoDB connected: {_redact_uri(self.uri) or self.name} (db={self.name})")

    def ping(self) -> bool:
        try:
            self._client.admin.command("ping")
            return True
        except PyMongoError as e:
            _debug(f"ping failed: {e}")
            return False

    def close(self) -> None:
        try:
            self._client.close()
            _debug("MongoDB connection closed")
        except PyMongoError as e:
            _debug(f"error closing MongoDB connection: {e}")

    # -----------------
    # Collections
    # -----------------

    def __getitem__(self, name: str) -> Collection:
        return self._db[name]

    @property
    def users(self) -> Collection:
        return self._db[USERS]

    @property
    def categories(self) -> Collection:
        return self._db[CATEGORIES]

    @property
    def decors(self) -> Collection:
        return self._db[DECORS]


def init_db(db: Database) -> None:
    """Create all indexes (idempotent)."""
    _debug(f"Initializing indexes on {db.name}")
    for collection, specs in get_index_specs().items():
        for keys, options in specs:
            db[collection].create_index(keys, **options)


def collection_counts(db: Database) -> dict:
    return {
        USERS: db.users.count_documents({}),
        CATEGORIES: db.categories.count_documents({}),
        DECORS: db.decors.count_documents({}),
    }


def get_database(cfg: Config, client: Optional[Any] = None, name: Optional[str] = None) -> Database:
    if client is not None:
        return Database(client, name or cfg.MONGODB_DB_NAME)
    return Database.from_config(cfg)


def object_id_or_none(value: Any) -> Optional[ObjectId]:
    """Parse a 24-hex id. Returns None for anything malformed."""
    if isinstance(value, ObjectId):
        return value
    s = str(value or "").strip()
    if not ObjectId.is_valid(s) or len(s) != 24:
        return None
    return ObjectId(s)
