from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import mongomock
import pytest
from fastapi.testclient import TestClient

from craftopia.api.server import create_app
from craftopia.auth.crud import create_user
from craftopia.auth.security import create_access_token, set_bcrypt_rounds
from craftopia.catalog.categories import create_category
from craftopia.catalog.decors import create_decor
from craftopia.config import Config
from craftopia.db import Database, init_db
from craftopia.media.cloudinary import MediaUploadError, UploadedImage, extract_public_id
from craftopia.models import ROLE_ADMIN, ROLE_SUPER_ADMIN, ROLE_USER


PASSWORD = "Password123"


class FakeMedia:
    """In-memory stand-in for CloudinaryClient."""

    enabled = True

    def __init__(self) -> None:
        self.uploaded: List[str] = []
        self.deleted: List[str] = []
        self.fail = False

    def upload_many(self, files: Sequence[Tuple[str, bytes]], *, folder: Optional[str] = None) -> List[UploadedImage]:
        if self.fail:
            raise MediaUploadError("upload rejected")
        out = []
        for filename, data in files:
            stem = filename.rsplit(".", 1)[0]
            url = f"https://res.cloudinary.com/demo/image/upload/v1/craftopia/decors/{len(self.uploaded)}_{stem}.jpg"
            self.uploaded.append(url)
            out.append(UploadedImage(url=url, public_id=extract_public_id(url), bytes=len(data)))
        return out

    def delete_many(self, public_ids: Sequence[str]) -> bool:
        self.deleted.extend(public_ids)
        return True

    def delete_urls(self, urls: Sequence[str]) -> bool:
        self.deleted.extend(urls)
        return True


@pytest.fixture
def cfg() -> Config:
    set_bcrypt_rounds(4)
    return Config(
        NODE_ENV="test",
        JWT_SECRET="test-secret",
        JWT_EXPIRE_MINUTES=60,
        BCRYPT_ROUNDS=4,
        AUTH_COOKIE_SECURE=False,
        CORS_ALLOW_ORIGINS="",
    )


@pytest.fixture
def db() -> Database:
    d = Database(mongomock.MongoClient(), "craftopia_test")
    init_db(d)
    return d


@pytest.fixture
def media() -> FakeMedia:
    return FakeMedia()


@pytest.fixture
def client(cfg: Config, db: Database, media: FakeMedia) -> TestClient:
    return TestClient(create_app(cfg, db=db, media=media))


@pytest.fixture
def make_user(db: Database) -> Callable[..., Dict[str, Any]]:
    counter = {"n": 0}

    def _make(role: str = ROLE_USER, *, email: Optional[str] = None, is_active: bool = True, **kw: Any) -> Dict[str, Any]:
        counter["n"] += 1
        return create_user(
            db,
            email=email or f"{role}{counter['n']}@craftopia.com",
            password=kw.pop("password", PASSWORD),
            first_name=kw.pop("first_name", "Test"),
            last_name=kw.pop("last_name", f"User{counter['n']}"),
            role=role,
            is_active=is_active,
        )

    return _make


@pytest.fixture
def auth_headers(cfg: Config) -> Callable[[Dict[str, Any]], Dict[str, str]]:
    def _headers(user: Dict[str, Any]) -> Dict[str, str]:
        token = create_access_token(
            secret=cfg.JWT_SECRET,
            user_id=str(user["_id"]),
            email=user["email"],
            role=user["role"],
            expires_minutes=cfg.JWT_EXPIRE_MINUTES,
        )
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def admin(make_user: Callable[..., Dict[str, Any]]) -> Dict[str, Any]:
    return make_user(ROLE_ADMIN)


@pytest.fixture
def super_admin(make_user: Callable[..., Dict[str, Any]]) -> Dict[str, Any]:
    return make_user(ROLE_SUPER_ADMIN)


@pytest.fixture
def category(db: Database, admin: Dict[str, Any]) -> Dict[str, Any]:
    return create_category(db, name="Wall Art", description="Hangings and prints", created_by=admin["_id"])


@pytest.fixture
def make_decor(db: Database, admin: Dict[str, Any], category: Dict[str, Any]) -> Callable[..., Dict[str, Any]]:
    counter = {"n": 0}

    def _make(**fields: Any) -> Dict[str, Any]:
        counter["n"] += 1
        base: Dict[str, Any] = {
            "name": f"Decor {counter['n']:03d}",
            "description": "Hand made",
            "category": category["_id"],
            "price": 100,
            "stock": 5,
            "materials": ["oak"],
        }
        base.update(fields)
        return create_decor(db, base, created_by=admin["_id"])

    return _make
