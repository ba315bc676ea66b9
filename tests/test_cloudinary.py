import hashlib
from typing import Any, Dict, List

import pytest
import requests

from craftopia.media import cloudinary
from craftopia.media.cloudinary import CloudinaryClient, MediaUploadError, extract_public_id, sign_params


class FakeResponse:
    def __init__(self, status_code: int, body: Dict[str, Any]):
        self.status_code = status_code
        self._body = body
        self.text = str(body)

    def json(self) -> Dict[str, Any]:
        return self._body


def _client() -> CloudinaryClient:
    return CloudinaryClient(cloud_name="demo", api_key="key", api_secret="shh", folder="craftopia/decors")


def test_sign_params_sorts_and_skips_unsigned_keys():
    params = {"timestamp": 1700000000, "folder": "craftopia/decors", "api_key": "key", "file": "...", "overwrite": ""}
    expected = hashlib.sha1(b"folder=craftopia/decors&timestamp=1700000000shh").hexdigest()
    assert sign_params(params, "shh") == expected


@pytest.mark.parametrize(
    "url, public_id",
    [
        ("https://res.cloudinary.com/demo/image/upload/v1712/craftopia/decors/vase.jpg", "craftopia/decors/vase"),
        ("https://res.cloudinary.com/demo/image/upload/lamp.png", "lamp"),
        ("https://res.cloudinary.com/demo/image/upload/v99/a/b/c.tar.gz", "a/b/c.tar"),
        ("", ""),
    ],
)
def test_extract_public_id(url, public_id):
    assert extract_public_id(url) == public_id


def test_upload_posts_signed_request(monkeypatch):
    calls: List[Dict[str, Any]] = []

    def fake_post(url, data=None, files=None, timeout=None):
        calls.append({"url": url, "data": data, "files": files, "timeout": timeout})
        return FakeResponse(200, {"secure_url": "https://res.cloudinary.com/demo/x.jpg", "public_id": "craftopia/decors/x", "width": 10})

    monkeypatch.setattr(cloudinary.requests, "post", fake_post)
    img = _client().upload(b"bytes", filename="My Vase!.jpg")

    assert img.url == "https://res.cloudinary.com/demo/x.jpg"
    assert img.public_id == "craftopia/decors/x"
    assert img.width == 10
    sent = calls[0]
    assert sent["url"] == "https://api.cloudinary.com/v1_1/demo/image/upload"
    assert sent["data"]["api_key"] == "key"
    assert sent["data"]["public_id"] == "My_Vase"
    unsigned = {k: v for k, v in sent["data"].items() if k not in ("signature", "api_key")}
    assert sent["data"]["signature"] == sign_params(unsigned, "shh")


def test_upload_requires_credentials_and_data():
    with pytest.raises(MediaUploadError):
        CloudinaryClient(cloud_name="", api_key="", api_secret="").upload(b"x", filename="a.jpg")
    with pytest.raises(MediaUploadError):
        _client().upload(b"", filename="a.jpg")


def test_upload_error_status_raises(monkeypatch):
    monkeypatch.setattr(cloudinary.requests, "post", lambda *a, **k: FakeResponse(401, {"error": "bad key"}))
    with pytest.raises(MediaUploadError):
        _client().upload(b"x", filename="a.jpg")


def test_upload_many_rolls_back_on_failure(monkeypatch):
    posted: List[str] = []
    deleted: List[Any] = []

    def fake_post(url, data=None, files=None, timeout=None):
        posted.append(data["public_id"])
        if len(posted) == 2:
            raise requests.ConnectionError("reset")
        return FakeResponse(200, {"secure_url": "https://x/1.jpg", "public_id": "craftopia/decors/first"})

    def fake_delete(url, params=None, auth=None, timeout=None):
        deleted.append(params)
        return FakeResponse(200, {"deleted": {"craftopia/decors/first": "deleted"}})

    monkeypatch.setattr(cloudinary.requests, "post", fake_post)
    monkeypatch.setattr(cloudinary.requests, "delete", fake_delete)

    with pytest.raises(MediaUploadError):
        _client().upload_many([("a.jpg", b"1"), ("b.jpg", b"2")])
    assert deleted == [[("public_ids[]", "craftopia/decors/first")]]


def test_delete_many_is_best_effort(monkeypatch):
    def boom(*a, **k):
        raise requests.Timeout("slow")

    monkeypatch.setattr(cloudinary.requests, "delete", boom)
    assert _client().delete_many(["a"]) is False
    assert _client().delete_many([]) is False

    monkeypatch.setattr(cloudinary.requests, "delete", lambda *a, **k: FakeResponse(500, {}))
    assert _client().delete_urls(["https://res.cloudinary.com/demo/image/upload/v1/a.jpg"]) is False
