from __future__ import annotations

import re
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple
from urllib.parse import urlparse

import requests

from craftopia.config import Config
from craftopia.util.hashing import sha1_hex


# Parameters Cloudinary excludes from the request signature.
_UNSIGNED = {"file", "api_key", "resource_type", "cloud_name", "signature"}

_VERSION_SEGMENT = re.compile(r"^v\d+$")


class MediaUploadError(RuntimeError):
    pass


@dataclass(frozen=True)
class UploadedImage:
    url: str
    public_id: str
    width: int | None = None
    height: int | None = None
    bytes: int | None = None
    format: str | None = None


def _debug(msg: str) -> None:
    print(f"[media] {msg}")


def sign_params(params: Dict[str, Any], api_secret: str) -> str:
    """Cloudinary request signature.

    Sorted `key=value` pairs joined by '&', with the API secret appended, SHA-1 hex.
    """
    pairs = [
        f"{k}={params[k]}"
        for k in sorted(params)
        if k not in _UNSIGNED and params[k] is not None and params[k] != ""
    ]
    return sha1_hex("&".join(pairs) + api_secret)


def extract_public_id(url: str) -> str:
    """Recover the public id from a delivery URL.

    https://res.cloudinary.com/demo/image/upload/v1712/craftopia/decors/vase.jpg
      -> craftopia/decors/vase
    """
    path = urlparse(url or "").path
    parts = [p for p in path.split("/") if p]
    if not parts:
        return ""
    stem = parts[-1].rsplit(".", 1)[0]
    if "upload" in parts:
        i = parts.index("upload") + 1
        if i < len(parts) - 1 and _VERSION_SEGMENT.match(parts[i]):
            i += 1
        folder = parts[i:-1]
        return "/".join(folder + [stem]) if folder else stem
    return stem


def _safe_stem(filename: str) -> str:
    stem = (filename or "image").rsplit("/", 1)[-1].split(".")[0]
    stem = re.sub(r"[^A-Za-z0-9_-]+", "_", stem).strip("_")
    return stem or "image"


class CloudinaryClient:
    """Minimal signed-upload client for the Cloudinary REST API."""

    def __init__(
        self,
        *,
        cloud_name: str,
        api_key: str,
        api_secret: str,
        folder: str = "craftopia/decors",
        base_url: str = "https://api.cloudinary.com/v1_1",
        timeout: float = 60.0,
    ) -> None:
        self.cloud_name = (cloud_name or "").strip()
        self.api_key = (api_key or "").strip()
        self.api_secret = (api_secret or "").strip()
        self.folder = folder
        self.base_url = base_url.rstrip("/")
        self.timeout = float(timeout)

    @classmethod
    def from_config(cls, cfg: Config) -> "CloudinaryClient":
        return cls(
            cloud_name=cfg.CLOUDINARY_CLOUD_NAME,
            api_key=cfg.CLOUDINARY_API_KEY,
            api_secret=cfg.CLOUDINARY_API_SECRET,
            folder=cfg.CLOUDINARY_FOLDER,
            base_url=cfg.CLOUDINARY_BASE_URL,
            timeout=cfg.CLOUDINARY_TIMEOUT_SECONDS,
        )

    @property
    def enabled(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{self.cloud_name}/{path.lstrip('/')}"

    def upload(self, data: bytes, *, filename: str, folder: Optional[str] = None) -> UploadedImage:
        if not self.enabled:
            raise MediaUploadError("Image hosting is not configured")
        if not data:
            raise MediaUploadError(f"Empty upload: {filename}")

        params: Dict[str, Any] = {
            "folder": folder or self.folder,
            "public_id": _safe_stem(filename),
            "overwrite": "true",
            "transformation": "c_limit,h_1200,w_1200/q_auto:good",
            "timestamp": int(time.time()),
        }
        params["signature"] = sign_params(params, self.api_secret)
        params["api_key"] = self.api_key

        _debug(f"Uploading {filename} ({len(data)} bytes) to {params['folder']}")
        try:
            r = requests.post(
                self._url("image/upload"),
                data=params,
                files={"file": (filename, data)},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise MediaUploadError(f"Image upload failed: {e}") from e
        if r.status_code != 200:
            raise MediaUploadError(f"Image upload failed {r.status_code}: {r.text}")

        body = r.json()
        return UploadedImage(
            url=str(body.get("secure_url") or body.get("url") or ""),
            public_id=str(body.get("public_id") or ""),
            width=body.get("width"),
            height=body.get("height"),
            bytes=body.get("bytes"),
            format=body.get("format"),
        )

    def upload_many(self, files: Sequence[Tuple[str, bytes]], *, folder: Optional[str] = None) -> List[UploadedImage]:
        """Upload every file or none: on failure, already-uploaded images are removed."""
        done: List[UploadedImage] = []
        stamp = int(time.time() * 1000)
        for i, (filename, data) in enumerate(files):
            try:
                done.append(self.upload(data, filename=f"{stamp}_{i}_{_safe_stem(filename)}", folder=folder))
            except MediaUploadError:
                if done:
                    self.delete_many([img.public_id for img in done])
                raise
        return done

    def delete_many(self, public_ids: Sequence[str]) -> bool:
        """Best-effort batch delete via the Admin API. Never raises."""
        ids = [p for p in public_ids if p]
        if not self.enabled or not ids:
            return False
        try:
            r = requests.delete(
                self._url("resources/image/upload"),
                params=[("public_ids[]", p) for p in ids],
                auth=(self.api_key, self.api_secret),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            _debug(f"batch delete failed: {e}")
            return False
        if r.status_code != 200:
            _debug(f"batch delete failed {r.status_code}: {r.text}")
            return False
        deleted = (r.json() or {}).get("deleted") or {}
        return all(v == "deleted" for v in deleted.values())

    def delete_urls(self, urls: Sequence[str]) -> bool:
        return self.delete_many([extract_public_id(u) for u in urls])
