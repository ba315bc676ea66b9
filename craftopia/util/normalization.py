from __future__ import annotations

import json
import re
import unicodedata
from typing import Any, List, Optional


_SLUG_STRIP = re.compile(r"[^\w\s-]", re.ASCII)
_SLUG_SEPARATORS = re.compile(r"[\s_-]+")


def generate_slug(text: str) -> str:
    """Derive a URL-safe slug from a display name.

    "Wall Art & Decor" -> "wall-art-decor"
    """
    s = unicodedata.normalize("NFKC", text or "")
    s = s.lower().strip()
    # Drop anything that isn't a word char, whitespace or hyphen.
    s = _SLUG_STRIP.sub("", s)
    s = _SLUG_SEPARATORS.sub("-", s)
    return s.strip("-")


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def parse_list_field(raw: Any) -> Optional[List[str]]:
    """Parse a list-valued form field.

    Multipart clients send lists either as a JSON array string ('["oak","brass"]')
    or as a comma-separated string ("oak,brass"). Returns None when the field is absent.
    """
    if raw is None:
        return None
    if isinstance(raw, (list, tuple)):
        items = list(raw)
    else:
        s = str(raw).strip()
        if not s:
            return []
        items = None
        if s.startswith("["):
            try:
                parsed = json.loads(s)
            except ValueError:
                parsed = None
            if isinstance(parsed, list):
                items = parsed
        if items is None:
            items = s.split(",")

    out: List[str] = []
    for it in items:
        v = str(it).strip()
        if v:
            out.append(v)
    return out


def parse_json_object(raw: Any) -> Optional[dict]:
    """Parse a JSON-object form field (e.g. dimensions). Blank -> None."""
    if raw is None:
        return None
    if isinstance(raw, dict):
        return raw
    s = str(raw).strip()
    if not s:
        return None
    try:
        parsed = json.loads(s)
    except ValueError:
        raise ValueError("Dimensions must be a JSON object")
    if not isinstance(parsed, dict):
        raise ValueError("Dimensions must be a JSON object")
    return parsed
