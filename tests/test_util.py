from datetime import datetime, timezone

import pytest
from bson import ObjectId

from craftopia.util.normalization import generate_slug, normalize_email, parse_json_object, parse_list_field
from craftopia.util.pagination import paginate, parse_sort
from craftopia.util.response import error_response, serialize_doc, success_response
from craftopia.util.time import to_iso


def test_generate_slug():
    assert generate_slug("Wall Art & Decor") == "wall-art-decor"
    assert generate_slug("  Hello__World -- again ") == "hello-world-again"
    assert generate_slug("Café Lamp") == "caf-lamp"
    assert generate_slug("!!!") == ""


def test_normalize_email():
    assert normalize_email("  Jane@Mail.COM ") == "jane@mail.com"
    assert normalize_email(None) == ""


def test_parse_list_field_accepts_json_and_csv():
    assert parse_list_field('["oak", "brass"]') == ["oak", "brass"]
    assert parse_list_field("oak, brass ,") == ["oak", "brass"]
    assert parse_list_field("") == []
    assert parse_list_field(None) is None


def test_parse_json_object():
    assert parse_json_object('{"length": 10}') == {"length": 10}
    assert parse_json_object("  ") is None
    with pytest.raises(ValueError):
        parse_json_object("[1, 2]")
    with pytest.raises(ValueError):
        parse_json_object("{nope")


def test_paginate_math():
    pg = paginate(2, 10, 25)
    assert (pg.page, pg.limit, pg.total, pg.pages, pg.skip) == (2, 10, 25, 3, 10)
    assert pg.has_next and pg.has_prev
    assert pg.summary("totalDecors") == {
        "currentPage": 2,
        "totalPages": 3,
        "totalDecors": 25,
        "hasNextPage": True,
        "hasPrevPage": True,
    }
    assert pg.envelope() == {"page": 2, "limit": 10, "total": 25, "pages": 3}


def test_paginate_clamps():
    assert paginate(0, 500, 7).page == 1
    assert paginate(1, 500, 7).limit == 100
    assert paginate(None, None, 7, default_limit=12).limit == 12
    assert paginate(1, 0, 7).limit == 1
    assert paginate(1, 10, 0).pages == 0


def test_parse_sort():
    allowed = ("name", "price", "createdAt")
    assert parse_sort("-price", allowed=allowed, default="-createdAt") == [("price", -1)]
    assert parse_sort("name", allowed=allowed, default="-createdAt") == [("name", 1)]
    assert parse_sort("password_hash", allowed=allowed, default="-createdAt") == [("createdAt", -1)]
    assert parse_sort(None, allowed=allowed, default="name") == [("name", 1)]


def test_serialize_doc():
    oid, ref = ObjectId(), ObjectId()
    doc = {
        "_id": oid,
        "password_hash": "x",
        "__v": 0,
        "category": {"_id": ref, "name": "Lamps"},
        "tags": [ref],
        "createdAt": datetime(2024, 1, 2, 3, 4, 5, 678000),
    }
    out = serialize_doc(doc)
    assert out == {
        "id": str(oid),
        "category": {"id": str(ref), "name": "Lamps"},
        "tags": [str(ref)],
        "createdAt": "2024-01-02T03:04:05.678Z",
    }


def test_to_iso_aware_and_passthrough():
    assert to_iso(datetime(2024, 5, 1, tzinfo=timezone.utc)) == "2024-05-01T00:00:00.000Z"
    assert to_iso("x") == "x"


def test_envelopes():
    assert success_response("ok") == {"success": True, "message": "ok"}
    assert success_response("ok", [], {"page": 1}) == {"success": True, "message": "ok", "data": [], "pagination": {"page": 1}}
    assert error_response("bad") == {"success": False, "message": "bad"}
    assert error_response("bad", "why")["error"] == "why"
