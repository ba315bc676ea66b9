from bson import ObjectId

from craftopia.catalog.categories import recount_decor_counts
from craftopia.catalog.decors import delete_decor, update_decor


def _create(client, headers, name, **extra):
    return client.post("/api/categories", json={"name": name, **extra}, headers=headers)


def test_create_category(client, admin, auth_headers):
    r = _create(client, auth_headers(admin), "  Table Lamps ", description="Lights")
    assert r.status_code == 201
    body = r.json()
    assert body["message"] == "Category created successfully"
    data = body["data"]
    assert data["name"] == "Table Lamps"
    assert data["slug"] == "table-lamps"
    assert data["decorCount"] == 0
    assert data["isActive"] is True
    assert data["createdBy"] == str(admin["_id"])


def test_create_category_rejects_duplicates_case_insensitively(client, admin, auth_headers):
    headers = auth_headers(admin)
    assert _create(client, headers, "Lighting").status_code == 201
    r = _create(client, headers, "lighting")
    assert r.status_code == 400
    assert r.json() == {"success": False, "message": "Category with this name already exists"}


def test_create_category_needs_admin(client, make_user, auth_headers):
    assert _create(client, {}, "Lighting").status_code == 401
    assert _create(client, auth_headers(make_user()), "Lighting").status_code == 403


def test_create_category_validation(client, admin, auth_headers):
    headers = auth_headers(admin)
    r = _create(client, headers, "x" * 101)
    assert r.status_code == 400
    assert r.json()["message"] == "Validation Error"

    r = _create(client, headers, "!!!")
    assert r.status_code == 400
    assert r.json()["message"] == "Category name must contain letters or digits"


def test_active_categories_sorted_by_name(client, admin, auth_headers):
    headers = auth_headers(admin)
    for name in ("Vases", "Candles", "Rugs"):
        assert _create(client, headers, name).status_code == 201
    rugs = client.get("/api/categories", params={"search": "rugs"}).json()["data"]["categories"][0]
    client.put(f"/api/categories/{rugs['id']}", json={"isActive": False}, headers=headers)

    r = client.get("/api/categories/active")
    assert r.status_code == 200
    rows = r.json()["data"]
    assert [c["name"] for c in rows] == ["Candles", "Vases"]
    assert set(rows[0]) == {"id", "name", "slug", "description", "icon", "decorCount"}


def test_list_categories_paginates_and_populates_creator(client, admin, auth_headers):
    headers = auth_headers(admin)
    for name in ("Bowls", "Art", "Clocks"):
        _create(client, headers, name)

    r = client.get("/api/categories", params={"limit": 2})
    body = r.json()
    assert [c["name"] for c in body["data"]["categories"]] == ["Art", "Bowls"]
    assert body["data"]["pagination"] == {
        "currentPage": 1,
        "totalPages": 2,
        "totalCategories": 3,
        "hasNextPage": True,
        "hasPrevPage": False,
    }
    creator = body["data"]["categories"][0]["createdBy"]
    assert creator["email"] == admin["email"]
    assert "password_hash" not in creator

    r = client.get("/api/categories", params={"page": 2, "limit": 2})
    assert [c["name"] for c in r.json()["data"]["categories"]] == ["Clocks"]


def test_get_category(client, category):
    r = client.get(f"/api/categories/{category['_id']}")
    assert r.status_code == 200
    assert r.json()["data"]["name"] == "Wall Art"

    assert client.get(f"/api/categories/{ObjectId()}").json()["message"] == "Category not found"
    assert client.get("/api/categories/123").status_code == 400


def test_rename_updates_slug(client, admin, auth_headers, category):
    headers = auth_headers(admin)
    r = client.put(f"/api/categories/{category['_id']}", json={"name": "Wall Hangings"}, headers=headers)
    assert r.status_code == 200
    assert r.json()["data"]["slug"] == "wall-hangings"

    _create(client, headers, "Mirrors")
    r = client.put(f"/api/categories/{category['_id']}", json={"name": "MIRRORS"}, headers=headers)
    assert r.status_code == 400
    assert r.json()["message"] == "Category with this name already exists"

    # Same name with different case is not a conflict with itself.
    r = client.put(f"/api/categories/{category['_id']}", json={"name": "wall hangings"}, headers=headers)
    assert r.status_code == 200


def test_delete_category(client, admin, auth_headers, category, make_decor, db):
    headers = auth_headers(admin)
    decor = make_decor()

    r = client.delete(f"/api/categories/{category['_id']}", headers=headers)
    assert r.status_code == 400
    assert r.json()["message"].startswith("Cannot delete category that has associated decors")

    delete_decor(db, decor["_id"])
    r = client.delete(f"/api/categories/{category['_id']}", headers=headers)
    assert r.status_code == 200
    assert db.categories.count_documents({}) == 0

    r = client.delete(f"/api/categories/{category['_id']}", headers=headers)
    assert r.status_code == 404


def test_category_decors_lists_active_only(client, category, make_decor):
    make_decor(name="Sun Mask")
    make_decor(name="Moon Mask")
    make_decor(name="Old Mask", status="inactive")

    r = client.get(f"/api/categories/{category['_id']}/decors", params={"sort": "name"})
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["category"] == {"id": str(category["_id"]), "name": "Wall Art", "description": "Hangings and prints"}
    assert [d["name"] for d in data["decors"]] == ["Moon Mask", "Sun Mask"]
    assert data["pagination"]["totalDecors"] == 2
    assert "createdBy" not in data["decors"][0]
    assert data["decors"][0]["category"]["name"] == "Wall Art"

    assert client.get(f"/api/categories/{ObjectId()}/decors").status_code == 404


def test_decor_count_follows_decor_writes(db, admin, category, make_decor):
    other = db.categories.insert_one({"name": "Other", "slug": "other", "decorCount": 0, "isActive": True}).inserted_id
    a = make_decor()
    make_decor()
    assert db.categories.find_one({"_id": category["_id"]})["decorCount"] == 2

    update_decor(db, a["_id"], {"category": other})
    assert db.categories.find_one({"_id": category["_id"]})["decorCount"] == 1
    assert db.categories.find_one({"_id": other})["decorCount"] == 1

    delete_decor(db, a["_id"])
    assert db.categories.find_one({"_id": other})["decorCount"] == 0


def test_recount_repairs_drift(db, category, make_decor):
    make_decor()
    make_decor()
    db.categories.update_one({"_id": category["_id"]}, {"$set": {"decorCount": 9}})
    assert recount_decor_counts(db) == 1
    assert db.categories.find_one({"_id": category["_id"]})["decorCount"] == 2
    assert recount_decor_counts(db) == 0


def test_category_stats(client, admin, auth_headers, category, make_decor):
    make_decor()
    client.post("/api/categories", json={"name": "Empty"}, headers=auth_headers(admin))

    r = client.get("/api/categories/admin/stats", headers=auth_headers(admin))
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["stats"] == {"totalCategories": 2, "activeCategories": 2, "inactiveCategories": 0}
    assert data["topCategories"][0]["name"] == "Wall Art"
    assert data["topCategories"][0]["decorCount"] == 1
    assert data["topCategories"][0]["id"] == str(category["_id"])

    assert client.get("/api/categories/admin/stats").status_code == 401
