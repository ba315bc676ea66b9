from bson import ObjectId

from craftopia.models import ROLE_ADMIN, ROLE_USER

from .conftest import PASSWORD


def test_user_routes_need_admin(client, make_user, auth_headers):
    assert client.get("/api/users").status_code == 401

    r = client.get("/api/users", headers=auth_headers(make_user()))
    assert r.status_code == 403
    assert r.json()["message"] == "Access denied. You do not have permission to perform this action."


def test_list_users_hides_password_hash(client, admin, make_user, auth_headers):
    for _ in range(3):
        make_user()
    r = client.get("/api/users", params={"limit": 2}, headers=auth_headers(admin))
    assert r.status_code == 200
    body = r.json()
    assert body["message"] == "Users retrieved successfully"
    users = body["data"]["users"]
    assert len(users) == 2
    assert all("password_hash" not in u for u in users)
    assert body["data"]["pagination"]["totalUsers"] == 4
    assert body["data"]["pagination"]["totalPages"] == 2
    assert body["pagination"] == {"page": 1, "limit": 2, "total": 4, "pages": 2}


def test_list_users_filters(client, admin, make_user, auth_headers):
    make_user(email="kim@shop.com", first_name="Kim")
    make_user(is_active=False)
    headers = auth_headers(admin)

    r = client.get("/api/users", params={"search": "kim"}, headers=headers)
    assert [u["email"] for u in r.json()["data"]["users"]] == ["kim@shop.com"]

    r = client.get("/api/users", params={"role": ROLE_ADMIN}, headers=headers)
    assert [u["id"] for u in r.json()["data"]["users"]] == [str(admin["_id"])]

    r = client.get("/api/users", params={"isActive": "false"}, headers=headers)
    assert r.json()["data"]["pagination"]["totalUsers"] == 1

    r = client.get("/api/users", params={"role": "wizard"}, headers=headers)
    assert r.status_code == 400


def test_get_user_errors(client, admin, auth_headers):
    headers = auth_headers(admin)

    r = client.get("/api/users/not-an-id", headers=headers)
    assert r.status_code == 400
    assert r.json()["message"] == "Invalid ID format"

    r = client.get(f"/api/users/{ObjectId()}", headers=headers)
    assert r.status_code == 404
    assert r.json()["message"] == "User not found"


def test_auth_is_checked_before_the_id(client, make_user, auth_headers):
    r = client.get("/api/users/not-an-id", headers=auth_headers(make_user()))
    assert r.status_code == 403


def test_update_user(client, admin, make_user, auth_headers):
    u = make_user()
    r = client.put(f"/api/users/{u['_id']}", json={"firstName": " Lee "}, headers=auth_headers(admin))
    assert r.status_code == 200
    assert r.json()["message"] == "User updated successfully"
    assert r.json()["data"]["firstName"] == "Lee"


def test_only_super_admin_changes_roles(client, admin, super_admin, make_user, auth_headers):
    u = make_user()

    r = client.put(f"/api/users/{u['_id']}", json={"role": ROLE_ADMIN}, headers=auth_headers(admin))
    assert r.status_code == 403
    assert r.json()["message"] == "Only a super admin can change user roles"

    r = client.put(f"/api/users/{u['_id']}", json={"role": ROLE_ADMIN}, headers=auth_headers(super_admin))
    assert r.status_code == 200
    assert r.json()["data"]["role"] == ROLE_ADMIN

    r = client.put(f"/api/users/{u['_id']}", json={"role": "super_admin"}, headers=auth_headers(super_admin))
    assert r.status_code == 400


def test_super_admin_is_protected(client, admin, super_admin, auth_headers):
    sid = super_admin["_id"]
    for headers in (auth_headers(admin), auth_headers(super_admin)):
        r = client.delete(f"/api/users/{sid}", headers=headers)
        assert r.status_code == 403
        assert r.json()["message"] == "Cannot delete super admin"

        r = client.patch(f"/api/users/{sid}/deactivate", headers=headers)
        assert r.status_code == 403
        assert r.json()["message"] == "Cannot deactivate super admin"

        r = client.put(f"/api/users/{sid}", json={"isActive": False}, headers=headers)
        assert r.status_code == 403

    r = client.patch(f"/api/users/{sid}/demote", headers=auth_headers(super_admin))
    assert r.status_code == 403
    assert r.json()["message"] == "Cannot demote super admin"


def test_promote_and_demote(client, admin, super_admin, make_user, auth_headers):
    u = make_user()
    path = f"/api/users/{u['_id']}"

    assert client.patch(f"{path}/promote", headers=auth_headers(admin)).status_code == 403

    r = client.patch(f"{path}/promote", headers=auth_headers(super_admin))
    assert r.status_code == 200
    assert r.json()["message"] == "User promoted to admin successfully"
    assert r.json()["data"]["role"] == ROLE_ADMIN

    r = client.patch(f"{path}/promote", headers=auth_headers(super_admin))
    assert r.status_code == 400
    assert r.json()["message"] == "User is already an admin"

    r = client.patch(f"{path}/demote", headers=auth_headers(super_admin))
    assert r.status_code == 200
    assert r.json()["message"] == "Admin demoted to user successfully"
    assert r.json()["data"]["role"] == ROLE_USER

    r = client.patch(f"{path}/demote", headers=auth_headers(super_admin))
    assert r.status_code == 400
    assert r.json()["message"] == "User is not an admin"


def test_deactivate_blocks_login_and_activate_restores(client, admin, make_user, auth_headers):
    u = make_user(email="sam@shop.com")
    headers = auth_headers(admin)

    r = client.patch(f"/api/users/{u['_id']}/deactivate", headers=headers)
    assert r.status_code == 200
    assert r.json()["data"]["isActive"] is False
    r = client.post("/api/auth/login", json={"email": "sam@shop.com", "password": PASSWORD})
    assert r.status_code == 403

    r = client.patch(f"/api/users/{u['_id']}/activate", headers=headers)
    assert r.json()["data"]["isActive"] is True
    r = client.post("/api/auth/login", json={"email": "sam@shop.com", "password": PASSWORD})
    assert r.status_code == 200


def test_delete_user(client, admin, make_user, auth_headers, db):
    u = make_user()
    r = client.delete(f"/api/users/{u['_id']}", headers=auth_headers(admin))
    assert r.status_code == 200
    assert r.json() == {"success": True, "message": "User deleted successfully"}
    assert db.users.find_one({"_id": u["_id"]}) is None

    r = client.delete(f"/api/users/{u['_id']}", headers=auth_headers(admin))
    assert r.status_code == 404


def test_user_stats(client, admin, super_admin, make_user, auth_headers):
    make_user()
    make_user(is_active=False)
    r = client.get("/api/users/stats", headers=auth_headers(admin))
    assert r.status_code == 200
    stats = r.json()["data"]["stats"]
    assert stats == {
        "totalUsers": 4,
        "activeUsers": 3,
        "inactiveUsers": 1,
        "adminUsers": 2,
        "regularUsers": 2,
    }
    assert len(r.json()["data"]["recentUsers"]) == 4
