def _new_user(client, headers, **overrides):
    body = {
        "username": "newbie",
        "email": "newbie@example.com",
        "password": "Testpass123!",
        "firstName": "New",
        "lastName": "Bie",
    }
    body.update(overrides)
    return client.post("/users", json=body, headers=headers)


def test_non_admin_is_forbidden(client, staff_headers):
    r = client.get("/users", headers=staff_headers)
    assert r.status_code == 403, r.text
    assert r.json()["error"] == "Admin access required"


def test_admin_creates_and_lists_users(client, admin_headers):
    r = _new_user(client, admin_headers)
    assert r.status_code == 201, r.text
    user = r.json()["user"]
    assert user["role"] == "user"
    assert user["passwordChangeRequired"] is False
    assert "passwordHash" not in user

    listed = client.get("/users", headers=admin_headers).json()["users"]
    assert {u["username"] for u in listed} == {"boss", "newbie"}
    assert all("passwordHash" not in u for u in listed)

    login = client.post("/auth/login", json={"email": "newbie@example.com", "password": "Testpass123!"})
    assert login.status_code == 200, login.text


def test_duplicate_user_is_409(client, admin_headers):
    assert _new_user(client, admin_headers).status_code == 201
    r = _new_user(client, admin_headers, email="other@example.com")
    assert r.status_code == 409, r.text


def test_create_user_validates_input(client, admin_headers):
    assert _new_user(client, admin_headers, password="123").status_code == 400
    assert _new_user(client, admin_headers, email="bad").status_code == 400
    assert _new_user(client, admin_headers, role="superuser").status_code == 400


def test_admin_updates_user(client, admin_headers):
    uid = _new_user(client, admin_headers).json()["user"]["id"]

    r = client.put(
        f"/users/{uid}",
        json={"role": "admin", "lastName": "Promoted", "password": "Brandnew456!"},
        headers=admin_headers,
    )
    assert r.status_code == 200, r.text
    assert r.json()["user"]["role"] == "admin"
    assert r.json()["user"]["lastName"] == "Promoted"
    assert r.json()["user"]["firstName"] == "New"

    login = client.post("/auth/login", json={"email": "newbie", "password": "Brandnew456!"})
    assert login.status_code == 200, login.text


def test_admin_cannot_change_own_role(client, make_user, headers_for):
    admin = make_user("root", role="admin")
    r = client.put(f"/users/{admin.id}", json={"role": "user"}, headers=headers_for(admin))
    assert r.status_code == 403, r.text

    # Same role is not a change.
    r = client.put(f"/users/{admin.id}", json={"role": "admin", "firstName": "Rooty"}, headers=headers_for(admin))
    assert r.status_code == 200, r.text


def test_admin_cannot_delete_self(client, make_user, headers_for):
    admin = make_user("root", role="admin")
    r = client.delete(f"/users/{admin.id}", headers=headers_for(admin))
    assert r.status_code == 403, r.text


def test_admin_deletes_user(client, admin_headers):
    uid = _new_user(client, admin_headers).json()["user"]["id"]
    assert client.delete(f"/users/{uid}", headers=admin_headers).status_code == 200
    assert client.delete(f"/users/{uid}", headers=admin_headers).status_code == 404
    assert client.put(f"/users/{uid}", json={"firstName": "X"}, headers=admin_headers).status_code == 404


def test_seed_admin_runs_once(db_session):
    from backend.app.services.bootstrap import seed_admin
    from backend.app.utils.security import verify_password

    admin = seed_admin(db_session)
    assert admin is not None
    assert admin.role == "admin"
    assert admin.password_change_required is True
    assert verify_password("password123", admin.password_hash)

    assert seed_admin(db_session) is None


def test_startup_seeds_admin(app):
    from fastapi.testclient import TestClient

    with TestClient(app) as client:
        r = client.post("/auth/login", json={"email": "admin", "password": "password123"})
        assert r.status_code == 200, r.text
        assert r.json()["user"]["role"] == "admin"
        assert client.get("/db/health").status_code == 200
