from .helpers import register


def test_register_returns_user_and_sets_cookie(client):
    res = client.post(
        "/api/auth/register",
        json={"username": "maria", "email": "Maria@Example.com", "password": "secret123"},
    )
    assert res.status_code == 201
    body = res.json()
    assert body["email"] == "maria@example.com"
    assert body["username"] == "maria"
    assert body["token"]
    assert "password" not in body
    assert "token" in res.cookies


def test_register_duplicate_email(client):
    register(client)
    res = client.post(
        "/api/auth/register",
        json={"username": "other", "email": "owner@example.com", "password": "secret123"},
    )
    assert res.status_code == 409
    assert res.json()["message"] == "Email already registered"


def test_register_validation_error_shape(client):
    res = client.post("/api/auth/register", json={"username": "ab", "email": "nope", "password": "1"})
    assert res.status_code == 400
    body = res.json()
    assert body["message"] == "Invalid request data"
    fields = {e["field"] for e in body["errors"]}
    assert {"username", "email", "password"} <= fields


def test_login_and_profile(client):
    register(client)
    res = client.post("/api/auth/login", json={"email": "owner@example.com", "password": "secret123"})
    assert res.status_code == 200
    token = res.json()["token"]

    profile = client.get("/api/auth/profile", headers={"Authorization": f"Bearer {token}"})
    assert profile.status_code == 200
    assert profile.json()["email"] == "owner@example.com"


def test_login_bad_credentials(client):
    register(client)
    res = client.post("/api/auth/login", json={"email": "owner@example.com", "password": "wrong-pass"})
    assert res.status_code == 401


def test_cookie_session(client):
    client.post(
        "/api/auth/register",
        json={"username": "cookie", "email": "cookie@example.com", "password": "secret123"},
    )
    assert client.get("/api/auth/profile").status_code == 200

    client.post("/api/auth/logout")
    client.cookies.clear()
    assert client.get("/api/auth/profile").status_code == 401


def test_profile_requires_valid_token(client):
    assert client.get("/api/auth/profile").status_code == 401
    res = client.get("/api/auth/profile", headers={"Authorization": "Bearer not-a-jwt"})
    assert res.status_code == 401
    assert res.json()["message"] == "Invalid or expired token"
