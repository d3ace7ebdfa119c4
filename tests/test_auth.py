from datetime import datetime, timedelta, timezone

from sqlalchemy import func, select

from clinicalcanvas.models import User
from conftest import auth_headers, register


def count_users(app, client):
    async def _count():
        async with app.state.db.session_maker() as s:
            return (await s.execute(select(func.count(User.id)))).scalar_one()

    return client.portal.call(_count)


def test_register_returns_token_and_user(client):
    res = register(client, "Alice@X.com", name="Alice")
    assert res.status_code == 201
    body = res.json()
    assert body["token"]
    assert body["user"]["email"] == "alice@x.com"
    assert body["user"]["role"] == "therapist"
    assert "password" not in body["user"]


def test_register_duplicate_email_rejected(app, client):
    assert register(client, "alice@x.com").status_code == 201
    before = count_users(app, client)

    res = register(client, "alice@x.com", password="other")
    assert res.status_code == 400
    assert res.json() == {"error": "User already exists"}
    assert count_users(app, client) == before


def test_register_rejects_unknown_role(client):
    res = register(client, "carol@x.com", role="patient")
    assert res.status_code == 400
    assert res.json()["error"] == "Invalid request body"


def test_register_requires_fields(client):
    res = client.post("/api/auth/register", json={"email": "dave@x.com"})
    assert res.status_code == 400
    assert "details" in res.json()


def test_password_is_not_stored_in_plaintext(app, client):
    register(client, "alice@x.com", password="pw1")

    async def _stored():
        async with app.state.db.session_maker() as s:
            return (await s.execute(select(User.password))).scalar_one()

    stored = client.portal.call(_stored)
    assert stored != "pw1"
    assert app.state.password_hasher.verify("pw1", stored)


def test_login_success(client):
    register(client, "alice@x.com", password="pw1")
    res = client.post("/api/auth/login", json={"email": "alice@x.com", "password": "pw1"})
    assert res.status_code == 200
    assert res.json()["token"]


def test_login_wrong_password(client):
    register(client, "alice@x.com", password="pw1")
    res = client.post("/api/auth/login", json={"email": "alice@x.com", "password": "nope"})
    assert res.status_code == 401
    assert res.json() == {"error": "Invalid credentials"}
    assert "token" not in res.json()


def test_login_unknown_user(client):
    res = client.post("/api/auth/login", json={"email": "ghost@x.com", "password": "pw1"})
    assert res.status_code == 401
    assert res.json() == {"error": "Invalid credentials"}


def test_me_returns_current_user(client, alice):
    res = client.get("/api/auth/me", headers=alice["headers"])
    assert res.status_code == 200
    assert res.json()["id"] == alice["id"]
    assert res.json()["email"] == "alice@x.com"


def test_missing_token(client):
    res = client.get("/api/clients")
    assert res.status_code == 401
    assert res.json() == {"error": "Access token required"}


def test_non_bearer_scheme(client):
    res = client.get("/api/clients", headers={"Authorization": "Basic abc"})
    assert res.status_code == 401


def test_invalid_token(client):
    res = client.get("/api/clients", headers=auth_headers("not-a-token"))
    assert res.status_code == 401
    assert res.headers["www-authenticate"] == "Bearer"


def test_expired_token(app, client, alice):
    issued = datetime.now(timezone.utc) - timedelta(days=2)
    token = app.state.token_service.issue(alice["id"], "alice@x.com", "therapist", now=issued)
    res = client.get("/api/clients", headers=auth_headers(token))
    assert res.status_code == 401
    assert res.json() == {"error": "Token expired"}


def test_non_therapist_role_forbidden(app, client):
    token = app.state.token_service.issue(99, "patient@x.com", "patient")
    res = client.get("/api/clients", headers=auth_headers(token))
    assert res.status_code == 403


def test_health_and_index_are_public(client):
    res = client.get("/api/health")
    assert res.status_code == 200
    assert res.json()["status"] == "ok"

    res = client.get("/api")
    assert res.status_code == 200
    body = res.json()
    assert body["message"] == "ClinicalCanvas API"
    assert body["endpoints"]["clients"] == "/api/clients"
    assert body["endpoints"]["analytics"] == "/api/analytics/dashboard"


def test_unknown_route_uses_error_body(client):
    res = client.get("/api/does-not-exist")
    assert res.status_code == 404
    assert res.json() == {"error": "Not Found"}
