import logging

from fastapi.testclient import TestClient
from sqlalchemy import func, select

from clinicalcanvas.api.routers import auth as auth_router
from clinicalcanvas.models import Client, Invoice, User
from conftest import register

GENERIC_500 = {"error": "Internal server error"}


def drop_table(app, client, table):
    async def _drop():
        async with app.state.db.engine.begin() as conn:
            await conn.run_sync(table.drop)

    client.portal.call(_drop)


def test_database_failure_returns_generic_500(app, client, alice, caplog):
    caplog.set_level(logging.ERROR)
    drop_table(app, client, Client.__table__)

    res = client.get("/api/clients", headers=alice["headers"])
    assert res.status_code == 500
    assert res.json() == GENERIC_500
    assert "no such table" not in res.text

    # 상세 내용은 서버 로그에만 남음
    records = [r for r in caplog.records if r.name == "clinicalcanvas.errors"]
    assert any("Failed to list client" in r.getMessage() for r in records)
    assert any(r.exc_info for r in records)


def test_dashboard_database_failure(app, client, alice):
    drop_table(app, client, Invoice.__table__)

    res = client.get("/api/analytics/dashboard", headers=alice["headers"])
    assert res.status_code == 500
    assert res.json() == GENERIC_500


def test_unhandled_exception_returns_generic_500(app, caplog):
    caplog.set_level(logging.ERROR)

    async def explode():
        raise RuntimeError("secret internal detail")

    app.add_api_route("/api/explode", explode)
    with TestClient(app, raise_server_exceptions=False) as c:
        res = c.get("/api/explode")

    assert res.status_code == 500
    assert res.json() == GENERIC_500
    assert "secret internal detail" not in res.text
    assert any("RuntimeError" in r.getMessage() for r in caplog.records)


def test_duplicate_email_caught_by_unique_index(app, client, monkeypatch):
    assert register(client, "alice@x.com").status_code == 201

    # 사전 조회를 건너뛰어 동시 가입과 같은 상황을 만듦
    async def no_user(db, email):
        return None

    monkeypatch.setattr(auth_router, "get_user_by_email", no_user)

    res = register(client, "alice@x.com", password="other")
    assert res.status_code == 400
    assert res.json() == {"error": "User already exists"}

    async def _count():
        async with app.state.db.session_maker() as s:
            return (await s.execute(select(func.count(User.id)))).scalar_one()

    assert client.portal.call(_count) == 1
