import pytest
from fastapi.testclient import TestClient

from clinicalcanvas.config import Settings
from clinicalcanvas.db import Database
from clinicalcanvas.main import create_app

TEST_SECRET = "test-secret"


def make_settings(**overrides) -> Settings:
    values = dict(
        database_url="sqlite+aiosqlite:///:memory:",
        jwt_secret=TEST_SECRET,
        password_hash_rounds=1000,
        cors_origins=("*",),
        create_tables=True,
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    # with 블록 안에서 lifespan 이 실행되어 테이블이 생성됨
    with TestClient(app) as c:
        yield c


def register(client, email, password="pw1", name="Therapist", **extra):
    return client.post(
        "/api/auth/register",
        json={"email": email, "password": password, "name": name, **extra},
    )


def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def alice(client):
    res = register(client, "alice@x.com", name="Alice")
    assert res.status_code == 201
    body = res.json()
    return {"id": body["user"]["id"], "headers": auth_headers(body["token"])}


@pytest.fixture
def bob(client):
    res = register(client, "bob@x.com", name="Bob")
    assert res.status_code == 201
    body = res.json()
    return {"id": body["user"]["id"], "headers": auth_headers(body["token"])}


@pytest.fixture
async def database():
    db = Database(make_settings())
    await db.create_all()
    try:
        yield db
    finally:
        await db.dispose()


@pytest.fixture
async def session(database):
    async with database.session_maker() as s:
        yield s
