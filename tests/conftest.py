import os
import tempfile

_TMP_DIR = tempfile.mkdtemp(prefix="perkhub-tests-")
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(_TMP_DIR, "perkhub.db")
os.environ.setdefault("JWT_SECRET", "integration-test-secret")
os.environ["BCRYPT_ROUNDS"] = "4"

import httpx  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from perkhub.client import PerksClient  # noqa: E402
from perkhub.db import Base, SessionLocal, engine  # noqa: E402
from perkhub.main import app as perkhub_app  # noqa: E402

from harness import close_session, open_session  # noqa: E402

API_BASE = "http://testserver/api"


@pytest.fixture(autouse=True)
def fresh_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def app():
    return perkhub_app


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db_session():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def sample_perk():
    return {
        "title": "Airport Lounge Pass",
        "description": "Two free lounge visits per year.",
        "category": "travel",
        "merchant": "SkyHub",
        "discountPercent": 20,
    }


def register_user(client, email="owner@example.com", name="Perk Owner", password="StrongPass123"):
    resp = client.post("/api/auth/register", json={"name": name, "email": email, "password": password})
    assert resp.status_code == 201, resp.text
    return resp.json()


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def owner(client):
    return register_user(client)


@pytest.fixture
def auth_headers(owner):
    return bearer(owner["token"])


@pytest.fixture
async def api_client(anyio_backend, app):
    transport = httpx.ASGITransport(app=app)
    async with PerksClient(base_url=API_BASE, transport=transport) as c:
        yield c


@pytest.fixture
async def harness(anyio_backend, api_client):
    ctx = await open_session(api_client)
    yield ctx
    await close_session(ctx)
