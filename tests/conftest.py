"""
Shared pytest fixtures for the CRM API test suite.

The environment is pointed at a throw-away SQLite file BEFORE the app is
imported, since config and the engine are built at import time.
"""
import os
import tempfile

_TMP_DIR = tempfile.mkdtemp(prefix="crm-tests-")

os.environ["APP_ENV"] = "test"
os.environ["DB_TYPE"] = "sqlite"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_TMP_DIR, 'crm_test.db')}"
os.environ["PDF_OUTPUT_DIR"] = os.path.join(_TMP_DIR, "pdfs")

import httpx
import pytest

from app.core.db import Base, engine, AsyncSessionLocal
from main import app


# ── Database (fresh schema per test) ─────────────────────────────────────────

@pytest.fixture
async def database():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    # pooled aiosqlite connections are tied to this test's event loop
    await engine.dispose()


@pytest.fixture
async def session(database):
    async with AsyncSessionLocal() as db:
        yield db


@pytest.fixture
async def client(database):
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


# ── Factories ────────────────────────────────────────────────────────────────

def _data(response, expected_status=200):
    assert response.status_code == expected_status, response.text
    return response.json()["data"]


@pytest.fixture
def make_company(client):
    counter = {"n": 0}

    async def _make(**overrides):
        counter["n"] += 1
        payload = {
            "name": f"Acme Graphite {counter['n']}",
            "industry": "Chemicals",
            "offices": [
                {
                    "name": "Head Office",
                    "city": "Pune",
                    "country": "India",
                    "contacts": [
                        {"name": "Ravi Kumar", "email_id": "ravi@acme-graphite.com", "is_primary": True},
                    ],
                },
            ],
            "plants": [{"name": "Plant 1", "city": "Nagpur"}],
        }
        payload.update(overrides)
        return _data(await client.post("/companies/", json=payload))

    return _make


@pytest.fixture
def make_enquiry(client):
    async def _make(**overrides):
        payload = {"subject": "Graphite heat exchanger", "priority": "High"}
        payload.update(overrides)
        return _data(await client.post("/enquiries/", json=payload))

    return _make


@pytest.fixture
def make_quotation(client):
    counter = {"n": 0}

    async def _make(enquiry_id, **overrides):
        counter["n"] += 1
        payload = {
            "enquiry_id": enquiry_id,
            "quotation_number": f"QT-TEST-{counter['n']:03d}",
            "items": [
                {"material_description": "Graphite block", "quantity": 2, "price_per_unit": "1500.00"},
            ],
        }
        payload.update(overrides)
        return _data(await client.post("/quotations/", json=payload))

    return _make


@pytest.fixture
def unwrap():
    """Envelope `data` of a response, asserting the status code first."""
    return _data
