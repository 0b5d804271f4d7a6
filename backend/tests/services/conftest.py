"""Service test fixtures — file-backed async DB, FastAPI test client and bearer tokens.

Invariants:
    - Every test gets a fresh SQLite database file in tmp_path
    - get_db dependency overridden to use the test DB; each request its own session
    - db_manager patched so the readiness probe sees the test engine
    - Tokens are minted with the same secret/algorithm the app decodes with

Design Decisions:
    - File-backed SQLite (not :memory:): concurrent requests get separate
      connections, so races on one row are real races on the database
"""

import pytest
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy.ext.asyncio import (
    AsyncSession, async_sessionmaker, create_async_engine,
)

import foodshare.infrastructure.database as db_module
from foodshare.api.dependencies import get_code_generator
from foodshare.config import get_settings
from foodshare.core.verification_code import fixed_code_generator
from foodshare.db.base import Base
from foodshare.infrastructure.database import DatabaseSessionManager, get_db
from foodshare.main import app
from foodshare.services.donation_store import SqlDonationRepository

DONOR_ID = 1
ORG_ID = 2
OTHER_ORG_ID = 3


def make_token(actor_id: int, user_type: str, **extra) -> str:
    settings = get_settings()
    claims = {"sub": str(actor_id), "user_type": user_type, **extra}
    return jwt.encode(
        claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm,
    )


def auth(actor_id: int, user_type: str) -> dict:
    return {"Authorization": f"Bearer {make_token(actor_id, user_type)}"}


@pytest.fixture
async def test_engine(tmp_path):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'foodshare.db'}", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def repo(test_db):
    return SqlDonationRepository(test_db)


@pytest.fixture
async def client(test_engine, test_session_factory):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


@pytest.fixture
def pin_code():
    """Make every reservation mint `code`."""
    def _pin(code: str):
        app.dependency_overrides[get_code_generator] = (
            lambda: fixed_code_generator(code)
        )
    return _pin


@pytest.fixture
def donor_headers():
    return auth(DONOR_ID, "donor")


@pytest.fixture
def org_headers():
    return auth(ORG_ID, "organization")


@pytest.fixture
def other_org_headers():
    return auth(OTHER_ORG_ID, "organization")


BREAD = {
    "title": "Bread", "quantity": 5, "category": "bakery",
    "latitude": 4.81, "longitude": -75.69,
}

LOGISTICS = {
    "pickup_time": "2024-01-01T10:00",
    "pickup_person_name": "Ana Ruiz",
    "pickup_person_id": "1029384756",
}


@pytest.fixture
def create_donation(client, donor_headers):
    async def _create(payload: dict | None = None, headers: dict | None = None) -> int:
        res = await client.post(
            "/api/v1/donations", json=payload or BREAD,
            headers=headers or donor_headers,
        )
        assert res.status_code == 201, res.text
        return res.json()["donation_id"]
    return _create


@pytest.fixture
def reserve(client, org_headers):
    async def _reserve(donation_id: int, headers: dict | None = None):
        return await client.post(
            f"/api/v1/donations/{donation_id}/reserve", json=LOGISTICS,
            headers=headers or org_headers,
        )
    return _reserve


@pytest.fixture
def accepted_donation(create_donation, reserve, client, donor_headers):
    """Create + reserve + business-accept; returns (donation_id, code)."""
    async def _accepted() -> tuple[int, str]:
        donation_id = await create_donation()
        res = await reserve(donation_id)
        assert res.status_code == 200, res.text
        code = res.json()["verification_code"]
        res = await client.post(
            f"/api/v1/donations/{donation_id}/business-confirm",
            json={"accept": True}, headers=donor_headers,
        )
        assert res.status_code == 200, res.text
        return donation_id, code
    return _accepted


@pytest.fixture
def headers_for():
    """Bearer headers for an arbitrary actor: headers_for(7, "organization")."""
    return auth


@pytest.fixture
def bread():
    return dict(BREAD)


@pytest.fixture
def logistics():
    return dict(LOGISTICS)
