"""Service test fixtures — fake asset store, auth tokens and FastAPI test client.

Invariants:
    - get_db dependency overridden to use the per-test SQLite session factory
    - db_manager patched so readiness checks hit the test engine
    - Asset store replaced with FakeAssetStore: no network, every call recorded
    - Each client gets a fresh rate limiter (budgets never leak between tests)

Design Decisions:
    - Background tasks run before the httpx response resolves, so tests can
      assert on deferred image deletions right after the request
"""

import pytest
from httpx import ASGITransport, AsyncClient

import blog_api.infrastructure.database as db_module
from blog_api.api.guards import get_rate_limiter, get_token_verifier
from blog_api.config import get_settings
from blog_api.infrastructure.asset_store import get_asset_store
from blog_api.infrastructure.database import DatabaseSessionManager, get_db
from blog_api.infrastructure.rate_limiter import (
    AdmissionRateLimiter, limits_from_settings,
)
from blog_api.infrastructure.token_verifier import TokenVerifier
from blog_api.main import app
from tests.services.fakes import TEST_SECRET, FakeAssetStore, auth_headers


@pytest.fixture
def fake_assets():
    return FakeAssetStore()


@pytest.fixture
def rate_limiter():
    return AdmissionRateLimiter(limits_from_settings(get_settings()))


@pytest.fixture
async def client(test_engine, test_session_factory, fake_assets, rate_limiter):
    """FastAPI test client with DB, assets, limiter and verifier overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_asset_store] = lambda: fake_assets
    app.dependency_overrides[get_rate_limiter] = lambda: rate_limiter
    app.dependency_overrides[get_token_verifier] = lambda: TokenVerifier(TEST_SECRET)

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
async def post_factory(client):
    """POST a post through the API and return its JSON."""
    async def _create(
        heading: str = "A heading",
        description: str = "A description long enough",
        image: bytes | None = None,
    ) -> dict:
        files = {"image": ("photo.png", image, "image/png")} if image else None
        res = await client.post(
            "/api/posts",
            data={"heading": heading, "description": description},
            files=files,
            headers=auth_headers(),
        )
        assert res.status_code == 201, res.text
        return res.json()["post"]

    return _create
