"""API test fixtures — FastAPI app over ASGITransport with SQLite store and FakeGateway.

Invariants:
    - Lifespan is not run: app.state is wired by hand around the per-test store
    - get_settings overridden with the test Settings
    - Every request from `client` carries a browser User-Agent
"""

import pytest
from httpx import ASGITransport, AsyncClient

from oneclick.api.dependencies import attach_orchestrators
from oneclick.config import get_settings
from oneclick.core.identifier_codec import IdentifierCodec
from oneclick.main import app
from tests.services.fake_gateway import FakeGateway

BROWSER_UA = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.1 Safari/605.1.15"
)


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def codec(settings):
    return IdentifierCodec(settings.encryption_key)


@pytest.fixture
async def client(settings, store, db_manager, gateway, codec):
    app.dependency_overrides[get_settings] = lambda: settings
    app.state.db_manager = db_manager
    attach_orchestrators(app, settings, store, gateway, codec)

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
        headers={"User-Agent": BROWSER_UA},
    ) as c:
        yield c

    app.dependency_overrides.clear()
