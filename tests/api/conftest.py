"""API test fixtures - TestClient over the in-memory stores."""

import base64

import pytest
from starlette.testclient import TestClient

from api.app import create_app
from core.config import AppConfig
from core.models import ClientCreate
from fakes import png_bytes


# =============================================================================
# APP & CLIENT FIXTURES
# =============================================================================


@pytest.fixture
def app(store):
    """Full application over the ONLINE in-memory store."""
    return create_app(config=AppConfig(), store=store)


@pytest.fixture
def client(app):
    """Test client; entering it runs the startup bootstrap."""
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c


@pytest.fixture
def services(app):
    return app.state.services


# =============================================================================
# TEST DATA FIXTURES
# =============================================================================


@pytest.fixture
def sample_client(client, services):
    created, _ = services["client"].create(ClientCreate(name="Ann Lee", company="Lee Studio"))
    return created


@pytest.fixture
def png_b64():
    return base64.b64encode(png_bytes((800, 400))).decode()
