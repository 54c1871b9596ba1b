"""
Pytest configuration for Conduit Control Service tests.
"""
import pytest
from fastapi.testclient import TestClient

from conduit_service.core.config import Settings
from conduit_service.main import create_app
from conduit_service.models import AppAccessToken, Conduit
from conduit_service.provider import MemoryProvider
from conduit_service.services import ControlState

CONTROL_SECRET = "test-control-token"


@pytest.fixture
def settings() -> Settings:
    """Settings for the memory provider, isolated from any local .env file."""
    return Settings(
        _env_file=None,
        control_port=8080,
        control_hardcoded_token=CONTROL_SECRET,
        twitch_client_id="client-id",
        twitch_client_secret="client-secret",
        twitch_user_login="reader",
        twitch_broadcaster_login="alice,bob",
        provider_backend="memory",
    )


@pytest.fixture
def provider() -> MemoryProvider:
    """A memory provider that knows the reader and two broadcasters."""
    return MemoryProvider(
        logins=["reader", "alice", "bob"],
        client_id="client-id",
        client_secret="client-secret",
    )


@pytest.fixture
def credential() -> AppAccessToken:
    return AppAccessToken(access_token="app-token", expires_in=3600)


@pytest.fixture
def control_state(provider, credential) -> ControlState:
    """ControlState over a two-shard conduit known to the provider."""
    conduit = Conduit(id="conduit-1", shard_count=2)
    provider.conduits.append(conduit)
    return ControlState(
        provider=provider,
        credential=credential,
        conduit=conduit,
        control_secret=CONTROL_SECRET,
    )


@pytest.fixture
def client(settings, provider):
    """Test client with the lifespan (and therefore bootstrap) run."""
    app = create_app(settings, provider=provider)
    with TestClient(app) as test_client:
        yield test_client
