"""
Tests for the Twitch Helix provider.
"""
import json
from urllib.parse import parse_qs

import httpx
import pytest

from conduit_service.models import AppAccessToken, Shard, SubscriptionRequest, Transport
from conduit_service.provider import (
    CredentialError,
    ProviderError,
    SubscriptionConflictError,
    TwitchProvider,
)

API = "https://api.test/helix"
AUTH = "https://id.test/oauth2"


class FakeHelix:
    """Records requests and answers with scripted responses keyed by (method, path)."""

    def __init__(self):
        self.requests = []
        self.responses = {}

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status, body = self.responses[(request.method, request.url.path)]
        return httpx.Response(status, json=body)


@pytest.fixture
def helix():
    return FakeHelix()


@pytest.fixture
async def twitch(helix):
    provider = TwitchProvider(
        client_id="client-id",
        api_url=API,
        auth_url=AUTH,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(helix.handler)),
    )
    yield provider
    await provider.close()


@pytest.fixture
def token():
    return AppAccessToken(access_token="app-token", expires_in=3600)


class TestAppAccessToken:
    """Tests for the client-credentials grant."""

    async def test_token_request(self, twitch, helix):
        helix.responses[("POST", "/oauth2/token")] = (
            200,
            {"access_token": "fresh", "expires_in": 5000, "token_type": "bearer"},
        )

        token = await twitch.get_app_access_token("client-id", "client-secret", ["user:read:chat"])

        assert token.access_token == "fresh"
        assert token.expires_in == 5000
        assert token.scopes == ["user:read:chat"]
        form = parse_qs(helix.requests[0].content.decode())
        assert form["grant_type"] == ["client_credentials"]
        assert form["client_id"] == ["client-id"]
        assert form["client_secret"] == ["client-secret"]

    async def test_rejected_credentials(self, twitch, helix):
        helix.responses[("POST", "/oauth2/token")] = (403, {"status": 403, "message": "invalid client secret"})

        with pytest.raises(CredentialError, match="invalid client secret") as exc_info:
            await twitch.get_app_access_token("client-id", "bad")
        assert exc_info.value.status_code == 403


class TestConduits:
    """Tests for conduit endpoints."""

    async def test_get_conduits_sends_auth_headers(self, twitch, helix, token):
        helix.responses[("GET", "/helix/eventsub/conduits")] = (
            200,
            {"data": [{"id": "c1", "shard_count": 2}, {"id": "c2", "shard_count": 1}]},
        )

        conduits = await twitch.get_conduits(token)

        assert [c.id for c in conduits] == ["c1", "c2"]
        request = helix.requests[0]
        assert request.headers["Authorization"] == "Bearer app-token"
        assert request.headers["Client-Id"] == "client-id"

    async def test_create_conduit(self, twitch, helix, token):
        helix.responses[("POST", "/helix/eventsub/conduits")] = (
            200,
            {"data": [{"id": "new", "shard_count": 3}]},
        )

        conduit = await twitch.create_conduit(3, token)

        assert conduit.id == "new"
        assert json.loads(helix.requests[0].content) == {"shard_count": 3}

    async def test_update_conduit_shards(self, twitch, helix, token):
        helix.responses[("PATCH", "/helix/eventsub/conduits/shards")] = (
            202,
            {
                "data": [{
                    "id": "0",
                    "status": "enabled",
                    "transport": {
                        "method": "websocket",
                        "session_id": "abc",
                        "connected_at": "2024-01-01T00:00:00Z",
                    },
                }],
                "errors": [{"id": "3", "message": "shard id out of range", "code": "invalid_parameter"}],
            },
        )

        result = await twitch.update_conduit_shards(
            "c1",
            [Shard(id="0", transport=Transport.websocket("abc"))],
            token,
        )

        assert json.loads(helix.requests[0].content) == {
            "conduit_id": "c1",
            "shards": [{"id": "0", "transport": {"method": "websocket", "session_id": "abc"}}],
        }
        assert result.data[0].transport == Transport.websocket("abc")
        assert not result.ok
        assert result.errors[0].id == "3"

    async def test_server_error_raises(self, twitch, helix, token):
        helix.responses[("GET", "/helix/eventsub/conduits")] = (500, {"message": "internal"})

        with pytest.raises(ProviderError) as exc_info:
            await twitch.get_conduits(token)
        assert exc_info.value.status_code == 500


class TestUsers:
    """Tests for user lookups."""

    async def test_logins_are_chunked(self, twitch, helix, token):
        helix.responses[("GET", "/helix/users")] = (
            200,
            {"data": [{"id": "1", "login": "someone", "display_name": "Someone"}]},
        )
        logins = [f"user{i}" for i in range(150)]

        users = await twitch.get_users_from_logins(logins, token)

        assert len(helix.requests) == 2
        assert len(helix.requests[0].url.params.get_list("login")) == 100
        assert len(helix.requests[1].url.params.get_list("login")) == 50
        assert len(users) == 2

    async def test_unknown_login_resolves_to_none(self, twitch, helix, token):
        helix.responses[("GET", "/helix/users")] = (200, {"data": []})

        assert await twitch.get_user_from_login("ghost", token) is None
        assert helix.requests[0].url.params.get_list("login") == ["ghost"]


class TestSubscriptions:
    """Tests for EventSub subscription creation."""

    async def test_create_subscription(self, twitch, helix, token):
        helix.responses[("POST", "/helix/eventsub/subscriptions")] = (
            202,
            {"data": [{
                "id": "sub-1",
                "status": "enabled",
                "type": "channel.chat.message",
                "version": "1",
                "condition": {"broadcaster_user_id": "10", "user_id": "20"},
                "transport": {"method": "conduit", "conduit_id": "c1"},
            }]},
        )
        request = SubscriptionRequest.chat_message("10", "20", Transport.conduit("c1"))

        subscription = await twitch.create_eventsub_subscription(request, token)

        assert subscription.id == "sub-1"
        assert json.loads(helix.requests[0].content) == {
            "type": "channel.chat.message",
            "version": "1",
            "condition": {"broadcaster_user_id": "10", "user_id": "20"},
            "transport": {"method": "conduit", "conduit_id": "c1"},
        }

    async def test_duplicate_subscription(self, twitch, helix, token):
        helix.responses[("POST", "/helix/eventsub/subscriptions")] = (
            409,
            {"status": 409, "message": "subscription already exists"},
        )
        request = SubscriptionRequest.chat_message("10", "20", Transport.conduit("c1"))

        with pytest.raises(SubscriptionConflictError):
            await twitch.create_eventsub_subscription(request, token)

    async def test_conflict_outside_subscriptions_is_plain_provider_error(self, twitch, helix, token):
        """Only subscription creation treats 409 as an existing subscription."""
        helix.responses[("PATCH", "/helix/eventsub/conduits/shards")] = (
            409,
            {"status": 409, "message": "conflict"},
        )

        with pytest.raises(ProviderError) as exc_info:
            await twitch.update_conduit_shards(
                "c1", [Shard(id="0", transport=Transport.websocket("abc"))], token
            )
        assert not isinstance(exc_info.value, SubscriptionConflictError)
        assert exc_info.value.status_code == 409
