"""
Twitch Helix provider.

Talks to the EventSub conduit, subscription and user endpoints over a single
shared httpx.AsyncClient.
"""
import logging
from typing import Any, List, Optional, Sequence

import httpx

from ..models import (
    AppAccessToken,
    Conduit,
    Shard,
    ShardUpdateResult,
    Subscription,
    SubscriptionRequest,
    User,
)
from .base import ProviderClient, ProviderError, SubscriptionConflictError
from .credentials import fetch_app_access_token

logger = logging.getLogger(__name__)

# Helix accepts at most this many login query parameters per /users request
MAX_LOGINS_PER_REQUEST = 100


def _error_message(response: httpx.Response) -> str:
    try:
        return response.json().get("message") or response.text
    except ValueError:
        return response.text


class TwitchProvider(ProviderClient):
    """
    Helix implementation of ProviderClient.

    The underlying AsyncClient owns the connection pool and is shared by all
    concurrent callers.
    """

    def __init__(
        self,
        client_id: str,
        api_url: str = "https://api.twitch.tv/helix",
        auth_url: str = "https://id.twitch.tv/oauth2",
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the Twitch provider.

        Args:
            client_id: Application client ID, sent as Client-Id on every call
            api_url: Helix base URL
            auth_url: OAuth base URL
            timeout: HTTP request timeout in seconds
            http_client: Optional pre-built client (used by tests)
        """
        self.client_id = client_id
        self.api_url = api_url.rstrip("/")
        self.auth_url = auth_url.rstrip("/")
        self.timeout = timeout
        self._client = http_client or httpx.AsyncClient(timeout=timeout)

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def _request(
        self, method: str, path: str, token: AppAccessToken, **kwargs: Any
    ) -> httpx.Response:
        headers = {
            "Authorization": f"Bearer {token.access_token}",
            "Client-Id": self.client_id,
        }
        response = await self._client.request(
            method, f"{self.api_url}{path}", headers=headers, **kwargs
        )
        logger.debug(f"{method} {path} -> {response.status_code}")

        if response.is_error:
            raise ProviderError(_error_message(response), status_code=response.status_code)
        return response

    # Credentials

    async def get_app_access_token(
        self,
        client_id: str,
        client_secret: str,
        scopes: Sequence[str] = (),
    ) -> AppAccessToken:
        return await fetch_app_access_token(
            self._client, self.auth_url, client_id, client_secret, scopes
        )

    # Conduits

    async def get_conduits(self, token: AppAccessToken) -> List[Conduit]:
        response = await self._request("GET", "/eventsub/conduits", token)
        return [Conduit.model_validate(item) for item in response.json().get("data", [])]

    async def create_conduit(self, shard_count: int, token: AppAccessToken) -> Conduit:
        response = await self._request(
            "POST", "/eventsub/conduits", token, json={"shard_count": shard_count}
        )
        data = response.json().get("data", [])
        if not data:
            raise ProviderError("Conduit creation returned no conduit")
        return Conduit.model_validate(data[0])

    async def update_conduit_shards(
        self, conduit_id: str, shards: Sequence[Shard], token: AppAccessToken
    ) -> ShardUpdateResult:
        response = await self._request(
            "PATCH",
            "/eventsub/conduits/shards",
            token,
            json={
                "conduit_id": conduit_id,
                "shards": [shard.to_payload() for shard in shards],
            },
        )
        return ShardUpdateResult.model_validate(response.json())

    # Users

    async def get_users_from_logins(
        self, logins: Sequence[str], token: AppAccessToken
    ) -> List[User]:
        logins = list(logins)
        users: List[User] = []
        for start in range(0, len(logins), MAX_LOGINS_PER_REQUEST):
            chunk = logins[start:start + MAX_LOGINS_PER_REQUEST]
            response = await self._request(
                "GET", "/users", token, params=[("login", login) for login in chunk]
            )
            users.extend(User.model_validate(item) for item in response.json().get("data", []))
        return users

    # Subscriptions

    async def create_eventsub_subscription(
        self, request: SubscriptionRequest, token: AppAccessToken
    ) -> Subscription:
        try:
            response = await self._request(
                "POST", "/eventsub/subscriptions", token, json=request.to_payload()
            )
        except ProviderError as e:
            if e.status_code == 409:
                raise SubscriptionConflictError(e.message, status_code=409) from e
            raise
        data = response.json().get("data", [])
        if not data:
            raise ProviderError("Subscription creation returned no subscription")
        return Subscription.model_validate(data[0])
