"""
Base interface for upstream event providers.

The core only talks to the provider through this narrow surface, so the
Twitch Helix client and the in-memory provider are interchangeable.
"""
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from ..models import (
    AppAccessToken,
    Conduit,
    Shard,
    ShardUpdateResult,
    Subscription,
    SubscriptionRequest,
    User,
)


class ProviderClient(ABC):
    """
    Abstract base class for EventSub providers.

    Implementations must be safe to call from concurrent request handlers.
    """

    @abstractmethod
    async def get_app_access_token(
        self,
        client_id: str,
        client_secret: str,
        scopes: Sequence[str] = (),
    ) -> AppAccessToken:
        """
        Acquire an application access token.

        Raises:
            CredentialError: If the provider rejects the client credentials
        """
        pass

    @abstractmethod
    async def get_conduits(self, token: AppAccessToken) -> List[Conduit]:
        """List the conduits owned by the application, in provider order."""
        pass

    @abstractmethod
    async def create_conduit(self, shard_count: int, token: AppAccessToken) -> Conduit:
        """Create a conduit with `shard_count` shards."""
        pass

    @abstractmethod
    async def get_users_from_logins(
        self, logins: Sequence[str], token: AppAccessToken
    ) -> List[User]:
        """
        Resolve users by login.

        Logins that do not exist are simply absent from the result.
        """
        pass

    async def get_user_from_login(
        self, login: str, token: AppAccessToken
    ) -> Optional[User]:
        """Resolve a single user by login, or None if it does not exist."""
        users = await self.get_users_from_logins([login], token)
        return users[0] if users else None

    @abstractmethod
    async def create_eventsub_subscription(
        self, request: SubscriptionRequest, token: AppAccessToken
    ) -> Subscription:
        """
        Create an EventSub subscription.

        Raises:
            SubscriptionConflictError: If the same subscription already exists
            ProviderError: For any other rejection
        """
        pass

    @abstractmethod
    async def update_conduit_shards(
        self, conduit_id: str, shards: Sequence[Shard], token: AppAccessToken
    ) -> ShardUpdateResult:
        """
        Replace the transport of the given shards.

        Per-shard rejections come back in `ShardUpdateResult.errors`; only a
        failure of the whole call raises.
        """
        pass

    async def close(self) -> None:
        """Release network resources."""
        pass

    @property
    def name(self) -> str:
        """Return the provider name for logging."""
        return self.__class__.__name__


class ProviderError(Exception):
    """Base exception for provider errors."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class CredentialError(ProviderError):
    """Raised when an application access token could not be obtained."""
    pass


class SubscriptionConflictError(ProviderError):
    """Raised when a subscription already exists."""
    pass
