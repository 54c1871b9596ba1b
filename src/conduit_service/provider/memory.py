"""
In-memory provider for the Conduit Control Service.

This provider is primarily used for:
- Local development without Twitch credentials
- Unit testing (it records every call it receives)

State lives in memory only and is lost on restart.
"""
import asyncio
import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple
from uuid import uuid4

from ..models import (
    AppAccessToken,
    Conduit,
    Shard,
    ShardError,
    ShardStatus,
    ShardUpdateResult,
    Subscription,
    SubscriptionRequest,
    Transport,
    User,
)
from .base import CredentialError, ProviderClient, ProviderError, SubscriptionConflictError

logger = logging.getLogger(__name__)


class MemoryProvider(ProviderClient):
    """
    In-memory EventSub provider.

    Behaves like the real provider where the core depends on it:
    - unknown logins are absent from user lookups
    - duplicate subscriptions are rejected with SubscriptionConflictError
    - shard updates outside the conduit come back as per-shard errors

    Scripted failures can be injected per operation through `errors`, and
    per broadcaster user ID through `subscription_errors`.
    """

    def __init__(
        self,
        logins: Iterable[str] = (),
        conduits: Iterable[Conduit] = (),
        client_id: str = "memory-client",
        client_secret: str = "memory-secret",
    ):
        """
        Initialize the memory provider.

        Args:
            logins: Logins that exist on the provider
            conduits: Conduits that already exist
            client_id: Accepted application client ID
            client_secret: Accepted application client secret
        """
        self.client_id = client_id
        self.client_secret = client_secret
        self.conduits: List[Conduit] = list(conduits)
        self.users: Dict[str, User] = {}
        for login in logins:
            self.add_user(login)
        # (type, version, condition items, transport) -> Subscription
        self.subscriptions: Dict[Tuple[Any, ...], Subscription] = {}
        # (conduit_id, shard_id) -> Transport
        self.shard_transports: Dict[Tuple[str, str], Transport] = {}
        # Operation name -> exception raised on every call
        self.errors: Dict[str, Exception] = {}
        # Broadcaster user ID -> exception raised when subscribing it
        self.subscription_errors: Dict[str, Exception] = {}
        self.calls: List[Tuple[str, Dict[str, Any]]] = []

    def add_user(self, login: str) -> User:
        user = User(id=str(1000 + len(self.users)), login=login.lower(), display_name=login)
        self.users[user.login] = user
        return user

    def calls_to(self, operation: str) -> List[Dict[str, Any]]:
        """Arguments of every recorded call to `operation`, in order."""
        return [kwargs for name, kwargs in self.calls if name == operation]

    async def _record(self, operation: str, **kwargs: Any) -> None:
        self.calls.append((operation, kwargs))
        # Yield so concurrent callers interleave as they would on the network
        await asyncio.sleep(0)
        if operation in self.errors:
            raise self.errors[operation]

    async def get_app_access_token(
        self,
        client_id: str,
        client_secret: str,
        scopes: Sequence[str] = (),
    ) -> AppAccessToken:
        await self._record("get_app_access_token", client_id=client_id, scopes=list(scopes))
        if client_id != self.client_id or client_secret != self.client_secret:
            raise CredentialError("invalid client", status_code=403)
        return AppAccessToken(
            access_token=uuid4().hex, expires_in=5_000_000, scopes=list(scopes)
        )

    async def get_conduits(self, token: AppAccessToken) -> List[Conduit]:
        await self._record("get_conduits")
        return list(self.conduits)

    async def create_conduit(self, shard_count: int, token: AppAccessToken) -> Conduit:
        await self._record("create_conduit", shard_count=shard_count)
        conduit = Conduit(id=str(uuid4()), shard_count=shard_count)
        self.conduits.append(conduit)
        logger.info(f"Memory provider created conduit {conduit.id} with {shard_count} shard(s)")
        return conduit

    async def get_users_from_logins(
        self, logins: Sequence[str], token: AppAccessToken
    ) -> List[User]:
        await self._record("get_users_from_logins", logins=list(logins))
        return [self.users[login.lower()] for login in logins if login.lower() in self.users]

    async def create_eventsub_subscription(
        self, request: SubscriptionRequest, token: AppAccessToken
    ) -> Subscription:
        await self._record("create_eventsub_subscription", request=request)
        broadcaster_id = request.condition.get("broadcaster_user_id", "")
        if broadcaster_id in self.subscription_errors:
            raise self.subscription_errors[broadcaster_id]

        key = (
            request.type,
            request.version,
            tuple(sorted(request.condition.items())),
            request.transport,
        )
        if key in self.subscriptions:
            raise SubscriptionConflictError("subscription already exists", status_code=409)

        subscription = Subscription(
            id=str(uuid4()),
            status="enabled",
            type=request.type,
            version=request.version,
            condition=dict(request.condition),
            transport=request.transport,
        )
        self.subscriptions[key] = subscription
        return subscription

    async def update_conduit_shards(
        self, conduit_id: str, shards: Sequence[Shard], token: AppAccessToken
    ) -> ShardUpdateResult:
        await self._record("update_conduit_shards", conduit_id=conduit_id, shards=list(shards))
        conduit = self._find_conduit(conduit_id)
        if conduit is None:
            raise ProviderError(f"conduit {conduit_id} not found", status_code=404)

        result = ShardUpdateResult()
        for shard in shards:
            if not shard.id.isdigit() or int(shard.id) >= conduit.shard_count:
                result.errors.append(
                    ShardError(id=shard.id, message="shard id out of range", code="invalid_parameter")
                )
                continue
            self.shard_transports[(conduit_id, shard.id)] = shard.transport
            result.data.append(ShardStatus(id=shard.id, status="enabled", transport=shard.transport))
        return result

    def _find_conduit(self, conduit_id: str) -> Optional[Conduit]:
        for conduit in self.conduits:
            if conduit.id == conduit_id:
                return conduit
        return None
