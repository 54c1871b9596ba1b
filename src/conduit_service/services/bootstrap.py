"""
Conduit bootstrap: runs once at startup before the control endpoint serves.
"""
import logging
from typing import List, Sequence

import httpx

from ..models import (
    AppAccessToken,
    BootstrapReport,
    Conduit,
    SubscriptionRequest,
    Transport,
    User,
)
from ..provider.base import ProviderClient, ProviderError, SubscriptionConflictError

logger = logging.getLogger(__name__)


class BootstrapError(Exception):
    """Raised when bootstrap cannot produce a usable conduit."""
    pass


class ConduitBootstrapper:
    """
    Discovers or creates the conduit and attaches chat subscriptions to it.

    Only conduit selection and resolving our own user are fatal. Each target
    broadcaster is subscribed independently; a failure for one is logged,
    recorded in `report` and skipped.
    """

    def __init__(self, provider: ProviderClient, credential: AppAccessToken):
        self.provider = provider
        self.credential = credential
        self.report = BootstrapReport()

    async def bootstrap(
        self,
        shard_count: int,
        user_login: str,
        targets: Sequence[str],
    ) -> Conduit:
        """
        Run the bootstrap pass.

        Args:
            shard_count: Shards to request if a conduit has to be created
            user_login: Login of the subscribing (reading) user
            targets: Broadcaster logins whose chat should be delivered

        Returns:
            The selected or newly created conduit

        Raises:
            ProviderError: If conduits cannot be listed or created
            BootstrapError: If our own user cannot be resolved
        """
        self.report = BootstrapReport()

        conduit = await self._select_conduit(shard_count)
        self.report.conduit_id = conduit.id

        me = await self._resolve_self(user_login)
        await self._subscribe_targets(conduit, me, targets)

        logger.info(
            f"Bootstrap complete for conduit {conduit.id}: "
            f"{len(self.report.subscribed)} subscribed, "
            f"{len(self.report.duplicates)} already present, "
            f"{len(self.report.failed)} failed"
        )
        return conduit

    async def _select_conduit(self, shard_count: int) -> Conduit:
        conduits = await self.provider.get_conduits(self.credential)
        logger.info(f"Found {len(conduits)} existing conduit(s)")

        if conduits:
            conduit = conduits[0]
            logger.info(f"Using existing conduit {conduit.id} ({conduit.shard_count} shard(s))")
            return conduit

        conduit = await self.provider.create_conduit(shard_count, self.credential)
        self.report.conduit_created = True
        logger.info(f"Created conduit {conduit.id} ({conduit.shard_count} shard(s))")
        return conduit

    async def _resolve_self(self, user_login: str) -> User:
        try:
            me = await self.provider.get_user_from_login(user_login, self.credential)
        except (ProviderError, httpx.HTTPError) as e:
            raise BootstrapError(f"Failed to retrieve user '{user_login}': {e}") from e
        if me is None:
            raise BootstrapError(f"Failed to retrieve user '{user_login}': no such login")
        logger.info(f"Subscribing as {me.login} ({me.id})")
        return me

    async def _resolve_targets(self, targets: Sequence[str]) -> List[User]:
        if not targets:
            return []
        try:
            users = await self.provider.get_users_from_logins(list(targets), self.credential)
        except Exception as e:
            # One malformed login fails the whole batch; retry logins one at a time
            logger.warning(
                f"Batch lookup of broadcaster logins failed ({e}), resolving individually"
            )
            return await self._resolve_targets_individually(targets)

        found = {user.login.lower() for user in users}
        for login in targets:
            if login.lower() not in found:
                logger.error(f"Broadcaster '{login}' not found, skipping")
                self.report.failed.append(login)
        return users

    async def _resolve_targets_individually(self, targets: Sequence[str]) -> List[User]:
        users: List[User] = []
        for login in targets:
            try:
                user = await self.provider.get_user_from_login(login, self.credential)
            except Exception as e:
                logger.error(f"Failed to resolve broadcaster '{login}': {e}")
                self.report.failed.append(login)
                continue
            if user is None:
                logger.error(f"Broadcaster '{login}' not found, skipping")
                self.report.failed.append(login)
            else:
                users.append(user)
        return users

    async def _subscribe_targets(
        self, conduit: Conduit, me: User, targets: Sequence[str]
    ) -> None:
        transport = Transport.conduit(conduit.id)

        for broadcaster in await self._resolve_targets(targets):
            request = SubscriptionRequest.chat_message(
                broadcaster_user_id=broadcaster.id,
                user_id=me.id,
                transport=transport,
            )
            try:
                subscription = await self.provider.create_eventsub_subscription(
                    request, self.credential
                )
            except SubscriptionConflictError:
                logger.info(f"Subscription for {broadcaster.login} already exists")
                self.report.duplicates.append(broadcaster.login)
            except (ProviderError, httpx.HTTPError) as e:
                logger.error(f"Failed to subscribe to {broadcaster.login}: {e}")
                self.report.failed.append(broadcaster.login)
            except Exception as e:
                logger.error(
                    f"Unexpected error subscribing to {broadcaster.login}: {e}", exc_info=True
                )
                self.report.failed.append(broadcaster.login)
            else:
                logger.info(
                    f"Subscribed to {request.type} for {broadcaster.login} "
                    f"(subscription {subscription.id})"
                )
                self.report.subscribed.append(broadcaster.login)
