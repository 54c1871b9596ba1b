"""
Shard transport reassignment.
"""
import logging
import secrets
from enum import Enum
from typing import Optional

import httpx

from ..models import Shard, Transport
from ..provider.base import ProviderError
from .control_state import ControlState

logger = logging.getLogger(__name__)


class AssignmentOutcome(str, Enum):
    """Result of a reassignment request."""
    ACKNOWLEDGED = "acknowledged"
    UNAUTHORIZED = "unauthorized"
    ERROR = "error"


class ShardAssignmentService:
    """
    Hands a shard of the bootstrapped conduit a new websocket transport.

    Each call makes at most one provider update and never retries. Concurrent
    calls for the same shard are not serialized; the provider keeps whichever
    update it processes last.
    """

    def __init__(self, state: ControlState):
        self.state = state

    def is_authorized(self, provided_secret: Optional[str]) -> bool:
        if not provided_secret:
            return False
        return secrets.compare_digest(
            provided_secret.encode("utf-8"),
            self.state.control_secret.encode("utf-8"),
        )

    async def assign_transport(
        self,
        provided_secret: Optional[str],
        shard_id: Optional[str],
        raw_payload: str,
    ) -> AssignmentOutcome:
        """
        Replace the transport of `shard_id` with a websocket session.

        Args:
            provided_secret: Bearer token presented by the caller
            shard_id: Shard to reassign, or None for the configured default
            raw_payload: Session identifier, passed to the provider verbatim

        Returns:
            UNAUTHORIZED without contacting the provider if the secret is wrong,
            otherwise ACKNOWLEDGED or ERROR depending on the provider's answer
        """
        if not self.is_authorized(provided_secret):
            logger.warning("Rejected shard reassignment: invalid control token")
            return AssignmentOutcome.UNAUTHORIZED

        state = self.state
        shard_id = shard_id or state.default_shard_id
        shard = Shard(id=shard_id, transport=Transport.websocket(raw_payload))

        try:
            result = await state.provider.update_conduit_shards(
                state.conduit.id, [shard], state.credential
            )
        except (ProviderError, httpx.HTTPError) as e:
            logger.error(f"Failed to reassign shard {shard_id} of conduit {state.conduit.id}: {e}")
            return AssignmentOutcome.ERROR
        except Exception as e:
            logger.error(
                f"Unexpected error reassigning shard {shard_id} of conduit {state.conduit.id}: {e}",
                exc_info=True,
            )
            return AssignmentOutcome.ERROR

        if not result.ok:
            for error in result.errors:
                logger.warning(
                    f"Provider rejected shard {error.id} of conduit {state.conduit.id}: "
                    f"{error.message} ({error.code})"
                )
            return AssignmentOutcome.ERROR

        logger.info(f"Shard {shard_id} of conduit {state.conduit.id} reassigned: {result.data}")
        return AssignmentOutcome.ACKNOWLEDGED
