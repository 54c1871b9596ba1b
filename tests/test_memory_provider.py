"""
Tests for the in-memory provider.
"""
import pytest

from conduit_service.models import Shard, SubscriptionRequest, Transport
from conduit_service.provider import (
    CredentialError,
    MemoryProvider,
    ProviderError,
    SubscriptionConflictError,
)


@pytest.fixture
def memory():
    return MemoryProvider(logins=["Reader", "alice"])


class TestMemoryProvider:

    async def test_credentials_are_checked(self, memory):
        token = await memory.get_app_access_token("memory-client", "memory-secret")
        assert token.access_token

        with pytest.raises(CredentialError):
            await memory.get_app_access_token("memory-client", "wrong")

    async def test_logins_are_case_insensitive(self, memory, credential):
        user = await memory.get_user_from_login("READER", credential)
        assert user.login == "reader"
        assert await memory.get_user_from_login("ghost", credential) is None

    async def test_duplicate_subscription_rejected(self, memory, credential):
        request = SubscriptionRequest.chat_message("1", "2", Transport.conduit("c1"))
        await memory.create_eventsub_subscription(request, credential)

        with pytest.raises(SubscriptionConflictError):
            await memory.create_eventsub_subscription(request, credential)
        assert len(memory.subscriptions) == 1

    async def test_update_unknown_conduit(self, memory, credential):
        with pytest.raises(ProviderError) as exc_info:
            await memory.update_conduit_shards(
                "missing", [Shard(id="0", transport=Transport.websocket("s"))], credential
            )
        assert exc_info.value.status_code == 404

    async def test_calls_are_recorded_in_order(self, memory, credential):
        await memory.get_conduits(credential)
        conduit = await memory.create_conduit(2, credential)

        assert [name for name, _ in memory.calls] == ["get_conduits", "create_conduit"]
        assert memory.calls_to("create_conduit") == [{"shard_count": 2}]
        assert memory.conduits == [conduit]
