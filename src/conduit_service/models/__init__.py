"""
Data models for the Conduit Control Service.
"""
from .schemas import (
    AppAccessToken,
    BootstrapReport,
    CHANNEL_CHAT_MESSAGE,
    Conduit,
    HealthResponse,
    Shard,
    ShardError,
    ShardStatus,
    ShardUpdateResult,
    Subscription,
    SubscriptionRequest,
    SubscriptionType,
    Transport,
    User,
)

__all__ = [
    "AppAccessToken",
    "BootstrapReport",
    "CHANNEL_CHAT_MESSAGE",
    "Conduit",
    "HealthResponse",
    "Shard",
    "ShardError",
    "ShardStatus",
    "ShardUpdateResult",
    "Subscription",
    "SubscriptionRequest",
    "SubscriptionType",
    "Transport",
    "User",
]
