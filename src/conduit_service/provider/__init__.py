"""
Upstream Event Providers

This package provides the adapter pattern implementation for the upstream
EventSub API (Twitch Helix, In-Memory).
"""
from ..core.config import Settings
from .base import CredentialError, ProviderClient, ProviderError, SubscriptionConflictError
from .credentials import acquire_credential
from .memory import MemoryProvider
from .twitch import TwitchProvider


def build_provider(settings: Settings) -> ProviderClient:
    """
    Factory function to create the appropriate provider based on configuration.
    """
    backend = settings.provider_backend.lower()

    if backend == "twitch":
        return TwitchProvider(
            client_id=settings.twitch_client_id,
            api_url=settings.twitch_api_url,
            auth_url=settings.twitch_auth_url,
            timeout=settings.provider_timeout,
        )
    elif backend == "memory":
        return MemoryProvider(
            logins=[settings.twitch_user_login, *settings.broadcaster_logins],
            client_id=settings.twitch_client_id,
            client_secret=settings.twitch_client_secret,
        )
    else:
        raise ValueError(f"Unknown provider backend: {backend}")


__all__ = [
    "CredentialError",
    "MemoryProvider",
    "ProviderClient",
    "ProviderError",
    "SubscriptionConflictError",
    "TwitchProvider",
    "acquire_credential",
    "build_provider",
]
