"""
Configuration settings for the Conduit Control Service.

Loads settings from environment variables and a local .env file.
"""
from typing import List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _split_csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseSettings):
    """
    Conduit Control Service configuration loaded from environment variables.

    Required values have no default: constructing Settings without them raises
    a ValidationError, which aborts startup before anything is served.

    Settings are built once at startup and handed to the app factory; nothing
    reads them as module-level state.
    """
    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # --- Service Settings ---
    service_name: str = "conduit-control-service"
    debug: bool = False

    # --- Control Endpoint ---
    control_host: str = "0.0.0.0"
    control_port: int = Field(..., ge=0, le=65535)
    control_hardcoded_token: str = Field(..., min_length=1)
    control_shard_id: str = "0"

    # --- Provider ---
    provider_backend: Literal["twitch", "memory"] = "twitch"
    provider_timeout: float = 30.0  # seconds
    twitch_api_url: str = "https://api.twitch.tv/helix"
    twitch_auth_url: str = "https://id.twitch.tv/oauth2"
    twitch_client_id: str
    twitch_client_secret: str
    twitch_scopes: str = ""  # comma-separated

    # --- Conduit Bootstrap ---
    twitch_user_login: str
    twitch_broadcaster_login: str  # comma-separated
    conduit_shard_count: int = Field(default=1, ge=1)

    @property
    def broadcaster_logins(self) -> List[str]:
        """Target broadcaster logins, in configured order."""
        return _split_csv(self.twitch_broadcaster_login)

    @property
    def scopes(self) -> List[str]:
        return _split_csv(self.twitch_scopes)
