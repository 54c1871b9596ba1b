"""
Pydantic models for the upstream EventSub API and the control endpoint.
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Credentials
# =============================================================================


class AppAccessToken(BaseModel):
    """
    Application access token obtained with the client-credentials grant.

    Expiry is informational: renewing the token is not this service's job.
    """
    model_config = ConfigDict(frozen=True)

    access_token: str = Field(..., repr=False, description="Bearer token value")
    expires_in: int = Field(..., description="Lifetime in seconds at issue time")
    token_type: str = Field(default="bearer", description="Token type")
    scopes: List[str] = Field(default_factory=list, description="Granted scopes")
    obtained_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the token was issued to us",
    )

    @property
    def expires_at(self) -> datetime:
        return self.obtained_at + timedelta(seconds=self.expires_in)

    @property
    def is_expired(self) -> bool:
        return datetime.now(timezone.utc) >= self.expires_at

    def __str__(self) -> str:
        return f"AppAccessToken(token_type={self.token_type!r}, expires_at={self.expires_at.isoformat()})"


# =============================================================================
# EventSub Resources
# =============================================================================


class Transport(BaseModel):
    """Where the provider pushes events: a websocket session, a conduit or a webhook."""
    model_config = ConfigDict(frozen=True)

    method: Literal["websocket", "conduit", "webhook"]
    session_id: Optional[str] = None
    conduit_id: Optional[str] = None
    callback: Optional[str] = None

    @classmethod
    def websocket(cls, session_id: str) -> "Transport":
        return cls(method="websocket", session_id=session_id)

    @classmethod
    def conduit(cls, conduit_id: str) -> "Transport":
        return cls(method="conduit", conduit_id=conduit_id)

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class Conduit(BaseModel):
    """A provider-managed channel fanning subscribed events out to shards."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Conduit ID assigned by the provider")
    shard_count: int = Field(..., description="Number of shards in the conduit")


class Shard(BaseModel):
    """A sub-channel of a conduit with exactly one active transport."""
    id: str = Field(..., description="Shard ordinal, e.g. '0'")
    transport: Transport

    def to_payload(self) -> Dict[str, Any]:
        return {"id": self.id, "transport": self.transport.to_payload()}


class ShardStatus(BaseModel):
    """Shard as reported back by the provider after an update."""
    id: str
    status: Optional[str] = None
    transport: Optional[Transport] = None


class ShardError(BaseModel):
    """Per-shard rejection returned inside an otherwise successful update."""
    id: str
    message: str = ""
    code: str = ""


class ShardUpdateResult(BaseModel):
    """Outcome of a shard transport update."""
    data: List[ShardStatus] = Field(default_factory=list)
    errors: List[ShardError] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


class User(BaseModel):
    """A provider account resolved from its login."""
    id: str
    login: str
    display_name: str = ""


class SubscriptionType(BaseModel):
    """An EventSub topic and its version."""
    model_config = ConfigDict(frozen=True)

    type: str
    version: str


CHANNEL_CHAT_MESSAGE = SubscriptionType(type="channel.chat.message", version="1")


class SubscriptionRequest(BaseModel):
    """Body for creating an EventSub subscription."""
    type: str
    version: str
    condition: Dict[str, str]
    transport: Transport

    @classmethod
    def chat_message(
        cls, broadcaster_user_id: str, user_id: str, transport: Transport
    ) -> "SubscriptionRequest":
        return cls(
            type=CHANNEL_CHAT_MESSAGE.type,
            version=CHANNEL_CHAT_MESSAGE.version,
            condition={"broadcaster_user_id": broadcaster_user_id, "user_id": user_id},
            transport=transport,
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "version": self.version,
            "condition": dict(self.condition),
            "transport": self.transport.to_payload(),
        }


class Subscription(BaseModel):
    """A created EventSub subscription."""
    id: str
    status: str = ""
    type: str
    version: str
    condition: Dict[str, str] = Field(default_factory=dict)
    transport: Optional[Transport] = None
    created_at: Optional[str] = None


# =============================================================================
# Bootstrap & Health
# =============================================================================


class BootstrapReport(BaseModel):
    """What a bootstrap pass did, for logs and the health endpoint."""
    conduit_id: Optional[str] = None
    conduit_created: bool = False
    subscribed: List[str] = Field(default_factory=list, description="Target logins newly subscribed")
    duplicates: List[str] = Field(default_factory=list, description="Target logins already subscribed")
    failed: List[str] = Field(default_factory=list, description="Target logins that could not be subscribed")


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = Field(..., description="Service status")
    provider: str = Field(..., description="Active provider backend")
    conduit_id: str = Field(..., description="Bootstrapped conduit ID")
    shard_count: int = Field(..., description="Shards in the conduit")
    default_shard_id: str = Field(..., description="Shard reassigned when no override is given")
    subscriptions: BootstrapReport
