"""
Process-wide control context shared by all request handlers.
"""
from dataclasses import dataclass, field

from ..models import AppAccessToken, BootstrapReport, Conduit
from ..provider.base import ProviderClient


@dataclass(frozen=True)
class ControlState:
    """
    Everything a request handler needs, assembled once after bootstrap.

    Handlers share a single instance by reference and only ever read it, which
    is why no lock guards it. Keep it frozen: a mutable field here would be
    written concurrently by every in-flight request.
    """
    provider: ProviderClient
    credential: AppAccessToken = field(repr=False)
    conduit: Conduit
    control_secret: str = field(repr=False)
    default_shard_id: str = "0"
    report: BootstrapReport = field(default_factory=BootstrapReport)
