"""
Conduit Control Service

Bootstraps a Twitch EventSub conduit, attaches chat subscriptions to it, and
exposes an authenticated control endpoint that reassigns a shard's transport.
"""

__version__ = "0.1.0"
