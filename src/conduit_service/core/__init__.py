"""Core configuration for the Conduit Control Service."""
from .config import Settings

__all__ = ["Settings"]
