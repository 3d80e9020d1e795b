"""HTTP API layer."""

from scandrink_bridge.api.router import api_router

__all__ = ["api_router"]
