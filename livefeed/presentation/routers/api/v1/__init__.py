"""API v1 routers."""

from livefeed.presentation.routers.api.v1.events import events_router

__all__ = ["events_router"]
