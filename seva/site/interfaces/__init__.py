"""Site API routes."""

from seva.site.interfaces.controllers import site_router

__all__ = ["site_router"]
