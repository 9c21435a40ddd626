"""API route handlers."""

from .annotate import router as annotate_router
from .query import router as query_router
from .health import router as health_router

__all__ = ["annotate_router", "query_router", "health_router"]
