"""Backend API routes."""

from .configs import router as configs_router
from .flows import router as flows_router

__all__ = ["configs_router", "flows_router"]
