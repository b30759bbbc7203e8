"""API routes."""

from .solution import router as solution_router
from .catalogue import router as catalogue_router

__all__ = ["solution_router", "catalogue_router"]
