"""API routes."""

from .entries import router as entries_router
from .memories import router as memories_router

__all__ = [
    "entries_router",
    "memories_router",
]
