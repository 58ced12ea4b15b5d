"""
Routes module - contains all API route handlers
"""

from .creations import router as creations_router
from .assets import router as assets_router
from .sweeps import router as sweeps_router

__all__ = [
    "creations_router",
    "assets_router",
    "sweeps_router",
]
