"""FastAPI router modules for backend endpoints."""

from .health import router as health_router
from .schedules import router as schedules_router
from .results import router as results_router

__all__ = [
    "health_router",
    "schedules_router",
    "results_router",
]
