"""API routes."""
from streamscore.api.score import router as score_router
from streamscore.api.records import router as records_router
from streamscore.api.settings import router as settings_router

__all__ = [
    "score_router",
    "records_router",
    "settings_router",
]
