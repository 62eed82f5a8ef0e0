"""Steal Your Stats API layer: routes, schemas and middleware."""

from src.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from src.api.routes import router
from src.api.schemas import (
    AudioSearchResponse,
    ErrorResponse,
    HealthResponse,
    IndexStatusResponse,
    SongDetailResponse,
    SongSearchResponse,
)

__all__ = [
    "AudioSearchResponse",
    "ErrorHandlingMiddleware",
    "ErrorResponse",
    "HealthResponse",
    "IndexStatusResponse",
    "RequestLoggingMiddleware",
    "SongDetailResponse",
    "SongSearchResponse",
    "configure_cors",
    "router",
]
