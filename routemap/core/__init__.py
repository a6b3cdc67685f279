"""
Core 설정 및 utilities, 커스텀 예외
"""

from routemap.core.config import settings

from routemap.core.exceptions import (
    RouteMapException,
    ValidationError,
    NotFoundError,
    UpstreamError,
    PositionUnavailable,
)

__all__ = [
    "settings",
    "RouteMapException",
    "ValidationError",
    "NotFoundError",
    "UpstreamError",
    "PositionUnavailable",
]
