"""
pydantic models for 응답, 도메인 객체
"""


from routemap.models.responses import (
    GeocodeCandidate,
    ErrorResponse,
    LivenessResponse,
    HealthResponse,
)
from routemap.models.domain import Coordinate, RouteGeometry, RouteSummary, Endpoint

__all__ = [
    "GeocodeCandidate",
    "ErrorResponse",
    "LivenessResponse",
    "HealthResponse",
    "Coordinate",
    "RouteGeometry",
    "RouteSummary",
    "Endpoint",
]
