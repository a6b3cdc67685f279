from enum import Enum
from typing import Optional
from dataclasses import dataclass

from routemap.models.domain import RouteGeometry, RouteSummary


class Outcome(str, Enum):
    """workflow 단계별 관측 가능한 결과"""

    RESOLVED = "resolved"
    LOCATED = "located"
    SKIPPED = "skipped"  # 좌표 누락 => 경로 요청 안 함
    NO_ROUTE = "no_route_found"
    NOT_FOUND = "not_found"
    UPSTREAM_ERROR = "upstream_error"
    POSITION_UNAVAILABLE = "position_unavailable"
    STALE = "stale"  # 더 최신 요청이 존재 => 결과 폐기


@dataclass(frozen=True)
class RouteResult:
    outcome: Outcome
    geometry: RouteGeometry = ()
    summary: Optional[RouteSummary] = None
    error: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.outcome is Outcome.RESOLVED


@dataclass(frozen=True)
class ResolutionResult:
    outcome: Outcome
    generation: int
    route: Optional[RouteResult] = None
    error: Optional[str] = None
