"""
경로 탐색 client

gateway geocoding + OSRM 경로 조회 + 지도 렌더링
"""

from routemap.client.geocoding_client import GatewayGeocoder
from routemap.client.route_resolver import RouteResolver
from routemap.client.positioning import (
    PositionProvider,
    StaticPositionProvider,
    UnavailablePositionProvider,
    position_provider_from_settings,
)
from routemap.client.results import Outcome, RouteResult, ResolutionResult
from routemap.client.workflow import LocationResolutionWorkflow, SessionState
from routemap.client.presentation import MapView, build_map_view, render_html, render_map

__all__ = [
    "GatewayGeocoder",
    "RouteResolver",
    "PositionProvider",
    "StaticPositionProvider",
    "UnavailablePositionProvider",
    "position_provider_from_settings",
    "Outcome",
    "RouteResult",
    "ResolutionResult",
    "LocationResolutionWorkflow",
    "SessionState",
    "MapView",
    "build_map_view",
    "render_html",
    "render_map",
]
