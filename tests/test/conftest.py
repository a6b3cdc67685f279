"""
Pytest 설정 및 공통 Fixture
"""

import sys
from pathlib import Path
from typing import Callable, Dict, List

import httpx
import pytest

# 프로젝트 루트를 sys.path에 추가 (tests/test/ => 루트)
project_root = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(project_root))

from routemap.core.exceptions import NotFoundError  # noqa: E402
from routemap.client.results import Outcome, RouteResult  # noqa: E402
from routemap.models.domain import Coordinate, RouteSummary  # noqa: E402


@pytest.fixture
def sample_places() -> Dict[str, Coordinate]:
    """테스트용 장소 좌표"""
    return {
        "Paris": Coordinate(48.8588897, 2.320041),
        "Berlin": Coordinate(52.5170365, 13.3888599),
        "Munich": Coordinate(48.1371079, 11.5753822),
    }


@pytest.fixture
def nominatim_candidates():
    """Nominatim search 응답 샘플 (Paris)"""
    return [
        {
            "place_id": 88066702,
            "lat": "48.8588897",
            "lon": "2.3200410",
            "display_name": "Paris, Île-de-France, France métropolitaine, France",
            "importance": 0.88,
        },
        {
            "place_id": 1421383,
            "lat": "33.6617962",
            "lon": "-95.5555130",
            "display_name": "Paris, Lamar County, Texas, United States",
            "importance": 0.55,
        },
    ]


@pytest.fixture
def osrm_route_payload():
    """OSRM /route 응답 샘플 (geometries=geojson)"""
    return {
        "code": "Ok",
        "routes": [
            {
                "geometry": {
                    "type": "LineString",
                    "coordinates": [
                        [2.320041, 48.85889],
                        [4.835659, 45.764043],
                        [8.682127, 50.110924],
                        [13.38886, 52.517037],
                    ],
                },
                "distance": 1054321.7,
                "duration": 36725.4,
            },
            {
                "geometry": {"type": "LineString", "coordinates": [[0.0, 0.0]]},
                "distance": 1.0,
                "duration": 1.0,
            },
        ],
        "waypoints": [],
    }


@pytest.fixture
def mock_transport():
    """
    httpx.MockTransport factory

    handler가 받은 요청은 transport.requests에 기록됨
    """

    def factory(handler: Callable[[httpx.Request], httpx.Response]):
        requests: List[httpx.Request] = []

        def recording_handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return handler(request)

        transport = httpx.MockTransport(recording_handler)
        transport.requests = requests
        return transport

    return factory


class FakeGeocoder:
    """GatewayGeocoder 대체, 호출 기록"""

    def __init__(self, places: Dict[str, Coordinate]):
        self.places = dict(places)
        self.calls: List[str] = []
        self.error = None  # 설정 시 모든 호출에서 raise

    async def geocode(self, query: str) -> Coordinate:
        self.calls.append(query)
        if self.error is not None:
            raise self.error
        if query not in self.places:
            raise NotFoundError()
        return self.places[query]


class FakeResolver:
    """RouteResolver 대체, 시작/끝 좌표로 직선 경로 반환"""

    def __init__(self):
        self.calls = []
        self.outcome = Outcome.RESOLVED

    async def resolve(self, start, end) -> RouteResult:
        self.calls.append((start, end))
        if start is None or end is None:
            return RouteResult(outcome=Outcome.SKIPPED)
        if self.outcome is not Outcome.RESOLVED:
            return RouteResult(outcome=self.outcome, error="No route found")
        return RouteResult(
            outcome=Outcome.RESOLVED,
            geometry=(start, end),
            summary=RouteSummary(distance_km=1054.32, duration_min=612.09),
        )


@pytest.fixture
def fake_geocoder(sample_places):
    return FakeGeocoder(sample_places)


@pytest.fixture
def fake_resolver():
    return FakeResolver()
