# OSRM routing provider client
# 좌표 변환 (lat, lon) <-> (lon, lat), URL 구성, 응답 정규화만 담당

import logging
from typing import Optional

import httpx

from routemap.core.config import settings
from routemap.core.exceptions import NotFoundError, UpstreamError
from routemap.client.results import Outcome, RouteResult
from routemap.models.domain import Coordinate, RouteSummary

logger = logging.getLogger(__name__)


def format_coordinates(start: Coordinate, end: Coordinate) -> str:
    """(lat, lon) 2개 => OSRM 형식 'lon,lat;lon,lat'"""
    return ";".join(f"{c.longitude},{c.latitude}" for c in (start, end))


def to_route_result(route: dict) -> RouteResult:
    """
    OSRM route 객체 => RouteResult

    geometry.coordinates는 [lon, lat] 순서 => Coordinate(lat, lon)로 변환
    순서, 개수 유지
    """
    geometry = tuple(
        Coordinate.from_lon_lat(pair) for pair in route["geometry"]["coordinates"]
    )
    summary = RouteSummary.from_provider(route["distance"], route["duration"])
    return RouteResult(outcome=Outcome.RESOLVED, geometry=geometry, summary=summary)


class RouteResolver:
    """
    Route Resolver

    - resolve(): 실패를 RouteResult로 변환 (예외 X)
    - fetch_route(): 실패 시 예외 발생
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        profile: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.ROUTER_URL).rstrip("/")
        self.profile = profile or settings.ROUTING_PROFILE
        self.timeout = timeout if timeout is not None else settings.UPSTREAM_TIMEOUT_SECONDS
        self.transport = transport

    async def resolve(
        self, start: Optional[Coordinate], end: Optional[Coordinate]
    ) -> RouteResult:
        """두 좌표 간 경로 조회, 좌표가 하나라도 없으면 SKIPPED"""
        if start is None or end is None:
            return RouteResult(outcome=Outcome.SKIPPED)

        try:
            return await self.fetch_route(start, end)
        except NotFoundError as e:
            logger.info(f"경로 없음: {start.as_tuple()} -> {end.as_tuple()}")
            return RouteResult(outcome=Outcome.NO_ROUTE, error=e.message)
        except UpstreamError as e:
            logger.error(f"경로 조회 실패: {e.detail}")
            return RouteResult(outcome=Outcome.UPSTREAM_ERROR, error=e.detail)

    async def fetch_route(self, start: Coordinate, end: Coordinate) -> RouteResult:
        """
        OSRM /route 호출

        Raises:
            NotFoundError: provider가 경로를 찾지 못함 (NoRoute, 빈 routes)
            UpstreamError: 통신/파싱 실패, 그 외 provider 오류 코드
        """
        url = f"{self.base_url}/{self.profile}/{format_coordinates(start, end)}"
        params = {"overview": "full", "geometries": "geojson"}

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self.transport
            ) as client:
                response = await client.get(url, params=params)
        except httpx.HTTPError as e:
            raise UpstreamError(f"routing provider 통신 실패: {e}")

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamError(
                f"routing provider 응답 파싱 실패 (HTTP {response.status_code}): {e}"
            )

        if not isinstance(data, dict):
            raise UpstreamError(f"예상하지 못한 응답 형식: {type(data).__name__}")

        # OSRM은 오류 시에도 JSON body에 code/message를 담아 반환
        code = data.get("code")
        if code == "NoRoute":
            raise NotFoundError("No route found")
        if code not in (None, "Ok") or response.is_error:
            raise UpstreamError(
                f"routing provider 오류: HTTP {response.status_code} "
                f"code={code} message={data.get('message')}"
            )

        routes = data.get("routes") or []
        if not routes:
            raise NotFoundError("No route found")

        # 첫 번째 route 사용
        try:
            return to_route_result(routes[0])
        except (KeyError, TypeError, ValueError) as e:
            raise UpstreamError(f"route 형식 오류: {e}")
