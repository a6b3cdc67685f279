"""
Location Resolution Workflow

출발지/목적지 텍스트 => 좌표 => 경로 조회 => 세션 상태 갱신
- SessionState는 immutable, workflow만 교체 (single writer)
- 모든 상태 변경 작업은 generation token을 발급받고, 완료 시점에 최신 token이 아니면 결과 폐기
  (in-flight 요청 취소 X, "last request wins")
- 위치 조회는 별도 token: 출발지 편집 / 교체 / 재조회만 결과를 폐기함
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Callable, List, Optional

from routemap.core.config import CURRENT_LOCATION_LABEL
from routemap.core.exceptions import (
    NotFoundError,
    PositionUnavailable,
    UpstreamError,
    ValidationError,
)
from routemap.client.geocoding_client import GatewayGeocoder
from routemap.client.positioning import PositionProvider
from routemap.client.results import Outcome, ResolutionResult, RouteResult
from routemap.client.route_resolver import RouteResolver
from routemap.models.domain import Endpoint, RouteGeometry, RouteSummary

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionState:
    source: Endpoint = field(default_factory=Endpoint)
    destination: Endpoint = field(default_factory=Endpoint)
    geometry: RouteGeometry = ()
    summary: Optional[RouteSummary] = None
    loading: bool = False
    last_outcome: Optional[Outcome] = None
    last_error: Optional[str] = None
    generation: int = 0

    @property
    def has_route(self) -> bool:
        return (
            self.source.coordinate is not None
            and self.destination.coordinate is not None
            and len(self.geometry) > 0
        )


Listener = Callable[[SessionState], None]


class LocationResolutionWorkflow:
    def __init__(
        self,
        geocoder: GatewayGeocoder,
        resolver: RouteResolver,
        positioning: Optional[PositionProvider] = None,
    ):
        self.geocoder = geocoder
        self.resolver = resolver
        self.positioning = positioning

        self._state = SessionState()
        self._generation = 0
        self._pending: Optional[int] = None  # 진행 중인 검색/교체 token
        self._position_generation = 0
        self._locating: Optional[int] = None  # 진행 중인 위치 조회 token
        self._listeners: List[Listener] = []

    # ========== 상태 조회 / 구독 ==========

    @property
    def state(self) -> SessionState:
        """현재 snapshot (immutable)"""
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """상태 변경 시마다 snapshot 전달, 해제 함수 반환"""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ========== 내부 상태 관리 ==========

    def _commit(self, **changes) -> SessionState:
        """유일한 상태 변경 지점"""
        state = replace(self._state, **changes)

        # 좌표가 하나라도 없으면 경로는 의미 없음
        if state.source.coordinate is None or state.destination.coordinate is None:
            state = replace(state, geometry=(), summary=None)

        self._state = state
        for listener in list(self._listeners):
            listener(state)
        return state

    def _begin(self) -> int:
        """새 generation 발급 + loading 표시"""
        self._generation += 1
        self._pending = self._generation
        self._commit(loading=True, generation=self._generation)
        return self._generation

    def _is_current(self, token: int) -> bool:
        return token == self._generation

    def _busy(self) -> bool:
        """검색/교체 또는 위치 조회가 아직 진행 중"""
        return self._pending is not None or self._locating is not None

    def _finish(
        self,
        token: int,
        outcome: Outcome,
        route: Optional[RouteResult] = None,
        error: Optional[str] = None,
        **changes,
    ) -> ResolutionResult:
        if not self._is_current(token):
            logger.debug(
                f"stale 결과 폐기: token={token}, latest={self._generation}, outcome={outcome.value}"
            )
            return ResolutionResult(Outcome.STALE, token, route=route, error=error)

        self._pending = None
        self._commit(
            loading=self._busy(), last_outcome=outcome, last_error=error, **changes
        )
        return ResolutionResult(outcome, token, route=route, error=error)

    def _release(self, token: int) -> None:
        """예상치 못한 예외로 빠져나갈 때도 loading 해제"""
        if self._is_current(token) and self._pending == token:
            self._pending = None
            self._commit(loading=self._busy())

    def _drop_locating(self) -> None:
        """진행 중인 위치 조회 결과를 더 이상 출발지에 반영하지 않음"""
        self._position_generation += 1
        self._locating = None

    # ========== 입력 편집 ==========

    def set_source_query(self, query: str) -> SessionState:
        """출발지 텍스트 변경 => 기존 좌표는 더 이상 유효하지 않음"""
        self._drop_locating()
        return self._edit(source=Endpoint(query=query))

    def set_destination_query(self, query: str) -> SessionState:
        """목적지 텍스트 변경 (진행 중인 위치 조회는 유지)"""
        return self._edit(destination=Endpoint(query=query))

    def _edit(self, **changes) -> SessionState:
        # 편집은 진행 중인 검색/교체를 대체 (완료되어도 적용 X)
        self._generation += 1
        self._pending = None
        return self._commit(loading=self._busy(), generation=self._generation, **changes)

    # ========== 상태 전이 ==========

    async def locate(self) -> ResolutionResult:
        """
        Idle -> Locating

        성공: 출발지 = 현재 위치
        실패: 출발지 유지, POSITION_UNAVAILABLE 결과 반환 (non-fatal)

        위치 조회는 별도 token 사용 => 목적지 편집이나 검색으로는 폐기되지 않고
        출발지 편집 / 교체 / 새 위치 조회로만 폐기됨
        """
        if self.positioning is None:
            return ResolutionResult(
                Outcome.POSITION_UNAVAILABLE,
                self._generation,
                error="No position provider configured",
            )

        self._drop_locating()
        token = self._locating = self._position_generation
        self._commit(loading=True)
        try:
            return await self._locate(token)
        finally:
            if self._locating == token:
                self._locating = None
                self._commit(loading=self._busy())

    async def _locate(self, token: int) -> ResolutionResult:
        try:
            coordinate = await self.positioning.get_current_position()
        except PositionUnavailable as e:
            logger.warning(f"현재 위치 조회 실패: {e.message}")
            return self._finish_locating(
                token, Outcome.POSITION_UNAVAILABLE, error=e.message
            )

        logger.info(f"현재 위치 확인: {coordinate.as_tuple()}")
        # 출발지가 바뀌므로 기존 경로는 폐기
        return self._finish_locating(
            token,
            Outcome.LOCATED,
            source=Endpoint(
                query=CURRENT_LOCATION_LABEL,
                coordinate=coordinate,
                is_current_location=True,
            ),
            geometry=(),
            summary=None,
        )

    def _finish_locating(
        self, token: int, outcome: Outcome, error: Optional[str] = None, **changes
    ) -> ResolutionResult:
        if self._locating != token:
            logger.debug(f"stale 위치 결과 폐기: token={token}, outcome={outcome.value}")
            return ResolutionResult(Outcome.STALE, self._generation, error=error)

        self._locating = None
        self._commit(
            loading=self._busy(), last_outcome=outcome, last_error=error, **changes
        )
        return ResolutionResult(outcome, self._generation, error=error)

    async def use_current_location(self) -> ResolutionResult:
        """출발지를 현재 위치로 되돌림"""
        return await self.locate()

    async def search(self) -> ResolutionResult:
        """
        Idle/Locating -> Searching -> Resolved | Failed

        Raises:
            ValidationError: 출발지/목적지 텍스트 중 하나라도 비어 있음 (네트워크 호출 X)
        """
        source = self._state.source
        destination = self._state.destination

        if not source.query.strip() or not destination.query.strip():
            raise ValidationError("Please enter both source and destination.")

        token = self._begin()
        try:
            return await self._resolve(token, source, destination)
        finally:
            self._release(token)

    async def _resolve(
        self, token: int, source: Endpoint, destination: Endpoint
    ) -> ResolutionResult:
        logger.info(f"경로 검색: {source.query!r} -> {destination.query!r}")

        try:
            # 현재 위치 또는 이미 변환된 출발지는 재사용
            source_coordinate = source.coordinate
            if source_coordinate is None:
                source_coordinate = await self.geocoder.geocode(source.query)
            destination_coordinate = await self.geocoder.geocode(destination.query)

        except NotFoundError as e:
            logger.info(f"geocode 결과 없음: {e.message}")
            return self._finish(token, Outcome.NOT_FOUND, error=e.message)
        except UpstreamError as e:
            logger.error(f"geocode 실패: {e.detail}")
            return self._finish(token, Outcome.UPSTREAM_ERROR, error=e.message)
        except ValidationError as e:
            logger.warning(f"gateway 입력 검증 실패: {e.message}")
            return self._finish(token, Outcome.NOT_FOUND, error=e.message)

        if not self._is_current(token):
            return ResolutionResult(Outcome.STALE, token)

        # 두 좌표를 한 번에 반영
        self._commit(
            source=replace(source, coordinate=source_coordinate),
            destination=replace(destination, coordinate=destination_coordinate),
            geometry=(),
            summary=None,
        )

        return await self._route(token)

    async def _route(self, token: int) -> ResolutionResult:
        """현재 좌표 쌍으로 경로 조회 후 반영"""
        state = self._state
        route = await self.resolver.resolve(
            state.source.coordinate, state.destination.coordinate
        )

        if route.found:
            logger.info(
                f"경로 확인: {route.summary.distance_km} km, {route.summary.duration_min} min"
            )
            return self._finish(
                token,
                Outcome.RESOLVED,
                route=route,
                geometry=route.geometry,
                summary=route.summary,
            )

        return self._finish(token, route.outcome, route=route, error=route.error)

    async def swap(self) -> ResolutionResult:
        """
        Resolved/Idle -> Swapped

        출발지/목적지(텍스트 + 좌표)를 한 번의 상태 교체로 맞바꾼 뒤
        두 좌표가 모두 있으면 경로 재조회
        """
        # 교체 후 도착한 위치는 엉뚱한 쪽에 반영되므로 폐기
        self._drop_locating()
        token = self._begin()
        try:
            state = self._state
            self._commit(
                source=state.destination,
                destination=state.source,
                geometry=(),
                summary=None,
            )

            if self._state.source.coordinate is None or self._state.destination.coordinate is None:
                return self._finish(token, Outcome.SKIPPED)

            return await self._route(token)
        finally:
            self._release(token)
