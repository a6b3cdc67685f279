"""
LocationResolutionWorkflow 테스트
"""

import asyncio

import pytest

from routemap.client.positioning import StaticPositionProvider, UnavailablePositionProvider
from routemap.client.results import Outcome
from routemap.client.workflow import LocationResolutionWorkflow, SessionState
from routemap.core.config import CURRENT_LOCATION_LABEL
from routemap.core.exceptions import UpstreamError, ValidationError
from routemap.models.domain import Coordinate


@pytest.fixture
def workflow(fake_geocoder, fake_resolver):
    return LocationResolutionWorkflow(geocoder=fake_geocoder, resolver=fake_resolver)


class TestSearch:
    """검색 (Searching -> Resolved / Failed) 테스트"""

    @pytest.mark.asyncio
    async def test_search_resolves_both_places(self, workflow, fake_geocoder, fake_resolver, sample_places):
        # Given
        workflow.set_source_query("Paris")
        workflow.set_destination_query("Berlin")

        # When
        result = await workflow.search()

        # Then
        state = workflow.state
        assert result.outcome is Outcome.RESOLVED
        assert fake_geocoder.calls == ["Paris", "Berlin"]
        assert fake_resolver.calls == [(sample_places["Paris"], sample_places["Berlin"])]
        assert state.source.coordinate == sample_places["Paris"]
        assert state.destination.coordinate == sample_places["Berlin"]
        assert state.has_route
        assert state.summary.distance_km > 0
        assert state.summary.duration_min > 0
        assert state.loading is False
        assert state.last_outcome is Outcome.RESOLVED

    @pytest.mark.asyncio
    async def test_empty_destination_fails_validation(self, workflow, fake_geocoder, fake_resolver):
        """목적지 비어 있음 => ValidationError, 네트워크 호출 X, 상태 변화 X"""
        workflow.set_source_query("Paris")
        before = workflow.state

        with pytest.raises(ValidationError):
            await workflow.search()

        assert fake_geocoder.calls == []
        assert fake_resolver.calls == []
        assert workflow.state == before
        assert workflow.state.geometry == ()
        assert workflow.state.summary is None

    @pytest.mark.asyncio
    async def test_whitespace_source_fails_validation(self, workflow, fake_geocoder):
        workflow.set_source_query("   ")
        workflow.set_destination_query("Berlin")

        with pytest.raises(ValidationError):
            await workflow.search()

        assert fake_geocoder.calls == []

    @pytest.mark.asyncio
    async def test_unknown_destination_does_not_route(self, workflow, fake_resolver):
        """geocode 결과 없음 => 목적지 좌표 미설정, 경로 조회 X"""
        workflow.set_source_query("Paris")
        workflow.set_destination_query("xqzvwpt qqq")

        result = await workflow.search()

        state = workflow.state
        assert result.outcome is Outcome.NOT_FOUND
        assert result.error == "No coordinates found"
        assert state.destination.coordinate is None
        assert fake_resolver.calls == []
        assert state.loading is False
        assert state.last_outcome is Outcome.NOT_FOUND

    @pytest.mark.asyncio
    async def test_upstream_failure_keeps_previous_route(self, workflow, fake_geocoder):
        """실패 시 이전 성공 상태 유지"""
        workflow.set_source_query("Paris")
        workflow.set_destination_query("Berlin")
        await workflow.search()
        resolved = workflow.state

        fake_geocoder.error = UpstreamError("gateway down")
        result = await workflow.search()

        state = workflow.state
        assert result.outcome is Outcome.UPSTREAM_ERROR
        assert state.geometry == resolved.geometry
        assert state.summary == resolved.summary
        assert state.destination == resolved.destination
        assert state.loading is False

    @pytest.mark.asyncio
    async def test_no_route_is_observable(self, workflow, fake_resolver, sample_places):
        """경로 없음 => NO_ROUTE 결과, 좌표는 반영, 경로 없음"""
        fake_resolver.outcome = Outcome.NO_ROUTE
        workflow.set_source_query("Paris")
        workflow.set_destination_query("Berlin")

        result = await workflow.search()

        state = workflow.state
        assert result.outcome is Outcome.NO_ROUTE
        assert state.last_outcome is Outcome.NO_ROUTE
        assert state.destination.coordinate == sample_places["Berlin"]
        assert state.geometry == ()
        assert state.summary is None
        assert not state.has_route

    @pytest.mark.asyncio
    async def test_resolved_source_is_reused(self, workflow, fake_geocoder):
        """이미 좌표가 있는 출발지는 다시 geocode하지 않음"""
        workflow.set_source_query("Paris")
        workflow.set_destination_query("Berlin")
        await workflow.search()

        workflow.set_destination_query("Munich")
        await workflow.search()

        assert fake_geocoder.calls == ["Paris", "Berlin", "Munich"]

    @pytest.mark.asyncio
    async def test_loading_flag_during_search(self, workflow):
        """요청 중에는 loading=True, 완료 후 False"""
        seen = []
        workflow.subscribe(lambda state: seen.append(state.loading))
        workflow.set_source_query("Paris")
        workflow.set_destination_query("Berlin")

        await workflow.search()

        assert True in seen
        assert seen[-1] is False


class TestEditing:
    """입력 편집 테스트"""

    @pytest.mark.asyncio
    async def test_editing_source_clears_route(self, workflow):
        workflow.set_source_query("Paris")
        workflow.set_destination_query("Berlin")
        await workflow.search()

        state = workflow.set_source_query("Munich")

        assert state.source.coordinate is None
        assert state.source.query == "Munich"
        assert state.geometry == ()
        assert state.summary is None

    def test_unsubscribe(self, workflow):
        seen = []
        unsubscribe = workflow.subscribe(seen.append)

        workflow.set_source_query("Paris")
        unsubscribe()
        workflow.set_source_query("Berlin")

        assert len(seen) == 1
        assert isinstance(seen[0], SessionState)


class TestLocate:
    """현재 위치 (Idle -> Locating) 테스트"""

    @pytest.mark.asyncio
    async def test_locate_seeds_source(self, fake_geocoder, fake_resolver, sample_places):
        # Given
        here = Coordinate(48.85, 2.35)
        workflow = LocationResolutionWorkflow(
            fake_geocoder, fake_resolver, positioning=StaticPositionProvider(here)
        )

        # When
        result = await workflow.locate()
        workflow.set_destination_query("Berlin")
        await workflow.search()

        # Then
        state = workflow.state
        assert result.outcome is Outcome.LOCATED
        assert state.source.query == CURRENT_LOCATION_LABEL
        assert state.source.is_current_location is True
        assert state.source.coordinate == here
        # 출발지는 geocode하지 않음
        assert fake_geocoder.calls == ["Berlin"]
        assert fake_resolver.calls == [(here, sample_places["Berlin"])]

    @pytest.mark.asyncio
    async def test_locate_failure_is_non_fatal(self, fake_geocoder, fake_resolver):
        workflow = LocationResolutionWorkflow(
            fake_geocoder, fake_resolver, positioning=UnavailablePositionProvider("denied")
        )

        result = await workflow.locate()

        state = workflow.state
        assert result.outcome is Outcome.POSITION_UNAVAILABLE
        assert result.error == "denied"
        assert state.source.coordinate is None
        assert state.loading is False
        assert state.last_outcome is Outcome.POSITION_UNAVAILABLE

    @pytest.mark.asyncio
    async def test_locate_without_provider(self, workflow):
        result = await workflow.locate()

        assert result.outcome is Outcome.POSITION_UNAVAILABLE
        assert workflow.state.loading is False

    @pytest.mark.asyncio
    async def test_use_current_location_restores_source(self, fake_geocoder, fake_resolver):
        here = Coordinate(48.85, 2.35)
        workflow = LocationResolutionWorkflow(
            fake_geocoder, fake_resolver, positioning=StaticPositionProvider(here)
        )
        workflow.set_source_query("Paris")

        await workflow.use_current_location()

        assert workflow.state.source.is_current_location is True
        assert workflow.state.source.coordinate == here


class TestSwap:
    """출발지/목적지 교체 테스트"""

    @pytest.mark.asyncio
    async def test_swap_exchanges_and_reroutes(self, workflow, fake_resolver, sample_places):
        workflow.set_source_query("Paris")
        workflow.set_destination_query("Berlin")
        await workflow.search()

        result = await workflow.swap()

        state = workflow.state
        assert result.outcome is Outcome.RESOLVED
        assert state.source.query == "Berlin"
        assert state.destination.query == "Paris"
        assert state.source.coordinate == sample_places["Berlin"]
        assert state.destination.coordinate == sample_places["Paris"]
        assert fake_resolver.calls[-1] == (sample_places["Berlin"], sample_places["Paris"])
        assert state.has_route

    @pytest.mark.asyncio
    async def test_swap_twice_restores_pairing(self, workflow):
        workflow.set_source_query("Paris")
        workflow.set_destination_query("Berlin")
        await workflow.search()
        original = workflow.state

        await workflow.swap()
        await workflow.swap()

        state = workflow.state
        assert state.source == original.source
        assert state.destination == original.destination

    @pytest.mark.asyncio
    async def test_swap_is_atomic(self, workflow):
        """중간 상태에서도 텍스트와 좌표 쌍이 어긋나지 않음"""
        workflow.set_source_query("Paris")
        workflow.set_destination_query("Berlin")
        await workflow.search()
        pairs = {("Paris", workflow.state.source.coordinate), ("Berlin", workflow.state.destination.coordinate)}

        seen = []
        workflow.subscribe(seen.append)
        await workflow.swap()

        for state in seen:
            assert (state.source.query, state.source.coordinate) in pairs
            assert (state.destination.query, state.destination.coordinate) in pairs
            assert state.source.query != state.destination.query

    @pytest.mark.asyncio
    async def test_swap_without_coordinates_skips_routing(self, workflow, fake_resolver):
        workflow.set_source_query("Paris")

        result = await workflow.swap()

        assert result.outcome is Outcome.SKIPPED
        assert workflow.state.source.query == ""
        assert workflow.state.destination.query == "Paris"
        assert fake_resolver.calls == []
        assert workflow.state.loading is False


class TestLastRequestWins:
    """stale 응답 폐기 (generation token) 테스트"""

    @pytest.mark.asyncio
    async def test_slow_search_superseded_by_edit(self, workflow, fake_geocoder, sample_places):
        # Given: 첫 번째 목적지 geocode가 멈춰 있음
        gate = asyncio.Event()
        original_geocode = fake_geocoder.geocode

        async def slow_geocode(query):
            if query == "Berlin":
                await gate.wait()
            return await original_geocode(query)

        fake_geocoder.geocode = slow_geocode
        workflow.set_source_query("Paris")
        workflow.set_destination_query("Berlin")
        first = asyncio.create_task(workflow.search())
        await asyncio.sleep(0)

        # When: 사용자가 목적지를 바꾸고 다시 검색
        workflow.set_destination_query("Munich")
        second = await workflow.search()
        gate.set()
        stale = await first

        # Then
        state = workflow.state
        assert second.outcome is Outcome.RESOLVED
        assert stale.outcome is Outcome.STALE
        assert state.destination.query == "Munich"
        assert state.destination.coordinate == sample_places["Munich"]
        assert state.generation == second.generation
        assert state.loading is False

    @pytest.mark.asyncio
    async def test_concurrent_searches_latest_wins(self, workflow, fake_resolver):
        gate = asyncio.Event()
        original_resolve = fake_resolver.resolve
        calls = {"count": 0}

        async def resolve_first_slowly(start, end):
            calls["count"] += 1
            if calls["count"] == 1:
                await gate.wait()
            return await original_resolve(start, end)

        fake_resolver.resolve = resolve_first_slowly
        workflow.set_source_query("Paris")
        workflow.set_destination_query("Berlin")

        first = asyncio.create_task(workflow.search())
        await asyncio.sleep(0)
        second = await workflow.search()
        gate.set()
        stale = await first

        assert stale.outcome is Outcome.STALE
        assert second.outcome is Outcome.RESOLVED
        assert stale.generation < second.generation
        assert workflow.state.generation == second.generation
        assert workflow.state.loading is False

    @pytest.mark.asyncio
    async def test_slow_position_survives_destination_edit(self, fake_geocoder, fake_resolver):
        """위치 조회 중 목적지 입력 => 위치는 그대로 출발지에 반영"""
        # Given
        gate = asyncio.Event()
        here = Coordinate(48.85, 2.35)

        class SlowProvider(StaticPositionProvider):
            async def get_current_position(self):
                await gate.wait()
                return await super().get_current_position()

        workflow = LocationResolutionWorkflow(
            fake_geocoder, fake_resolver, positioning=SlowProvider(here)
        )
        locating = asyncio.create_task(workflow.locate())
        await asyncio.sleep(0)

        # When
        workflow.set_destination_query("Berlin")
        assert workflow.state.loading is True
        gate.set()
        result = await locating

        # Then
        state = workflow.state
        assert result.outcome is Outcome.LOCATED
        assert state.source.coordinate == here
        assert state.source.is_current_location is True
        assert state.destination.query == "Berlin"
        assert state.loading is False

    @pytest.mark.asyncio
    async def test_slow_position_dropped_after_source_edit(self, fake_geocoder, fake_resolver):
        """위치 조회 중 출발지를 직접 입력 => 입력값 우선"""
        gate = asyncio.Event()

        class SlowProvider(StaticPositionProvider):
            async def get_current_position(self):
                await gate.wait()
                return await super().get_current_position()

        workflow = LocationResolutionWorkflow(
            fake_geocoder, fake_resolver, positioning=SlowProvider(Coordinate(48.85, 2.35))
        )
        locating = asyncio.create_task(workflow.locate())
        await asyncio.sleep(0)

        workflow.set_source_query("Munich")
        gate.set()
        result = await locating

        state = workflow.state
        assert result.outcome is Outcome.STALE
        assert state.source.query == "Munich"
        assert state.source.coordinate is None
        assert state.loading is False
