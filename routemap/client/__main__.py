"""
경로 탐색 실행 스크립트

사용법:
    python -m routemap.client Paris Berlin
    python -m routemap.client --current-location Berlin --position 48.85,2.35
    python -m routemap.client Paris Berlin --swap --layer Terrain --output route.html
"""

import argparse
import asyncio
import logging
import sys

from routemap.core.config import TILE_PROVIDERS
from routemap.core.exceptions import ValidationError
from routemap.client.geocoding_client import GatewayGeocoder
from routemap.client.positioning import position_provider_from_settings
from routemap.client.presentation import build_map_view, render_map
from routemap.client.results import Outcome
from routemap.client.route_resolver import RouteResolver
from routemap.client.workflow import LocationResolutionWorkflow
from routemap.models.domain import Coordinate

logger = logging.getLogger("routemap.client")


def parse_position(raw: str) -> Coordinate:
    """--position 'lat,lon' => Coordinate (범위 검증 포함)"""
    try:
        return Coordinate.parse(raw)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"잘못된 위치 {raw!r}: {e}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="두 장소 간 운전 경로를 지도 HTML로 출력")
    parser.add_argument("source", nargs="?", default="", help="출발지 (생략 시 --current-location)")
    parser.add_argument("destination", help="목적지")
    parser.add_argument("--current-location", action="store_true", help="출발지로 현재 위치 사용")
    parser.add_argument("--position", type=parse_position, help="현재 위치 'lat,lon' (DEVICE_POSITION 대체)")
    parser.add_argument("--gateway", help="Geocoding Gateway URL (GATEWAY_URL 대체)")
    parser.add_argument("--swap", action="store_true", help="검색 후 출발지/목적지 교체")
    parser.add_argument("--layer", default="Default", choices=list(TILE_PROVIDERS), help="base tile layer")
    parser.add_argument("--output", default="route.html", help="출력 HTML 파일")
    parser.add_argument("-v", "--verbose", action="store_true", help="DEBUG 로그 출력")
    return parser


async def run(args) -> int:
    workflow = LocationResolutionWorkflow(
        geocoder=GatewayGeocoder(gateway_url=args.gateway),
        resolver=RouteResolver(),
        positioning=position_provider_from_settings(args.position),
    )

    if args.current_location or not args.source:
        located = await workflow.locate()
        if located.outcome is Outcome.POSITION_UNAVAILABLE:
            print(f"⚠️ 현재 위치를 사용할 수 없습니다: {located.error}")
    if args.source:
        workflow.set_source_query(args.source)
    workflow.set_destination_query(args.destination)

    try:
        result = await workflow.search()
    except ValidationError as e:
        print(f"❌ {e.message}")
        return 2

    if args.swap and result.outcome is Outcome.RESOLVED:
        result = await workflow.swap()

    state = workflow.state
    print(f"출발지: {state.source.query}  ->  목적지: {state.destination.query}")

    if result.outcome is Outcome.RESOLVED:
        print("🚗 Route Information")
        print(f"📏 Distance: {state.summary.distance_km} km")
        print(f"⏳ Estimated Time: {state.summary.duration_min} minutes")
    else:
        print(f"⚠️ 경로를 표시할 수 없습니다: {result.outcome.value} {result.error or ''}")

    render_map(build_map_view(state, base_layer=args.layer)).save(args.output)
    print(f"🗺️ 지도 저장: {args.output}")

    return 0 if result.outcome is Outcome.RESOLVED else 1


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    if args.current_location and args.source:
        build_parser().error("--current-location과 source는 함께 사용할 수 없습니다")

    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
