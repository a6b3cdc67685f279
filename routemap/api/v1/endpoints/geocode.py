"""
Geocoding Gateway REST API 엔드포인트
"""

from fastapi import APIRouter, Depends, Query
from typing import List, Optional
import logging

from routemap.api.deps import get_geocoding_service
from routemap.core.exceptions import RouteMapException, UpstreamError
from routemap.models.responses import ErrorResponse, GeocodeCandidate
from routemap.services.geocoding_service import GeocodingService

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get(
    "/geocode",
    response_model=List[GeocodeCandidate],
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def geocode_location(
    location: Optional[str] = Query(None, description="장소 이름"),
    service: GeocodingService = Depends(get_geocoding_service),
):
    """
    장소 이름 => 좌표 (첫 번째 후보)

    - **location**: 장소 이름 (필수, 빈 문자열 불가)

    Example:
        GET /api/geocode?location=Paris
        => [{"lat": "48.8588897", "lon": "2.3200410"}]
    """
    logger.info(f"geocode 요청: location={location!r}")

    try:
        return await service.geocode(location)

    except UpstreamError as e:
        # upstream 원본 오류는 로그에만 남김
        logger.error(f"geocode upstream 오류: {e.detail}")
        raise
    except RouteMapException as e:
        logger.warning(f"geocode 실패: {e.code} {e.message}")
        raise
