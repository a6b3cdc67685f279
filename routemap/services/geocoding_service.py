# 외부 geocoding provider(Nominatim) 프록시 서비스

import logging
from typing import Dict, List, Optional

import httpx

from routemap.core.config import settings
from routemap.core.exceptions import NotFoundError, UpstreamError, ValidationError
from routemap.models.domain import Coordinate

logger = logging.getLogger(__name__)


class GeocodingService:
    """
    Geocoding Gateway

    - 장소 이름(free text) => provider 후보 리스트 => 첫 번째 후보의 lat/lon
    - 요청마다 새 HTTP client 사용 (요청 간 공유 상태 없음)
    - upstream 오류는 모두 UpstreamError로 정규화, 재시도 X
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        user_agent: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url or settings.GEOCODER_URL
        self.user_agent = user_agent or settings.GEOCODER_USER_AGENT
        self.timeout = timeout if timeout is not None else settings.UPSTREAM_TIMEOUT_SECONDS
        self.transport = transport  # 테스트에서 MockTransport 주입

    async def geocode(self, location: Optional[str]) -> List[Dict[str, str]]:
        """
        장소 이름을 좌표로 변환

        Args:
            location: 장소 이름

        Returns:
            [{"lat": "...", "lon": "..."}] (항상 원소 1개)

        Raises:
            ValidationError: location 누락 또는 빈 문자열
            NotFoundError: 후보 없음
            UpstreamError: 통신/파싱 실패
        """
        if location is None or not location.strip():
            raise ValidationError()

        candidates = await self._search(location)

        if not candidates:
            logger.info(f"geocode 결과 없음: location={location!r}")
            raise NotFoundError()

        # 첫 번째 후보가 authoritative
        first = candidates[0]
        try:
            lat, lon = str(first["lat"]), str(first["lon"])
            Coordinate.from_strings(lat, lon)
        except (KeyError, TypeError, ValueError) as e:
            raise UpstreamError(f"잘못된 후보 형식: {first!r} ({e})")

        logger.debug(f"geocode 완료: location={location!r} -> ({lat}, {lon})")
        return [{"lat": lat, "lon": lon}]

    async def _search(self, location: str) -> list:
        """provider 호출 => 후보 리스트 반환"""
        params = {"format": "json", "q": location}
        headers = {"User-Agent": self.user_agent}

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self.transport
            ) as client:
                response = await client.get(self.base_url, params=params, headers=headers)
                response.raise_for_status()
                data = response.json()

        except httpx.HTTPStatusError as e:
            raise UpstreamError(
                f"geocoding provider HTTP {e.response.status_code}: {e.response.text[:200]}"
            )
        except httpx.HTTPError as e:
            raise UpstreamError(f"geocoding provider 통신 실패: {e}")
        except ValueError as e:
            raise UpstreamError(f"geocoding provider 응답 파싱 실패: {e}")

        if not isinstance(data, list):
            raise UpstreamError(f"예상하지 못한 응답 형식: {type(data).__name__}")

        return data
