# Geocoding Gateway client (client 측 어댑터)

import logging
from typing import Optional

import httpx

from routemap.core.config import settings
from routemap.core.exceptions import NotFoundError, UpstreamError, ValidationError
from routemap.models.domain import Coordinate

logger = logging.getLogger(__name__)


class GatewayGeocoder:
    """
    gateway의 GET /api/geocode 호출 => Coordinate

    HTTP status => 예외 매핑
    - 400 => ValidationError
    - 404 => NotFoundError
    - 그 외 실패, 응답 파싱 실패 => UpstreamError
    """

    GEOCODE_PATH = "/api/geocode"

    def __init__(
        self,
        gateway_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.gateway_url = (gateway_url or settings.GATEWAY_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.UPSTREAM_TIMEOUT_SECONDS
        self.transport = transport

    async def geocode(self, query: str) -> Coordinate:
        url = f"{self.gateway_url}{self.GEOCODE_PATH}"
        logger.debug(f"gateway geocode 요청: {query!r}")

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self.transport
            ) as client:
                response = await client.get(url, params={"location": query})
        except httpx.HTTPError as e:
            raise UpstreamError(f"gateway 통신 실패: {e}")

        if response.status_code == 400:
            raise ValidationError(self._error_message(response, "Location is required"))
        if response.status_code == 404:
            raise NotFoundError(self._error_message(response, "No coordinates found"))
        if response.is_error:
            raise UpstreamError(
                f"gateway HTTP {response.status_code}: {response.text[:200]}"
            )

        try:
            data = response.json()
            first = data[0]
            return Coordinate.from_strings(first["lat"], first["lon"])
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise UpstreamError(f"gateway 응답 파싱 실패: {e}")

    @staticmethod
    def _error_message(response: httpx.Response, default: str) -> str:
        try:
            return response.json().get("error", default)
        except (ValueError, AttributeError):
            return default
