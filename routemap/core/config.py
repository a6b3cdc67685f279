import logging
import os
from typing import Optional
from dotenv import load_dotenv

from routemap.models.domain import Coordinate

load_dotenv()  # 환경변수 읽어오기

logger = logging.getLogger(__name__)


def _parse_position(raw: Optional[str]) -> Optional[Coordinate]:
    """
    DEVICE_POSITION ("lat,lon") => Coordinate

    client 전용 설정 => 잘못된 값이어도 gateway 기동은 막지 않고 미설정으로 처리
    """
    if not raw:
        return None
    try:
        return Coordinate.parse(raw)
    except ValueError as e:
        logger.warning(f"DEVICE_POSITION 무시 ({e})")
        return None


class Settings:
    PROJECT_NAME: str = "RouteMap Geocoding Gateway"
    VERSION: str = "1.0.0"

    DEBUG: bool = os.getenv("DEBUG", "False").lower() == "true"
    PORT: int = int(os.getenv("PORT", 5000))

    # CORS 설정
    # CORS_ALLOW_ALL=true => 모든 origin 허용 (credentials 사용 X)
    # false => ALLOWED_ORIGINS에 명시된 origin만 허용
    CORS_ALLOW_ALL: bool = os.getenv("CORS_ALLOW_ALL", "true").lower() == "true"
    ALLOWED_ORIGINS: list[str] = os.getenv(
        "ALLOWED_ORIGINS",
        "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000",
    ).split(",")

    # 외부 geocoding provider (Nominatim)
    GEOCODER_URL: str = os.getenv(
        "GEOCODER_URL", "https://nominatim.openstreetmap.org/search"
    )
    # Nominatim usage policy => 식별 가능한 User-Agent 필수
    GEOCODER_USER_AGENT: str = os.getenv(
        "GEOCODER_USER_AGENT", "routemap-gateway/1.0"
    )

    # 외부 routing provider (OSRM)
    ROUTER_URL: str = os.getenv(
        "ROUTER_URL", "https://router.project-osrm.org/route/v1"
    )
    ROUTING_PROFILE: str = os.getenv("ROUTING_PROFILE", "driving")

    # client => gateway 주소
    GATEWAY_URL: str = os.getenv("GATEWAY_URL", "http://localhost:5000")

    # 외부 호출 timeout (초), 비어 있으면 timeout 없음
    UPSTREAM_TIMEOUT_SECONDS: Optional[float] = (
        float(os.getenv("UPSTREAM_TIMEOUT_SECONDS"))
        if os.getenv("UPSTREAM_TIMEOUT_SECONDS")
        else None
    )

    # 기기 위치 (client 측 positioning), "lat,lon"
    DEVICE_POSITION: Optional[Coordinate] = _parse_position(
        os.getenv("DEVICE_POSITION")
    )

    # 성능 모니터링
    ENABLE_PERFORMANCE_MONITORING: bool = (
        os.getenv("ENABLE_PERFORMANCE_MONITORING", "true").lower() == "true"
    )
    SLOW_REQUEST_THRESHOLD_MS: float = float(
        os.getenv("SLOW_REQUEST_THRESHOLD_MS", 1000)
    )


settings = Settings()  # 모듈화


# 지도 기본값
DEFAULT_MAP_CENTER = (20.0, 78.0)
DEFAULT_MAP_ZOOM = 5
FOCUS_ZOOM = 13

CURRENT_LOCATION_LABEL = "Your Current Location"

# base tile layer 목록 (name -> url, subdomains)
TILE_PROVIDERS = {
    "Default": {
        "url": "https://{s}.tile.openstreetmap.org/{z}/{x}/{y}.png",
        "subdomains": ["a", "b", "c"],
        "attribution": "&copy; OpenStreetMap contributors",
    },
    "Satellite": {
        "url": "https://{s}.google.com/vt/lyrs=s&x={x}&y={y}&z={z}",
        "subdomains": ["mt0", "mt1", "mt2", "mt3"],
        "attribution": "Google",
    },
    "Terrain": {
        "url": "https://{s}.google.com/vt/lyrs=p&x={x}&y={y}&z={z}",
        "subdomains": ["mt0", "mt1", "mt2", "mt3"],
        "attribution": "Google",
    },
}

MARKER_ICONS = {
    "source": "https://raw.githubusercontent.com/pointhi/leaflet-color-markers/master/img/marker-icon-blue.png",
    "destination": "https://raw.githubusercontent.com/pointhi/leaflet-color-markers/master/img/marker-icon-red.png",
}
