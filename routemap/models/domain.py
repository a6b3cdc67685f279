import math
from typing import List, Optional, Tuple
from dataclasses import dataclass

# domain 정의


@dataclass(frozen=True)
class Coordinate:
    latitude: float  # 내부 연산은 (lat, lon) 순서로 통일
    longitude: float

    def __post_init__(self):
        for name, value, bound in (
            ("latitude", self.latitude, 90.0),
            ("longitude", self.longitude, 180.0),
        ):
            if not isinstance(value, (int, float)) or not math.isfinite(value):
                raise ValueError(f"{name} must be a finite number: {value!r}")
            if not -bound <= value <= bound:
                raise ValueError(f"{name} out of range [-{bound}, {bound}]: {value}")

    @classmethod
    def from_strings(cls, lat: str, lon: str) -> "Coordinate":
        """provider가 내려주는 숫자 문자열 => Coordinate"""
        return cls(float(lat), float(lon))

    @classmethod
    def parse(cls, raw: str) -> "Coordinate":
        """
        "lat,lon" 문자열 => Coordinate (DEVICE_POSITION, --position)

        Raises:
            ValueError: 형식 오류 또는 범위 초과
        """
        parts = raw.split(",")
        if len(parts) != 2:
            raise ValueError(f"expected 'lat,lon', got {raw!r}")
        return cls.from_strings(parts[0].strip(), parts[1].strip())

    @classmethod
    def from_lon_lat(cls, pair: List[float]) -> "Coordinate":
        """GeoJSON 순서 [lon, lat] => Coordinate"""
        lon, lat = pair
        return cls(float(lat), float(lon))

    def as_tuple(self) -> Tuple[float, float]:
        return (self.latitude, self.longitude)


# 경로 polyline, 순서 = 경로 순서 (재정렬 금지)
RouteGeometry = Tuple[Coordinate, ...]


@dataclass(frozen=True)
class RouteSummary:
    distance_km: float
    duration_min: float

    @classmethod
    def from_provider(cls, distance_m: float, duration_s: float) -> "RouteSummary":
        """meters/seconds => km/minutes (소수점 2자리 반올림)"""
        if distance_m < 0 or duration_s < 0:
            raise ValueError("distance and duration must be non-negative")
        return cls(
            distance_km=round(distance_m / 1000, 2),
            duration_min=round(duration_s / 60, 2),
        )


@dataclass(frozen=True)
class Endpoint:
    """경로의 한쪽 끝 (출발지 또는 목적지)"""

    query: str = ""
    coordinate: Optional[Coordinate] = None
    is_current_location: bool = False
