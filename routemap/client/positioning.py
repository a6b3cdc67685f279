# 기기 위치 조회 (single-shot, 비동기, 실패 가능)

import logging
from abc import ABC, abstractmethod
from typing import Optional

from routemap.core.config import settings
from routemap.core.exceptions import PositionUnavailable
from routemap.models.domain import Coordinate

logger = logging.getLogger(__name__)


class PositionProvider(ABC):
    """
    위치 제공자 blueprint
    모든 구현체는 동일한 public method를 가짐
    """

    @abstractmethod
    async def get_current_position(self) -> Coordinate:
        """현재 위치 반환, 실패 시 PositionUnavailable"""


class StaticPositionProvider(PositionProvider):
    """고정 좌표를 현재 위치로 반환"""

    def __init__(self, coordinate: Coordinate):
        self.coordinate = coordinate

    async def get_current_position(self) -> Coordinate:
        return self.coordinate


class UnavailablePositionProvider(PositionProvider):
    """위치 권한 거부 / 사용 불가 상황"""

    def __init__(self, reason: str = "Current position is unavailable"):
        self.reason = reason

    async def get_current_position(self) -> Coordinate:
        raise PositionUnavailable(self.reason)


def position_provider_from_settings(
    position: Optional[Coordinate] = None,
) -> PositionProvider:
    """
    DEVICE_POSITION 설정값 => PositionProvider

    설정이 없으면 UnavailablePositionProvider
    """
    position = position if position is not None else settings.DEVICE_POSITION
    if position is None:
        logger.debug("DEVICE_POSITION 미설정 => 위치 사용 불가")
        return UnavailablePositionProvider("DEVICE_POSITION is not configured")

    return StaticPositionProvider(position)
