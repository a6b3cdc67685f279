from functools import lru_cache

from routemap.services.geocoding_service import GeocodingService


# lru_cache 사용하여 싱글톤 패턴과 유사한 효과, 의존성 주입
# 서비스 자체는 요청 간 mutable state가 없음
@lru_cache()
def get_geocoding_service() -> GeocodingService:
    return GeocodingService()
