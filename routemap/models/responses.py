from pydantic import BaseModel, Field

# service 별 응답 구조 정의


# geocode 응답 원소 => provider의 숫자 문자열 그대로 전달
class GeocodeCandidate(BaseModel):
    lat: str = Field(..., description="위도 (숫자 문자열)")
    lon: str = Field(..., description="경도 (숫자 문자열)")


# 에러 응답
class ErrorResponse(BaseModel):
    error: str = Field(..., description="에러 메시지")


# liveness probe 응답
class LivenessResponse(BaseModel):
    activeStatus: bool = Field(True, description="서버 동작 여부")
    error: bool = Field(False, description="오류 여부")


# 헬스 체크 응답
class HealthResponse(BaseModel):
    status: str = Field(..., description="서비스 상태")
    service: str = Field(..., description="서비스 이름")
    version: str = Field(..., description="버전")
