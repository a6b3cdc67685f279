"""
RouteMap Backend - FastAPI Application

장소 이름 geocoding 프록시 (Geocoding Gateway)
client의 CORS / rate-limit 문제를 피하기 위해 외부 geocoding provider 호출을 대행
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from routemap.core.config import settings
from routemap.core.exceptions import RouteMapException
from routemap.api.v1.router import api_router
from routemap.models.responses import HealthResponse, LivenessResponse

# 성능 모니터링
from routemap.middleware.performance_monitoring import (
    PerformanceMonitoringMiddleware,
    RequestLoggingMiddleware,
    get_metrics_collector,
)

# 로깅 설정
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    애플리케이션 생명주기 관리

    gateway는 요청 단위로 stateless => 초기화할 연결 풀 없음
    시작 시 설정값만 로깅
    """
    logger.info("=" * 60)
    logger.info(f"{settings.PROJECT_NAME} 시작 (port={settings.PORT})")
    logger.info(f"geocoder={settings.GEOCODER_URL}")
    logger.info(
        "CORS: 모든 origin 허용"
        if settings.CORS_ALLOW_ALL
        else f"CORS: {settings.ALLOWED_ORIGINS}"
    )
    logger.info("=" * 60)

    yield

    logger.info(f"✓ {settings.PROJECT_NAME} 종료")


# FastAPI 애플리케이션 생성
app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description="""
    ## 장소 이름 geocoding 프록시

    - `GET /api/geocode?location=<text>` => `[{"lat": "...", "lon": "..."}]`
    - 400: location 누락, 404: 결과 없음, 500: upstream 오류
    """,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

# CORS: 전체 허용(credentials X) 또는 명시된 origin만 (credentials O)
# "*"와 allow_credentials=True는 함께 쓸 수 없음
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.CORS_ALLOW_ALL else settings.ALLOWED_ORIGINS,
    allow_credentials=not settings.CORS_ALLOW_ALL,
    allow_methods=["GET", "OPTIONS"],
    allow_headers=["*"],
)

if settings.ENABLE_PERFORMANCE_MONITORING:
    app.add_middleware(
        PerformanceMonitoringMiddleware,
        slow_threshold_ms=settings.SLOW_REQUEST_THRESHOLD_MS,
    )
    app.add_middleware(RequestLoggingMiddleware)

# API 라우터 등록
app.include_router(api_router, prefix="/api")


# ========== Health Check Endpoints ==========


@app.get("/", response_model=LivenessResponse)
async def root():
    """
    liveness probe
    """
    return {"activeStatus": True, "error": False}


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """
    헬스 체크 엔드포인트 (로드 밸런서, 모니터링)
    """
    return {
        "status": "healthy",
        "service": settings.PROJECT_NAME,
        "version": settings.VERSION,
    }


@app.get("/metrics")
async def get_metrics():
    """
    성능 메트릭 엔드포인트
    """
    if not settings.ENABLE_PERFORMANCE_MONITORING:
        return {"message": "성능 모니터링이 비활성화되어 있습니다"}

    collector = get_metrics_collector()
    return {
        "summary": collector.get_summary(),
        "top_paths": collector.get_path_stats(top_n=10),
        "configuration": {"slow_request_threshold_ms": settings.SLOW_REQUEST_THRESHOLD_MS},
    }


# ========== Exception Handlers ==========


@app.exception_handler(RouteMapException)
async def routemap_exception_handler(request: Request, exc: RouteMapException):
    """
    도메인 예외 => {"error": message}

    UpstreamError의 detail은 응답에 포함하지 않음 (엔드포인트에서 로깅)
    """
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    전역 예외 핸들러

    예상치 못한 오류 처리
    """
    logger.error(f"예상치 못한 오류: {exc}", exc_info=True)

    return JSONResponse(status_code=500, content={"error": "Internal server error"})


# ========== Development Server ==========


def run_server():
    """개발 서버 실행 (routemap-server)"""
    import uvicorn

    logger.info("개발 서버 시작...")

    uvicorn.run(
        "routemap.main:app",
        host="0.0.0.0",
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level="debug" if settings.DEBUG else "info",
        access_log=True,
    )


if __name__ == "__main__":
    run_server()
