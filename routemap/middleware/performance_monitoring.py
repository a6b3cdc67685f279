# 요청 시간 측정 / 로깅 미들웨어 + 메모리 메트릭

import json
import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from routemap.core.config import settings

logger = logging.getLogger(__name__)


UNMATCHED_PATH = "<unmatched>"


def _status_class(status_code: int) -> str:
    return f"{status_code // 100}xx"


def _path_key(request: Request) -> str:
    """라우트 템플릿 기준 key, 매칭 안 된 경로(스캔 등)는 한 bucket으로"""
    route = request.scope.get("route")
    path = getattr(route, "path", None) or UNMATCHED_PATH
    return f"{request.method} {path}"


class PerformanceMonitoringMiddleware(BaseHTTPMiddleware):
    """
    요청 처리 시간 측정

    - X-Process-Time-Ms 응답 헤더
    - threshold 초과 시 WARNING (대부분 geocoding provider 지연)
    - MetricsCollector에 기록 => GET /metrics
    """

    def __init__(self, app: ASGIApp, slow_threshold_ms: Optional[float] = None):
        super().__init__(app)
        if slow_threshold_ms is None:
            slow_threshold_ms = settings.SLOW_REQUEST_THRESHOLD_MS
        self.slow_threshold_ms = slow_threshold_ms

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                f"처리 중 예외: {request.method} {request.url.path} "
                f"({(time.perf_counter() - started) * 1000:.2f}ms)"
            )
            raise

        elapsed_ms = (time.perf_counter() - started) * 1000
        is_slow = elapsed_ms > self.slow_threshold_ms
        response.headers["X-Process-Time-Ms"] = f"{elapsed_ms:.2f}"

        if is_slow:
            logger.warning(
                f"⚠️ 느린 요청: {request.method} {request.url.path} "
                f"{elapsed_ms:.2f}ms > {self.slow_threshold_ms}ms"
            )

        record = {
            "method": request.method,
            "path": request.url.path,
            "status": response.status_code,
            "elapsed_ms": round(elapsed_ms, 2),
            "slow": is_slow,
        }
        # geocode 요청은 검색어만 남김
        if "location" in request.query_params:
            record["location"] = request.query_params["location"]
        logger.info(f"PERFORMANCE: {json.dumps(record, ensure_ascii=False)}")

        get_metrics_collector().record_request(
            _path_key(request),
            response.status_code,
            elapsed_ms,
            is_slow,
        )
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """요청/응답 한 줄씩 로깅"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        host = request.client.host if request.client else "unknown"
        logger.info(f"→ {request.method} {request.url.path} from {host}")

        response = await call_next(request)

        # 404(결과 없음)는 정상 흐름, upstream 실패(5xx)만 ERROR
        level = logging.ERROR if response.status_code >= 500 else logging.INFO
        logger.log(
            level, f"← {request.method} {request.url.path} status={response.status_code}"
        )
        return response


@dataclass
class PathStats:
    count: int = 0
    total_ms: float = 0.0
    slow: int = 0
    client_errors: int = 0
    server_errors: int = 0

    @property
    def avg_ms(self) -> float:
        return round(self.total_ms / self.count, 2) if self.count else 0.0


class MetricsCollector:
    """프로세스 메모리에만 보관 (재시작 시 초기화)"""

    def __init__(self):
        self.paths: Dict[str, PathStats] = {}
        self.status_classes: Dict[str, int] = {}

    def record_request(
        self, path_key: str, status_code: int, elapsed_ms: float, is_slow: bool = False
    ) -> None:
        stats = self.paths.setdefault(path_key, PathStats())
        stats.count += 1
        stats.total_ms += elapsed_ms
        stats.slow += int(is_slow)
        if 400 <= status_code < 500:
            stats.client_errors += 1
        elif status_code >= 500:
            stats.server_errors += 1

        bucket = _status_class(status_code)
        self.status_classes[bucket] = self.status_classes.get(bucket, 0) + 1

    def get_summary(self) -> dict:
        total = sum(s.count for s in self.paths.values())
        total_ms = sum(s.total_ms for s in self.paths.values())
        server_errors = sum(s.server_errors for s in self.paths.values())

        return {
            "total_requests": total,
            "average_elapsed_time_ms": round(total_ms / total, 2) if total else 0,
            "slow_requests": sum(s.slow for s in self.paths.values()),
            "client_errors": sum(s.client_errors for s in self.paths.values()),
            "server_errors": server_errors,
            "availability": round((total - server_errors) / total * 100, 2) if total else 0,
            "by_status": dict(self.status_classes),
        }

    def get_path_stats(self, top_n: int = 10) -> List[dict]:
        """요청 수 기준 상위 N개"""
        ranked = sorted(self.paths.items(), key=lambda item: item[1].count, reverse=True)
        return [
            {
                "path": key,
                "count": stats.count,
                "avg_time_ms": stats.avg_ms,
                "slow_count": stats.slow,
                "client_errors": stats.client_errors,
                "server_errors": stats.server_errors,
            }
            for key, stats in ranked[:top_n]
        ]


_metrics_collector = MetricsCollector()


def get_metrics_collector() -> MetricsCollector:
    return _metrics_collector
