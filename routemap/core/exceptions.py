# custom exception 정의 및 관리


class RouteMapException(Exception):  # 예외 구조 정의
    status_code: int = 500

    def __init__(self, message: str, code: str = "INTERNAL_ERROR"):
        self.message = message
        self.code = code
        super().__init__(self.message)


class ValidationError(RouteMapException):
    """필수 입력 누락 => client가 수정 후 재시도"""

    status_code = 400

    def __init__(self, message: str = "Location is required"):
        super().__init__(message, code="VALIDATION_ERROR")


class NotFoundError(RouteMapException):
    """upstream이 결과를 찾지 못함 => 자동 재시도 X"""

    status_code = 404

    def __init__(self, message: str = "No coordinates found"):
        super().__init__(message, code="NOT_FOUND")


class UpstreamError(RouteMapException):
    """
    외부 provider 통신/파싱 실패

    message는 client에 노출되는 일반 메시지, detail은 로그 전용
    """

    status_code = 500

    def __init__(self, detail: str = "", message: str = "Internal server error"):
        self.detail = detail
        super().__init__(message, code="UPSTREAM_ERROR")


class PositionUnavailable(RouteMapException):
    """기기 위치 조회 실패 (권한 거부, 사용 불가) => non-fatal"""

    def __init__(self, message: str = "Current position is unavailable"):
        super().__init__(message, code="POSITION_UNAVAILABLE")
