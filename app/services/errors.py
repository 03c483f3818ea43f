"""서비스 예외 정의

각 예외는 HTTP 응답 코드(status_code)를 가지고 있으며,
main.py의 예외 핸들러가 {"error": ...} 형태로 변환한다.
"""
from typing import Any, Dict, List, Optional


class DesignServiceError(Exception):
    """모든 서비스 예외의 기본 클래스"""

    status_code: int = 500

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_body(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class ConfigurationError(DesignServiceError):
    """API 키 등 설정 누락"""
    status_code = 500


class ValidationError(DesignServiceError):
    """요청 필드 오류"""
    status_code = 400

    def __init__(self, message: str, details: Optional[List[Dict[str, str]]] = None):
        super().__init__(message, details)


class AuthenticationError(DesignServiceError):
    """Authorization 헤더 누락"""
    status_code = 401


class UpstreamRateLimited(DesignServiceError):
    status_code = 429


class UpstreamPaymentRequired(DesignServiceError):
    status_code = 402


class UpstreamGatewayError(DesignServiceError):
    """429/402 이외의 업스트림 실패 (fallback 실패 포함)"""
    status_code = 500

    def __init__(self, message: str, upstream_status: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.upstream_status = upstream_status
        self.body = body


class ExtractionError(DesignServiceError):
    """성공 응답이지만 결과물이 없음"""
    status_code = 500
