# 커스텀 예외 클래스 정의
# - 서비스 레이어는 HTTP를 모르고 도메인 예외만 발생시킵니다.
# - main.py 의 예외 핸들러가 status_code 를 보고 JSON 응답으로 변환합니다.

from typing import Optional


class BlogApiError(Exception):
    """모든 애플리케이션 예외의 기본 클래스

    Attributes:
        message: 클라이언트에 그대로 반환해도 되는 메시지
        status_code: 응답 HTTP 상태 코드
    """
    status_code: int = 500
    default_message: str = "Something went wrong."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(BlogApiError):
    """입력값이 형식/정책을 위반한 경우 (400)"""
    status_code = 400
    default_message = "Validation failed"


class InvalidVerificationCodeError(ValidationError):
    """인증/재설정 코드를 가진 사용자가 없을 때 (이미 사용된 코드 포함)"""
    default_message = "Invalid or expired verification code."


class ConflictError(BlogApiError):
    """이름/이메일 등 유니크 필드 중복

    주의: 기존 API 계약에 맞춰 409 가 아닌 400 을 사용합니다.
    """
    status_code = 400

    def __init__(self, field: str, message: Optional[str] = None):
        self.field = field
        super().__init__(message or f"A user with this {field} already exists.")


class UnauthenticatedError(BlogApiError):
    """토큰이 아예 없는 경우 (401)"""
    status_code = 401
    default_message = "Access denied. No token provided."


class InvalidCredentialsError(BlogApiError):
    status_code = 401
    default_message = "Invalid credentials."


class ForbiddenError(BlogApiError):
    """잘못된 토큰, 권한(role) 부족, 소유권 위반, 미인증 계정 (403)"""
    status_code = 403
    default_message = "Access denied."


class NotFoundError(BlogApiError):
    status_code = 404

    def __init__(self, resource: str = "Resource", resource_id: Optional[str] = None):
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(f"{resource} not found.")


class InternalError(BlogApiError):
    """예상하지 못한 실패. 메시지는 일부러 일반화합니다."""
    status_code = 500


class InvalidTokenError(Exception):
    """토큰 서명 불일치/만료/형식 오류

    TokenService 에서만 발생하며 HTTP 로 직접 나가지 않습니다.
    접근 제어 의존성이 이를 ForbiddenError 로 변환하거나 익명으로 취급합니다.
    """

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid token: {reason}")
