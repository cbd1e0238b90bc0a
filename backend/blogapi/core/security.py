# 보안/인증 유틸리티
# - 비밀번호 해싱/검증, 비밀번호 강도 정책
# - JWT 토큰 발급/검증 (TokenService)
# - 이메일 인증/비밀번호 재설정용 1회용 코드 생성
# - 접근 제어 의존성 (Bearer 토큰 → 요청자 신원, 선택적 role 검사)

import logging
import re
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from passlib.context import CryptContext
from pydantic import ValidationError as PydanticValidationError

from .config import Settings, get_settings
from .exceptions import ForbiddenError, InvalidTokenError, UnauthenticatedError, ValidationError
from ..schemas.user_schema import TokenClaims

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
# auto_error=False: 헤더가 없을 때 401/403 구분을 직접 하기 위함
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)

PASSWORD_MIN_LENGTH = 8
# 32바이트 난수 → 64자 hex. 기존 코드와의 중복 검사는 하지 않습니다.
VERIFICATION_CODE_BYTES = 32


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def validate_password_strength(password: str) -> None:
    """회원가입/재설정/비밀번호 변경에 공통으로 적용되는 비밀번호 정책

    8자 이상, 소문자/대문자/숫자/특수문자 각각 1개 이상.
    위반 시 ValidationError(400).
    """
    missing = []
    if len(password) < PASSWORD_MIN_LENGTH:
        missing.append(f"be at least {PASSWORD_MIN_LENGTH} characters long")
    if not re.search(r"[a-z]", password):
        missing.append("contain a lowercase letter")
    if not re.search(r"[A-Z]", password):
        missing.append("contain an uppercase letter")
    if not re.search(r"\d", password):
        missing.append("contain a digit")
    if not re.search(r"[^A-Za-z0-9]", password):
        missing.append("contain a symbol")
    if missing:
        raise ValidationError("Password must " + ", ".join(missing) + ".")


def generate_verification_code() -> str:
    return secrets.token_hex(VERIFICATION_CODE_BYTES)


class TokenService:
    """서명된 신원 토큰 {id, email, role?} 발급/검증

    만료는 서명 payload 의 exp 로만 관리되며 DB 에는 저장하지 않습니다.
    """

    def __init__(self, settings: Settings):
        self.secret_key = settings.JWT_SECRET_KEY
        self.algorithm = settings.JWT_ALGORITHM
        self.expires_delta = timedelta(days=settings.JWT_EXPIRE_DAYS)

    def issue(self, claims: TokenClaims, expires_delta: Optional[timedelta] = None) -> str:
        now = datetime.now(tz=timezone.utc)
        payload = {
            "exp": now + (expires_delta if expires_delta is not None else self.expires_delta),
            "iat": now,
            **claims.model_dump(exclude_none=True),
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenClaims:
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError as e:
            raise InvalidTokenError("expired") from e
        except jwt.PyJWTError as e:
            raise InvalidTokenError(str(e)) from e

        try:
            return TokenClaims.model_validate(payload)
        except PydanticValidationError as e:
            raise InvalidTokenError("missing identity claims") from e


def get_token_service(settings: Settings = Depends(get_settings)) -> TokenService:
    return TokenService(settings)


def authorize(required_role: Optional[str] = None):
    """Bearer 토큰을 검사하는 의존성을 만들어 반환합니다.

    - 헤더 없음 → 401
    - 토큰 위조/만료 → 403 (기존 API 동작 유지)
    - required_role 이 있고 role 이 다르면 → 403

    DB 조회는 하지 않습니다. 삭제/강등된 사용자의 토큰도 만료 전까지는 유효합니다.
    """

    async def _dependency(
        token: Optional[str] = Depends(oauth2_scheme),
        tokens: TokenService = Depends(get_token_service),
    ) -> TokenClaims:
        if not token:
            raise UnauthenticatedError()
        try:
            claims = tokens.verify(token)
        except InvalidTokenError as e:
            logger.info(f"[Auth] Rejected bearer token: {e.reason}")
            raise ForbiddenError("Invalid or expired token.") from e

        if required_role and claims.role != required_role:
            raise ForbiddenError("Access denied. Insufficient permissions.")
        return claims

    return _dependency


async def get_optional_identity(
    token: Optional[str] = Depends(oauth2_scheme),
    tokens: TokenService = Depends(get_token_service),
) -> Optional[TokenClaims]:
    # 공개 라우트용: 토큰이 없거나 유효하지 않으면 익명으로 취급
    if not token:
        return None
    try:
        return tokens.verify(token)
    except InvalidTokenError:
        return None
