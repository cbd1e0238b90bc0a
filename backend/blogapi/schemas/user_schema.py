# 요청/응답 스키마 정의 (Pydantic 모델)
# - 인증(회원가입/로그인/비밀번호 재설정), 프로필, 토큰 claims

from datetime import datetime
from typing import Annotated, Optional

from pydantic import BaseModel, EmailStr, Field, StringConstraints

from .common import CamelModel

UserName = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=4, max_length=20, pattern=r"^[A-Za-z0-9_-]+$"),
]


class TokenClaims(BaseModel):
    """토큰에 실리는 신원 정보 (DB 조회 없이 검증 가능)"""
    id: str
    email: str
    role: Optional[str] = None


class UserCreate(CamelModel):
    name: UserName
    email: EmailStr
    password: str


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1)


class ForgotPasswordRequest(CamelModel):
    email: EmailStr


class ResetPasswordRequest(CamelModel):
    code: str = Field(min_length=1)
    new_password: str


class UserUpdate(CamelModel):
    # 부분 수정: 보내지 않은 필드는 model_fields_set 에 없으므로 기존 값 유지
    name: Optional[UserName] = None
    email: Optional[EmailStr] = None


class PasswordChange(CamelModel):
    current_password: str = Field(min_length=1)
    new_password: str


class TokenResponse(CamelModel):
    token: str


class UserPublic(CamelModel):
    # hashed_password, verification_code 는 절대 포함하지 않습니다.
    id: str
    name: str
    email: str
    role: str
    is_verified: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_user(cls, user) -> "UserPublic":
        return cls(
            id=str(user.id),
            name=user.name,
            email=user.email,
            role=user.role,
            is_verified=user.is_verified,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )
