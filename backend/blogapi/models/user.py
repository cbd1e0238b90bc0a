# User 도메인 모델 (Beanie Document)
# - 이름, 이메일, 비밀번호 해시, 권한(role), 이메일 인증 여부
# - verification_code 는 이메일 인증과 비밀번호 재설정이 함께 쓰는 1회용 슬롯
# - 이름/이메일은 unique 인덱스

from datetime import datetime
from typing import Optional

import pymongo
from beanie import Document, Indexed
from pydantic import EmailStr, Field

ROLE_USER = "user"
ROLE_ADMIN = "admin"


class User(Document):
    name: Indexed(str, unique=True)
    email: Indexed(EmailStr, unique=True)  # 중복 방지 인덱스
    hashed_password: str = Field(repr=False)
    role: str = ROLE_USER
    is_verified: bool = False
    # 새 코드가 발급되면 이전 코드(인증/재설정 무관)는 덮어써져 무효가 됩니다.
    verification_code: Optional[str] = Field(default=None, repr=False)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "users"  # 컬렉션명
        indexes = [
            pymongo.IndexModel([("verification_code", pymongo.ASCENDING)], sparse=True),
        ]
