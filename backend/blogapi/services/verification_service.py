# 1회용 코드 수명주기
# - 이메일 인증 코드와 비밀번호 재설정 코드는 User.verification_code 슬롯 하나를 공유합니다.
# - 재설정 요청은 대기 중인 인증 코드를 덮어씁니다 (기존 동작 유지).
# - 코드 사용(소비) 시 슬롯을 비워 재사용을 막습니다.

import logging
from enum import Enum
from typing import Optional

from fastapi import BackgroundTasks

from ..core.exceptions import InvalidVerificationCodeError
from ..core.security import generate_verification_code, get_password_hash, validate_password_strength
from ..models.user import User
from ..repositories.user_repository import UserRepository
from .mail_service import MailService

logger = logging.getLogger(__name__)


class CodePurpose(str, Enum):
    VERIFY_EMAIL = "verify-email"
    RESET_PASSWORD = "reset-password"


class VerificationCodeService:
    def __init__(self, repo: UserRepository, mailer: MailService, background_tasks: BackgroundTasks):
        self.repo = repo
        self.mailer = mailer
        self.background_tasks = background_tasks

    async def issue_for_registration(self, user: User) -> str:
        code = generate_verification_code()
        user.verification_code = code
        user.is_verified = False
        await self.repo.save(user)
        # 저장이 끝난 뒤에만 메일 발송을 예약
        self.background_tasks.add_task(self.mailer.send_verification_email, user.email, code)
        return code

    async def issue_for_password_reset(self, user: User) -> str:
        code = generate_verification_code()
        if user.verification_code:
            logger.info(f"[VerificationCode] Overwriting pending code for user {user.id}")
        user.verification_code = code
        await self.repo.save(user)
        self.background_tasks.add_task(self.mailer.send_password_reset_email, user.email, code)
        return code

    async def consume(self, code: str, purpose: CodePurpose, new_password: Optional[str] = None) -> User:
        if purpose is CodePurpose.VERIFY_EMAIL:
            changes = {"is_verified": True}
        else:
            # 정책 위반이면 코드를 소비하지 않고 비밀번호도 그대로 둡니다.
            validate_password_strength(new_password or "")
            changes = {"hashed_password": get_password_hash(new_password)}

        user = await self.repo.consume_verification_code(code, changes)
        if not user:
            raise InvalidVerificationCodeError()
        logger.info(f"[VerificationCode] Consumed {purpose.value} code for user {user.id}")
        return user
