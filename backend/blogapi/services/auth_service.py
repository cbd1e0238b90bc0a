# 인증 서비스 레이어
# - 이름/이메일 중복 체크, 회원가입 (+ 인증 메일)
# - 이메일 인증, 로그인 (비밀번호 검증, 인증 여부 확인, JWT 발급)
# - 비밀번호 찾기/재설정

import logging

from fastapi import BackgroundTasks, Depends

from ..core.exceptions import ConflictError, ForbiddenError, InvalidCredentialsError, NotFoundError
from ..core.security import (
    TokenService,
    get_password_hash,
    get_token_service,
    validate_password_strength,
    verify_password,
)
from ..models.user import User
from ..repositories.user_repository import UserRepository
from ..schemas.user_schema import TokenClaims
from .mail_service import MailService, get_mail_service
from .verification_service import CodePurpose, VerificationCodeService

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, repo: UserRepository, tokens: TokenService, codes: VerificationCodeService):
        self.repo = repo
        self.tokens = tokens
        self.codes = codes

    async def register(self, name: str, email: str, password: str) -> User:
        email = email.lower()
        validate_password_strength(password)

        existing = await self.repo.get_by_email_or_name(email, name)
        if existing:
            field = "email" if existing.email == email else "name"
            raise ConflictError(field)

        user = await self.repo.create(name=name, email=email, hashed_password=get_password_hash(password))
        # 메일 발송 실패는 가입을 되돌리지 않습니다.
        await self.codes.issue_for_registration(user)
        logger.info(f"[AuthService] Registered user {user.id} ({email})")
        return user

    async def verify_email(self, code: str) -> User:
        return await self.codes.consume(code, CodePurpose.VERIFY_EMAIL)

    async def login(self, email: str, password: str) -> str:
        user = await self.repo.get_by_email(email.lower())
        if not user or not verify_password(password, user.hashed_password):
            logger.warning(f"[AuthService] Failed login for {email}")
            raise InvalidCredentialsError()
        if not user.is_verified:
            raise ForbiddenError("Please verify your email before logging in.")

        return self.tokens.issue(TokenClaims(id=str(user.id), email=user.email, role=user.role))

    async def forgot_password(self, email: str) -> None:
        user = await self.repo.get_by_email(email.lower())
        if not user:
            raise NotFoundError("User")
        await self.codes.issue_for_password_reset(user)
        logger.info(f"[AuthService] Password reset requested for user {user.id}")

    async def reset_password(self, code: str, new_password: str) -> User:
        return await self.codes.consume(code, CodePurpose.RESET_PASSWORD, new_password=new_password)


def get_verification_service(
    background_tasks: BackgroundTasks,
    repo: UserRepository = Depends(UserRepository),
    mailer: MailService = Depends(get_mail_service),
) -> VerificationCodeService:
    return VerificationCodeService(repo, mailer, background_tasks)


def get_auth_service(
    repo: UserRepository = Depends(UserRepository),
    tokens: TokenService = Depends(get_token_service),
    codes: VerificationCodeService = Depends(get_verification_service),
) -> AuthService:
    return AuthService(repo, tokens, codes)
