# 계정 서비스 레이어
# - 내 프로필 조회/수정/삭제, 비밀번호 변경
# - 관리자용 전체 사용자 조회/삭제

import logging
from typing import Any, Dict, List

from fastapi import Depends

from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..core.security import get_password_hash, validate_password_strength, verify_password
from ..models.user import User
from ..repositories.user_repository import UserRepository
from ..schemas.user_schema import TokenClaims

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("name", "email")


class UserService:
    def __init__(self, repo: UserRepository):
        self.repo = repo

    async def _load(self, user_id: str) -> User:
        user = await self.repo.get(user_id)
        if not user:
            raise NotFoundError("User", user_id)
        return user

    async def get_self(self, identity: TokenClaims) -> User:
        return await self._load(identity.id)

    async def update_self(self, identity: TokenClaims, changes: Dict[str, Any]) -> User:
        """changes 에 들어있는 키만 반영합니다 (exclude_unset 결과를 그대로 받음)."""
        user = await self._load(identity.id)

        for field in UPDATABLE_FIELDS:
            if field not in changes:
                continue
            value = changes[field]
            if value is None:
                raise ValidationError(f"{field} cannot be null.")
            if field == "email":
                value = value.lower()
            if value == getattr(user, field):
                continue

            lookup = self.repo.get_by_email if field == "email" else self.repo.get_by_name
            other = await lookup(value)
            if other and str(other.id) != str(user.id):
                raise ConflictError(field)
            setattr(user, field, value)

        # 동시 수정으로 인한 중복은 저장 시 유니크 인덱스가 잡아냅니다.
        return await self.repo.save(user)

    async def change_password(self, identity: TokenClaims, current_password: str, new_password: str) -> None:
        user = await self._load(identity.id)
        if not verify_password(current_password, user.hashed_password):
            raise ValidationError("Current password is incorrect.")
        validate_password_strength(new_password)

        user.hashed_password = get_password_hash(new_password)
        await self.repo.save(user)
        logger.info(f"[UserService] Password changed for user {user.id}")

    async def delete_self(self, identity: TokenClaims) -> None:
        if not await self.repo.delete(identity.id):
            raise NotFoundError("User", identity.id)
        logger.info(f"[UserService] User {identity.id} deleted own account")

    async def list_all(self) -> List[User]:
        return await self.repo.list_all()

    async def delete_by_id(self, admin: TokenClaims, user_id: str) -> None:
        # 관리자가 자기 자신을 삭제하는 것도 막지 않습니다.
        if not await self.repo.delete(user_id):
            raise NotFoundError("User", user_id)
        logger.info(f"[UserService] Admin {admin.id} deleted user {user_id}")


def get_user_service(repo: UserRepository = Depends(UserRepository)) -> UserService:
    return UserService(repo)
