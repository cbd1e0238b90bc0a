# 사용자 저장소 레이어
# - 데이터 접근(조회/생성/수정/삭제)만 담당 (서비스 로직 분리)
# - 유니크 인덱스 위반은 ConflictError 로 변환
# - 1회용 코드 소비는 조회+비우기를 한 번의 find_one_and_update 로 처리

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from beanie import UpdateResponse
from beanie.operators import In, Or, Set
from pymongo.errors import DuplicateKeyError

from ..core.exceptions import ConflictError
from ..models.user import ROLE_USER, User
from .common import duplicate_field, parse_object_id


class UserRepository:
    async def get(self, user_id: str) -> Optional[User]:
        oid = parse_object_id(user_id)
        if oid is None:
            return None
        return await User.get(oid)

    async def get_many(self, user_ids: Iterable[str]) -> List[User]:
        oids = [oid for oid in (parse_object_id(u) for u in user_ids) if oid is not None]
        if not oids:
            return []
        return await User.find(In(User.id, oids)).to_list()

    async def get_by_email(self, email: str) -> Optional[User]:
        return await User.find_one(User.email == email)

    async def get_by_name(self, name: str) -> Optional[User]:
        return await User.find_one(User.name == name)

    async def get_by_email_or_name(self, email: str, name: str) -> Optional[User]:
        return await User.find_one(Or(User.email == email, User.name == name))

    async def consume_verification_code(self, code: str, changes: Dict[str, Any]) -> Optional[User]:
        """code 를 가진 사용자에게 changes 를 적용하고 코드를 비운 뒤 갱신된 문서를 반환합니다.

        동시에 같은 코드로 요청이 와도 하나만 성공합니다. 해당 코드가 없으면 None.
        """
        if not code:
            return None
        return await User.find_one(User.verification_code == code).update(
            Set({**changes, "verification_code": None, "updated_at": datetime.utcnow()}),
            response_type=UpdateResponse.NEW_DOCUMENT,
        )

    async def list_all(self) -> List[User]:
        return await User.find_all().sort(+User.created_at).to_list()

    async def create(
        self,
        name: str,
        email: str,
        hashed_password: str,
        role: str = ROLE_USER,
    ) -> User:
        user = User(name=name, email=email, hashed_password=hashed_password, role=role)
        try:
            return await user.insert()
        except DuplicateKeyError as e:
            raise ConflictError(await self._conflicting_field(e, user)) from e

    async def save(self, user: User) -> User:
        user.updated_at = datetime.utcnow()
        try:
            await user.save()
        except DuplicateKeyError as e:
            raise ConflictError(await self._conflicting_field(e, user)) from e
        return user

    async def delete(self, user_id: str) -> bool:
        user = await self.get(user_id)
        if not user:
            return False
        await user.delete()
        return True

    async def _conflicting_field(self, error: DuplicateKeyError, user: User) -> str:
        field = duplicate_field(error)
        if field:
            return field
        # 드라이버가 keyPattern 을 주지 않으면 어느 값이 겹치는지 직접 확인
        other = await self.get_by_name(user.name)
        if other and other.id != user.id:
            return "name"
        return "email"
