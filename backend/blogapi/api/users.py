# 사용자 라우터
# - 내 정보: GET/DELETE /api/users/me, PUT /api/users/update, PUT /api/users/password (로그인 필요)
# - 관리자: GET /api/users, DELETE /api/users/{user_id} (role=admin)

from typing import List

from fastapi import APIRouter, Depends

from ..core.security import authorize
from ..models.user import ROLE_ADMIN
from ..schemas.common import MessageResponse
from ..schemas.user_schema import PasswordChange, TokenClaims, UserPublic, UserUpdate
from ..services.user_service import UserService, get_user_service

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=UserPublic, summary="내 정보 조회")
async def get_me(identity: TokenClaims = Depends(authorize()), service: UserService = Depends(get_user_service)):
    return UserPublic.from_user(await service.get_self(identity))


@router.put("/update", response_model=UserPublic, summary="이름/이메일 수정")
async def update_me(
    payload: UserUpdate,
    identity: TokenClaims = Depends(authorize()),
    service: UserService = Depends(get_user_service),
):
    user = await service.update_self(identity, payload.model_dump(exclude_unset=True))
    return UserPublic.from_user(user)


@router.put("/password", response_model=MessageResponse, summary="비밀번호 변경 (현재 비밀번호 확인)")
async def change_password(
    payload: PasswordChange,
    identity: TokenClaims = Depends(authorize()),
    service: UserService = Depends(get_user_service),
):
    await service.change_password(identity, payload.current_password, payload.new_password)
    return {"message": "Password updated successfully."}


@router.delete("/me", response_model=MessageResponse, summary="회원 탈퇴")
async def delete_me(identity: TokenClaims = Depends(authorize()), service: UserService = Depends(get_user_service)):
    await service.delete_self(identity)
    return {"message": "Account deleted successfully."}


@router.get("", response_model=List[UserPublic], summary="전체 사용자 조회 (관리자)")
async def list_users(
    _: TokenClaims = Depends(authorize(ROLE_ADMIN)),
    service: UserService = Depends(get_user_service),
):
    return [UserPublic.from_user(u) for u in await service.list_all()]


@router.delete("/{user_id}", response_model=MessageResponse, summary="사용자 삭제 (관리자)")
async def delete_user(
    user_id: str,
    admin: TokenClaims = Depends(authorize(ROLE_ADMIN)),
    service: UserService = Depends(get_user_service),
):
    await service.delete_by_id(admin, user_id)
    return {"message": "User deleted successfully."}
