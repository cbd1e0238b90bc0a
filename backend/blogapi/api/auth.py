# 인증 라우터
# - 회원가입: POST /api/auth/register
# - 이메일 인증: GET /api/auth/verify-email/{code}
# - 로그인: POST /api/auth/login
# - 비밀번호 찾기/재설정: POST /api/auth/forgot-password, /api/auth/reset-password

from fastapi import APIRouter, Depends, status

from ..schemas.common import MessageResponse
from ..schemas.user_schema import (
    ForgotPasswordRequest,
    LoginRequest,
    ResetPasswordRequest,
    TokenResponse,
    UserCreate,
)
from ..services.auth_service import AuthService, get_auth_service

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=MessageResponse,
    summary="회원가입 (이름/이메일 중복 체크, 인증 메일 발송)",
)
async def register(payload: UserCreate, service: AuthService = Depends(get_auth_service)):
    await service.register(payload.name, payload.email, payload.password)
    return {"message": "Account created. Please check your email to verify your account."}


@router.get("/verify-email/{code}", response_model=MessageResponse, summary="이메일 인증 코드 확인")
async def verify_email(code: str, service: AuthService = Depends(get_auth_service)):
    await service.verify_email(code)
    return {"message": "Email verified successfully."}


@router.post("/login", response_model=TokenResponse, summary="로그인 (JWT 발급)")
async def login(payload: LoginRequest, service: AuthService = Depends(get_auth_service)):
    token = await service.login(payload.email, payload.password)
    return {"token": token}


@router.post("/forgot-password", response_model=MessageResponse, summary="비밀번호 재설정 메일 발송")
async def forgot_password(payload: ForgotPasswordRequest, service: AuthService = Depends(get_auth_service)):
    await service.forgot_password(payload.email)
    return {"message": "Password reset link sent to your email."}


@router.post("/reset-password", response_model=MessageResponse, summary="재설정 코드로 비밀번호 변경")
async def reset_password(payload: ResetPasswordRequest, service: AuthService = Depends(get_auth_service)):
    await service.reset_password(payload.code, payload.new_password)
    return {"message": "Password reset successful."}
