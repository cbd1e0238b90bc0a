# FastAPI 진입점
# - Beanie ODM 초기화 (MongoDB)
# - 라우터 라우팅 (/api/auth, /api/users, /api/blogs)
# - CORS 설정, 로깅 설정
# - 도메인 예외 → JSON 응답 변환

import logging
from datetime import datetime

from beanie import init_beanie
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from motor.motor_asyncio import AsyncIOMotorClient

from .core.config import get_settings
from .core.exceptions import BlogApiError, InternalError
from .models.blog import BlogPost
from .models.user import User
from .api.auth import router as auth_router
from .api.blogs import router as blog_router
from .api.users import router as users_router

settings = get_settings()

logger = logging.getLogger(__name__)
if not logging.getLogger().handlers:
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

# FastAPI 애플리케이션 인스턴스 생성
app = FastAPI(
    title="Blog API",
    description="회원 인증(가입/인증/로그인/비밀번호 재설정), 프로필 관리, 블로그/댓글 API",
    version="1.0.0"
)

# CORS 허용 도메인 세팅
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins or ["*"],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=86400,
)


# ---- 예외 핸들러 ----

def _error_response(exc: BlogApiError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


@app.exception_handler(BlogApiError)
async def blog_api_error_handler(request: Request, exc: BlogApiError):
    if exc.status_code >= 500:
        logger.error(f"[API] {request.method} {request.url.path} failed: {exc.message}")
    return _error_response(exc)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    # 입력 형식 오류는 422 대신 400 으로 통일
    # 요청 원문(input)은 비밀번호가 섞일 수 있어 응답에서 제외
    errors = [{k: v for k, v in e.items() if k != "input"} for e in exc.errors()]
    return JSONResponse(
        status_code=400,
        content={"message": "Validation failed", "errors": jsonable_encoder(errors)},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    # 실제 원인은 서버 로그에만 남기고 클라이언트에는 일반 메시지만 반환
    logger.exception(f"[API] Unhandled error on {request.method} {request.url.path}")
    return _error_response(InternalError())


# Beanie 초기화 (앱 시작 시 1회)
@app.on_event("startup")
async def app_init():
    try:
        client = AsyncIOMotorClient(settings.MONGODB_URI, serverSelectionTimeoutMS=5000)
        # 연결 테스트
        await client.admin.command('ping')

        db = client.get_default_database()
        await init_beanie(database=db, document_models=[User, BlogPost])
        logger.info(f"[Startup] MongoDB 연결 성공: {settings.MONGODB_URI}")
    except Exception as e:
        # 연결 실패 시에도 서버는 시작됩니다. 헬스체크는 동작하지만 DB 를 쓰는 API 는 500 을 반환합니다.
        logger.warning(f"[Startup] MongoDB 연결 실패: {e}")


# 간단한 헬스체크
@app.get("/")
async def root():
    return {"ok": True, "app": settings.APP_NAME, "time": datetime.utcnow().isoformat()}


@app.get("/health")
async def health_check():
    return {"status": "ok", "app": settings.APP_NAME, "version": "1.0.0"}


# API 라우터 등록
app.include_router(auth_router, prefix="/api")
app.include_router(users_router, prefix="/api")
app.include_router(blog_router, prefix="/api")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("blogapi.main:app", host=settings.HOST, port=settings.PORT)
