# 블로그 라우터
# - 공개: GET /api/blogs (공개 글 목록), GET /api/blogs/{blog_id} (토큰 선택)
# - 관리자 + 작성자 본인: 글 작성/수정/삭제
# - 관리자: 댓글 작성/삭제 (삭제는 댓글 작성자 또는 글 작성자만)

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from ..core.config import Settings, get_settings
from ..core.security import authorize, get_optional_identity
from ..models.user import ROLE_ADMIN
from ..schemas.blog_schema import BlogCreate, BlogListResponse, BlogPublic, BlogUpdate, CommentCreate, CommentPublic
from ..schemas.common import MessageResponse
from ..schemas.user_schema import TokenClaims
from ..services.blog_service import BlogService, get_blog_service

router = APIRouter(prefix="/blogs", tags=["blogs"])

require_admin = authorize(ROLE_ADMIN)


@router.get("", response_model=BlogListResponse, summary="공개 글 목록 (최신순, 태그 필터)")
async def list_blogs(
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    tag: Optional[str] = None,
    settings: Settings = Depends(get_settings),
    service: BlogService = Depends(get_blog_service),
):
    limit = min(limit or settings.DEFAULT_PAGE_SIZE, settings.MAX_PAGE_SIZE)
    return await service.list_published(page=page, limit=limit, tag=tag)


@router.get("/{blog_id}", response_model=BlogPublic, summary="글 상세 (비공개 글은 작성자만)")
async def get_blog(
    blog_id: str,
    identity: Optional[TokenClaims] = Depends(get_optional_identity),
    service: BlogService = Depends(get_blog_service),
):
    return await service.get_one(blog_id, identity)


@router.post("", status_code=status.HTTP_201_CREATED, response_model=BlogPublic, summary="글 작성")
async def create_blog(
    payload: BlogCreate,
    identity: TokenClaims = Depends(require_admin),
    service: BlogService = Depends(get_blog_service),
):
    return await service.create(identity, payload.model_dump())


@router.put("/{blog_id}", response_model=BlogPublic, summary="글 부분 수정 (작성자만)")
async def update_blog(
    blog_id: str,
    payload: BlogUpdate,
    identity: TokenClaims = Depends(require_admin),
    service: BlogService = Depends(get_blog_service),
):
    return await service.update(blog_id, identity, payload.model_dump(exclude_unset=True))


@router.delete("/{blog_id}", response_model=MessageResponse, summary="글 삭제 (작성자만, 댓글 포함)")
async def delete_blog(
    blog_id: str,
    identity: TokenClaims = Depends(require_admin),
    service: BlogService = Depends(get_blog_service),
):
    await service.delete(blog_id, identity)
    return {"message": "Blog deleted successfully."}


@router.post(
    "/{blog_id}/comments",
    status_code=status.HTTP_201_CREATED,
    response_model=CommentPublic,
    summary="댓글 작성",
)
async def add_comment(
    blog_id: str,
    payload: CommentCreate,
    identity: TokenClaims = Depends(require_admin),
    service: BlogService = Depends(get_blog_service),
):
    return await service.add_comment(blog_id, identity, payload.content)


@router.delete(
    "/{blog_id}/comments/{comment_id}",
    response_model=MessageResponse,
    summary="댓글 삭제 (댓글 작성자 또는 글 작성자)",
)
async def delete_comment(
    blog_id: str,
    comment_id: str,
    identity: TokenClaims = Depends(require_admin),
    service: BlogService = Depends(get_blog_service),
):
    await service.delete_comment(blog_id, comment_id, identity)
    return {"message": "Comment deleted successfully."}
