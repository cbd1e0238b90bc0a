# 블로그 서비스 레이어
# - 게시글 CRUD: 비공개(is_published=False) 글은 작성자만 조회 가능
# - 수정/삭제는 작성자만 가능
# - 댓글 삭제는 댓글 작성자 또는 게시글 작성자만 가능
# - 응답의 author 는 {id, name, email} 로 채워서 반환

import logging
import math
from typing import Any, Dict, Iterable, List, Optional

from fastapi import Depends

from ..core.exceptions import ForbiddenError, NotFoundError, ValidationError
from ..models.blog import BlogPost, Comment
from ..repositories.blog_repository import BlogRepository
from ..repositories.common import parse_object_id
from ..repositories.user_repository import UserRepository
from ..schemas.blog_schema import AuthorSummary, BlogListResponse, BlogPublic, CommentPublic
from ..schemas.user_schema import TokenClaims

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("title", "content", "tags", "is_published")


def _is_author(blog: BlogPost, identity: Optional[TokenClaims]) -> bool:
    return identity is not None and str(blog.author_id) == identity.id


class BlogService:
    def __init__(self, blogs: BlogRepository, users: UserRepository):
        self.blogs = blogs
        self.users = users

    # ---- 조회 ----

    async def _load(self, blog_id: str) -> BlogPost:
        blog = await self.blogs.get(blog_id)
        if not blog:
            raise NotFoundError("Blog", blog_id)
        return blog

    async def list_published(self, page: int, limit: int, tag: Optional[str] = None) -> BlogListResponse:
        blogs, total = await self.blogs.list_published(page=page, limit=limit, tag=tag)
        return BlogListResponse(
            blogs=await self._to_public_many(blogs),
            total_pages=math.ceil(total / limit),
            current_page=page,
        )

    async def get_one(self, blog_id: str, identity: Optional[TokenClaims] = None) -> BlogPublic:
        blog = await self._load(blog_id)
        if not blog.is_published and not _is_author(blog, identity):
            raise ForbiddenError()
        return (await self._to_public_many([blog]))[0]

    # ---- 게시글 변경 ----

    async def create(self, identity: TokenClaims, data: Dict[str, Any]) -> BlogPublic:
        blog = await self.blogs.create(
            author_id=identity.id,
            title=data["title"],
            content=data["content"],
            tags=list(data.get("tags") or []),
            is_published=bool(data.get("is_published", False)),
        )
        logger.info(f"[BlogService] Blog {blog.id} created by {identity.id}")
        return (await self._to_public_many([blog]))[0]

    async def update(self, blog_id: str, identity: TokenClaims, changes: Dict[str, Any]) -> BlogPublic:
        """changes 에 있는 키만 덮어쓰고, 없는 필드는 기존 값을 유지합니다.

        빈 리스트나 False 도 명시적으로 보낸 값이면 반영합니다.
        """
        blog = await self._load(blog_id)
        if not _is_author(blog, identity):
            raise ForbiddenError()

        fields = {}
        for field in UPDATABLE_FIELDS:
            if field not in changes:
                continue
            if changes[field] is None:
                raise ValidationError(f"{field} cannot be null.")
            fields[field] = changes[field]

        blog = await self.blogs.update_fields(blog, fields)
        if blog is None:
            # 조회와 수정 사이에 글이 삭제된 경우
            raise NotFoundError("Blog", blog_id)
        return (await self._to_public_many([blog]))[0]

    async def delete(self, blog_id: str, identity: TokenClaims) -> None:
        blog = await self._load(blog_id)
        if not _is_author(blog, identity):
            raise ForbiddenError()
        await self.blogs.delete(blog)
        logger.info(f"[BlogService] Blog {blog_id} deleted by {identity.id}")

    # ---- 댓글 ----

    async def add_comment(self, blog_id: str, identity: TokenClaims, content: str) -> CommentPublic:
        blog = await self._load(blog_id)
        if not blog.is_published and not _is_author(blog, identity):
            raise ForbiddenError()

        comment = Comment(content=content, author_id=parse_object_id(identity.id))
        if not await self.blogs.push_comment(blog_id, comment):
            # 조회와 추가 사이에 글이 삭제된 경우
            raise NotFoundError("Blog", blog_id)

        authors = await self._authors([comment.author_id])
        return self._comment_public(comment, authors)

    async def delete_comment(self, blog_id: str, comment_id: str, identity: TokenClaims) -> None:
        blog = await self._load(blog_id)
        comment = next((c for c in blog.comments if str(c.id) == comment_id), None)
        if comment is None:
            raise NotFoundError("Comment", comment_id)

        if str(comment.author_id) != identity.id and not _is_author(blog, identity):
            raise ForbiddenError()

        if not await self.blogs.pull_comment(blog_id, comment_id):
            raise NotFoundError("Comment", comment_id)

    # ---- 응답 변환 ----

    async def _authors(self, author_ids: Iterable[Any]) -> Dict[str, AuthorSummary]:
        ids = {str(a) for a in author_ids}
        users = await self.users.get_many(ids)
        found = {str(u.id): AuthorSummary(id=str(u.id), name=u.name, email=u.email) for u in users}
        # 삭제된 작성자는 id 만 남깁니다.
        return {i: found.get(i, AuthorSummary(id=i)) for i in ids}

    def _comment_public(self, comment: Comment, authors: Dict[str, AuthorSummary]) -> CommentPublic:
        return CommentPublic(
            id=str(comment.id),
            content=comment.content,
            author=authors[str(comment.author_id)],
            created_at=comment.created_at,
            updated_at=comment.updated_at,
        )

    async def _to_public_many(self, blogs: List[BlogPost]) -> List[BlogPublic]:
        author_ids = set()
        for blog in blogs:
            author_ids.add(blog.author_id)
            author_ids.update(c.author_id for c in blog.comments)
        authors = await self._authors(author_ids)

        return [
            BlogPublic(
                id=str(blog.id),
                title=blog.title,
                content=blog.content,
                author=authors[str(blog.author_id)],
                tags=list(blog.tags),
                is_published=blog.is_published,
                comments=[self._comment_public(c, authors) for c in blog.comments],
                created_at=blog.created_at,
                updated_at=blog.updated_at,
            )
            for blog in blogs
        ]


def get_blog_service(
    blogs: BlogRepository = Depends(BlogRepository),
    users: UserRepository = Depends(UserRepository),
) -> BlogService:
    return BlogService(blogs, users)
