# 블로그 저장소 레이어
# - 공개 글 목록(태그 필터, 최신순, 페이지네이션)
# - 댓글 추가/삭제는 문서 단위 원자 연산($push/$pull)으로 처리해
#   동시에 달린 댓글이 유실되지 않도록 합니다.

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from beanie.exceptions import DocumentNotFound

from ..models.blog import BlogPost, Comment
from .common import parse_object_id


class BlogRepository:
    async def get(self, blog_id: str) -> Optional[BlogPost]:
        oid = parse_object_id(blog_id)
        if oid is None:
            return None
        return await BlogPost.get(oid)

    async def create(
        self,
        author_id: str,
        title: str,
        content: str,
        tags: List[str],
        is_published: bool = False,
    ) -> BlogPost:
        blog = BlogPost(
            author_id=parse_object_id(author_id),
            title=title,
            content=content,
            tags=tags,
            is_published=is_published,
        )
        return await blog.insert()

    async def update_fields(self, blog: BlogPost, changes: Dict[str, Any]) -> Optional[BlogPost]:
        """바뀐 필드만 $set 으로 반영합니다.

        comments 는 쓰지 않으므로 조회 이후 추가/삭제된 댓글이 되돌아가지 않습니다.
        반영 후 blog 는 DB 의 최신 상태(댓글 포함)로 갱신됩니다. 그 사이 글이 삭제됐으면 None.
        """
        try:
            await blog.set({**changes, "updated_at": datetime.utcnow()})
        except DocumentNotFound:
            return None
        return blog

    async def delete(self, blog: BlogPost) -> None:
        # 댓글은 임베드되어 있으므로 문서 삭제로 함께 제거됩니다.
        await blog.delete()

    async def list_published(
        self, page: int, limit: int, tag: Optional[str] = None
    ) -> Tuple[List[BlogPost], int]:
        query = {"is_published": True}
        if tag:
            query["tags"] = tag

        total = await BlogPost.find(query).count()
        blogs = (
            await BlogPost.find(query)
            .sort(-BlogPost.created_at)
            .skip((page - 1) * limit)
            .limit(limit)
            .to_list()
        )
        return blogs, total

    async def push_comment(self, blog_id: str, comment: Comment) -> bool:
        oid = parse_object_id(blog_id)
        if oid is None:
            return False
        result = await BlogPost.get_motor_collection().update_one(
            {"_id": oid},
            {
                "$push": {"comments": comment.model_dump()},
                "$set": {"updated_at": datetime.utcnow()},
            },
        )
        return result.matched_count == 1

    async def pull_comment(self, blog_id: str, comment_id: str) -> bool:
        oid = parse_object_id(blog_id)
        comment_oid = parse_object_id(comment_id)
        if oid is None or comment_oid is None:
            return False
        result = await BlogPost.get_motor_collection().update_one(
            {"_id": oid},
            {
                "$pull": {"comments": {"id": comment_oid}},
                "$set": {"updated_at": datetime.utcnow()},
            },
        )
        return result.modified_count == 1
