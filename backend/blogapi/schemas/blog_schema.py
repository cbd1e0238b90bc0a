# 블로그/댓글 요청·응답 스키마

from datetime import datetime
from typing import Annotated, List, Optional

from pydantic import Field, StringConstraints

from .common import CamelModel

MAX_TAGS = 5

Title = Annotated[str, StringConstraints(strip_whitespace=True, min_length=4, max_length=200)]
Content = Annotated[str, StringConstraints(strip_whitespace=True, min_length=10)]
Tag = Annotated[str, StringConstraints(strip_whitespace=True, min_length=2, max_length=20)]
CommentContent = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=500)]


class BlogCreate(CamelModel):
    title: Title
    content: Content
    tags: List[Tag] = Field(default_factory=list, max_length=MAX_TAGS)
    is_published: bool = False


class BlogUpdate(CamelModel):
    # 빈 리스트/False 도 "보낸 값"으로 취급해야 하므로 서비스에서는 exclude_unset 으로 꺼냅니다.
    title: Optional[Title] = None
    content: Optional[Content] = None
    tags: Optional[List[Tag]] = Field(default=None, max_length=MAX_TAGS)
    is_published: Optional[bool] = None


class CommentCreate(CamelModel):
    content: CommentContent


class AuthorSummary(CamelModel):
    id: str
    name: Optional[str] = None
    email: Optional[str] = None


class CommentPublic(CamelModel):
    id: str
    content: str
    author: AuthorSummary
    created_at: datetime
    updated_at: datetime


class BlogPublic(CamelModel):
    id: str
    title: str
    content: str
    author: AuthorSummary
    tags: List[str]
    is_published: bool
    comments: List[CommentPublic]
    created_at: datetime
    updated_at: datetime


class BlogListResponse(CamelModel):
    blogs: List[BlogPublic]
    total_pages: int
    current_page: int
