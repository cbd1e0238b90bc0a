# BlogPost 도메인 모델 (Beanie Document)
# - 댓글(Comment)은 별도 컬렉션이 아니라 게시글 문서 안에 임베드됩니다.
# - 게시글 삭제 시 댓글도 함께 사라집니다.

from datetime import datetime
from typing import List

import pymongo
from beanie import Document, PydanticObjectId
from pydantic import BaseModel, Field


class Comment(BaseModel):
    id: PydanticObjectId = Field(default_factory=PydanticObjectId)
    content: str
    author_id: PydanticObjectId
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class BlogPost(Document):
    title: str
    content: str
    author_id: PydanticObjectId  # 생성 이후 변경 불가
    tags: List[str] = Field(default_factory=list)
    is_published: bool = False
    comments: List[Comment] = Field(default_factory=list)  # 삽입 순서 유지
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "blogs"
        indexes = [
            "tags",
            "is_published",
            "author_id",
            pymongo.IndexModel([("created_at", pymongo.DESCENDING)]),
        ]
