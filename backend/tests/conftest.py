# 테스트 공통 픽스처
# - MongoDB/SMTP 없이 돌 수 있도록 저장소와 메일러를 메모리 구현으로 교체
# - 환경변수는 blogapi 를 import 하기 전에 설정해야 합니다.

import os

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("MONGODB_URI", "mongodb://localhost:27017/blog_api_test")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import datetime, timedelta
from itertools import count
from typing import Dict, List, Optional

import pytest
from beanie import PydanticObjectId
from fastapi import BackgroundTasks
from fastapi.testclient import TestClient
from pydantic import BaseModel, Field

from blogapi.core.config import get_settings
from blogapi.core.exceptions import ConflictError
from blogapi.core.security import TokenService, get_password_hash
from blogapi.main import app
from blogapi.models.blog import Comment
from blogapi.repositories.blog_repository import BlogRepository
from blogapi.repositories.user_repository import UserRepository
from blogapi.schemas.user_schema import TokenClaims
from blogapi.services.mail_service import get_mail_service

STRONG_PASSWORD = "Str0ng!Pass"
# bcrypt 는 느리므로 공용 해시를 한 번만 만듭니다.
STRONG_PASSWORD_HASH = get_password_hash(STRONG_PASSWORD)

_clock = count()


def _tick() -> datetime:
    # 같은 마이크로초에 생성돼도 정렬 순서가 보장되도록 단조 증가 시각 사용
    return datetime(2024, 1, 1) + timedelta(seconds=next(_clock))


class FakeUser(BaseModel):
    id: PydanticObjectId = Field(default_factory=PydanticObjectId)
    name: str
    email: str
    hashed_password: str = STRONG_PASSWORD_HASH
    role: str = "user"
    is_verified: bool = False
    verification_code: Optional[str] = None
    created_at: datetime = Field(default_factory=_tick)
    updated_at: datetime = Field(default_factory=_tick)


class FakeBlogPost(BaseModel):
    id: PydanticObjectId = Field(default_factory=PydanticObjectId)
    title: str
    content: str
    author_id: PydanticObjectId
    tags: List[str] = Field(default_factory=list)
    is_published: bool = False
    comments: List[Comment] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_tick)
    updated_at: datetime = Field(default_factory=_tick)


class InMemoryUserRepository:
    def __init__(self):
        self.items: Dict[str, FakeUser] = {}

    def add(self, user: FakeUser) -> FakeUser:
        self.items[str(user.id)] = user
        return user

    def _check_unique(self, user: FakeUser):
        for other in self.items.values():
            if other.id == user.id:
                continue
            if other.email == user.email:
                raise ConflictError("email")
            if other.name == user.name:
                raise ConflictError("name")

    async def get(self, user_id):
        return self.items.get(str(user_id))

    async def get_many(self, user_ids):
        return [self.items[str(i)] for i in user_ids if str(i) in self.items]

    async def get_by_email(self, email):
        return next((u for u in self.items.values() if u.email == email), None)

    async def get_by_name(self, name):
        return next((u for u in self.items.values() if u.name == name), None)

    async def get_by_email_or_name(self, email, name):
        return next((u for u in self.items.values() if u.email == email or u.name == name), None)

    async def consume_verification_code(self, code, changes):
        user = next((u for u in self.items.values() if code and u.verification_code == code), None)
        if user is None:
            return None
        for field, value in changes.items():
            setattr(user, field, value)
        user.verification_code = None
        user.updated_at = _tick()
        return user

    async def list_all(self):
        return sorted(self.items.values(), key=lambda u: u.created_at)

    async def create(self, name, email, hashed_password, role="user"):
        user = FakeUser(name=name, email=email, hashed_password=hashed_password, role=role)
        self._check_unique(user)
        return self.add(user)

    async def save(self, user):
        self._check_unique(user)
        user.updated_at = _tick()
        self.items[str(user.id)] = user
        return user

    async def delete(self, user_id):
        return self.items.pop(str(user_id), None) is not None


class InMemoryBlogRepository:
    def __init__(self):
        self.items: Dict[str, FakeBlogPost] = {}

    def add(self, blog: FakeBlogPost) -> FakeBlogPost:
        self.items[str(blog.id)] = blog
        return blog

    async def get(self, blog_id):
        return self.items.get(str(blog_id))

    async def create(self, author_id, title, content, tags, is_published=False):
        return self.add(FakeBlogPost(
            author_id=PydanticObjectId(author_id),
            title=title,
            content=content,
            tags=tags,
            is_published=is_published,
        ))

    async def update_fields(self, blog, changes):
        stored = self.items.get(str(blog.id))
        if stored is None:
            return None
        for field, value in changes.items():
            setattr(stored, field, value)
        stored.updated_at = _tick()
        return stored

    async def delete(self, blog):
        self.items.pop(str(blog.id), None)

    async def list_published(self, page, limit, tag=None):
        matching = [
            b for b in self.items.values()
            if b.is_published and (not tag or tag in b.tags)
        ]
        matching.sort(key=lambda b: b.created_at, reverse=True)
        start = (page - 1) * limit
        return matching[start:start + limit], len(matching)

    async def push_comment(self, blog_id, comment):
        blog = self.items.get(str(blog_id))
        if blog is None:
            return False
        blog.comments.append(comment)
        return True

    async def pull_comment(self, blog_id, comment_id):
        blog = self.items.get(str(blog_id))
        if blog is None:
            return False
        before = len(blog.comments)
        blog.comments = [c for c in blog.comments if str(c.id) != comment_id]
        return len(blog.comments) < before


class RecordingMailer:
    def __init__(self):
        self.sent = []

    def send_verification_email(self, to_email, code):
        self.sent.append(("verification", to_email, code))
        return True

    def send_password_reset_email(self, to_email, code):
        self.sent.append(("password-reset", to_email, code))
        return True

    def last_code(self, kind: str) -> str:
        return [code for k, _, code in self.sent if k == kind][-1]


@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
def token_service(settings):
    return TokenService(settings)


@pytest.fixture
def user_repo():
    return InMemoryUserRepository()


@pytest.fixture
def blog_repo():
    return InMemoryBlogRepository()


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def background_tasks():
    return BackgroundTasks()


@pytest.fixture
def make_user(user_repo):
    def _make(name="reader_1", email=None, role="user", is_verified=True, **kwargs):
        return user_repo.add(FakeUser(
            name=name,
            email=email or f"{name}@example.com",
            role=role,
            is_verified=is_verified,
            **kwargs,
        ))
    return _make


@pytest.fixture
def claims_for():
    def _claims(user) -> TokenClaims:
        return TokenClaims(id=str(user.id), email=user.email, role=user.role)
    return _claims


@pytest.fixture
def auth_header(token_service, claims_for):
    def _header(user) -> Dict[str, str]:
        return {"Authorization": f"Bearer {token_service.issue(claims_for(user))}"}
    return _header


@pytest.fixture
def client(user_repo, blog_repo, mailer):
    app.dependency_overrides[UserRepository] = lambda: user_repo
    app.dependency_overrides[BlogRepository] = lambda: blog_repo
    app.dependency_overrides[get_mail_service] = lambda: mailer
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
