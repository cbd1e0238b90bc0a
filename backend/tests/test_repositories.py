# 저장소 테스트: 실제 Beanie 쿼리를 mongomock-motor 위에서 실행
# - 댓글 $push/$pull, 게시글 부분 수정과 댓글 보존
# - 유니크 인덱스 위반 → ConflictError, 최신순 페이지네이션
# - 1회용 코드 원자적 소비

import asyncio
from datetime import datetime, timedelta

import pytest
from beanie import PydanticObjectId, init_beanie
from mongomock_motor import AsyncMongoMockClient

from blogapi.core.exceptions import ConflictError
from blogapi.models.blog import BlogPost, Comment
from blogapi.models.user import User
from blogapi.repositories.blog_repository import BlogRepository
from blogapi.repositories.user_repository import UserRepository

from conftest import STRONG_PASSWORD_HASH

AUTHOR_ID = PydanticObjectId()


async def _init_db():
    client = AsyncMongoMockClient()
    await init_beanie(database=client["blog_api_test"], document_models=[User, BlogPost])


async def _create_post(repo: BlogRepository, **overrides) -> BlogPost:
    data = {
        "author_id": str(AUTHOR_ID),
        "title": "First post",
        "content": "Some long enough content",
        "tags": ["python"],
        "is_published": True,
    }
    data.update(overrides)
    return await repo.create(**data)


# ---- 게시글 / 댓글 ----

def test_update_keeps_comment_added_after_loading():
    async def scenario():
        await _init_db()
        repo = BlogRepository()
        blog = await _create_post(repo)
        stale = await repo.get(str(blog.id))

        assert await repo.push_comment(str(blog.id), Comment(content="Nice", author_id=AUTHOR_ID))
        assert await repo.update_fields(stale, {"title": "New title"}) is not None
        return await repo.get(str(blog.id))

    stored = asyncio.run(scenario())
    assert stored.title == "New title"
    assert stored.content == "Some long enough content"
    assert [c.content for c in stored.comments] == ["Nice"]


def test_update_does_not_restore_removed_comment():
    async def scenario():
        await _init_db()
        repo = BlogRepository()
        blog = await _create_post(repo)
        comment = Comment(content="Nice", author_id=AUTHOR_ID)
        await repo.push_comment(str(blog.id), comment)
        stale = await repo.get(str(blog.id))

        assert await repo.pull_comment(str(blog.id), str(comment.id))
        await repo.update_fields(stale, {"tags": []})
        return await repo.get(str(blog.id))

    stored = asyncio.run(scenario())
    assert stored.tags == []
    assert stored.comments == []


def test_update_of_deleted_post_returns_none():
    async def scenario():
        await _init_db()
        repo = BlogRepository()
        blog = await _create_post(repo)
        stale = await repo.get(str(blog.id))
        await repo.delete(blog)
        return await repo.update_fields(stale, {"title": "New title"})

    assert asyncio.run(scenario()) is None


def test_comment_push_and_pull():
    async def scenario():
        await _init_db()
        repo = BlogRepository()
        blog = await _create_post(repo)
        first = Comment(content="First", author_id=AUTHOR_ID)
        second = Comment(content="Second", author_id=AUTHOR_ID)
        await repo.push_comment(str(blog.id), first)
        await repo.push_comment(str(blog.id), second)

        results = {
            "pull": await repo.pull_comment(str(blog.id), str(first.id)),
            "pull_again": await repo.pull_comment(str(blog.id), str(first.id)),
            "pull_malformed": await repo.pull_comment(str(blog.id), "not-an-id"),
            "push_missing_post": await repo.push_comment(str(PydanticObjectId()), first),
        }
        stored = await repo.get(str(blog.id))
        return results, stored

    results, stored = asyncio.run(scenario())
    assert results == {
        "pull": True,
        "pull_again": False,
        "pull_malformed": False,
        "push_missing_post": False,
    }
    assert [c.content for c in stored.comments] == ["Second"]
    assert stored.comments[0].author_id == AUTHOR_ID


def test_list_published_newest_first_with_tag_filter():
    async def scenario():
        await _init_db()
        base = datetime(2024, 1, 1)
        for i in range(5):
            await BlogPost(
                title=f"Post {i}",
                content="Some long enough content",
                author_id=AUTHOR_ID,
                tags=["python"] if i % 2 == 0 else ["web"],
                is_published=True,
                created_at=base + timedelta(minutes=i),
            ).insert()
        await BlogPost(
            title="Draft",
            content="Some long enough content",
            author_id=AUTHOR_ID,
            tags=["python"],
            created_at=base + timedelta(minutes=10),
        ).insert()

        repo = BlogRepository()
        return (
            await repo.list_published(page=1, limit=2),
            await repo.list_published(page=3, limit=2),
            await repo.list_published(page=1, limit=10, tag="python"),
        )

    (page1, total), (page3, _), (tagged, tagged_total) = asyncio.run(scenario())
    assert total == 5
    assert [b.title for b in page1] == ["Post 4", "Post 3"]
    assert [b.title for b in page3] == ["Post 0"]
    assert tagged_total == 3
    assert [b.title for b in tagged] == ["Post 4", "Post 2", "Post 0"]


def test_get_with_malformed_id_returns_none():
    async def scenario():
        await _init_db()
        return await BlogRepository().get("not-an-id"), await UserRepository().get("123")

    assert asyncio.run(scenario()) == (None, None)


# ---- 사용자 ----

@pytest.mark.parametrize("name, email, field", [
    ("writer_1", "other@example.com", "name"),
    ("writer_2", "writer@example.com", "email"),
])
def test_create_duplicate_raises_conflict_on_field(name, email, field):
    async def scenario():
        await _init_db()
        repo = UserRepository()
        await repo.create("writer_1", "writer@example.com", STRONG_PASSWORD_HASH)
        with pytest.raises(ConflictError) as exc_info:
            await repo.create(name, email, STRONG_PASSWORD_HASH)
        return exc_info.value, await User.find_all().count()

    error, count = asyncio.run(scenario())
    assert error.field == field
    assert count == 1


def test_get_many_skips_unknown_and_malformed_ids():
    async def scenario():
        await _init_db()
        repo = UserRepository()
        first = await repo.create("writer_1", "writer1@example.com", STRONG_PASSWORD_HASH)
        second = await repo.create("writer_2", "writer2@example.com", STRONG_PASSWORD_HASH)
        found = await repo.get_many([str(first.id), str(second.id), str(PydanticObjectId()), "bad"])
        return {u.name for u in found}

    assert asyncio.run(scenario()) == {"writer_1", "writer_2"}


def test_verification_code_is_consumed_once_under_concurrency():
    async def scenario():
        await _init_db()
        repo = UserRepository()
        user = await repo.create("writer_1", "writer@example.com", STRONG_PASSWORD_HASH)
        user.verification_code = "a" * 64
        await repo.save(user)

        results = await asyncio.gather(
            repo.consume_verification_code("a" * 64, {"is_verified": True}),
            repo.consume_verification_code("a" * 64, {"is_verified": True}),
        )
        return results, await repo.get(str(user.id))

    results, stored = asyncio.run(scenario())
    winners = [r for r in results if r is not None]
    assert len(winners) == 1
    assert winners[0].is_verified is True
    assert stored.is_verified is True
    assert stored.verification_code is None


def test_consume_unknown_or_empty_code_returns_none():
    async def scenario():
        await _init_db()
        repo = UserRepository()
        await repo.create("writer_1", "writer@example.com", STRONG_PASSWORD_HASH)
        return (
            await repo.consume_verification_code("b" * 64, {"is_verified": True}),
            await repo.consume_verification_code("", {"is_verified": True}),
        )

    assert asyncio.run(scenario()) == (None, None)
