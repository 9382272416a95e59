"""
Linkhub Backend: Post Service Tests
======================================

What we test:
    ✅ Create / edit / delete with ownership checks
    ✅ Like toggle is an involution and notifies once per added like
    ✅ Self-likes and self-comments never notify
    ✅ Blank content and comment text are rejected
    ✅ A failing notification keeps the like or comment
    ✅ A failing commit surfaces as DatabaseError and writes nothing
"""

from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from app.exceptions import DatabaseError, NotFoundError, ValidationError
from app.models.notification import Notification
from app.schemas.post import PostCreate, PostUpdate
from app.services.notification_service import notification_service
from app.services.post_service import PostService


async def _notifications(db):
    result = await db.execute(select(Notification))
    return result.scalars().all()


class TestPostCrud:

    def setup_method(self):
        self.service = PostService()

    @pytest.mark.asyncio
    async def test_create_post(self, db_session, make_user):
        author = await make_user("Ada")

        post = await self.service.create_post(
            db_session, author.id, PostCreate(content="Hello network")
        )

        assert post.content == "Hello network"
        assert post.author.id == author.id
        assert post.author.name == "Ada"
        assert post.likes == []
        assert post.like_count == 0
        assert post.comments == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content", ["", "   "])
    async def test_create_blank_content_rejected(self, db_session, make_user, content):
        author = await make_user("Ada")

        with pytest.raises(ValidationError):
            await self.service.create_post(db_session, author.id, PostCreate(content=content))

    @pytest.mark.asyncio
    async def test_create_for_unknown_author(self, db_session):
        with pytest.raises(NotFoundError):
            await self.service.create_post(db_session, uuid4(), PostCreate(content="hi"))

    @pytest.mark.asyncio
    async def test_list_posts_includes_everyone(self, db_session, make_user):
        ada = await make_user("Ada")
        bob = await make_user("Bob")
        await self.service.create_post(db_session, ada.id, PostCreate(content="one"))
        await self.service.create_post(db_session, bob.id, PostCreate(content="two"))

        posts = await self.service.list_posts(db_session)

        assert {p.content for p in posts} == {"one", "two"}

    @pytest.mark.asyncio
    async def test_update_keeps_fields_left_blank(self, db_session, make_user):
        author = await make_user("Ada")
        post = await self.service.create_post(
            db_session, author.id, PostCreate(content="draft", image="http://img/1.png")
        )

        updated = await self.service.update_post(
            db_session, post.id, author.id, PostUpdate(content="final", image="")
        )

        assert updated.content == "final"
        assert updated.image == "http://img/1.png"

    @pytest.mark.asyncio
    async def test_update_by_other_user_is_not_found(self, db_session, make_user):
        author = await make_user("Ada")
        other = await make_user("Bob")
        post = await self.service.create_post(db_session, author.id, PostCreate(content="mine"))

        with pytest.raises(NotFoundError):
            await self.service.update_post(
                db_session, post.id, other.id, PostUpdate(content="hijacked")
            )

    @pytest.mark.asyncio
    async def test_delete_post(self, db_session, make_user):
        author = await make_user("Ada")
        post = await self.service.create_post(db_session, author.id, PostCreate(content="bye"))

        result = await self.service.delete_post(db_session, post.id, author.id)

        assert result.message == "Post deleted"
        with pytest.raises(NotFoundError):
            await self.service.get_post(db_session, post.id)

    @pytest.mark.asyncio
    async def test_delete_by_other_user_is_not_found(self, db_session, make_user):
        author = await make_user("Ada")
        other = await make_user("Bob")
        post = await self.service.create_post(db_session, author.id, PostCreate(content="mine"))

        with pytest.raises(NotFoundError):
            await self.service.delete_post(db_session, post.id, other.id)


class TestLikeToggle:

    def setup_method(self):
        self.service = PostService()

    @pytest.mark.asyncio
    async def test_like_then_unlike_restores_likes(self, db_session, make_user):
        author = await make_user("Ada")
        fan = await make_user("Bob")
        post = await self.service.create_post(db_session, author.id, PostCreate(content="x"))

        first = await self.service.toggle_like(db_session, post.id, fan.id)
        assert first.liked is True
        assert first.like_count == 1
        assert first.post.likes == [fan.id]

        second = await self.service.toggle_like(db_session, post.id, fan.id)
        assert second.liked is False
        assert second.like_count == 0
        assert second.post.likes == []

    @pytest.mark.asyncio
    async def test_double_like_notifies_once(self, db_session, make_user):
        author = await make_user("Ada")
        fan = await make_user("Bob")
        post = await self.service.create_post(db_session, author.id, PostCreate(content="x"))

        await self.service.toggle_like(db_session, post.id, fan.id)
        await self.service.toggle_like(db_session, post.id, fan.id)

        notes = await _notifications(db_session)
        assert len(notes) == 1
        assert notes[0].type == "like"
        assert notes[0].recipient_id == author.id
        assert notes[0].related_post_id == post.id
        assert notes[0].message == "Bob liked your post"

    @pytest.mark.asyncio
    async def test_self_like_counts_but_does_not_notify(self, db_session, make_user):
        author = await make_user("Ada")
        post = await self.service.create_post(db_session, author.id, PostCreate(content="x"))

        result = await self.service.toggle_like(db_session, post.id, author.id)

        assert result.liked is True
        assert result.like_count == 1
        assert await _notifications(db_session) == []

    @pytest.mark.asyncio
    async def test_likes_from_different_users_accumulate(self, db_session, make_user):
        author = await make_user("Ada")
        fans = [await make_user(f"Fan{i}") for i in range(3)]
        post = await self.service.create_post(db_session, author.id, PostCreate(content="x"))

        for fan in fans:
            result = await self.service.toggle_like(db_session, post.id, fan.id)

        assert result.like_count == 3
        assert sorted(result.post.likes) == sorted(f.id for f in fans)

    @pytest.mark.asyncio
    async def test_like_unknown_post(self, db_session, make_user):
        fan = await make_user("Bob")

        with pytest.raises(NotFoundError):
            await self.service.toggle_like(db_session, uuid4(), fan.id)


class TestComments:

    def setup_method(self):
        self.service = PostService()

    @pytest.mark.asyncio
    async def test_comment_appended_and_author_notified(self, db_session, make_user):
        author = await make_user("Ada")
        reader = await make_user("Bob")
        post = await self.service.create_post(db_session, author.id, PostCreate(content="x"))

        updated = await self.service.add_comment(db_session, post.id, reader.id, "Nice!")

        assert len(updated.comments) == 1
        assert updated.comments[0].text == "Nice!"
        assert updated.comments[0].user.id == reader.id
        assert updated.comments[0].created_at is not None

        notes = await _notifications(db_session)
        assert [n.type for n in notes] == ["comment"]
        assert notes[0].message == "Bob commented on your post"

    @pytest.mark.asyncio
    async def test_comments_keep_order(self, db_session, make_user):
        author = await make_user("Ada")
        reader = await make_user("Bob")
        post = await self.service.create_post(db_session, author.id, PostCreate(content="x"))

        await self.service.add_comment(db_session, post.id, reader.id, "first")
        updated = await self.service.add_comment(db_session, post.id, author.id, "second")

        assert [c.text for c in updated.comments] == ["first", "second"]

    @pytest.mark.asyncio
    async def test_self_comment_does_not_notify(self, db_session, make_user):
        author = await make_user("Ada")
        post = await self.service.create_post(db_session, author.id, PostCreate(content="x"))

        await self.service.add_comment(db_session, post.id, author.id, "bump")

        assert await _notifications(db_session) == []

    @pytest.mark.asyncio
    async def test_blank_comment_rejected(self, db_session, make_user):
        author = await make_user("Ada")
        reader = await make_user("Bob")
        post = await self.service.create_post(db_session, author.id, PostCreate(content="x"))

        with pytest.raises(ValidationError):
            await self.service.add_comment(db_session, post.id, reader.id, "  ")

        fresh = await self.service.get_post(db_session, post.id)
        assert fresh.comments == []
        assert await _notifications(db_session) == []


class TestFailureHandling:

    def setup_method(self):
        self.service = PostService()

    @pytest.mark.asyncio
    async def test_like_survives_notification_failure(self, db_session, make_user):
        author = await make_user("Ada")
        fan = await make_user("Bob")
        # The failed emit rolls the session back, expiring loaded instances
        author_id, fan_id = author.id, fan.id
        post = await self.service.create_post(db_session, author_id, PostCreate(content="x"))

        with patch.object(
            notification_service,
            "emit",
            AsyncMock(side_effect=SQLAlchemyError("notifications table locked")),
        ):
            result = await self.service.toggle_like(db_session, post.id, fan_id)

        assert result.liked is True
        assert result.post.likes == [fan_id]
        assert (await self.service.get_post(db_session, post.id)).like_count == 1
        assert await _notifications(db_session) == []

    @pytest.mark.asyncio
    async def test_comment_survives_notification_failure(self, db_session, make_user):
        author = await make_user("Ada")
        reader = await make_user("Bob")
        author_id, reader_id = author.id, reader.id
        post = await self.service.create_post(db_session, author_id, PostCreate(content="x"))

        with patch.object(
            notification_service,
            "emit",
            AsyncMock(side_effect=SQLAlchemyError("notifications table locked")),
        ):
            updated = await self.service.add_comment(db_session, post.id, reader_id, "Nice!")

        assert [c.text for c in updated.comments] == ["Nice!"]
        assert updated.comments[0].user.id == reader_id
        assert await _notifications(db_session) == []

    @pytest.mark.asyncio
    async def test_comment_commit_failure(self, db_session, make_user):
        author = await make_user("Ada")
        reader = await make_user("Bob")
        author_id, reader_id = author.id, reader.id
        post = await self.service.create_post(db_session, author_id, PostCreate(content="x"))

        failing = AsyncMock(side_effect=OperationalError("COMMIT", {}, Exception("disk full")))
        with patch.object(db_session, "commit", failing):
            with pytest.raises(DatabaseError) as exc_info:
                await self.service.add_comment(db_session, post.id, reader_id, "Nice!")

        assert exc_info.value.context["error_type"] == "OperationalError"
        assert (await self.service.get_post(db_session, post.id)).comments == []
        assert await _notifications(db_session) == []

    @pytest.mark.asyncio
    async def test_update_commit_failure(self, db_session, make_user):
        author = await make_user("Ada")
        author_id = author.id
        post = await self.service.create_post(db_session, author_id, PostCreate(content="x"))

        failing = AsyncMock(side_effect=OperationalError("COMMIT", {}, Exception("disk full")))
        with patch.object(db_session, "commit", failing):
            with pytest.raises(DatabaseError):
                await self.service.update_post(
                    db_session, post.id, author_id, PostUpdate(content="edited")
                )

        assert (await self.service.get_post(db_session, post.id)).content == "x"
