# tests/test_post_service.py
"""Tests for post creation, editing, deletion and anonymisation."""

from __future__ import annotations

from datetime import timedelta

import pytest
from sqlalchemy import func, select

from neor.core.errors import (
    AuthorizationError,
    ConfirmationMismatchError,
    ValidationError,
)
from neor.core.pagination import PageRequest
from neor.core.roles import Role
from neor.db.time import utcnow
from neor.models import Comment, Post, Tag, post_tags
from neor.schemas import PostView
from neor.services import post_service


def test_create_post_renders_markdown_and_tags(make_user, make_post, db_session) -> None:
    author = make_user()
    post = make_post(author, tags="web python web", content="**bold** <script>x</script>")

    assert post.tag_names == ["python", "web"]
    assert "<strong>bold</strong>" in post.markdown_content
    assert "<script>" not in post.markdown_content
    assert post.posted_by_user_id == author.id
    assert post.modified_at is None


def test_tags_are_shared_between_posts(make_user, make_post, db_session) -> None:
    author = make_user()
    make_post(author, tags="python")
    make_post(author, tags="python web")

    assert db_session.scalar(select(func.count()).select_from(Tag)) == 2
    page = post_service.list_posts_by_tag(db_session, PageRequest(), "python")
    assert len(page.items) == 2


@pytest.mark.parametrize("role", [Role.BANNED, Role.UNVERIFIED])
def test_create_post_requires_capability(make_user, viewer_of, db_session, role) -> None:
    viewer = viewer_of(make_user(role=role))
    with pytest.raises(AuthorizationError, match="You are not allowed to post"):
        post_service.create_post(
            db_session, viewer, title="t", description="d", tags="a", content="c"
        )


@pytest.mark.parametrize(
    ("field", "message"),
    [
        ("title", "Invalid title"),
        ("description", "Invalid description"),
        ("tags", "Invalid tags"),
        ("content", "Invalid content"),
    ],
)
def test_create_post_validation(make_user, viewer_of, db_session, field, message) -> None:
    values = {"title": "t", "description": "d", "tags": "a", "content": "c", field: ""}
    with pytest.raises(ValidationError, match=message):
        post_service.create_post(db_session, viewer_of(make_user()), **values)


def test_edit_post_within_window(make_user, make_post, viewer_of, db_session) -> None:
    author = make_user()
    post = make_post(author)
    now = utcnow()

    post_service.edit_post(
        db_session,
        viewer_of(author),
        post.id,
        title="Edited",
        description="New description",
        tags="news",
        content="_new_",
        now=now,
    )
    db_session.expire_all()

    assert post.title == "Edited"
    assert post.tag_names == ["news"]
    assert "<em>new</em>" in post.markdown_content
    assert post.modified_at is not None


def test_edit_post_after_window_is_refused(make_user, make_post, viewer_of, db_session) -> None:
    author = make_user()
    post = make_post(author)

    with pytest.raises(AuthorizationError, match="You are not allowed to edit this post"):
        post_service.edit_post(
            db_session,
            viewer_of(author),
            post.id,
            title="Late",
            description="d",
            tags="a",
            content="c",
            now=utcnow() + timedelta(hours=3),
        )


def test_edit_post_by_other_member_is_refused(make_user, make_post, viewer_of, db_session) -> None:
    post = make_post(make_user())
    with pytest.raises(AuthorizationError):
        post_service.edit_post(
            db_session,
            viewer_of(make_user()),
            post.id,
            title="t",
            description="d",
            tags="a",
            content="c",
        )


def test_delete_post_needs_title_and_moderator(
    make_user, make_post, make_comment, viewer_of, db_session
) -> None:
    author = make_user()
    post = make_post(author, title="Doomed")
    make_comment(author, post)
    post_id = post.id
    mod = viewer_of(make_user(role=Role.MOD))

    with pytest.raises(AuthorizationError, match="You are not allowed to delete this post"):
        post_service.delete_post(db_session, viewer_of(author), post_id, confirm="Doomed")
    with pytest.raises(ConfirmationMismatchError):
        post_service.delete_post(db_session, mod, post_id, confirm="doomed")

    post_service.delete_post(db_session, mod, post_id, confirm="Doomed")
    db_session.expunge_all()

    assert post_service.get_post(db_session, post_id) is None
    assert db_session.scalar(select(func.count()).select_from(Comment)) == 0
    assert db_session.scalar(select(func.count()).select_from(post_tags)) == 0


def test_delete_missing_post(make_user, viewer_of, db_session) -> None:
    with pytest.raises(AuthorizationError):
        post_service.delete_post(
            db_session, viewer_of(make_user(role=Role.ADMIN)), 999, confirm="x"
        )


def test_anonymise_post(make_user, make_post, viewer_of, db_session) -> None:
    author = make_user()
    post = make_post(author, title="Mine")

    with pytest.raises(AuthorizationError):
        post_service.anonymise_post(
            db_session, viewer_of(make_user(role=Role.MOD)), post.id, confirm="Mine"
        )
    with pytest.raises(ConfirmationMismatchError):
        post_service.anonymise_post(db_session, viewer_of(author), post.id, confirm="mine")

    post_service.anonymise_post(db_session, viewer_of(author), post.id, confirm="Mine")
    db_session.expire_all()
    assert post.posted_by_user_id is None
    assert post.posted_by is None

    # An anonymised post has no owner, so a second attempt is refused.
    with pytest.raises(AuthorizationError):
        post_service.anonymise_post(db_session, viewer_of(author), post.id, confirm="Mine")


def test_list_posts_by_user(make_user, make_post, db_session) -> None:
    alice, bob = make_user(), make_user()
    make_post(alice)
    bobs = make_post(bob)

    page = post_service.list_posts_by_user(db_session, PageRequest(), bob.id)
    assert [post.id for post in page.items] == [bobs.id]
    assert db_session.scalar(select(func.count()).select_from(Post)) == 2


def test_duplicate_tags_round_trip(make_user, make_post, db_session) -> None:
    post = make_post(make_user(), tags="a b a")
    post_id = post.id
    db_session.expunge_all()

    assert post_service.get_post(db_session, post_id).tag_names == ["a", "b"]


def test_anonymised_post_keeps_content(make_user, make_post, viewer_of, db_session) -> None:
    author = make_user()
    post = make_post(author, title="Kept", tags="x y", content="stays")
    post_service.anonymise_post(db_session, viewer_of(author), post.id, confirm="Kept")
    db_session.expire_all()

    assert (post.title, post.content, post.tag_names) == ("Kept", "stays", ["x", "y"])
    view = PostView.from_post(post, viewer_of(author), utcnow())
    assert not view.is_editable and not view.is_anonymisable and not view.is_deletable

    moderator_view = PostView.from_post(post, viewer_of(make_user(role=Role.MOD)), utcnow())
    assert moderator_view.is_deletable


def test_listing_is_repeatable(make_user, make_post, db_session) -> None:
    author = make_user()
    for n in range(4):
        make_post(author, title=f"Stable {n}")
    request = PageRequest.from_query("backwards", 2, 3)

    first = post_service.list_posts(db_session, request)
    second = post_service.list_posts(db_session, request)
    assert [post.id for post in first.items] == [post.id for post in second.items]
