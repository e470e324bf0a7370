"""Post creation, editing, removal and listings."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from neor.core.errors import (
    AuthorizationError,
    ConfirmationMismatchError,
    ValidationError,
)
from neor.core.pagination import Order, Page, PageRequest, fetch_page
from neor.core.values import Content, Description, InvalidValue, Tags, Title
from neor.core.visibility import DEFAULT_EDIT_WINDOW, Viewer, post_flags
from neor.db.session import unit_of_work
from neor.db.time import utcnow
from neor.models import Post, Tag
from neor.services.markdown import render_markdown

logger = logging.getLogger(__name__)

__all__ = [
    "get_post",
    "list_posts",
    "list_posts_by_tag",
    "list_posts_by_user",
    "create_post",
    "edit_post",
    "delete_post",
    "anonymise_post",
]

TITLE_MISMATCH = "Post title and confirmation string do not match"


def _parse_fields(
    title: str, description: str, tags: str, content: str
) -> tuple[Title, Description, Tags, Content]:
    try:
        valid_title = Title.parse(title)
    except InvalidValue as err:
        raise ValidationError("Invalid title") from err
    try:
        valid_description = Description.parse(description)
    except InvalidValue as err:
        raise ValidationError("Invalid description") from err
    try:
        valid_tags = Tags.parse(tags)
    except InvalidValue as err:
        raise ValidationError("Invalid tags") from err
    try:
        valid_content = Content.parse(content)
    except InvalidValue as err:
        raise ValidationError("Invalid content") from err
    return valid_title, valid_description, valid_tags, valid_content


def upsert_tags(db: Session, names: Tags, created_by_user_id: int) -> list[Tag]:
    """Return ``Tag`` rows for ``names``, creating the missing ones."""
    stmt = select(Tag).where(Tag.name.in_(list(names)))
    existing = {tag.name: tag for tag in db.scalars(stmt)}
    tags = []
    for name in names.sorted():
        tag = existing.get(name)
        if tag is None:
            tag = Tag(name=name, created_by_user_id=created_by_user_id)
            db.add(tag)
        tags.append(tag)
    return tags


def get_post(db: Session, post_id: int) -> Post | None:
    return db.get(Post, post_id)


def list_posts(db: Session, request: PageRequest, query: str | None = None) -> Page[Post]:
    """Newest-first posts whose title contains ``query``."""
    filters = [Post.title.contains(query, autoescape=True)] if query else []
    return fetch_page(db, Post, Post.id, request, Order.NEWEST_FIRST, filters)


def list_posts_by_tag(db: Session, request: PageRequest, tag: str) -> Page[Post]:
    """Newest-first posts carrying exactly ``tag``."""
    filters = [Post.tags.any(Tag.name == tag)]
    return fetch_page(db, Post, Post.id, request, Order.NEWEST_FIRST, filters)


def list_posts_by_user(db: Session, request: PageRequest, user_id: int) -> Page[Post]:
    filters = [Post.posted_by_user_id == user_id]
    return fetch_page(db, Post, Post.id, request, Order.NEWEST_FIRST, filters)


def create_post(
    db: Session,
    viewer: Viewer,
    *,
    title: str,
    description: str,
    tags: str,
    content: str,
) -> Post:
    """Create a post owned by ``viewer``.

    Raises:
        AuthorizationError: The viewer's role cannot post.
        ValidationError: A field is invalid.
    """
    if not viewer.capabilities.can_post:
        raise AuthorizationError("You are not allowed to post")
    valid_title, valid_description, valid_tags, valid_content = _parse_fields(
        title, description, tags, content
    )

    with unit_of_work(db):
        post = Post(
            title=str(valid_title),
            description=str(valid_description),
            content=str(valid_content),
            markdown_content=render_markdown(valid_content),
            posted_by_user_id=viewer.id,
        )
        post.tags = upsert_tags(db, valid_tags, viewer.id)
        db.add(post)
        db.flush()

    logger.info("Post created", extra={"post_id": post.id, "user_id": viewer.id})
    return post


def edit_post(
    db: Session,
    viewer: Viewer,
    post_id: int,
    *,
    title: str,
    description: str,
    tags: str,
    content: str,
    now: datetime | None = None,
    window: timedelta = DEFAULT_EDIT_WINDOW,
) -> Post:
    """Replace every field of a post the viewer may still edit.

    Raises:
        AuthorizationError: The post is missing, not the viewer's, or too old.
        ValidationError: A field is invalid.
    """
    valid_title, valid_description, valid_tags, valid_content = _parse_fields(
        title, description, tags, content
    )

    with unit_of_work(db):
        post = get_post(db, post_id)
        if post is None or not post_flags(
            post.posted_by_user_id, post.posted_at, viewer, now, window
        ).is_editable:
            raise AuthorizationError("You are not allowed to edit this post")

        post.title = str(valid_title)
        post.description = str(valid_description)
        post.content = str(valid_content)
        post.markdown_content = render_markdown(valid_content)
        post.modified_at = now or utcnow()
        post.tags = upsert_tags(db, valid_tags, viewer.id)

    return post


def delete_post(db: Session, viewer: Viewer, post_id: int, *, confirm: str) -> None:
    """Remove a post and its comments.

    Deletion is a moderation capability, so ownership is not required.

    Raises:
        AuthorizationError: The post is missing or the viewer cannot delete posts.
        ConfirmationMismatchError: ``confirm`` differs from the current title.
    """
    with unit_of_work(db):
        post = get_post(db, post_id)
        if post is None or not viewer.capabilities.can_delete_posts:
            raise AuthorizationError("You are not allowed to delete this post")
        if confirm != post.title:
            raise ConfirmationMismatchError(TITLE_MISMATCH)

        db.execute(delete(Post).where(Post.id == post_id))

    logger.info("Post deleted", extra={"post_id": post_id, "user_id": viewer.id})


def anonymise_post(db: Session, viewer: Viewer, post_id: int, *, confirm: str) -> None:
    """Detach a post from its author while keeping its content.

    Raises:
        AuthorizationError: The post is missing or not the viewer's to anonymise.
        ConfirmationMismatchError: ``confirm`` differs from the current title.
    """
    with unit_of_work(db):
        post = get_post(db, post_id)
        if post is None or not post_flags(
            post.posted_by_user_id, post.posted_at, viewer
        ).is_anonymisable:
            raise AuthorizationError("You are not allowed to anonymise this post")
        if confirm != post.title:
            raise ConfirmationMismatchError(TITLE_MISMATCH)

        result = db.execute(
            update(Post)
            .where(Post.id == post_id, Post.posted_by_user_id == viewer.id)
            .values(posted_by_user_id=None)
            .execution_options(synchronize_session="fetch")
        )
        if result.rowcount != 1:
            raise AuthorizationError("You are not allowed to anonymise this post")
