"""Comment creation, editing, removal and listings."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from neor.core.errors import (
    AuthorizationError,
    ConfirmationMismatchError,
    NotFoundError,
    ValidationError,
)
from neor.core.pagination import Order, Page, PageRequest, fetch_page
from neor.core.values import CommentContent, InvalidValue
from neor.core.visibility import DEFAULT_EDIT_WINDOW, Viewer, comment_flags
from neor.db.session import unit_of_work
from neor.db.time import utcnow
from neor.models import Comment, Post
from neor.services.markdown import render_markdown

logger = logging.getLogger(__name__)

__all__ = [
    "ANONYMOUS",
    "get_comment",
    "list_comments_for_post",
    "list_comments_by_user",
    "create_comment",
    "edit_comment",
    "delete_comment",
    "anonymise_comment",
]

# Confirmation string for comments that no longer have an author.
ANONYMOUS = "Anonymous"
USERNAME_MISMATCH = "Commenter's username and confirmation string do not match"


def _parse_content(content: str) -> CommentContent:
    try:
        return CommentContent.parse(content)
    except InvalidValue as err:
        raise ValidationError("Invalid content") from err


def confirmation_for(comment: Comment) -> str:
    """Return the string a caller must echo to delete or anonymise ``comment``."""
    return comment.posted_by.username if comment.posted_by else ANONYMOUS


def get_comment(db: Session, comment_id: int) -> Comment | None:
    return db.get(Comment, comment_id)


def list_comments_for_post(db: Session, request: PageRequest, post_id: int) -> Page[Comment]:
    """Oldest-first comments of one post."""
    filters = [Comment.post_id == post_id]
    return fetch_page(db, Comment, Comment.id, request, Order.OLDEST_FIRST, filters)


def list_comments_by_user(db: Session, request: PageRequest, user_id: int) -> Page[Comment]:
    filters = [Comment.posted_by_user_id == user_id]
    return fetch_page(db, Comment, Comment.id, request, Order.NEWEST_FIRST, filters)


def create_comment(
    db: Session,
    viewer: Viewer,
    *,
    post_id: int,
    content: str,
    reply_to_comment_id: int | None = None,
) -> Comment:
    """Create a comment, optionally replying to another one on the same post.

    Raises:
        AuthorizationError: The viewer's role cannot comment.
        NotFoundError: The post or the replied-to comment does not exist.
        ValidationError: The content is invalid or the reply crosses posts.
    """
    if not viewer.capabilities.can_comment:
        raise AuthorizationError("You are not allowed to comment")

    with unit_of_work(db):
        if db.scalar(select(Post.id).where(Post.id == post_id)) is None:
            raise NotFoundError("Post not found")
        if reply_to_comment_id is not None:
            if not viewer.capabilities.can_reply:
                raise AuthorizationError("You are not allowed to reply")
            reply_post_id = db.scalar(
                select(Comment.post_id).where(Comment.id == reply_to_comment_id)
            )
            if reply_post_id is None:
                raise NotFoundError("Comment not found")
            if reply_post_id != post_id:
                raise ValidationError("Reply and original comment must be on the same post")

        valid_content = _parse_content(content)
        comment = Comment(
            post_id=post_id,
            reply_to_comment_id=reply_to_comment_id,
            content=str(valid_content),
            markdown_content=render_markdown(valid_content),
            posted_by_user_id=viewer.id,
        )
        db.add(comment)
        db.flush()

    return comment


def edit_comment(
    db: Session,
    viewer: Viewer,
    comment_id: int,
    *,
    content: str,
    now: datetime | None = None,
    window: timedelta = DEFAULT_EDIT_WINDOW,
) -> Comment:
    """Replace the content of a comment the viewer may still edit.

    Raises:
        AuthorizationError: The comment is missing, not the viewer's, or too old.
        ValidationError: The content is invalid.
    """
    valid_content = _parse_content(content)

    with unit_of_work(db):
        comment = get_comment(db, comment_id)
        if comment is None or not comment_flags(
            comment.posted_by_user_id, comment.posted_at, viewer, now, window
        ).is_editable:
            raise AuthorizationError("You are not allowed to edit this comment")

        comment.content = str(valid_content)
        comment.markdown_content = render_markdown(valid_content)
        comment.modified_at = now or utcnow()

    return comment


def delete_comment(db: Session, viewer: Viewer, comment_id: int, *, confirm: str) -> int:
    """Remove a comment and return the id of its post.

    Raises:
        AuthorizationError: The comment is missing or the viewer cannot delete comments.
        ConfirmationMismatchError: ``confirm`` differs from the author's username.
    """
    with unit_of_work(db):
        comment = get_comment(db, comment_id)
        if comment is None or not viewer.capabilities.can_delete_comments:
            raise AuthorizationError("You are not allowed to delete this comment")
        if confirm != confirmation_for(comment):
            raise ConfirmationMismatchError(USERNAME_MISMATCH)

        post_id = comment.post_id
        db.execute(delete(Comment).where(Comment.id == comment_id))

    logger.info("Comment deleted", extra={"comment_id": comment_id, "user_id": viewer.id})
    return post_id


def anonymise_comment(db: Session, viewer: Viewer, comment_id: int, *, confirm: str) -> int:
    """Detach a comment from its author and return the id of its post.

    Raises:
        AuthorizationError: The comment is missing or not the viewer's to anonymise.
        ConfirmationMismatchError: ``confirm`` differs from the author's username.
    """
    with unit_of_work(db):
        comment = get_comment(db, comment_id)
        if comment is None or not comment_flags(
            comment.posted_by_user_id, comment.posted_at, viewer
        ).is_anonymisable:
            raise AuthorizationError("You are not allowed to anonymise this comment")
        if confirm != confirmation_for(comment):
            raise ConfirmationMismatchError(USERNAME_MISMATCH)

        post_id = comment.post_id
        result = db.execute(
            update(Comment)
            .where(Comment.id == comment_id, Comment.posted_by_user_id == viewer.id)
            .values(posted_by_user_id=None)
            .execution_options(synchronize_session="fetch")
        )
        if result.rowcount != 1:
            raise AuthorizationError("You are not allowed to anonymise this comment")

    return post_id
