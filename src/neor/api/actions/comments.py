"""Comment form actions."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Form
from fastapi.responses import RedirectResponse

from neor.api.dependencies import NowDep, SessionDep, ViewerDep, see_other, signed_in
from neor.core.errors import ForumError, FormRedirect
from neor.core.settings import settings
from neor.services import comment_service

router = APIRouter(prefix="/api/comment", tags=["actions"])


def _comment_location(post_id: int, comment_id: int) -> str:
    return f"/post/{post_id}?start_id={comment_id}#{comment_id}"


@router.post("/create")
async def create_comment(
    db: SessionDep,
    viewer: ViewerDep,
    post_id: Annotated[int, Form()],
    content: Annotated[str, Form()] = "",
    reply_to_comment_id: Annotated[int | None, Form()] = None,
) -> RedirectResponse:
    """Post a comment and jump to it.

    Args:
        db: Database session
        viewer: Signed-in viewer, if any
        post_id: Post being commented on
        content: Markdown body
        reply_to_comment_id: Comment being replied to, if any

    Returns:
        Redirect to the comment on its post page

    Raises:
        FormRedirect: Back to the comment form with the reason
    """
    form_location = f"/comment/create?post_id={post_id}"
    if reply_to_comment_id is not None:
        form_location = f"{form_location}&reply_to_comment_id={reply_to_comment_id}"

    author = signed_in(viewer, form_location)
    try:
        comment = comment_service.create_comment(
            db,
            author,
            post_id=post_id,
            content=content,
            reply_to_comment_id=reply_to_comment_id,
        )
    except ForumError as err:
        raise FormRedirect(form_location, err.message) from err
    return see_other(_comment_location(post_id, comment.id))


@router.post("/edit")
async def edit_comment(
    db: SessionDep,
    viewer: ViewerDep,
    now: NowDep,
    comment_id: Annotated[int, Form()],
    content: Annotated[str, Form()] = "",
) -> RedirectResponse:
    """Save an edit made within the edit window."""
    editor = signed_in(viewer, f"/comment/{comment_id}/edit")
    try:
        comment = comment_service.edit_comment(
            db, editor, comment_id, content=content, now=now, window=settings.edit_window
        )
    except ForumError as err:
        raise FormRedirect(f"/comment/{comment_id}/edit", err.message) from err
    return see_other(_comment_location(comment.post_id, comment.id))


@router.post("/delete")
async def delete_comment(
    db: SessionDep,
    viewer: ViewerDep,
    comment_id: Annotated[int, Form()],
    confirm: Annotated[str, Form()] = "",
) -> RedirectResponse:
    """Delete a comment once its author's username has been typed back."""
    moderator = signed_in(viewer, f"/comment/{comment_id}/delete")
    try:
        post_id = comment_service.delete_comment(db, moderator, comment_id, confirm=confirm)
    except ForumError as err:
        raise FormRedirect(f"/comment/{comment_id}/delete", err.message) from err
    return see_other(f"/post/{post_id}")


@router.post("/anonymise")
async def anonymise_comment(
    db: SessionDep,
    viewer: ViewerDep,
    comment_id: Annotated[int, Form()],
    confirm: Annotated[str, Form()] = "",
) -> RedirectResponse:
    """Remove the author from a comment once their username has been typed back."""
    author = signed_in(viewer, f"/comment/{comment_id}/anonymise")
    try:
        post_id = comment_service.anonymise_comment(db, author, comment_id, confirm=confirm)
    except ForumError as err:
        raise FormRedirect(f"/comment/{comment_id}/anonymise", err.message) from err
    return see_other(_comment_location(post_id, comment_id))
