"""Post form actions."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Form
from fastapi.responses import RedirectResponse

from neor.api.dependencies import NowDep, SessionDep, ViewerDep, see_other, signed_in
from neor.core.errors import ForumError, FormRedirect
from neor.core.settings import settings
from neor.services import post_service

router = APIRouter(prefix="/api/post", tags=["actions"])


@router.post("/create")
async def create_post(
    db: SessionDep,
    viewer: ViewerDep,
    title: Annotated[str, Form()] = "",
    description: Annotated[str, Form()] = "",
    tags: Annotated[str, Form()] = "",
    content: Annotated[str, Form()] = "",
) -> RedirectResponse:
    """Create a post and open it.

    Args:
        db: Database session
        viewer: Signed-in viewer, if any
        title: Post title
        description: Short summary shown in listings
        tags: Whitespace separated tag names
        content: Markdown body

    Returns:
        Redirect to the new post

    Raises:
        FormRedirect: Back to the create form with the reason
    """
    author = signed_in(viewer, "/post/create")
    try:
        post = post_service.create_post(
            db, author, title=title, description=description, tags=tags, content=content
        )
    except ForumError as err:
        raise FormRedirect("/post/create", err.message) from err
    return see_other(f"/post/{post.id}")


@router.post("/edit")
async def edit_post(
    db: SessionDep,
    viewer: ViewerDep,
    now: NowDep,
    post_id: Annotated[int, Form()],
    title: Annotated[str, Form()] = "",
    description: Annotated[str, Form()] = "",
    tags: Annotated[str, Form()] = "",
    content: Annotated[str, Form()] = "",
) -> RedirectResponse:
    """Save an edit made within the edit window."""
    editor = signed_in(viewer, f"/post/{post_id}/edit")
    try:
        post_service.edit_post(
            db,
            editor,
            post_id,
            title=title,
            description=description,
            tags=tags,
            content=content,
            now=now,
            window=settings.edit_window,
        )
    except ForumError as err:
        raise FormRedirect(f"/post/{post_id}/edit", err.message) from err
    return see_other(f"/post/{post_id}")


@router.post("/delete")
async def delete_post(
    db: SessionDep,
    viewer: ViewerDep,
    post_id: Annotated[int, Form()],
    confirm: Annotated[str, Form()] = "",
) -> RedirectResponse:
    """Delete a post once its title has been typed back."""
    moderator = signed_in(viewer, f"/post/{post_id}/delete")
    try:
        post_service.delete_post(db, moderator, post_id, confirm=confirm)
    except ForumError as err:
        raise FormRedirect(f"/post/{post_id}/delete", err.message) from err
    return see_other("/")


@router.post("/anonymise")
async def anonymise_post(
    db: SessionDep,
    viewer: ViewerDep,
    post_id: Annotated[int, Form()],
    confirm: Annotated[str, Form()] = "",
) -> RedirectResponse:
    """Remove the author from a post once its title has been typed back."""
    author = signed_in(viewer, f"/post/{post_id}/anonymise")
    try:
        post_service.anonymise_post(db, author, post_id, confirm=confirm)
    except ForumError as err:
        raise FormRedirect(f"/post/{post_id}/anonymise", err.message) from err
    return see_other(f"/post/{post_id}")
