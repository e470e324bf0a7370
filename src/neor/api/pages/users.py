"""Profile page and the account forms."""

from __future__ import annotations

from typing import Literal
from urllib.parse import quote

from fastapi import APIRouter, Query, Request
from fastapi.responses import HTMLResponse

from neor.api.dependencies import (
    NowDep,
    RequiredViewerDep,
    SessionDep,
    TemplatesDep,
    ViewerDep,
)
from neor.api.rendering import page_urls, render, render_not_found
from neor.core.pagination import PageRequest
from neor.core.settings import settings
from neor.schemas import CommentView, PostPreview, UserProfile
from neor.services import comment_service, post_service, user_service

router = APIRouter(prefix="/user", tags=["pages"])


@router.get("/{username}", response_class=HTMLResponse)
async def profile_page(
    username: str,
    request: Request,
    db: SessionDep,
    viewer: ViewerDep,
    templates: TemplatesDep,
    now: NowDep,
    display: Literal["posts", "comments"] = Query("posts"),
    direction: str | None = Query(None),
    start_id: int | None = Query(None),
    limit: int | None = Query(None),
) -> HTMLResponse:
    """Render a profile with one page of the user's posts or comments.

    Args:
        username: Account to show
        request: Incoming request
        db: Database session
        viewer: Signed-in viewer, if any
        templates: Template registry
        now: Current time for edit windows
        display: Whether to list ``posts`` or ``comments``
        direction: ``forwards`` or ``backwards``
        start_id: Cursor to start the page at
        limit: Page size, clamped to 1..100

    Returns:
        The rendered profile, or the not found page
    """
    user = user_service.get_user_by_username(db, username)
    if user is None:
        return render_not_found(request, templates, viewer)

    page_request = PageRequest.from_query(direction, start_id, limit)
    if display == "comments":
        page = comment_service.list_comments_by_user(db, page_request, user.id).map(
            lambda comment: CommentView.from_comment(comment, viewer, now, settings.edit_window)
        )
    else:
        page = post_service.list_posts_by_user(db, page_request, user.id).map(
            PostPreview.from_post
        )

    return render(
        request,
        templates,
        "user/profile.html",
        viewer,
        user=UserProfile.from_user(user, viewer),
        display=display,
        items=page.items,
        page=page,
        links=page_urls(f"/user/{quote(username)}", page, display=display),
    )


@router.get("/{username}/edit", response_class=HTMLResponse)
async def edit_profile_page(
    username: str,
    request: Request,
    db: SessionDep,
    viewer: RequiredViewerDep,
    templates: TemplatesDep,
) -> HTMLResponse:
    """Render the profile edit form."""
    user = user_service.get_user_by_username(db, username)
    if user is None:
        return render_not_found(request, templates, viewer)
    return render(
        request, templates, "user/edit.html", viewer, user=UserProfile.from_user(user, viewer)
    )


@router.get("/{username}/admin", response_class=HTMLResponse)
async def admin_page(
    username: str,
    request: Request,
    db: SessionDep,
    viewer: RequiredViewerDep,
    templates: TemplatesDep,
) -> HTMLResponse:
    """Render the role and profile reset form."""
    user = user_service.get_user_by_username(db, username)
    if user is None:
        return render_not_found(request, templates, viewer)
    return render(
        request, templates, "user/admin.html", viewer, user=UserProfile.from_user(user, viewer)
    )
