"""Post page and the forms that act on a post."""

from __future__ import annotations

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
from neor.schemas import CommentView, PostView
from neor.services import comment_service, post_service

router = APIRouter(prefix="/post", tags=["pages"])


@router.get("/create", response_class=HTMLResponse)
async def create_post_page(
    request: Request,
    viewer: RequiredViewerDep,
    templates: TemplatesDep,
) -> HTMLResponse:
    """Render the new post form."""
    return render(request, templates, "post/create.html", viewer)


@router.get("/{post_id:int}", response_class=HTMLResponse)
async def post_page(
    post_id: int,
    request: Request,
    db: SessionDep,
    viewer: ViewerDep,
    templates: TemplatesDep,
    now: NowDep,
    direction: str | None = Query(None),
    start_id: int | None = Query(None),
    limit: int | None = Query(None),
) -> HTMLResponse:
    """Render a post with one page of its comments, oldest first.

    Args:
        post_id: ID of the post to render
        request: Incoming request
        db: Database session
        viewer: Signed-in viewer, if any
        templates: Template registry
        now: Current time for edit windows
        direction: ``forwards`` or ``backwards``
        start_id: Comment cursor to start the page at
        limit: Page size, clamped to 1..100

    Returns:
        The rendered post page, or the not found page
    """
    post = post_service.get_post(db, post_id)
    if post is None:
        return render_not_found(request, templates, viewer)

    window = settings.edit_window
    page_request = PageRequest.from_query(direction, start_id, limit)
    page = comment_service.list_comments_for_post(db, page_request, post_id).map(
        lambda comment: CommentView.from_comment(comment, viewer, now, window)
    )
    return render(
        request,
        templates,
        "post/view.html",
        viewer,
        post=PostView.from_post(post, viewer, now, window),
        comments=page.items,
        page=page,
        links=page_urls(f"/post/{post_id}", page),
    )


async def _post_action_page(
    template: str,
    post_id: int,
    request: Request,
    db: SessionDep,
    viewer: RequiredViewerDep,
    templates: TemplatesDep,
    now: NowDep,
) -> HTMLResponse:
    post = post_service.get_post(db, post_id)
    if post is None:
        return render_not_found(request, templates, viewer)
    view = PostView.from_post(post, viewer, now, settings.edit_window)
    return render(request, templates, template, viewer, post=view)


@router.get("/{post_id:int}/edit", response_class=HTMLResponse)
async def edit_post_page(
    post_id: int,
    request: Request,
    db: SessionDep,
    viewer: RequiredViewerDep,
    templates: TemplatesDep,
    now: NowDep,
) -> HTMLResponse:
    """Render the edit form, prefilled with the current post."""
    return await _post_action_page("post/edit.html", post_id, request, db, viewer, templates, now)


@router.get("/{post_id:int}/delete", response_class=HTMLResponse)
async def delete_post_page(
    post_id: int,
    request: Request,
    db: SessionDep,
    viewer: RequiredViewerDep,
    templates: TemplatesDep,
    now: NowDep,
) -> HTMLResponse:
    """Render the delete confirmation form."""
    return await _post_action_page(
        "post/delete.html", post_id, request, db, viewer, templates, now
    )


@router.get("/{post_id:int}/anonymise", response_class=HTMLResponse)
async def anonymise_post_page(
    post_id: int,
    request: Request,
    db: SessionDep,
    viewer: RequiredViewerDep,
    templates: TemplatesDep,
    now: NowDep,
) -> HTMLResponse:
    """Render the anonymise confirmation form."""
    return await _post_action_page(
        "post/anonymise.html", post_id, request, db, viewer, templates, now
    )
