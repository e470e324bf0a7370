"""Post listings: the front page and per-tag pages."""

from __future__ import annotations

from urllib.parse import quote

from fastapi import APIRouter, Query, Request
from fastapi.responses import HTMLResponse

from neor.api.dependencies import SessionDep, TemplatesDep, ViewerDep
from neor.api.rendering import page_urls, render
from neor.core.pagination import PageRequest
from neor.schemas import PostPreview
from neor.services import post_service

router = APIRouter(tags=["pages"])


@router.get("/", response_class=HTMLResponse)
async def index(
    request: Request,
    db: SessionDep,
    viewer: ViewerDep,
    templates: TemplatesDep,
    direction: str | None = Query(None),
    start_id: int | None = Query(None),
    limit: int | None = Query(None),
    query: str | None = Query(None, description="Substring of the post title"),
) -> HTMLResponse:
    """Render the newest posts, optionally filtered by title.

    Args:
        request: Incoming request
        db: Database session
        viewer: Signed-in viewer, if any
        templates: Template registry
        direction: ``forwards`` or ``backwards``
        start_id: Cursor to start the page at
        limit: Page size, clamped to 1..100
        query: Title filter

    Returns:
        The rendered index page
    """
    page_request = PageRequest.from_query(direction, start_id, limit)
    page = post_service.list_posts(db, page_request, query).map(PostPreview.from_post)
    return render(
        request,
        templates,
        "index.html",
        viewer,
        posts=page.items,
        page=page,
        links=page_urls("/", page, query=query or None),
        query=query,
    )


@router.get("/tag/{tag}", response_class=HTMLResponse)
async def tag_page(
    tag: str,
    request: Request,
    db: SessionDep,
    viewer: ViewerDep,
    templates: TemplatesDep,
    direction: str | None = Query(None),
    start_id: int | None = Query(None),
    limit: int | None = Query(None),
) -> HTMLResponse:
    """Render the newest posts carrying ``tag``."""
    page_request = PageRequest.from_query(direction, start_id, limit)
    page = post_service.list_posts_by_tag(db, page_request, tag).map(PostPreview.from_post)
    return render(
        request,
        templates,
        "tag.html",
        viewer,
        tag=tag,
        posts=page.items,
        page=page,
        links=page_urls(f"/tag/{quote(tag)}", page),
    )
