"""Forms that create or act on a comment."""

from __future__ import annotations

from fastapi import APIRouter, Query, Request
from fastapi.responses import HTMLResponse

from neor.api.dependencies import NowDep, RequiredViewerDep, SessionDep, TemplatesDep
from neor.api.rendering import render, render_not_found
from neor.core.settings import settings
from neor.schemas import CommentView
from neor.services import comment_service
from neor.services.comment_service import confirmation_for

router = APIRouter(prefix="/comment", tags=["pages"])


@router.get("/create", response_class=HTMLResponse)
async def create_comment_page(
    request: Request,
    viewer: RequiredViewerDep,
    templates: TemplatesDep,
    db: SessionDep,
    now: NowDep,
    post_id: int = Query(...),
    reply_to_comment_id: int | None = Query(None),
) -> HTMLResponse:
    """Render the comment form, quoting the comment being replied to."""
    reply_to = None
    if reply_to_comment_id is not None:
        comment = comment_service.get_comment(db, reply_to_comment_id)
        if comment is not None:
            reply_to = CommentView.from_comment(comment, viewer, now, settings.edit_window)
    return render(
        request,
        templates,
        "comment/create.html",
        viewer,
        post_id=post_id,
        reply_to_comment_id=reply_to_comment_id,
        reply_to=reply_to,
    )


async def _comment_action_page(
    template: str,
    comment_id: int,
    request: Request,
    db: SessionDep,
    viewer: RequiredViewerDep,
    templates: TemplatesDep,
    now: NowDep,
) -> HTMLResponse:
    comment = comment_service.get_comment(db, comment_id)
    if comment is None:
        return render_not_found(request, templates, viewer)
    return render(
        request,
        templates,
        template,
        viewer,
        comment=CommentView.from_comment(comment, viewer, now, settings.edit_window),
        confirmation=confirmation_for(comment),
    )


@router.get("/{comment_id:int}/edit", response_class=HTMLResponse)
async def edit_comment_page(
    comment_id: int,
    request: Request,
    db: SessionDep,
    viewer: RequiredViewerDep,
    templates: TemplatesDep,
    now: NowDep,
) -> HTMLResponse:
    return await _comment_action_page(
        "comment/edit.html", comment_id, request, db, viewer, templates, now
    )


@router.get("/{comment_id:int}/delete", response_class=HTMLResponse)
async def delete_comment_page(
    comment_id: int,
    request: Request,
    db: SessionDep,
    viewer: RequiredViewerDep,
    templates: TemplatesDep,
    now: NowDep,
) -> HTMLResponse:
    return await _comment_action_page(
        "comment/delete.html", comment_id, request, db, viewer, templates, now
    )


@router.get("/{comment_id:int}/anonymise", response_class=HTMLResponse)
async def anonymise_comment_page(
    comment_id: int,
    request: Request,
    db: SessionDep,
    viewer: RequiredViewerDep,
    templates: TemplatesDep,
    now: NowDep,
) -> HTMLResponse:
    return await _comment_action_page(
        "comment/anonymise.html", comment_id, request, db, viewer, templates, now
    )
