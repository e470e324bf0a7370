"""Account pages: sign-up, sign-in, verification, password reset, sign-out."""

from __future__ import annotations

from fastapi import APIRouter, Query, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from neor.api.dependencies import SessionDep, TemplatesDep, ViewerDep, see_other
from neor.api.rendering import render
from neor.services import user_service
from neor.services.session import SESSION_COOKIE_NAME

router = APIRouter(tags=["pages"])


@router.get("/sign-up", response_class=HTMLResponse)
async def sign_up_page(
    request: Request, viewer: ViewerDep, templates: TemplatesDep
) -> HTMLResponse:
    return render(request, templates, "sign_up.html", viewer)


@router.get("/sign-in", response_class=HTMLResponse)
async def sign_in_page(
    request: Request,
    viewer: ViewerDep,
    templates: TemplatesDep,
    back: str | None = Query(None),
) -> HTMLResponse:
    return render(request, templates, "sign_in.html", viewer, back=back)


@router.get("/email-verification", response_class=HTMLResponse)
async def email_verification_page(
    request: Request, viewer: ViewerDep, templates: TemplatesDep
) -> HTMLResponse:
    return render(request, templates, "email_verification.html", viewer)


@router.get("/password-reset", response_class=HTMLResponse)
async def password_reset_page(
    request: Request, viewer: ViewerDep, templates: TemplatesDep
) -> HTMLResponse:
    return render(request, templates, "password_reset.html", viewer)


@router.get("/password-change", response_class=HTMLResponse)
async def password_change_page(
    request: Request, viewer: ViewerDep, templates: TemplatesDep
) -> HTMLResponse:
    return render(request, templates, "password_change.html", viewer)


@router.get("/sign-out")
async def sign_out(db: SessionDep, viewer: ViewerDep) -> RedirectResponse:
    """Rotate the viewer's session token so every signed-in browser is signed out."""
    response = see_other("/sign-in")
    if viewer is None:
        return response

    user_service.sign_out(db, viewer)
    response.delete_cookie(SESSION_COOKIE_NAME, path="/")
    return response
