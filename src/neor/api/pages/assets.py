"""Theme switching, the stylesheet and uploaded images."""

from __future__ import annotations

import re

from fastapi import APIRouter, Query, Request
from fastapi.responses import FileResponse, RedirectResponse, Response

from neor.api.dependencies import TemplatesDep, ViewerDep, safe_back, see_other
from neor.api.rendering import render_not_found
from neor.core.settings import settings
from neor.core.theme import THEME_COOKIE_NAME, Theme

router = APIRouter(tags=["assets"])

_FILE_NAME_RE = re.compile(r"(default|not_found|[0-9]+)\.(jpeg|jpg|png|gif)")


@router.get("/switch-theme")
async def switch_theme(request: Request, back: str | None = Query(None)) -> RedirectResponse:
    """Toggle between the light and dark theme and return to ``back``."""
    theme = Theme.from_cookie(request.cookies.get(THEME_COOKIE_NAME)).switch()
    response = see_other(safe_back(back))
    response.set_cookie(THEME_COOKIE_NAME, theme.value, path="/", samesite="lax")
    return response


@router.get("/style.css")
async def stylesheet(request: Request, templates: TemplatesDep) -> Response:
    """Render the stylesheet with the colours of the current theme."""
    theme = Theme.from_cookie(request.cookies.get(THEME_COOKIE_NAME))
    return templates.TemplateResponse(
        request, "style.css", dict(theme.palette), media_type="text/css"
    )


@router.get("/files/{name}")
async def files(
    name: str, request: Request, viewer: ViewerDep, templates: TemplatesDep
) -> Response:
    """Serve a stored image; anything but an id or a built-in name is not found."""
    if not _FILE_NAME_RE.fullmatch(name):
        return render_not_found(request, templates, viewer)
    path = settings.files_dir / name
    if not path.is_file():
        return render_not_found(request, templates, viewer)
    return FileResponse(path)
