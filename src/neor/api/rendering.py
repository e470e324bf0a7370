"""Helpers that turn view models into HTML responses."""

from __future__ import annotations

from typing import Any
from urllib.parse import urlencode

from fastapi import Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from neor.core import values
from neor.core.pagination import MAX_ID, Direction, Order, Page
from neor.core.roles import ASSIGNABLE_ROLES
from neor.core.theme import THEME_COOKIE_NAME, Theme
from neor.core.visibility import Viewer

# Exposed to every template so forms can advertise maxlength.
FIELD_LIMITS = {
    "title": values.TITLE_MAX_CHARS,
    "description": values.DESCRIPTION_MAX_CHARS,
    "content": values.CONTENT_MAX_CHARS,
    "tags": values.TAGS_MAX_CHARS,
    "username": values.USERNAME_MAX_CHARS,
    "email": values.EMAIL_MAX_CHARS,
    "password": values.PASSWORD_MAX_CHARS,
    "name": values.NAME_MAX_CHARS,
    "user_description": values.USER_DESCRIPTION_MAX_CHARS,
}


def current_url(request: Request) -> str:
    url = request.url.path
    if request.url.query:
        url = f"{url}?{request.url.query}"
    return url


def render(
    request: Request,
    templates: Jinja2Templates,
    name: str,
    viewer: Viewer | None,
    status_code: int = 200,
    **context: Any,
) -> HTMLResponse:
    """Render template ``name`` with the context every page shares."""
    theme = Theme.from_cookie(request.cookies.get(THEME_COOKIE_NAME))
    shared = {
        "current_user": viewer,
        "current_url": current_url(request),
        "theme": theme.value,
        "assignable_roles": [role.value for role in ASSIGNABLE_ROLES],
        "error": request.query_params.get("error"),
        "message": request.query_params.get("message"),
    }
    return templates.TemplateResponse(
        request, name, {**shared, **context}, status_code=status_code
    )


def render_not_found(
    request: Request, templates: Jinja2Templates, viewer: Viewer | None
) -> HTMLResponse:
    return render(request, templates, "not_found.html", viewer, status_code=404)


def _url(path: str, params: dict[str, Any]) -> str:
    query = urlencode({key: value for key, value in params.items() if value is not None})
    return f"{path}?{query}" if query else path


def page_urls(path: str, page: Page[Any], **params: Any) -> dict[str, str | None]:
    """Build first/prev/next/last links for ``page``.

    A link is ``None`` when there is nothing in that direction.
    """
    limit = page.limit
    last_start = 0 if page.order is Order.NEWEST_FIRST else MAX_ID
    return {
        "first": _url(path, {**params, "limit": limit}) if page.has_prev else None,
        "prev": _url(
            path,
            {
                **params,
                "direction": Direction.BACKWARDS.value,
                "start_id": page.prev_start,
                "limit": limit,
            },
        )
        if page.has_prev
        else None,
        "next": _url(
            path,
            {
                **params,
                "direction": Direction.FORWARDS.value,
                "start_id": page.next_start,
                "limit": limit,
            },
        )
        if page.has_next
        else None,
        "last": _url(
            path,
            {
                **params,
                "direction": Direction.BACKWARDS.value,
                "start_id": last_start,
                "limit": limit,
            },
        )
        if page.has_next
        else None,
    }
