"""Shared dependencies for pages and form actions."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated
from urllib.parse import quote

from fastapi import Cookie, Depends, Request
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.orm import Session

from neor.core.visibility import Viewer
from neor.db.session import get_db
from neor.db.time import utcnow
from neor.services.mail import Mailer, get_mailer
from neor.services.session import resolve_viewer

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]
MailerDep = Annotated[Mailer, Depends(get_mailer)]


class SignInRequired(Exception):
    """Raised when an anonymous visitor reaches a page that needs an account."""

    def __init__(self, back: str) -> None:
        super().__init__(back)
        self.back = back

    @property
    def url(self) -> str:
        return f"/sign-in?back={quote(self.back, safe='')}"


def get_viewer(
    db: SessionDep,
    session: Annotated[str | None, Cookie()] = None,
) -> Viewer | None:
    """Resolve the ``session`` cookie to the signed-in viewer, if any."""
    return resolve_viewer(db, session)


ViewerDep = Annotated[Viewer | None, Depends(get_viewer)]


def require_viewer(request: Request, viewer: ViewerDep) -> Viewer:
    """Return the viewer or send the visitor to sign in and come back."""
    if viewer is None:
        back = request.url.path
        if request.url.query:
            back = f"{back}?{request.url.query}"
        raise SignInRequired(back)
    return viewer


RequiredViewerDep = Annotated[Viewer, Depends(require_viewer)]


def signed_in(viewer: Viewer | None, back: str) -> Viewer:
    """Like ``require_viewer`` for form actions, which return to their form page."""
    if viewer is None:
        raise SignInRequired(back)
    return viewer


def get_now() -> datetime:
    """Return the current time used for edit-window checks."""
    return utcnow()


NowDep = Annotated[datetime, Depends(get_now)]


def get_templates(request: Request) -> Jinja2Templates:
    """Return the template registry built at startup."""
    return request.app.state.templates


TemplatesDep = Annotated[Jinja2Templates, Depends(get_templates)]


def see_other(location: str) -> RedirectResponse:
    return RedirectResponse(location, status_code=303)


def safe_back(back: str | None) -> str:
    """Return ``back`` when it is a local path, otherwise the index."""
    if back and back.startswith("/") and not back.startswith("//"):
        return back
    return "/"
