"""Main entry point for the neor forum."""

from __future__ import annotations

import logging
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, RedirectResponse, Response
from fastapi.templating import Jinja2Templates
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from neor.api import (
    assets_router,
    auth_actions_router,
    auth_pages_router,
    comment_actions_router,
    comment_pages_router,
    index_router,
    post_actions_router,
    post_pages_router,
    user_actions_router,
    user_pages_router,
)
from neor.api.dependencies import SignInRequired
from neor.api.rendering import FIELD_LIMITS, render
from neor.core.errors import SERVER_ERROR_MESSAGE, FormRedirect, ForumError
from neor.core.logging_config import setup_logging
from neor.core.settings import settings

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"


def build_templates(directory: Path = TEMPLATES_DIR) -> Jinja2Templates:
    """Parse the page templates once; the registry is shared by every request."""
    templates = Jinja2Templates(directory=str(directory))
    templates.env.globals["limits"] = FIELD_LIMITS
    templates.env.globals["app_name"] = settings.app_name
    return templates


setup_logging(settings.log_level, settings.log_format)

# Initialize FastAPI app
app = FastAPI(
    title="neor",
    description="Server-rendered community forum",
    version=settings.app_version,
    docs_url=None,
    redoc_url=None,
    openapi_url=None,
)
app.state.templates = build_templates()

# Pages
app.include_router(index_router)
app.include_router(post_pages_router)
app.include_router(comment_pages_router)
app.include_router(user_pages_router)
app.include_router(auth_pages_router)
app.include_router(assets_router)

# Form actions
app.include_router(auth_actions_router)
app.include_router(post_actions_router)
app.include_router(comment_actions_router)
app.include_router(user_actions_router)


@app.exception_handler(FormRedirect)
async def form_redirect_handler(request: Request, exc: FormRedirect) -> RedirectResponse:
    """Send a failed form back to its page with the reason in ``error``."""
    return RedirectResponse(exc.url, status_code=303)


@app.exception_handler(SignInRequired)
async def sign_in_required_handler(request: Request, exc: SignInRequired) -> RedirectResponse:
    return RedirectResponse(exc.url, status_code=303)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> Response:
    """Render unknown routes with the not found page."""
    if exc.status_code == 404:
        return render(request, app.state.templates, "not_found.html", None, status_code=404)
    return HTMLResponse(str(exc.detail), status_code=exc.status_code)


@app.exception_handler(ForumError)
async def forum_error_handler(request: Request, exc: ForumError) -> HTMLResponse:
    """Errors raised outside a form action only ever show a generic message."""
    logger.warning("Request failed", extra={"path": request.url.path, "error": exc.message})
    return render(
        request,
        app.state.templates,
        "error.html",
        None,
        status_code=500,
        error_message=SERVER_ERROR_MESSAGE,
    )


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError) -> HTMLResponse:
    logger.error("Database error", exc_info=exc, extra={"path": request.url.path})
    return render(
        request,
        app.state.templates,
        "error.html",
        None,
        status_code=500,
        error_message=SERVER_ERROR_MESSAGE,
    )


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("neor.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
