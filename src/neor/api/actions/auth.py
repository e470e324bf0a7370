"""Account form actions."""

from __future__ import annotations

from typing import Annotated
from urllib.parse import quote, urlencode

from fastapi import APIRouter, Form
from fastapi.responses import RedirectResponse

from neor.api.dependencies import MailerDep, SessionDep, safe_back, see_other
from neor.core.errors import ForumError, FormRedirect
from neor.core.settings import settings
from neor.services import user_service
from neor.services.session import SESSION_COOKIE_NAME

router = APIRouter(prefix="/api", tags=["actions"])

# Persistent cookies last about a year.
REMEMBER_ME_SECONDS = 365 * 24 * 60 * 60


def is_checked(value: str | None) -> bool:
    """HTML checkboxes submit ``on`` when ticked and nothing otherwise."""
    return value is not None and value.lower() in {"on", "true", "1", "yes"}


@router.post("/sign-up")
async def sign_up(
    db: SessionDep,
    mailer: MailerDep,
    username: Annotated[str, Form()] = "",
    email: Annotated[str, Form()] = "",
    password: Annotated[str, Form()] = "",
    password_repeat: Annotated[str, Form()] = "",
) -> RedirectResponse:
    """Register an account and send the verification code.

    Args:
        db: Database session
        mailer: Outgoing mail transport
        username: Requested username
        email: Email address to verify
        password: Chosen password
        password_repeat: Same password again

    Returns:
        Redirect to the verification form

    Raises:
        FormRedirect: Back to the sign-up form with the reason
    """
    try:
        user_service.sign_up(
            db,
            mailer,
            settings.domain,
            username=username,
            email=email,
            password=password,
            password_repeat=password_repeat,
        )
    except ForumError as err:
        raise FormRedirect("/sign-up", err.message) from err
    return see_other("/email-verification")


@router.post("/email-verification")
async def email_verification(
    db: SessionDep,
    code: Annotated[str, Form()] = "",
) -> RedirectResponse:
    """Redeem a sign-up verification code."""
    try:
        user_service.verify_email(db, code)
    except ForumError as err:
        raise FormRedirect("/email-verification", err.message) from err
    return see_other(f"/sign-in?{urlencode({'message': 'Successfully verified email'})}")


@router.post("/sign-in")
async def sign_in(
    db: SessionDep,
    email: Annotated[str, Form()] = "",
    password: Annotated[str, Form()] = "",
    remember_me: Annotated[str | None, Form()] = None,
    back: Annotated[str | None, Form()] = None,
) -> RedirectResponse:
    """Check credentials and hand the browser the account's session cookie."""
    try:
        user = user_service.sign_in(db, email=email, password=password)
    except ForumError as err:
        location = "/sign-in"
        if back is not None:
            location = f"/sign-in?back={quote(safe_back(back), safe='')}"
        raise FormRedirect(location, err.message) from err

    response = see_other(safe_back(back))
    response.set_cookie(
        SESSION_COOKIE_NAME,
        user.session,
        max_age=REMEMBER_ME_SECONDS if is_checked(remember_me) else None,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.secure_cookies,
    )
    return response


@router.post("/password-reset")
async def password_reset(
    db: SessionDep,
    mailer: MailerDep,
    email: Annotated[str, Form()] = "",
) -> RedirectResponse:
    """Mail a password change code to the account using ``email``."""
    try:
        user_service.request_password_reset(db, mailer, settings.domain, email=email)
    except ForumError as err:
        raise FormRedirect("/password-reset", err.message) from err
    return see_other("/password-change")


@router.post("/password-change")
async def password_change(
    db: SessionDep,
    mailer: MailerDep,
    code: Annotated[str, Form()] = "",
    password: Annotated[str, Form()] = "",
    password_repeat: Annotated[str, Form()] = "",
) -> RedirectResponse:
    """Redeem a password change code and set the new password."""
    try:
        user_service.change_password(
            db,
            mailer,
            settings.domain,
            code=code,
            password=password,
            password_repeat=password_repeat,
        )
    except ForumError as err:
        raise FormRedirect("/password-change", err.message) from err
    return see_other(f"/sign-in?{urlencode({'message': 'Successfully changed password'})}")
