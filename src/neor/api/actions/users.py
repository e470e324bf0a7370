"""Profile form actions."""

from __future__ import annotations

from typing import Annotated
from urllib.parse import quote

from fastapi import APIRouter, File, Form, UploadFile
from fastapi.responses import RedirectResponse

from neor.api.actions.auth import is_checked
from neor.api.dependencies import SessionDep, ViewerDep, see_other, signed_in
from neor.core.errors import ForumError, FormRedirect
from neor.core.settings import settings
from neor.services import user_service

router = APIRouter(prefix="/api/user", tags=["actions"])


@router.post("/edit")
async def edit_user(
    db: SessionDep,
    viewer: ViewerDep,
    username: Annotated[str, Form()],
    name: Annotated[str, Form()] = "",
    description: Annotated[str, Form()] = "",
    pfp: Annotated[UploadFile | None, File()] = None,
) -> RedirectResponse:
    """Update the viewer's profile, resizing a new picture if one was uploaded.

    Args:
        db: Database session
        viewer: Signed-in viewer, if any
        username: Account being edited
        name: Display name
        description: Free text shown on the profile
        pfp: Optional new profile picture

    Returns:
        Redirect to the profile

    Raises:
        FormRedirect: Back to the edit form with the reason
    """
    profile = f"/user/{quote(username)}"
    editor = signed_in(viewer, f"{profile}/edit")

    picture = None
    if pfp is not None:
        picture = (pfp.filename or "", await pfp.read())

    try:
        user_service.edit_profile(
            db,
            editor,
            settings.files_dir,
            username=username,
            name=name,
            description=description,
            picture=picture,
            mini_width=settings.mini_pfp_width,
            full_width=settings.pfp_width,
        )
    except ForumError as err:
        raise FormRedirect(f"{profile}/edit", err.message) from err
    return see_other(profile)


@router.post("/admin")
async def admin_user(
    db: SessionDep,
    viewer: ViewerDep,
    username: Annotated[str, Form()],
    role: Annotated[str, Form()] = "",
    reset_name: Annotated[str | None, Form()] = None,
    reset_description: Annotated[str | None, Form()] = None,
    reset_pfp: Annotated[str | None, Form()] = None,
) -> RedirectResponse:
    """Change another account's role and optionally reset its profile."""
    profile = f"/user/{quote(username)}"
    admin = signed_in(viewer, f"{profile}/admin")
    try:
        user_service.admin_user(
            db,
            admin,
            username=username,
            role=role,
            reset_name=is_checked(reset_name),
            reset_description=is_checked(reset_description),
            reset_pfp=is_checked(reset_pfp),
        )
    except ForumError as err:
        raise FormRedirect(f"{profile}/admin", err.message) from err
    return see_other(profile)
