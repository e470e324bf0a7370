"""Account lifecycle: sign-up, verification, sign-in, passwords and profiles."""

from __future__ import annotations

import logging
from pathlib import Path

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from neor.core import security
from neor.core.errors import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from neor.core.roles import ASSIGNABLE_ROLES, Role
from neor.core.values import (
    Code,
    Email,
    InvalidValue,
    Name,
    Password,
    PasswordPair,
    UserDescription,
    Username,
)
from neor.core.visibility import Viewer
from neor.db.session import unit_of_work
from neor.models import User
from neor.services import images
from neor.services.mail import (
    Mailer,
    password_changed_email,
    password_reset_email,
    verification_email,
)

logger = logging.getLogger(__name__)

__all__ = [
    "get_user_by_username",
    "sign_up",
    "verify_email",
    "sign_in",
    "sign_out",
    "request_password_reset",
    "change_password",
    "edit_profile",
    "admin_user",
]

INVALID_CODE = "Invalid code"
INVALID_EMAIL_OR_PASSWORD = "Invalid email or password"


def _session_taken(db: Session):
    return lambda token: db.scalar(select(User.id).where(User.session == token)) is not None


def _code_taken(db: Session):
    return lambda code: db.scalar(select(User.id).where(User.code == code)) is not None


def _password_pair(password: str, password_repeat: str) -> PasswordPair:
    try:
        return PasswordPair.parse(password, password_repeat)
    except PasswordPair.Mismatch as err:
        raise ValidationError("Passwords do not match") from err
    except InvalidValue as err:
        raise ValidationError("Invalid password") from err


def get_user_by_username(db: Session, username: str) -> User | None:
    """Return the account called ``username``."""
    return db.scalars(select(User).where(User.username == username)).first()


def sign_up(
    db: Session,
    mailer: Mailer,
    domain: str,
    *,
    username: str,
    email: str,
    password: str,
    password_repeat: str,
) -> User:
    """Register an unverified account and mail it a verification code.

    Raises:
        ValidationError: A field is malformed or the passwords differ.
        ConflictError: The username or email is already registered.
        ExternalServiceError: The verification email could not be sent.
    """
    try:
        valid_username = Username.parse(username)
    except InvalidValue as err:
        raise ValidationError("Invalid username") from err
    try:
        valid_email = Email.parse(email)
    except InvalidValue as err:
        raise ValidationError("Invalid email") from err
    pair = _password_pair(password, password_repeat)

    with unit_of_work(db):
        if get_user_by_username(db, valid_username) is not None:
            raise ConflictError("Username already taken")
        if db.scalar(select(User.id).where(User.email == valid_email)) is not None:
            raise ConflictError("Email already taken")

        user = User(
            username=str(valid_username),
            email=str(valid_email),
            role=Role.default(),
            password_hash=security.hash_password(pair.password),
            session=security.new_session_token(_session_taken(db)),
            code=security.new_code(_code_taken(db)),
            name="",
            description="",
        )
        db.add(user)
        try:
            db.flush()
        except IntegrityError as err:
            raise ConflictError("Username or email already taken") from err

        subject, body = verification_email(domain, user.code or "")
        mailer.send(user.email, subject, body)

    logger.info("User signed up", extra={"user_id": user.id})
    return user


def verify_email(db: Session, code: str) -> None:
    """Promote the unverified account holding ``code`` to member.

    Raises:
        ValidationError: No unverified account holds the code.
    """
    try:
        valid_code = Code.parse(code)
    except InvalidValue as err:
        raise ValidationError(INVALID_CODE) from err

    with unit_of_work(db):
        result = db.execute(
            update(User)
            .where(User.code == valid_code, User.role == Role.UNVERIFIED)
            .values(code=None, role=Role.MEMBER)
        )
        if result.rowcount != 1:
            raise ValidationError(INVALID_CODE)


def sign_in(db: Session, *, email: str, password: str) -> User:
    """Return the account matching the credentials.

    Raises:
        ValidationError: The email is unknown or the password is wrong.
    """
    try:
        valid_email = Email.parse(email)
        valid_password = Password.parse(password)
    except InvalidValue as err:
        raise ValidationError(INVALID_EMAIL_OR_PASSWORD) from err

    user = db.scalars(select(User).where(User.email == valid_email)).first()
    if user is None or not security.verify_password(valid_password, user.password_hash):
        raise ValidationError(INVALID_EMAIL_OR_PASSWORD)
    return user


def sign_out(db: Session, viewer: Viewer) -> None:
    """Give the viewer a fresh session token, invalidating every cookie."""
    with unit_of_work(db):
        token = security.new_session_token(_session_taken(db))
        db.execute(update(User).where(User.id == viewer.id).values(session=token))


def request_password_reset(db: Session, mailer: Mailer, domain: str, *, email: str) -> None:
    """Store a fresh code on the account for ``email`` and mail it.

    Raises:
        ValidationError: The email is malformed.
        NotFoundError: No account uses the email.
        ExternalServiceError: The email could not be sent.
    """
    try:
        valid_email = Email.parse(email)
    except InvalidValue as err:
        raise ValidationError("Invalid email") from err

    with unit_of_work(db):
        code = security.new_code(_code_taken(db))
        result = db.execute(update(User).where(User.email == valid_email).values(code=code))
        if result.rowcount != 1:
            raise NotFoundError("Account with that email address was not found")

        subject, body = password_reset_email(domain, code)
        mailer.send(valid_email, subject, body)


def change_password(
    db: Session,
    mailer: Mailer,
    domain: str,
    *,
    code: str,
    password: str,
    password_repeat: str,
) -> None:
    """Redeem a reset code and replace the password.

    Raises:
        ValidationError: The code is unknown or the passwords are invalid.
        ExternalServiceError: The confirmation email could not be sent.
    """
    pair = _password_pair(password, password_repeat)
    try:
        valid_code = Code.parse(code)
    except InvalidValue as err:
        raise ValidationError(INVALID_CODE) from err

    with unit_of_work(db):
        email = db.scalar(select(User.email).where(User.code == valid_code))
        if email is None:
            raise ValidationError(INVALID_CODE)

        result = db.execute(
            update(User)
            .where(User.code == valid_code)
            .values(password_hash=security.hash_password(pair.password), code=None)
        )
        if result.rowcount != 1:
            raise ValidationError(INVALID_CODE)

        subject, body = password_changed_email(domain)
        mailer.send(email, subject, body)


def edit_profile(
    db: Session,
    viewer: Viewer,
    files_dir: Path,
    *,
    username: str,
    name: str,
    description: str,
    picture: tuple[str, bytes] | None = None,
    mini_width: int = 32,
    full_width: int = 128,
) -> None:
    """Update the viewer's own display name, description and picture.

    ``picture`` is ``(filename, data)`` of an upload; an empty upload leaves
    the current pictures in place.

    Raises:
        AuthorizationError: The viewer is not the account or cannot edit it.
        ValidationError: The name or description is invalid.
        ExternalServiceError: The picture could not be processed.
    """
    if not viewer.capabilities.can_edit_self or viewer.username != username:
        raise AuthorizationError("You are not allowed to edit this user")
    try:
        valid_name = Name.parse(name)
    except InvalidValue as err:
        raise ValidationError("Invalid name") from err
    try:
        valid_description = UserDescription.parse(description)
    except InvalidValue as err:
        raise ValidationError("Invalid description") from err

    written: list[Path] = []
    try:
        with unit_of_work(db):
            values: dict[str, object] = {"name": valid_name, "description": valid_description}
            if picture is not None and picture[1]:
                filename, data = picture
                sizes = (("mini_pfp_file_id", mini_width), ("pfp_file_id", full_width))
                for column, width in sizes:
                    stored = images.store_resized_image(
                        db, files_dir, filename, data, width, viewer.id
                    )
                    written.append(files_dir / stored.filename_on_disk)
                    values[column] = stored.id

            db.execute(update(User).where(User.id == viewer.id).values(**values))
    except Exception:
        images.discard_stored_images(written)
        raise


def admin_user(
    db: Session,
    viewer: Viewer,
    *,
    username: str,
    role: str,
    reset_name: bool = False,
    reset_description: bool = False,
    reset_pfp: bool = False,
) -> None:
    """Change another account's role and optionally wipe its profile.

    Raises:
        AuthorizationError: The viewer cannot admin, or the target is an admin.
        ValidationError: The requested role cannot be handed out.
        NotFoundError: No account is called ``username``.
    """
    if not viewer.capabilities.can_admin:
        raise AuthorizationError("You are not allowed to admin this user")
    try:
        new_role = Role.parse(role)
    except ValueError as err:
        raise ValidationError("Invalid role") from err
    if new_role not in ASSIGNABLE_ROLES:
        raise ValidationError("Invalid role")

    with unit_of_work(db):
        target = get_user_by_username(db, username)
        if target is None:
            raise NotFoundError("User not found")
        if target.role.capabilities.can_admin:
            raise AuthorizationError("You are not allowed to admin this user")

        values: dict[str, object] = {"role": new_role}
        if reset_name:
            values["name"] = ""
        if reset_description:
            values["description"] = ""
        if reset_pfp:
            values.update(mini_pfp_file_id=None, pfp_file_id=None)

        db.execute(
            update(User)
            .where(User.id == target.id, User.role.notin_([Role.ADMIN]))
            .values(**values)
        )

    logger.info(
        "User role changed",
        extra={"admin_id": viewer.id, "target": username, "role": new_role.value},
    )
