# tests/test_user_service.py
"""Tests for the account lifecycle services."""

from __future__ import annotations

import io

import pytest
from PIL import Image
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from neor.core.errors import (
    AuthorizationError,
    ConflictError,
    ExternalServiceError,
    NotFoundError,
    ServerError,
    ValidationError,
)
from neor.core.roles import Role
from neor.core.security import verify_password
from neor.models import File, User
from neor.services import user_service

DOMAIN = "forum.test"
PASSWORD = "correct horse"


def _sign_up(db_session, mailer, username="alice", email="alice@example.com"):
    return user_service.sign_up(
        db_session,
        mailer,
        DOMAIN,
        username=username,
        email=email,
        password="hunter22",
        password_repeat="hunter22",
    )


def _png(width: int = 64, height: int = 32) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), "red").save(buffer, format="PNG")
    return buffer.getvalue()


def test_sign_up_creates_unverified_user_and_mails_code(db_session, mailer) -> None:
    user = _sign_up(db_session, mailer)

    assert user.role is Role.UNVERIFIED
    assert user.code is not None and len(user.code) == 6
    assert verify_password("hunter22", user.password_hash)
    to, subject, body = mailer.last
    assert to == "alice@example.com"
    assert subject == "neor registration"
    assert user.code in body
    assert f"https://{DOMAIN}/email-verification" in body


def test_sign_up_rejects_taken_username_and_email(db_session, mailer) -> None:
    _sign_up(db_session, mailer)

    with pytest.raises(ConflictError, match="Username already taken"):
        _sign_up(db_session, mailer, email="other@example.com")
    with pytest.raises(ConflictError, match="Email already taken"):
        _sign_up(db_session, mailer, username="other")


@pytest.mark.parametrize(
    ("fields", "message"),
    [
        ({"username": "bad name"}, "Invalid username"),
        ({"username": "alice\n"}, "Invalid username"),
        ({"email": ""}, "Invalid email"),
        ({"password": ""}, "Invalid password"),
        ({"password_repeat": "different"}, "Passwords do not match"),
    ],
)
def test_sign_up_validation(db_session, mailer, fields, message) -> None:
    values = {
        "username": "bob",
        "email": "bob@example.com",
        "password": "hunter22",
        "password_repeat": "hunter22",
        **fields,
    }
    with pytest.raises(ValidationError, match=message):
        user_service.sign_up(db_session, mailer, DOMAIN, **values)
    assert mailer.sent == []


def test_verify_email_is_single_use(db_session, mailer) -> None:
    user = _sign_up(db_session, mailer)
    code = user.code

    user_service.verify_email(db_session, code)
    db_session.expire_all()
    assert user.role is Role.MEMBER
    assert user.code is None

    with pytest.raises(ValidationError, match="Invalid code"):
        user_service.verify_email(db_session, code)


def test_verify_email_rejects_malformed_code(db_session) -> None:
    with pytest.raises(ValidationError, match="Invalid code"):
        user_service.verify_email(db_session, "abc")


def test_sign_in(make_user, db_session) -> None:
    user = make_user(email="carol@example.com")

    signed_in = user_service.sign_in(db_session, email="carol@example.com", password=PASSWORD)
    assert signed_in.id == user.id
    with pytest.raises(ValidationError, match="Invalid email or password"):
        user_service.sign_in(db_session, email="carol@example.com", password="wrong")
    with pytest.raises(ValidationError, match="Invalid email or password"):
        user_service.sign_in(db_session, email="nobody@example.com", password=PASSWORD)


def test_sign_out_rotates_session(make_user, viewer_of, db_session) -> None:
    user = make_user()
    old_session = user.session

    user_service.sign_out(db_session, viewer_of(user))
    db_session.expire_all()
    assert user.session != old_session


def test_password_reset_and_change(make_user, db_session, mailer) -> None:
    user = make_user(email="dave@example.com")

    user_service.request_password_reset(db_session, mailer, DOMAIN, email="dave@example.com")
    db_session.expire_all()
    code = user.code
    assert code is not None
    assert code in mailer.last[2]

    user_service.change_password(
        db_session, mailer, DOMAIN, code=code, password="new-pass", password_repeat="new-pass"
    )
    db_session.expire_all()
    assert user.code is None
    assert verify_password("new-pass", user.password_hash)
    assert "successfully changed" in mailer.last[2]

    with pytest.raises(ValidationError, match="Invalid code"):
        user_service.change_password(
            db_session, mailer, DOMAIN, code=code, password="again1", password_repeat="again1"
        )


def test_password_reset_unknown_email(db_session, mailer) -> None:
    with pytest.raises(NotFoundError, match="Account with that email address was not found"):
        user_service.request_password_reset(
            db_session, mailer, DOMAIN, email="ghost@example.com"
        )
    assert mailer.sent == []


def test_edit_profile(make_user, viewer_of, db_session, tmp_path) -> None:
    user = make_user(username="erin")

    user_service.edit_profile(
        db_session,
        viewer_of(user),
        tmp_path,
        username="erin",
        name="Erin",
        description="Hello there",
        picture=("me.png", _png()),
    )
    db_session.expire_all()

    assert user.name == "Erin"
    assert user.description == "Hello there"
    assert user.mini_pfp_name == f"{user.mini_pfp_file_id}.png"
    with Image.open(tmp_path / user.mini_pfp_name) as mini:
        assert mini.size == (32, 16)
    with Image.open(tmp_path / user.pfp_name) as full:
        assert full.size == (128, 64)
    uploaded = db_session.scalars(select(File).where(File.uploaded_by_user_id == user.id)).all()
    assert len(uploaded) == 2


def test_edit_profile_rejects_other_users(make_user, viewer_of, db_session, tmp_path) -> None:
    make_user(username="frank")
    intruder = make_user(username="mallory")

    with pytest.raises(AuthorizationError, match="You are not allowed to edit this user"):
        user_service.edit_profile(
            db_session, viewer_of(intruder), tmp_path, username="frank", name="x", description="y"
        )


def test_edit_profile_rejects_broken_picture(make_user, viewer_of, db_session, tmp_path) -> None:
    user = make_user(username="gina")

    with pytest.raises(ExternalServiceError, match="Invalid profile picture"):
        user_service.edit_profile(
            db_session,
            viewer_of(user),
            tmp_path,
            username="gina",
            name="Gina",
            description="d",
            picture=("me.png", b"not an image"),
        )
    db_session.expire_all()
    assert user.name == ""


def test_edit_profile_failed_commit_removes_written_pictures(
    make_user, viewer_of, db_session, tmp_path, mocker
) -> None:
    user = make_user(username="iris")
    mocker.patch.object(db_session, "commit", side_effect=SQLAlchemyError("disk full"))

    with pytest.raises(ServerError):
        user_service.edit_profile(
            db_session,
            viewer_of(user),
            tmp_path,
            username="iris",
            name="Iris",
            description="d",
            picture=("me.png", _png()),
        )

    assert list(tmp_path.glob("*.png")) == []


def test_admin_changes_role_and_resets_profile(make_user, viewer_of, db_session) -> None:
    admin = make_user(role=Role.ADMIN)
    target = make_user(username="henry")
    target.name = "Henry"
    target.description = "spam"
    db_session.commit()

    user_service.admin_user(
        db_session,
        viewer_of(admin),
        username="henry",
        role="Banned",
        reset_name=True,
        reset_description=True,
        reset_pfp=True,
    )
    db_session.expire_all()
    assert target.role is Role.BANNED
    assert target.name == ""
    assert target.description == ""


def test_admin_rules(make_user, viewer_of, db_session) -> None:
    admin = viewer_of(make_user(role=Role.ADMIN))
    make_user(username="other-admin", role=Role.ADMIN)
    make_user(username="ivy")
    mod = viewer_of(make_user(role=Role.MOD))

    with pytest.raises(AuthorizationError):
        user_service.admin_user(db_session, mod, username="ivy", role="Banned")
    with pytest.raises(AuthorizationError):
        user_service.admin_user(db_session, admin, username="other-admin", role="Member")
    with pytest.raises(ValidationError, match="Invalid role"):
        user_service.admin_user(db_session, admin, username="ivy", role="Admin")
    with pytest.raises(ValidationError, match="Invalid role"):
        user_service.admin_user(db_session, admin, username="ivy", role="Owner")
    with pytest.raises(NotFoundError, match="User not found"):
        user_service.admin_user(db_session, admin, username="nobody", role="Member")

    assert db_session.scalar(select(User.role).where(User.username == "ivy")) is Role.MEMBER
