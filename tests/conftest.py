# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from datetime import datetime
from itertools import count
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

os.environ.setdefault("EMAIL_ENABLED", "false")

from neor.api.dependencies import get_now
from neor.core.roles import Role
from neor.core.security import hash_password
from neor.core.settings import settings
from neor.core.visibility import Viewer
from neor.db.session import Base, enable_sqlite_foreign_keys
from neor.db.session import get_db as app_get_session
from neor.main import app as fastapi_app
from neor.models import Comment, Post, User
from neor.services import comment_service, post_service
from neor.services.mail import get_mailer
from neor.services.session import SESSION_COOKIE_NAME, viewer_from_user

DEFAULT_PASSWORD = "correct horse"

_USER_COUNTER = count(1)


class RecordingMailer:
    """Mailer that keeps every message instead of sending it."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, str, str]] = []

    def send(self, to: str, subject: str, body: str) -> None:
        self.sent.append((to, subject, body))

    @property
    def last(self) -> tuple[str, str, str]:
        return self.sent[-1]


@pytest.fixture(scope="session")
def engine(tmp_path_factory: pytest.TempPathFactory) -> Generator[Engine, None, None]:
    # A file database lets the app's per-request sessions and the test
    # session see each other's commits.
    path = tmp_path_factory.mktemp("db") / "neor-test.db"
    engine = create_engine(f"sqlite:///{path}", connect_args={"check_same_thread": False})
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture(scope="session")
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture()
def db_session(engine: Engine, session_factory: sessionmaker[Session]) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()

        # Ensure each test sees a clean database even if commits occurred.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(
    app: FastAPI, db_session: Session, session_factory: sessionmaker[Session]
) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture()
def mailer(app: FastAPI) -> Iterator[RecordingMailer]:
    """Capture outgoing mail for both services and HTTP requests."""
    recorder = RecordingMailer()
    app.dependency_overrides[get_mailer] = lambda: recorder
    try:
        yield recorder
    finally:
        app.dependency_overrides.pop(get_mailer, None)


@pytest.fixture()
def set_now(app: FastAPI) -> Iterator[Callable[[datetime], None]]:
    """Pin the clock used by pages and form actions."""

    def _set(moment: datetime) -> None:
        app.dependency_overrides[get_now] = lambda: moment

    try:
        yield _set
    finally:
        app.dependency_overrides.pop(get_now, None)


@pytest.fixture()
def files_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    directory = tmp_path / "files"
    monkeypatch.setattr(settings, "files_dir", directory)
    return directory


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def make_user(db_session: Session) -> Callable[..., User]:
    """Create and return a persisted, committed account."""

    def _make(
        username: str | None = None,
        role: Role = Role.MEMBER,
        password: str = DEFAULT_PASSWORD,
        email: str | None = None,
    ) -> User:
        n = next(_USER_COUNTER)
        username = username or f"user{n}"
        user = User(
            username=username,
            email=email or f"{username}@example.com",
            role=role,
            password_hash=hash_password(password),
            session=f"session-{username}-{n}",
            name="",
            description="",
        )
        db_session.add(user)
        db_session.commit()
        return user

    return _make


@pytest.fixture()
def viewer_of() -> Callable[[User], Viewer]:
    return viewer_from_user


@pytest.fixture()
def make_post(db_session: Session) -> Callable[..., Post]:
    def _make(
        author: User,
        title: str = "Hello",
        description: str = "A first post",
        tags: str = "general",
        content: str = "Some *content*",
    ) -> Post:
        return post_service.create_post(
            db_session,
            viewer_from_user(author),
            title=title,
            description=description,
            tags=tags,
            content=content,
        )

    return _make


@pytest.fixture()
def make_comment(db_session: Session) -> Callable[..., Comment]:
    def _make(
        author: User,
        post: Post,
        content: str = "Nice post",
        reply_to: Comment | None = None,
    ) -> Comment:
        return comment_service.create_comment(
            db_session,
            viewer_from_user(author),
            post_id=post.id,
            content=content,
            reply_to_comment_id=reply_to.id if reply_to else None,
        )

    return _make


@pytest.fixture()
def sign_in_as(client: TestClient) -> Callable[[User], TestClient]:
    """Attach ``user``'s session cookie to the test client."""

    def _sign_in(user: User) -> TestClient:
        client.cookies.set(SESSION_COOKIE_NAME, user.session)
        return client

    return _sign_in
