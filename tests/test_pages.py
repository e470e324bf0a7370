# tests/test_pages.py
"""Tests for the server-rendered pages and static assets."""

from __future__ import annotations

import io
from datetime import timedelta

from fastapi import status
from PIL import Image

from neor.core.roles import Role
from neor.db.time import utcnow


def test_health(client) -> None:
    response = client.get("/health")
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"status": "ok"}


def test_index_lists_posts_newest_first(client, make_user, make_post) -> None:
    author = make_user(username="poster")
    make_post(author, title="Older post")
    make_post(author, title="Newer post")

    response = client.get("/")
    assert response.status_code == status.HTTP_200_OK
    assert response.text.index("Newer post") < response.text.index("Older post")
    assert "poster" in response.text


def test_index_query_filters_titles(client, make_user, make_post) -> None:
    author = make_user()
    make_post(author, title="Cats are great")
    make_post(author, title="Dogs are fine")

    response = client.get("/", params={"query": "Cats"})
    assert "Cats are great" in response.text
    assert "Dogs are fine" not in response.text


def test_index_pagination_links(client, make_user, make_post) -> None:
    author = make_user()
    for n in range(3):
        make_post(author, title=f"Numbered {n}")

    response = client.get("/", params={"limit": 2})
    assert "Numbered 2" in response.text and "Numbered 0" not in response.text
    assert "direction=forwards" in response.text
    assert "direction=backwards&amp;start_id=0" in response.text


def test_tag_page(client, make_user, make_post) -> None:
    author = make_user()
    make_post(author, title="Tagged", tags="rust")
    make_post(author, title="Untagged", tags="go")

    response = client.get("/tag/rust")
    assert response.status_code == status.HTTP_200_OK
    assert "Tagged" in response.text
    assert "Untagged" not in response.text


def test_post_page_shows_content_and_comments(client, make_user, make_post, make_comment) -> None:
    author = make_user()
    post = make_post(author, title="Readable", content="# Heading")
    make_comment(author, post, content="First comment")

    response = client.get(f"/post/{post.id}")
    assert response.status_code == status.HTTP_200_OK
    assert "<h1>Heading</h1>" in response.text
    assert "First comment" in response.text
    # Anonymous visitors see no action links.
    assert f"/post/{post.id}/edit" not in response.text


def test_post_page_flags_for_owner_and_moderator(
    client, make_user, make_post, sign_in_as, set_now
) -> None:
    author = make_user()
    post = make_post(author)

    sign_in_as(author)
    text = client.get(f"/post/{post.id}").text
    assert f"/post/{post.id}/edit" in text
    assert f"/post/{post.id}/anonymise" in text
    assert f"/post/{post.id}/delete" not in text

    set_now(utcnow() + timedelta(hours=3))
    assert f"/post/{post.id}/edit" not in client.get(f"/post/{post.id}").text

    sign_in_as(make_user(role=Role.MOD))
    assert f"/post/{post.id}/delete" in client.get(f"/post/{post.id}").text


def test_unknown_pages_render_not_found(client) -> None:
    for path in ("/post/424242", "/user/nobody", "/no/such/page", "/files/../secret.png"):
        response = client.get(path)
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert "Not found" in response.text


def test_forms_require_sign_in(client, make_user, make_post) -> None:
    post = make_post(make_user())
    response = client.get(f"/post/{post.id}/edit", follow_redirects=False)
    assert response.status_code == status.HTTP_303_SEE_OTHER
    assert response.headers["location"] == f"/sign-in?back=%2Fpost%2F{post.id}%2Fedit"


def test_profile_lists_posts_or_comments(client, make_user, make_post, make_comment) -> None:
    author = make_user(username="profiled")
    post = make_post(author, title="Profile post")
    make_comment(author, post, content="Profile comment")

    posts = client.get("/user/profiled")
    assert "Profile post" in posts.text
    assert "Profile comment" not in posts.text

    comments = client.get("/user/profiled", params={"display": "comments"})
    assert "Profile comment" in comments.text


def test_profile_actions(client, make_user, sign_in_as) -> None:
    member = make_user(username="self")
    sign_in_as(member)
    text = client.get("/user/self").text
    assert "/user/self/edit" in text
    assert "/sign-out" in text
    assert "/user/self/admin" not in text

    sign_in_as(make_user(role=Role.ADMIN))
    assert "/user/self/admin" in client.get("/user/self").text


def test_stylesheet_follows_theme(client) -> None:
    light = client.get("/style.css")
    assert light.headers["content-type"].startswith("text/css")
    assert "background-color: white" in light.text

    client.cookies.set("theme", "dark")
    assert "color: pink" in client.get("/style.css").text


def test_switch_theme(client) -> None:
    response = client.get("/switch-theme", params={"back": "/tag/x"}, follow_redirects=False)
    assert response.status_code == status.HTTP_303_SEE_OTHER
    assert response.headers["location"] == "/tag/x"
    assert "theme=dark" in response.headers["set-cookie"]

    client.cookies.set("theme", "dark")
    response = client.get("/switch-theme", params={"back": "//evil.test"}, follow_redirects=False)
    assert response.headers["location"] == "/"
    assert "theme=light" in response.headers["set-cookie"]


def test_files_serves_stored_images(client, files_dir) -> None:
    files_dir.mkdir(parents=True)
    buffer = io.BytesIO()
    Image.new("RGB", (4, 4)).save(buffer, format="PNG")
    (files_dir / "7.png").write_bytes(buffer.getvalue())
    (files_dir / "notes.txt").write_text("hidden")

    assert client.get("/files/7.png").content == buffer.getvalue()
    assert client.get("/files/8.png").status_code == status.HTTP_404_NOT_FOUND
    assert client.get("/files/notes.txt").status_code == status.HTTP_404_NOT_FOUND
    assert client.get("/files/7.png%0A").status_code == status.HTTP_404_NOT_FOUND
