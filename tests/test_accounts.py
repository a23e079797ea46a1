# tests/test_accounts.py

from __future__ import annotations

import pytest

from core.accounts import (
    authenticate_user,
    get_profile,
    get_user,
    leaderboard,
    register_user,
)
from core.errors import AlreadyExists, Empty, InvalidCredentials, NotFound
from core.security import verify_password


def test_register_then_login(db, ctx) -> None:
    register_user(db, ctx.sink, "alice", "pw", email="alice@example.com")
    user = authenticate_user(db, "alice", "pw")
    assert user.username == "alice"
    assert user.email == "alice@example.com"
    assert user.score == 0


def test_duplicate_username_keeps_original(db, ctx) -> None:
    register_user(db, ctx.sink, "alice", "first", email="a@example.com")
    with pytest.raises(AlreadyExists):
        register_user(db, ctx.sink, "alice", "second", email="b@example.com")

    user = get_user(db, "alice")
    assert user.email == "a@example.com"
    assert verify_password("first", user.hashed_password)


def test_wrong_password_and_unknown_user_look_the_same(db, ctx) -> None:
    register_user(db, ctx.sink, "alice", "pw")

    with pytest.raises(InvalidCredentials) as wrong_pw:
        authenticate_user(db, "alice", "nope")
    with pytest.raises(InvalidCredentials) as unknown:
        authenticate_user(db, "bob", "pw")

    assert wrong_pw.value.message == unknown.value.message
    assert wrong_pw.value.status_code == unknown.value.status_code


def test_avatar_goes_through_the_sink(db, ctx) -> None:
    user = register_user(db, ctx.sink, "alice", "pw", avatar=("me.PNG", b"\x89PNG"))
    assert user.avatar_url.endswith(".png")
    assert ctx.sink.get(user.avatar_url) == b"\x89PNG"


def test_profile_of_missing_user(db) -> None:
    with pytest.raises(NotFound):
        get_profile(db, "ghost")


def test_leaderboard_empty(db) -> None:
    with pytest.raises(Empty):
        leaderboard(db)


def test_leaderboard_orders_by_score_desc(db, ctx) -> None:
    for name, score in [("carol", 5), ("alice", 20), ("bob", -3), ("dave", 20)]:
        user = register_user(db, ctx.sink, name, "pw")
        user.score = score
    db.commit()

    board = leaderboard(db)
    assert [(u.username, u.score) for u in board] == [
        ("alice", 20),
        ("dave", 20),
        ("carol", 5),
        ("bob", -3),
    ]
