# tests/test_security.py

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from core.errors import Expired, Unauthenticated
from core.security import (
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)


def test_password_hash_is_one_way_and_verifiable() -> None:
    hashed = get_password_hash("hunter2")
    assert hashed != "hunter2"
    assert verify_password("hunter2", hashed)
    assert not verify_password("hunter3", hashed)


def test_token_round_trip_yields_username() -> None:
    token = create_access_token("alice", "k")
    assert decode_access_token(token, "k") == "alice"


def test_token_is_valid_for_one_hour() -> None:
    now = datetime.now(timezone.utc)
    token = create_access_token("alice", "k", now=now)
    claims = jwt.get_unverified_claims(token)
    assert claims["exp"] - claims["iat"] == 3600


def test_token_older_than_an_hour_is_expired() -> None:
    issued = datetime.now(timezone.utc) - timedelta(hours=1, minutes=1)
    token = create_access_token("alice", "k", now=issued)
    with pytest.raises(Expired):
        decode_access_token(token, "k")


@pytest.mark.parametrize("token", ["", "not-a-jwt", "a.b.c"])
def test_malformed_token_is_unauthenticated(token: str) -> None:
    with pytest.raises(Unauthenticated):
        decode_access_token(token, "k")


def test_token_signed_with_other_secret_is_unauthenticated() -> None:
    token = create_access_token("alice", "other")
    with pytest.raises(Unauthenticated):
        decode_access_token(token, "k")


def test_token_without_subject_is_unauthenticated() -> None:
    exp = datetime.now(timezone.utc) + timedelta(minutes=5)
    token = jwt.encode({"exp": exp}, "k", algorithm="HS256")
    with pytest.raises(Unauthenticated):
        decode_access_token(token, "k")
