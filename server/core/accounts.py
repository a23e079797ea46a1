# server/core/accounts.py

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.artifacts import ArtifactSink, discard, put_with_retry
from core.errors import AlreadyExists, Empty, InvalidCredentials, NotFound, StoreFailure
from core.security import get_password_hash, verify_password
from database import transaction
from models.user import User


logger = logging.getLogger(__name__)

# Verified against when the username is unknown, so both failure paths cost a bcrypt check.
_DUMMY_HASH = get_password_hash("not-a-real-password")


def get_user(db: Session, username: str) -> User | None:
    return db.query(User).filter(User.username == username).first()


def register_user(
    db: Session,
    sink: ArtifactSink,
    username: str,
    password: str,
    email: str | None = None,
    avatar: tuple[str, bytes] | None = None,
    upload_attempts: int = 3,
    upload_backoff: float = 0.2,
) -> User:
    """
    Creates a user with a bcrypt-hashed password.
    `avatar` is an optional (filename, bytes) pair stored through the artifact sink.
    """
    if get_user(db, username):
        raise AlreadyExists()

    avatar_url = None
    if avatar is not None:
        avatar_url = put_with_retry(sink, avatar[1], avatar[0], upload_attempts, upload_backoff)

    user = User(
        username=username,
        hashed_password=get_password_hash(password),
        email=email or None,
        avatar_url=avatar_url,
        score=0,
    )
    try:
        with transaction(db):
            db.add(user)
    except StoreFailure as e:
        if avatar_url is not None:
            discard(sink, avatar_url)
        # lost a race with a concurrent registration of the same name
        if isinstance(e.__cause__, IntegrityError):
            raise AlreadyExists()
        raise

    logger.info("Registered user %s", username)
    return user


def authenticate_user(db: Session, username: str, password: str) -> User:
    user = get_user(db, username)
    if user is None:
        verify_password(password, _DUMMY_HASH)
        raise InvalidCredentials()
    if not verify_password(password, user.hashed_password):
        raise InvalidCredentials()
    return user


def get_profile(db: Session, username: str) -> User:
    user = get_user(db, username)
    if user is None:
        raise NotFound("User not found.")
    return user


def leaderboard(db: Session) -> list[User]:
    users = db.query(User).order_by(User.score.desc(), User.username).all()
    if not users:
        raise Empty()
    return users
