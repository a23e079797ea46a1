# server/core/security.py

from datetime import datetime, timedelta, timezone

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from core.errors import Expired, Unauthenticated


pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def create_access_token(
    username: str,
    secret_key: str,
    algorithm: str = "HS256",
    expires_minutes: int = 60,
    now: datetime | None = None,
) -> str:
    issued = now or datetime.now(timezone.utc)
    to_encode = {
        "sub": username,
        "iat": issued,
        "exp": issued + timedelta(minutes=expires_minutes),
    }
    return jwt.encode(to_encode, secret_key, algorithm=algorithm)


def decode_access_token(token: str, secret_key: str, algorithm: str = "HS256") -> str:
    """
    Returns the username asserted by `token`.
    A past-expiry token raises Expired; anything else wrong raises Unauthenticated,
    so clients can tell "log in again" apart from "this token is garbage".
    """
    try:
        payload = jwt.decode(token, secret_key, algorithms=[algorithm])
    except ExpiredSignatureError:
        raise Expired()
    except JWTError:
        raise Unauthenticated()

    username = payload.get("sub")
    if not username:
        raise Unauthenticated()
    return username
