"""User credentials and bearer tokens for the finance API."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHash, VerificationError, VerifyMismatchError
from jose import JWTError, jwt
from sqlmodel import Session, select

from ..exceptions import Unauthorized
from ..models.user import User

SessionFactory = Callable[[], Session]

_hasher = PasswordHasher()
DEFAULT_ALGORITHM = "HS256"


def get_user_by_username(username: str, session_factory: SessionFactory) -> Optional[User]:
    """Fetch a user by username."""
    username = username.strip()
    with session_factory() as session:
        user = session.exec(select(User).where(User.username == username)).first()
        if user:
            session.expunge(user)
        return user


def create_user(
    *,
    username: str,
    password: str,
    session_factory: SessionFactory,
) -> User:
    """Create a new user with hashed password."""

    username = username.strip()
    if not username:
        raise ValueError("Username cannot be empty")
    if not password:
        raise ValueError("Password cannot be empty")
    password_hash = _hasher.hash(password)
    with session_factory() as session:
        existing = session.exec(select(User).where(User.username == username)).first()
        if existing:
            raise ValueError("Username already exists")
        user = User(username=username, password_hash=password_hash)
        session.add(user)
        session.commit()
        session.refresh(user)
        session.expunge(user)
        return user


def authenticate(
    *,
    username: str,
    password: str,
    session_factory: SessionFactory,
) -> Optional[User]:
    """Validate credentials and return the user when correct."""

    username = username.strip()
    if not username:
        return None
    with session_factory() as session:
        user = session.exec(select(User).where(User.username == username)).first()
        if user is None:
            return None
        try:
            _hasher.verify(user.password_hash, password)
        except (VerifyMismatchError, InvalidHash, VerificationError):
            return None

        user.last_login = datetime.now(timezone.utc)
        session.add(user)
        session.commit()
        session.refresh(user)
        session.expunge(user)
        return user


def issue_token(
    user_id: int,
    secret: str,
    *,
    expires_in: timedelta | None = None,
    algorithm: str = DEFAULT_ALGORITHM,
) -> str:
    """Sign a bearer token whose subject is ``user_id``."""

    expire = datetime.now(timezone.utc) + (expires_in or timedelta(minutes=60))
    claims = {"sub": str(user_id), "exp": expire}
    return jwt.encode(claims, secret, algorithm=algorithm)


def resolve_token(token: str, secret: str, *, algorithm: str = DEFAULT_ALGORITHM) -> int:
    """Return the user id carried by ``token`` or raise :class:`Unauthorized`."""

    try:
        claims = jwt.decode(token, secret, algorithms=[algorithm])
    except JWTError as exc:
        raise Unauthorized("Invalid or expired token") from exc
    try:
        return int(claims["sub"])
    except (KeyError, TypeError, ValueError) as exc:
        raise Unauthorized("Token has no valid subject") from exc
