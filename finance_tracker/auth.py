"""
Credentials and sessions.

Passwords are hashed with passlib's bcrypt_sha256, so the whole password
counts, not just its first 72 bytes. A successful login issues a signed JWT
whose ``sub`` claim is the user id; nothing is kept server-side.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import structlog
from fastapi import Depends, Header, Request
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from . import crud
from .config import Settings
from .database import get_db
from .errors import Conflict, InvalidCredentials, MalformedHeader, NotFound, Unauthenticated
from .models import User

logger = structlog.get_logger(__name__)

pwd_context = CryptContext(schemes=["bcrypt_sha256"], deprecated="auto")


# ---------- Helpers ----------
def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def create_access_token(user_id: int, settings: Settings, expires_delta: Optional[timedelta] = None) -> str:
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode = {"sub": str(user_id), "exp": expire}
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str, settings: Settings) -> int:
    """Return the user id carried by ``token``; raise ``Unauthenticated`` otherwise."""
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError as exc:
        logger.info("token_rejected", reason=str(exc))
        raise Unauthenticated()

    sub = payload.get("sub")
    try:
        return int(sub)
    except (TypeError, ValueError):
        logger.info("token_rejected", reason="missing or malformed subject")
        raise Unauthenticated()


# ---------- Credential service ----------
def register_user(db: Session, name: str, email: str, password: str) -> User:
    if crud.get_user_by_email(db, email) is not None:
        raise Conflict("User already exists")

    try:
        user = crud.create_user(db, name=name, email=email, hashed_password=hash_password(password))
    except IntegrityError:
        # lost a race with another registration for the same email
        db.rollback()
        raise Conflict("User already exists")

    logger.info("user_registered", user_id=user.id)
    return user


def login(db: Session, email: str, password: str, settings: Settings) -> str:
    user = crud.get_user_by_email(db, email)
    if user is None:
        raise NotFound("User not found")

    if not verify_password(password, user.hashed_password):
        logger.info("login_failed", user_id=user.id)
        raise InvalidCredentials("Invalid credentials")

    logger.info("login_succeeded", user_id=user.id)
    return create_access_token(user.id, settings)


# ---------- Session verifier ----------
def authenticate(authorization: Optional[str], settings: Settings) -> int:
    """Check an ``Authorization`` header value and return the caller's user id."""
    if not authorization:
        raise Unauthenticated("Access denied. No token provided.")

    parts = authorization.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer":
        raise MalformedHeader()

    return decode_access_token(parts[1], settings)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_token_user_id(
    authorization: Optional[str] = Header(None),
    settings: Settings = Depends(get_app_settings),
) -> int:
    """User id from a valid token, whether or not that user still exists."""
    return authenticate(authorization, settings)


def get_current_user_id(
    user_id: int = Depends(get_token_user_id),
    db: Session = Depends(get_db),
) -> int:
    if crud.get_user(db, user_id) is None:
        logger.info("token_rejected", reason="unknown user", user_id=user_id)
        raise Unauthenticated()
    return user_id
