from __future__ import annotations

import re
from typing import Annotated

import structlog
from fastapi import Depends, HTTPException, Request
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from partyhub.auth.jwt import verify_access_token
from partyhub.core.config import settings
from partyhub.db import get_db
from partyhub.models import User

logger = structlog.get_logger(__name__)

DBSession = Annotated[Session, Depends(get_db)]

_DEV_USERNAME = re.compile(r"^[A-Za-z0-9_.-]{1,50}$")


def _unauthorized(detail: str = "unauthorized") -> HTTPException:
    return HTTPException(
        status_code=401,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _bearer_token(request: Request) -> str | None:
    auth = request.headers.get("Authorization")
    if auth is None:
        return None
    if not auth.startswith("Bearer "):
        raise _unauthorized("missing bearer token")
    token = auth.removeprefix("Bearer ").strip()
    if not token:
        raise _unauthorized("missing bearer token")
    return token


def _dev_user(db: Session, token: str) -> User:
    prefix = settings.dev_auth_prefix
    if not token.startswith(prefix):
        raise _unauthorized(f"invalid dev token (expected prefix {prefix})")

    username = token.removeprefix(prefix).strip()
    if not _DEV_USERNAME.match(username):
        raise _unauthorized("invalid username in token")

    external_id = f"dev:{username}"
    user = db.scalar(select(User).where(User.external_id == external_id))
    if user:
        return user

    user = User(external_id=external_id, username=username, display_name=username)
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # Another request provisioned the same dev user first
        db.rollback()
        user = db.scalar(select(User).where(User.external_id == external_id))
        if user is None:
            raise _unauthorized("could not provision dev user") from None
        return user

    db.refresh(user)
    logger.info("dev_user_provisioned", user_id=str(user.id), username=username)
    return user


def _jwt_user(db: Session, token: str) -> User:
    try:
        claims = verify_access_token(token)
    except ValueError:
        raise _unauthorized("invalid access token") from None

    user = db.scalar(select(User).where(User.external_id == str(claims["sub"])))
    if not user:
        raise _unauthorized("unknown user")
    return user


def _resolve_user(db: Session, token: str) -> User:
    # Local dev auth only
    if settings.auth_mode == "dev" and settings.env == "local":
        return _dev_user(db, token)
    if settings.auth_mode == "jwt":
        return _jwt_user(db, token)
    raise _unauthorized("auth not configured")


def get_current_user(request: Request, db: DBSession) -> User:
    token = _bearer_token(request)
    if token is None:
        raise _unauthorized("missing bearer token")
    return _resolve_user(db, token)


def get_optional_user(request: Request, db: DBSession) -> User | None:
    """Anonymous when no Authorization header is sent; a bad token is still rejected."""
    token = _bearer_token(request)
    if token is None:
        return None
    return _resolve_user(db, token)


CurrentUser = Annotated[User, Depends(get_current_user)]
OptionalUser = Annotated[User | None, Depends(get_optional_user)]
