from __future__ import annotations

import re
import secrets
import uuid
from typing import Any

import structlog
from sqlalchemy import exists, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from partyhub.api.v1.schemas.users import UserUpdate
from partyhub.models import User
from partyhub.services.error_codes import ErrorCode
from partyhub.services.exceptions import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)

logger = structlog.get_logger(__name__)

USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_]+$")
RESERVED_USERNAMES = frozenset({"admin", "root", "system", "support", "help", "api", "www"})
SUGGESTION_ATTEMPTS = 10


def username_error(username: str) -> str | None:
    if len(username) < 3:
        return "username must be at least 3 characters"
    if len(username) > 30:
        return "username must be at most 30 characters"
    if not USERNAME_PATTERN.match(username):
        return "username can only contain letters, numbers and underscores"
    if username.lower() in RESERVED_USERNAMES:
        return "this username is reserved"
    return None


def _username_taken(db: Session, username: str) -> bool:
    return bool(db.scalar(select(exists().where(User.username == username))))


def _suggest_username(db: Session, username: str) -> str | None:
    base = username.rstrip("0123456789") or username
    for _ in range(SUGGESTION_ATTEMPTS):
        candidate = f"{base}{secrets.randbelow(1000)}"
        if len(candidate) <= 30 and not _username_taken(db, candidate):
            return candidate
    return None


def get_user(db: Session, user_id: uuid.UUID) -> User:
    user = db.get(User, user_id)
    if not user:
        raise NotFoundError(ErrorCode.USER_NOT_FOUND, "user not found")
    return user


def update_user(db: Session, actor: User, user_id: uuid.UUID, patch: UserUpdate) -> User:
    """Users edit only their own profile. Unset fields are left alone."""
    user = get_user(db, user_id)
    if actor.id != user.id:
        raise PermissionDeniedError(
            ErrorCode.NOT_PROFILE_OWNER, "you can only update your own profile"
        )

    updates: dict[str, Any] = patch.model_dump(exclude_unset=True)
    if "username" in updates:
        username = (updates["username"] or "").strip()
        error = username_error(username)
        if error:
            raise ValidationError(ErrorCode.INVALID_USERNAME, error)
        if username != user.username and _username_taken(db, username):
            raise ConflictError(ErrorCode.USERNAME_TAKEN, "username already taken")
        updates["username"] = username
    if "display_name" in updates and updates["display_name"] is not None:
        updates["display_name"] = updates["display_name"].strip() or None
    if updates.get("avatar_url") is not None:
        updates["avatar_url"] = str(updates["avatar_url"])

    for key, value in updates.items():
        setattr(user, key, value)

    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError(ErrorCode.USERNAME_TAKEN, "username already taken") from exc

    logger.info("user_updated", user_id=str(user.id), fields=sorted(updates.keys()))
    db.refresh(user)
    return user


def check_username(db: Session, username: str) -> dict[str, Any]:
    error = username_error(username)
    if error:
        return {"available": False, "valid": False, "error": error}
    if not _username_taken(db, username):
        return {"available": True, "valid": True}
    return {"available": False, "valid": True, "suggestion": _suggest_username(db, username)}
