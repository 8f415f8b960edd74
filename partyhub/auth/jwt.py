from __future__ import annotations

from datetime import datetime, timedelta, timezone

import jwt
from jwt import PyJWTError

from partyhub.core.config import settings


def _now() -> datetime:
    return datetime.now(timezone.utc)


def create_access_token(
    external_id: str,
    username: str | None = None,
    ttl_seconds: int | None = None,
) -> str:
    now = _now()
    exp = now + timedelta(seconds=ttl_seconds or settings.access_token_ttl_seconds)
    payload = {
        "sub": external_id,
        "iat": int(now.timestamp()),
        "exp": int(exp.timestamp()),
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
    }
    if username:
        payload["preferred_username"] = username
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_access_token(token: str) -> dict:
    try:
        return jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            issuer=settings.jwt_issuer,
            audience=settings.jwt_audience,
            options={"require": ["sub", "exp"]},
        )
    except PyJWTError as exc:
        raise ValueError("invalid access token") from exc
