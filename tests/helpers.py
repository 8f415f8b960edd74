from __future__ import annotations

from datetime import datetime, timedelta, timezone


def auth(username: str) -> dict[str, str]:
    return {"Authorization": f"Bearer dev_{username}"}


def future(days: int = 1, hours: int = 0) -> str:
    return (datetime.now(timezone.utc) + timedelta(days=days, hours=hours)).isoformat()


def past(days: int = 1) -> str:
    return (datetime.now(timezone.utc) - timedelta(days=days)).isoformat()
