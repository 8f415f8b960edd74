from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import ColumnElement, or_
from sqlalchemy.orm import Session

from partyhub.core.config import settings
from partyhub.models import Party
from partyhub.models.party import PartyStatus
from partyhub.services.error_codes import ErrorCode
from partyhub.services.exceptions import ValidationError
from partyhub.services.party_repository import PartyRepository

UPCOMING_STATUSES = (PartyStatus.PLANNED, PartyStatus.LIVE)


def check_pagination(page: int, limit: int) -> None:
    if page < 1:
        raise ValidationError(ErrorCode.INVALID_PAGINATION, "page must be at least 1")
    if not 1 <= limit <= settings.max_page_size:
        raise ValidationError(
            ErrorCode.INVALID_PAGINATION,
            f"limit must be between 1 and {settings.max_page_size}",
        )


@dataclass(frozen=True)
class PartyFilters:
    status: PartyStatus | None = None
    host_id: uuid.UUID | None = None
    search: str | None = None
    upcoming: bool = False
    page: int = 1
    limit: int = settings.default_page_size

    def __post_init__(self) -> None:
        check_pagination(self.page, self.limit)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def build_conditions(filters: PartyFilters, now: datetime) -> list[ColumnElement[bool]]:
    # Listings never show private parties, host-scoped ones included
    conditions: list[ColumnElement[bool]] = [Party.is_private.is_(False)]

    if filters.status is not None:
        conditions.append(Party.status == filters.status)
    if filters.host_id is not None:
        conditions.append(Party.host_id == filters.host_id)

    term = (filters.search or "").strip()
    if term:
        pattern = f"%{_escape_like(term)}%"
        conditions.append(
            or_(
                Party.title.ilike(pattern, escape="\\"),
                Party.description.ilike(pattern, escape="\\"),
            )
        )

    if filters.upcoming:
        conditions.append(Party.starts_at >= now)
        conditions.append(Party.status.in_(UPCOMING_STATUSES))

    return conditions


def list_parties(
    db: Session,
    filters: PartyFilters,
    now: datetime | None = None,
) -> tuple[list[Party], int]:
    """Public party listing ordered by start time, with the unpaged total."""
    now = now or datetime.now(timezone.utc)
    repo = PartyRepository(db)
    return repo.page_parties(build_conditions(filters, now), filters.offset, filters.limit)
