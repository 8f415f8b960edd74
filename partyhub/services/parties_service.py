from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from partyhub.api.v1.schemas.parties import PartyCreate, PartyUpdate
from partyhub.core.config import settings
from partyhub.models import Party, User
from partyhub.models.notification import NotificationKind
from partyhub.models.party import STATUS_TRANSITIONS, PartyStatus
from partyhub.services import notifications
from partyhub.services.access_codes import allocate_access_code
from partyhub.services.error_codes import ErrorCode
from partyhub.services.exceptions import (
    ConflictError,
    InvalidStateError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from partyhub.services.media_repository import MediaRepository
from partyhub.services.party_repository import PartyRepository
from partyhub.services.tags_service import attach_tags
from partyhub.storage.factory import get_storage

logger = structlog.get_logger(__name__)

# Columns a patch may null out; None for anything else means "leave as is"
NULLABLE_FIELDS = frozenset({"description", "cover_image_url", "ends_at", "max_attendees"})

STATUS_NOTIFICATIONS = {
    PartyStatus.LIVE: NotificationKind.PARTY_STARTED,
    PartyStatus.ENDED: NotificationKind.PARTY_ENDED,
    PartyStatus.CANCELLED: NotificationKind.PARTY_CANCELLED,
}


def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite hands back naive datetimes; everything is stored in UTC
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def get_party_or_404(repo: PartyRepository, party_id: uuid.UUID) -> Party:
    party = repo.get(party_id)
    if not party:
        raise NotFoundError(ErrorCode.PARTY_NOT_FOUND, "party not found")
    return party


def _require_host(party: Party, user: User, action: str) -> None:
    if party.host_id != user.id:
        raise PermissionDeniedError(ErrorCode.NOT_PARTY_HOST, f"only the host can {action} the party")


def ensure_can_view(repo: PartyRepository, party: Party, viewer: User | None) -> None:
    """Private parties are visible to their host and current attendees only."""
    if not party.is_private:
        return
    if viewer is not None and party.host_id == viewer.id:
        return
    if viewer is not None and repo.get_attendee(party.id, viewer.id) is not None:
        return
    raise PermissionDeniedError(
        ErrorCode.PRIVATE_PARTY_ACCESS_DENIED, "access denied to private party"
    )


def _validate_date_range(starts_at: datetime | None, ends_at: datetime | None) -> None:
    starts_at, ends_at = _as_utc(starts_at), _as_utc(ends_at)
    if starts_at and ends_at and ends_at <= starts_at:
        raise ValidationError(ErrorCode.INVALID_DATE_RANGE, "ends_at must be after starts_at")


def _validate_transition(current: PartyStatus, target: PartyStatus) -> None:
    if current == target:
        return
    if target not in STATUS_TRANSITIONS[current]:
        raise InvalidStateError(
            ErrorCode.INVALID_STATUS_TRANSITION,
            f"cannot change status from {current.value} to {target.value}",
        )


def create_party(db: Session, host: User, payload: PartyCreate) -> Party:
    title = payload.title.strip()
    if len(title) < 3:
        raise ValidationError(ErrorCode.VALIDATION_FAILED, "title must be at least 3 characters")
    if len(payload.tags) > settings.max_tags_per_party:
        raise ValidationError(
            ErrorCode.TOO_MANY_TAGS, f"at most {settings.max_tags_per_party} tags are allowed"
        )
    _validate_date_range(payload.starts_at, payload.ends_at)

    repo = PartyRepository(db)
    venue_values = payload.venue.model_dump() if payload.venue else None

    party: Party | None = None
    for _ in range(settings.access_code_max_attempts):
        access_code = (
            allocate_access_code(repo.access_code_exists) if payload.is_private else None
        )
        party = Party(
            host_id=host.id,
            title=title,
            description=payload.description,
            cover_image_url=str(payload.cover_image_url) if payload.cover_image_url else None,
            starts_at=payload.starts_at,
            ends_at=payload.ends_at,
            status=payload.status,
            is_private=payload.is_private,
            access_code=access_code,
            max_attendees=payload.max_attendees,
        )
        try:
            repo.add_party(party)
            if venue_values:
                repo.upsert_venue(party, venue_values)
            if payload.tags:
                attach_tags(db, party.id, payload.tags)
            db.commit()
            break
        except IntegrityError:
            db.rollback()
            # Only the access code can collide here; anything else is a real fault
            if not payload.is_private:
                raise
            party = None
    if party is None:
        raise ConflictError(
            ErrorCode.ACCESS_CODE_UNAVAILABLE, "could not allocate a unique access code"
        )

    party_id = party.id
    logger.info("party_created", party_id=str(party_id), host_id=str(host.id), title=title)

    db.expire_all()
    return get_party_or_404(repo, party_id)


def get_party(db: Session, party_id: uuid.UUID, viewer: User | None = None) -> Party:
    repo = PartyRepository(db)
    party = get_party_or_404(repo, party_id)
    ensure_can_view(repo, party, viewer)
    return party


def update_party(db: Session, host: User, party_id: uuid.UUID, patch: PartyUpdate) -> Party:
    repo = PartyRepository(db)
    party = get_party_or_404(repo, party_id)
    _require_host(party, host, "update")

    patch_data: dict[str, Any] = patch.model_dump(exclude_unset=True, exclude={"venue"})
    venue_values = patch.venue.model_dump() if patch.venue is not None else None
    patch_data = {
        key: value
        for key, value in patch_data.items()
        if value is not None or key in NULLABLE_FIELDS
    }

    if "title" in patch_data:
        patch_data["title"] = patch_data["title"].strip()
        if len(patch_data["title"]) < 3:
            raise ValidationError(
                ErrorCode.VALIDATION_FAILED, "title must be at least 3 characters"
            )
    if patch_data.get("cover_image_url") is not None:
        patch_data["cover_image_url"] = str(patch_data["cover_image_url"])

    _validate_date_range(
        patch_data.get("starts_at", party.starts_at),
        patch_data.get("ends_at", party.ends_at),
    )

    previous_status = party.status
    new_status = patch_data.get("status")
    if new_status is not None:
        _validate_transition(previous_status, new_status)

    new_max = patch_data.get("max_attendees")
    if new_max is not None and new_max < party.attendees_count:
        raise InvalidStateError(
            ErrorCode.CAPACITY_BELOW_ATTENDANCE,
            "max_attendees cannot be below the current attendee count",
        )

    if "is_private" in patch_data:
        if patch_data["is_private"] and not party.access_code:
            patch_data["access_code"] = allocate_access_code(repo.access_code_exists)
        elif not patch_data["is_private"]:
            patch_data["access_code"] = None

    for key, value in patch_data.items():
        setattr(party, key, value)
    if venue_values is not None:
        repo.upsert_venue(party, venue_values)

    db.add(party)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError(
            ErrorCode.ACCESS_CODE_UNAVAILABLE, "could not allocate a unique access code"
        ) from exc

    logger.info(
        "party_updated",
        party_id=str(party_id),
        host_id=str(host.id),
        fields=sorted(patch_data.keys()) + (["venue"] if venue_values is not None else []),
    )

    if new_status is not None and new_status != previous_status:
        kind = STATUS_NOTIFICATIONS.get(new_status)
        if kind is not None:
            notifications.dispatch(kind, party.id, party.title, host.id, repo.guest_ids(party.id))

    db.refresh(party)
    return party


def delete_party(db: Session, host: User, party_id: uuid.UUID) -> None:
    repo = PartyRepository(db)
    party = get_party_or_404(repo, party_id)
    _require_host(party, host, "delete")

    title = party.title
    guests = repo.guest_ids(party.id)
    media_keys = MediaRepository(db).storage_keys_for_party(party.id)

    repo.delete_party(party)
    db.commit()

    logger.info("party_deleted", party_id=str(party_id), host_id=str(host.id))
    if media_keys:
        get_storage().discard(media_keys)
    notifications.dispatch(NotificationKind.PARTY_DELETED, party_id, title, host.id, guests)
