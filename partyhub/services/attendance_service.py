from __future__ import annotations

import uuid

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from partyhub.models import Party, PartyAttendee, User
from partyhub.models.notification import NotificationKind
from partyhub.models.party import CLOSED_STATUSES
from partyhub.services import notifications
from partyhub.services.access_codes import codes_match, is_well_formed
from partyhub.services.error_codes import ErrorCode
from partyhub.services.exceptions import (
    ConflictError,
    InvalidStateError,
    NotFoundError,
    PermissionDeniedError,
)
from partyhub.services.parties_service import ensure_can_view, get_party_or_404
from partyhub.services.party_queries import check_pagination
from partyhub.services.party_repository import PartyRepository

logger = structlog.get_logger(__name__)


def _ensure_open(party: Party) -> None:
    if party.status in CLOSED_STATUSES:
        raise InvalidStateError(
            ErrorCode.PARTY_CLOSED, "party is no longer accepting attendees"
        )


def _ensure_capacity(party: Party) -> None:
    # Fast rejection only; the conditional update in admit_attendee is authoritative
    if party.max_attendees is not None and party.attendees_count >= party.max_attendees:
        raise InvalidStateError(ErrorCode.PARTY_FULL, "party is full")


def _admit(db: Session, repo: PartyRepository, party_id: uuid.UUID, user_id: uuid.UUID) -> None:
    """Insert the guest row and bump the headcount as one transaction."""
    try:
        admitted = repo.admit_attendee(party_id, user_id)
        if admitted:
            db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError(ErrorCode.ALREADY_ATTENDING, "already attending") from exc

    if not admitted:
        db.rollback()
        if repo.get(party_id) is None:
            raise NotFoundError(ErrorCode.PARTY_NOT_FOUND, "party not found")
        raise InvalidStateError(ErrorCode.PARTY_FULL, "party is full")


def join_party(
    db: Session,
    user: User,
    party_id: uuid.UUID,
    access_code: str | None = None,
) -> None:
    repo = PartyRepository(db)
    party = get_party_or_404(repo, party_id)

    if party.is_private and not codes_match(party.access_code, access_code):
        raise PermissionDeniedError(ErrorCode.INVALID_ACCESS_CODE, "invalid access code")

    _ensure_open(party)
    _ensure_capacity(party)

    if repo.get_attendee(party.id, user.id) is not None:
        raise ConflictError(ErrorCode.ALREADY_ATTENDING, "already attending")

    host_id, title = party.host_id, party.title
    _admit(db, repo, party_id, user.id)

    logger.info("party_joined", party_id=str(party_id), user_id=str(user.id))
    notifications.dispatch(NotificationKind.PARTY_JOINED, party_id, title, user.id, [host_id])


def join_by_access_code(db: Session, user: User, access_code: str) -> Party:
    """Join through a shared code. Already attending is a successful no-op."""
    repo = PartyRepository(db)
    party = repo.get_by_access_code(access_code) if is_well_formed(access_code) else None
    if not party:
        raise NotFoundError(ErrorCode.INVALID_ACCESS_CODE, "invalid access code")

    if repo.get_attendee(party.id, user.id) is not None:
        return party

    _ensure_open(party)
    _ensure_capacity(party)

    party_id, host_id, title = party.id, party.host_id, party.title
    try:
        _admit(db, repo, party_id, user.id)
    except ConflictError:
        # Lost a race against our own duplicate request
        return get_party_or_404(repo, party_id)

    logger.info("party_joined_by_code", party_id=str(party_id), user_id=str(user.id))
    notifications.dispatch(NotificationKind.PARTY_JOINED, party_id, title, user.id, [host_id])

    db.refresh(party)
    return party


def leave_party(db: Session, user: User, party_id: uuid.UUID) -> None:
    repo = PartyRepository(db)
    party = get_party_or_404(repo, party_id)

    if party.host_id == user.id:
        raise InvalidStateError(ErrorCode.HOST_CANNOT_LEAVE, "host cannot leave the party")

    host_id, title = party.host_id, party.title
    if not repo.release_attendee(party.id, user.id):
        db.rollback()
        raise InvalidStateError(ErrorCode.NOT_ATTENDING, "not attending this party")
    db.commit()

    logger.info("party_left", party_id=str(party_id), user_id=str(user.id))
    notifications.dispatch(NotificationKind.PARTY_LEFT, party_id, title, user.id, [host_id])


def list_attendees(
    db: Session,
    party_id: uuid.UUID,
    viewer: User | None,
    page: int,
    limit: int,
) -> tuple[list[PartyAttendee], int]:
    check_pagination(page, limit)
    repo = PartyRepository(db)
    party = get_party_or_404(repo, party_id)
    ensure_can_view(repo, party, viewer)
    return repo.page_attendees(party.id, (page - 1) * limit, limit)
