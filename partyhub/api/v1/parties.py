from __future__ import annotations

import uuid

from fastapi import APIRouter

from partyhub.api.responses import paginated_response, success_response
from partyhub.api.v1.media import media_out
from partyhub.api.v1.schemas.parties import (
    AttendeeOut,
    JoinByCodeIn,
    JoinPartyIn,
    PartyCreate,
    PartyOut,
    PartyUpdate,
)
from partyhub.auth.deps import CurrentUser, DBSession, OptionalUser
from partyhub.core.config import settings
from partyhub.models import Party, PartyAttendee
from partyhub.models.media import MediaMood, MediaType
from partyhub.models.party import PartyStatus
from partyhub.services import attendance_service, media_service, parties_service
from partyhub.services.media_service import MediaFilters
from partyhub.services.party_queries import PartyFilters, list_parties

router = APIRouter(prefix="/parties", tags=["parties"])


def _party_out(party: Party) -> dict:
    return PartyOut.model_validate(party).model_dump(mode="json")


def _attendee_out(row: PartyAttendee) -> dict:
    return AttendeeOut(
        id=row.user.id,
        username=row.user.username,
        display_name=row.user.display_name,
        avatar_url=row.user.avatar_url,
        role=row.role,
        joined_at=row.joined_at,
    ).model_dump(mode="json")


@router.get("")
def list_public_parties(
    db: DBSession,
    status: PartyStatus | None = None,
    host_id: uuid.UUID | None = None,
    search: str | None = None,
    upcoming: bool = False,
    page: int = 1,
    limit: int = settings.default_page_size,
):
    filters = PartyFilters(
        status=status,
        host_id=host_id,
        search=search,
        upcoming=upcoming,
        page=page,
        limit=limit,
    )
    items, total = list_parties(db, filters)
    return paginated_response([_party_out(p) for p in items], page, limit, total)


@router.post("")
def create_party(payload: PartyCreate, user: CurrentUser, db: DBSession):
    party = parties_service.create_party(db, user, payload)
    return success_response(
        {"party": _party_out(party)},
        message="Party created successfully",
        status_code=201,
    )


@router.post("/join-by-code")
def join_by_code(payload: JoinByCodeIn, user: CurrentUser, db: DBSession):
    party = attendance_service.join_by_access_code(db, user, payload.access_code)
    return success_response({"party": _party_out(party)}, message="Joined party successfully")


@router.get("/{party_id}")
def get_party(party_id: uuid.UUID, viewer: OptionalUser, db: DBSession):
    party = parties_service.get_party(db, party_id, viewer)
    return success_response({"party": _party_out(party)})


@router.put("/{party_id}")
def update_party(party_id: uuid.UUID, payload: PartyUpdate, user: CurrentUser, db: DBSession):
    party = parties_service.update_party(db, user, party_id, payload)
    return success_response({"party": _party_out(party)}, message="Party updated successfully")


@router.delete("/{party_id}")
def delete_party(party_id: uuid.UUID, user: CurrentUser, db: DBSession):
    parties_service.delete_party(db, user, party_id)
    return success_response(None, message="Party deleted successfully")


@router.post("/{party_id}/join")
def join_party(
    party_id: uuid.UUID,
    user: CurrentUser,
    db: DBSession,
    payload: JoinPartyIn | None = None,
):
    access_code = payload.access_code if payload else None
    attendance_service.join_party(db, user, party_id, access_code)
    return success_response(None, message="Joined party successfully")


@router.post("/{party_id}/leave")
def leave_party(party_id: uuid.UUID, user: CurrentUser, db: DBSession):
    attendance_service.leave_party(db, user, party_id)
    return success_response(None, message="Left party successfully")


@router.get("/{party_id}/attendees")
def list_attendees(
    party_id: uuid.UUID,
    viewer: OptionalUser,
    db: DBSession,
    page: int = 1,
    limit: int = settings.default_page_size,
):
    rows, total = attendance_service.list_attendees(db, party_id, viewer, page, limit)
    return paginated_response([_attendee_out(row) for row in rows], page, limit, total)


@router.get("/{party_id}/media")
def list_party_media(
    party_id: uuid.UUID,
    viewer: OptionalUser,
    db: DBSession,
    media_type: MediaType | None = None,
    mood: MediaMood | None = None,
    uploader_id: uuid.UUID | None = None,
    page: int = 1,
    limit: int = settings.default_page_size,
):
    filters = MediaFilters(
        media_type=media_type,
        mood=mood,
        uploader_id=uploader_id,
        page=page,
        limit=limit,
    )
    items, total = media_service.list_party_media(db, party_id, viewer, filters)
    return paginated_response([media_out(m) for m in items], page, limit, total)
