"""Persistence boundary for parties, attendees, venues and tag links.

Methods flush but never commit: the calling service decides where a
transaction ends, so a roster row and the headcount always land together.
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from typing import Any

from sqlalchemy import ColumnElement, delete, exists, func, or_, select, update
from sqlalchemy.orm import Session

from partyhub.models import ChatRoom, Party, PartyAttendee, PartyTag, Tag, Venue
from partyhub.models.party_attendee import AttendeeRole


class PartyRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    # --- Parties -----------------------------------------------------------

    def get(self, party_id: uuid.UUID) -> Party | None:
        return self.db.get(Party, party_id)

    def get_by_access_code(self, code: str) -> Party | None:
        return self.db.scalar(select(Party).where(Party.access_code == code))

    def access_code_exists(self, code: str) -> bool:
        return bool(self.db.scalar(select(exists().where(Party.access_code == code))))

    def add_party(self, party: Party) -> Party:
        """Insert a party with its host attendee row and chat room placeholder."""
        party.attendees_count = 1
        self.db.add(party)
        self.db.flush()

        self.db.add(
            PartyAttendee(
                party_id=party.id,
                user_id=party.host_id,
                role=AttendeeRole.HOST.value,
            )
        )
        self.db.add(ChatRoom(party_id=party.id))
        self.db.flush()
        return party

    def upsert_venue(self, party: Party, values: dict[str, Any]) -> Venue:
        venue = party.venue
        if venue is None:
            venue = Venue(party_id=party.id, **values)
            party.venue = venue
        else:
            for key, value in values.items():
                setattr(venue, key, value)
        self.db.add(venue)
        return venue

    def delete_party(self, party: Party) -> None:
        self.db.delete(party)
        self.db.flush()

    def page_parties(
        self,
        conditions: Sequence[ColumnElement[bool]],
        offset: int,
        limit: int,
    ) -> tuple[list[Party], int]:
        total = self.db.scalar(select(func.count()).select_from(Party).where(*conditions)) or 0
        rows = self.db.scalars(
            select(Party)
            .where(*conditions)
            .order_by(Party.starts_at.asc(), Party.created_at.asc())
            .offset(offset)
            .limit(limit)
        ).unique()
        return list(rows), int(total)

    # --- Attendees ---------------------------------------------------------

    def get_attendee(self, party_id: uuid.UUID, user_id: uuid.UUID) -> PartyAttendee | None:
        return self.db.scalar(
            select(PartyAttendee).where(
                PartyAttendee.party_id == party_id,
                PartyAttendee.user_id == user_id,
            )
        )

    def count_attendees(self, party_id: uuid.UUID) -> int:
        return int(
            self.db.scalar(
                select(func.count())
                .select_from(PartyAttendee)
                .where(PartyAttendee.party_id == party_id)
            )
            or 0
        )

    def guest_ids(self, party_id: uuid.UUID) -> list[uuid.UUID]:
        return list(
            self.db.scalars(
                select(PartyAttendee.user_id).where(
                    PartyAttendee.party_id == party_id,
                    PartyAttendee.role == AttendeeRole.GUEST.value,
                )
            )
        )

    def admit_attendee(self, party_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        """Take a seat and insert the guest row in the caller's transaction.

        The headcount only moves when it is still below max_attendees, in the
        same statement that reads it. Returns False when no seat was taken
        (party full or gone); a duplicate guest surfaces as IntegrityError.
        """
        result = self.db.execute(
            update(Party)
            .where(
                Party.id == party_id,
                or_(
                    Party.max_attendees.is_(None),
                    Party.attendees_count < Party.max_attendees,
                ),
            )
            .values(attendees_count=Party.attendees_count + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            return False

        self.db.add(
            PartyAttendee(
                party_id=party_id,
                user_id=user_id,
                role=AttendeeRole.GUEST.value,
            )
        )
        self.db.flush()
        return True

    def release_attendee(self, party_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        """Delete a guest row and give its seat back. Host rows are never released."""
        result = self.db.execute(
            delete(PartyAttendee)
            .where(
                PartyAttendee.party_id == party_id,
                PartyAttendee.user_id == user_id,
                PartyAttendee.role == AttendeeRole.GUEST.value,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            return False

        self.db.execute(
            update(Party)
            .where(Party.id == party_id)
            .values(attendees_count=Party.attendees_count - 1)
            .execution_options(synchronize_session=False)
        )
        return True

    def page_attendees(
        self, party_id: uuid.UUID, offset: int, limit: int
    ) -> tuple[list[PartyAttendee], int]:
        rows = self.db.scalars(
            select(PartyAttendee)
            .where(PartyAttendee.party_id == party_id)
            .order_by(PartyAttendee.joined_at.asc(), PartyAttendee.id.asc())
            .offset(offset)
            .limit(limit)
        ).unique()
        return list(rows), self.count_attendees(party_id)

    # --- Tags --------------------------------------------------------------

    def get_tag_by_slug(self, slug: str) -> Tag | None:
        return self.db.scalar(select(Tag).where(Tag.slug == slug))

    def add_tag(self, name: str, slug: str) -> Tag:
        tag = Tag(name=name, slug=slug, usage_count=0)
        self.db.add(tag)
        self.db.flush()
        return tag

    def link_tag(self, party_id: uuid.UUID, tag: Tag) -> bool:
        """Create the party/tag link if absent and count the new use. Returns False if linked."""
        if self.db.get(PartyTag, (party_id, tag.id)) is not None:
            return False

        self.db.add(PartyTag(party_id=party_id, tag_id=tag.id))
        self.db.execute(
            update(Tag)
            .where(Tag.id == tag.id)
            .values(usage_count=Tag.usage_count + 1)
            .execution_options(synchronize_session=False)
        )
        self.db.flush()
        return True
