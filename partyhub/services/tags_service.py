from __future__ import annotations

import re
import uuid
from collections.abc import Iterable

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from partyhub.models import Tag
from partyhub.services.party_repository import PartyRepository

logger = structlog.get_logger(__name__)

_WHITESPACE = re.compile(r"\s+")


def slugify(name: str) -> str:
    return _WHITESPACE.sub("-", name.strip().lower())


def _get_or_create_tag(db: Session, repo: PartyRepository, name: str, slug: str) -> Tag:
    tag = repo.get_tag_by_slug(slug)
    if tag is not None:
        return tag
    try:
        with db.begin_nested():
            return repo.add_tag(name, slug)
    except IntegrityError:
        # Another request created the slug first
        tag = repo.get_tag_by_slug(slug)
        if tag is None:
            raise
        return tag


def attach_tags(db: Session, party_id: uuid.UUID, names: Iterable[str]) -> list[str]:
    """Link tags to a party inside the caller's transaction.

    Each tag is written under its own savepoint so a concurrent insert of
    the same slug or link only unwinds that tag. The caller commits.
    Returns the slugs that were newly linked to the party.
    """
    repo = PartyRepository(db)
    linked: list[str] = []

    for raw in names:
        name = raw.strip()
        slug = slugify(name)
        if not slug:
            continue

        tag = _get_or_create_tag(db, repo, name, slug)
        try:
            with db.begin_nested():
                created = repo.link_tag(party_id, tag)
        except IntegrityError:
            # Concurrent attach of the same tag; the link exists either way
            continue

        if created:
            linked.append(slug)
            logger.info("tag_attached", party_id=str(party_id), slug=slug)

    return linked
