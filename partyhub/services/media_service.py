"""Party media: upload handshake, gallery listing, likes and favorites.

Binaries never pass through this service. A client asks for an upload
target, writes the file straight to the blob store, then confirms the key
so the metadata row is recorded. Media inherits its party's visibility.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import PurePosixPath
from typing import Any

import structlog
from sqlalchemy import ColumnElement
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from partyhub.api.v1.schemas.media import ConfirmUploadIn, UploadUrlIn
from partyhub.core.config import settings
from partyhub.models import Media, Party, User
from partyhub.models.media import MediaMood, MediaType
from partyhub.services.error_codes import ErrorCode
from partyhub.services.exceptions import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from partyhub.services.media_repository import MediaRepository
from partyhub.services.parties_service import ensure_can_view, get_party_or_404
from partyhub.services.party_queries import check_pagination
from partyhub.services.party_repository import PartyRepository
from partyhub.storage.factory import get_storage

logger = structlog.get_logger(__name__)

MIME_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
    "video/mp4": "mp4",
    "video/webm": "webm",
    "video/quicktime": "mov",
    "audio/mpeg": "mp3",
    "audio/wav": "wav",
    "audio/ogg": "ogg",
}

CONTENT_TYPE_PREFIXES = {
    MediaType.PHOTO: "image/",
    MediaType.VIDEO: "video/",
    MediaType.AUDIO: "audio/",
}


@dataclass(frozen=True)
class MediaFilters:
    media_type: MediaType | None = None
    mood: MediaMood | None = None
    uploader_id: uuid.UUID | None = None
    page: int = 1
    limit: int = settings.default_page_size

    def __post_init__(self) -> None:
        check_pagination(self.page, self.limit)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def upload_prefix(party_id: uuid.UUID, user_id: uuid.UUID) -> str:
    return f"parties/{party_id}/media/{user_id}/"


def thumbnail_key_for(storage_key: str) -> str:
    path = PurePosixPath(storage_key)
    return str(path.parent / "thumbnails" / f"{path.stem}_thumb.jpg")


def _get_media_or_404(repo: MediaRepository, media_id: uuid.UUID) -> Media:
    media = repo.get(media_id)
    if not media:
        raise NotFoundError(ErrorCode.MEDIA_NOT_FOUND, "media not found")
    return media


def _attended_party(db: Session, party_id: uuid.UUID, user: User) -> Party:
    repo = PartyRepository(db)
    party = get_party_or_404(repo, party_id)
    if repo.get_attendee(party.id, user.id) is None:
        raise PermissionDeniedError(
            ErrorCode.NOT_PARTY_ATTENDEE, "you must be attending the party to upload media"
        )
    return party


def _visible_party(db: Session, media: Media, viewer: User | None) -> Party:
    repo = PartyRepository(db)
    party = get_party_or_404(repo, media.party_id)
    ensure_can_view(repo, party, viewer)
    return party


def request_upload(db: Session, user: User, payload: UploadUrlIn) -> dict[str, Any]:
    party = _attended_party(db, payload.party_id, user)

    content_type = payload.content_type.strip().lower()
    if not content_type.startswith(CONTENT_TYPE_PREFIXES[payload.media_type]):
        raise ValidationError(
            ErrorCode.INVALID_CONTENT_TYPE,
            f"content type {content_type} does not match media type {payload.media_type.value}",
        )

    extension = MIME_EXTENSIONS.get(content_type, "bin")
    key = (
        f"{upload_prefix(party.id, user.id)}"
        f"{payload.media_type.value.lower()}/{uuid.uuid4()}.{extension}"
    )
    expires_at = datetime.now(timezone.utc) + timedelta(seconds=settings.upload_url_ttl_seconds)

    storage = get_storage()
    target = {
        "upload_url": storage.upload_url(key, content_type, expires_at),
        "download_url": storage.resolve_uri(key),
        "storage_key": key,
        "expires_at": expires_at,
    }

    logger.info(
        "media_upload_requested",
        party_id=str(party.id),
        user_id=str(user.id),
        media_type=payload.media_type.value,
    )
    return target


def confirm_upload(db: Session, user: User, payload: ConfirmUploadIn) -> Media:
    party = _attended_party(db, payload.party_id, user)

    key = payload.storage_key.strip()
    if not key.startswith(upload_prefix(party.id, user.id)) or ".." in PurePosixPath(key).parts:
        raise ValidationError(
            ErrorCode.INVALID_MEDIA_PATH, "file path does not belong to this party upload"
        )

    storage = get_storage()
    stored = storage.stat(key)
    if stored is None:
        raise ValidationError(
            ErrorCode.UPLOAD_NOT_FOUND, "file not found, the upload may have failed"
        )

    thumbnail_key = thumbnail_key_for(key)
    media = Media(
        party_id=party.id,
        uploader_id=user.id,
        media_type=payload.media_type,
        mood=payload.mood,
        storage_key=key,
        url=storage.resolve_uri(key),
        thumbnail_key=thumbnail_key,
        thumbnail_url=storage.resolve_uri(thumbnail_key),
        caption=(payload.caption or "").strip() or None,
        width=payload.width,
        height=payload.height,
        duration=payload.duration,
        file_size=stored.size,
        mime_type=stored.content_type,
    )

    repo = MediaRepository(db)
    try:
        repo.add(media)
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError(
            ErrorCode.MEDIA_ALREADY_CONFIRMED, "this upload has already been confirmed"
        ) from exc

    logger.info(
        "media_confirmed", media_id=str(media.id), party_id=str(party.id), user_id=str(user.id)
    )
    db.refresh(media)
    return media


def get_media(db: Session, media_id: uuid.UUID, viewer: User | None = None) -> Media:
    repo = MediaRepository(db)
    media = _get_media_or_404(repo, media_id)
    _visible_party(db, media, viewer)

    repo.count_view(media.id)
    db.commit()
    db.refresh(media)
    return media


def list_party_media(
    db: Session,
    party_id: uuid.UUID,
    viewer: User | None,
    filters: MediaFilters,
) -> tuple[list[Media], int]:
    party_repo = PartyRepository(db)
    party = get_party_or_404(party_repo, party_id)
    ensure_can_view(party_repo, party, viewer)

    conditions: list[ColumnElement[bool]] = [Media.party_id == party.id]
    if filters.media_type is not None:
        conditions.append(Media.media_type == filters.media_type)
    if filters.mood is not None:
        conditions.append(Media.mood == filters.mood)
    if filters.uploader_id is not None:
        conditions.append(Media.uploader_id == filters.uploader_id)

    return MediaRepository(db).page(conditions, filters.offset, filters.limit)


def delete_media(db: Session, user: User, media_id: uuid.UUID) -> None:
    """Uploader or the party host may delete. Blobs are removed after the row."""
    repo = MediaRepository(db)
    media = _get_media_or_404(repo, media_id)
    party = get_party_or_404(PartyRepository(db), media.party_id)

    if media.uploader_id != user.id and party.host_id != user.id:
        raise PermissionDeniedError(ErrorCode.NOT_MEDIA_OWNER, "not authorized to delete this media")

    keys = [key for key in (media.storage_key, media.thumbnail_key) if key]
    repo.delete(media)
    db.commit()

    logger.info("media_deleted", media_id=str(media_id), user_id=str(user.id))
    get_storage().discard(keys)


def like_media(db: Session, user: User, media_id: uuid.UUID) -> None:
    repo = MediaRepository(db)
    media = _get_media_or_404(repo, media_id)
    _visible_party(db, media, user)

    if repo.get_like(media.id, user.id) is not None:
        raise ConflictError(ErrorCode.ALREADY_LIKED, "already liked this media")

    try:
        repo.add_like(media.id, user.id)
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError(ErrorCode.ALREADY_LIKED, "already liked this media") from exc

    logger.info("media_liked", media_id=str(media_id), user_id=str(user.id))


def unlike_media(db: Session, user: User, media_id: uuid.UUID) -> None:
    repo = MediaRepository(db)
    _get_media_or_404(repo, media_id)

    if not repo.remove_like(media_id, user.id):
        db.rollback()
        raise NotFoundError(ErrorCode.LIKE_NOT_FOUND, "like not found")
    db.commit()

    logger.info("media_unliked", media_id=str(media_id), user_id=str(user.id))


def add_favorite(db: Session, user: User, media_id: uuid.UUID) -> None:
    repo = MediaRepository(db)
    media = _get_media_or_404(repo, media_id)
    _visible_party(db, media, user)

    if repo.get_favorite(media.id, user.id) is not None:
        raise ConflictError(ErrorCode.ALREADY_FAVORITED, "already in favorites")

    try:
        repo.add_favorite(media.id, user.id)
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError(ErrorCode.ALREADY_FAVORITED, "already in favorites") from exc


def remove_favorite(db: Session, user: User, media_id: uuid.UUID) -> None:
    repo = MediaRepository(db)
    if not repo.remove_favorite(media_id, user.id):
        db.rollback()
        raise NotFoundError(ErrorCode.FAVORITE_NOT_FOUND, "not in favorites")
    db.commit()


def list_favorites(db: Session, user: User, page: int, limit: int) -> tuple[list[Media], int]:
    check_pagination(page, limit)
    return MediaRepository(db).page_favorites(user.id, (page - 1) * limit, limit)
