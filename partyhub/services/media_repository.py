"""Persistence for party media, likes and favorites. Flushes, never commits."""

from __future__ import annotations

import uuid
from collections.abc import Sequence

from sqlalchemy import ColumnElement, delete, func, select, update
from sqlalchemy.orm import Session

from partyhub.models import Media, MediaFavorite, MediaLike


class MediaRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def get(self, media_id: uuid.UUID) -> Media | None:
        return self.db.get(Media, media_id)

    def add(self, media: Media) -> Media:
        self.db.add(media)
        self.db.flush()
        return media

    def delete(self, media: Media) -> None:
        self.db.delete(media)
        self.db.flush()

    def storage_keys_for_party(self, party_id: uuid.UUID) -> list[str]:
        keys: list[str] = []
        rows = self.db.execute(
            select(Media.storage_key, Media.thumbnail_key).where(Media.party_id == party_id)
        )
        for storage_key, thumbnail_key in rows:
            keys.append(storage_key)
            if thumbnail_key:
                keys.append(thumbnail_key)
        return keys

    def page(
        self,
        conditions: Sequence[ColumnElement[bool]],
        offset: int,
        limit: int,
    ) -> tuple[list[Media], int]:
        total = self.db.scalar(select(func.count()).select_from(Media).where(*conditions)) or 0
        rows = self.db.scalars(
            select(Media)
            .where(*conditions)
            .order_by(Media.created_at.desc(), Media.id.desc())
            .offset(offset)
            .limit(limit)
        ).unique()
        return list(rows), int(total)

    def count_view(self, media_id: uuid.UUID) -> None:
        self.db.execute(
            update(Media)
            .where(Media.id == media_id)
            .values(views_count=Media.views_count + 1)
            .execution_options(synchronize_session=False)
        )

    # --- Likes -------------------------------------------------------------

    def get_like(self, media_id: uuid.UUID, user_id: uuid.UUID) -> MediaLike | None:
        return self.db.get(MediaLike, (media_id, user_id))

    def add_like(self, media_id: uuid.UUID, user_id: uuid.UUID) -> None:
        """Insert the like row and bump likes_count; a repeat like raises IntegrityError."""
        self.db.add(MediaLike(media_id=media_id, user_id=user_id))
        self.db.flush()
        self.db.execute(
            update(Media)
            .where(Media.id == media_id)
            .values(likes_count=Media.likes_count + 1)
            .execution_options(synchronize_session=False)
        )

    def remove_like(self, media_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        result = self.db.execute(
            delete(MediaLike)
            .where(MediaLike.media_id == media_id, MediaLike.user_id == user_id)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            return False

        self.db.execute(
            update(Media)
            .where(Media.id == media_id)
            .values(likes_count=Media.likes_count - 1)
            .execution_options(synchronize_session=False)
        )
        return True

    # --- Favorites ---------------------------------------------------------

    def get_favorite(self, media_id: uuid.UUID, user_id: uuid.UUID) -> MediaFavorite | None:
        return self.db.get(MediaFavorite, (media_id, user_id))

    def add_favorite(self, media_id: uuid.UUID, user_id: uuid.UUID) -> None:
        self.db.add(MediaFavorite(media_id=media_id, user_id=user_id))
        self.db.flush()

    def remove_favorite(self, media_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        result = self.db.execute(
            delete(MediaFavorite)
            .where(MediaFavorite.media_id == media_id, MediaFavorite.user_id == user_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0

    def page_favorites(
        self, user_id: uuid.UUID, offset: int, limit: int
    ) -> tuple[list[Media], int]:
        total = self.db.scalar(
            select(func.count()).select_from(MediaFavorite).where(MediaFavorite.user_id == user_id)
        ) or 0
        favorites = self.db.scalars(
            select(MediaFavorite)
            .where(MediaFavorite.user_id == user_id)
            .order_by(MediaFavorite.created_at.desc())
            .offset(offset)
            .limit(limit)
        ).unique()
        return [favorite.media for favorite in favorites], int(total)
