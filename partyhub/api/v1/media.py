from __future__ import annotations

import uuid

from fastapi import APIRouter

from partyhub.api.responses import paginated_response, success_response
from partyhub.api.v1.schemas.media import ConfirmUploadIn, MediaOut, UploadTargetOut, UploadUrlIn
from partyhub.auth.deps import CurrentUser, DBSession, OptionalUser
from partyhub.core.config import settings
from partyhub.models import Media
from partyhub.services import media_service

router = APIRouter(prefix="/media", tags=["media"])


def media_out(media: Media) -> dict:
    return MediaOut.model_validate(media).model_dump(mode="json")


@router.post("/upload-url")
def request_upload_url(payload: UploadUrlIn, user: CurrentUser, db: DBSession):
    target = media_service.request_upload(db, user, payload)
    return success_response(
        UploadTargetOut(**target).model_dump(mode="json"), message="Upload URL generated"
    )


@router.post("/confirm")
def confirm_upload(payload: ConfirmUploadIn, user: CurrentUser, db: DBSession):
    media = media_service.confirm_upload(db, user, payload)
    return success_response(
        {"media": media_out(media)},
        message="Media uploaded successfully",
        status_code=201,
    )


@router.get("/favorites")
def my_favorites(
    user: CurrentUser,
    db: DBSession,
    page: int = 1,
    limit: int = settings.default_page_size,
):
    items, total = media_service.list_favorites(db, user, page, limit)
    return paginated_response([media_out(m) for m in items], page, limit, total)


@router.get("/{media_id}")
def get_media(media_id: uuid.UUID, viewer: OptionalUser, db: DBSession):
    media = media_service.get_media(db, media_id, viewer)
    return success_response({"media": media_out(media)})


@router.delete("/{media_id}")
def delete_media(media_id: uuid.UUID, user: CurrentUser, db: DBSession):
    media_service.delete_media(db, user, media_id)
    return success_response(None, message="Media deleted successfully")


@router.post("/{media_id}/like")
def like_media(media_id: uuid.UUID, user: CurrentUser, db: DBSession):
    media_service.like_media(db, user, media_id)
    return success_response(None, message="Media liked")


@router.delete("/{media_id}/like")
def unlike_media(media_id: uuid.UUID, user: CurrentUser, db: DBSession):
    media_service.unlike_media(db, user, media_id)
    return success_response(None, message="Media unliked")


@router.post("/{media_id}/favorite")
def add_favorite(media_id: uuid.UUID, user: CurrentUser, db: DBSession):
    media_service.add_favorite(db, user, media_id)
    return success_response(None, message="Added to favorites")


@router.delete("/{media_id}/favorite")
def remove_favorite(media_id: uuid.UUID, user: CurrentUser, db: DBSession):
    media_service.remove_favorite(db, user, media_id)
    return success_response(None, message="Removed from favorites")
