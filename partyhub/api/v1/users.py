from __future__ import annotations

import uuid

from fastapi import APIRouter

from partyhub.api.responses import success_response
from partyhub.api.v1.schemas.users import UsernameCheckOut, UserProfileOut, UserUpdate
from partyhub.auth.deps import CurrentUser, DBSession
from partyhub.services import users_service

router = APIRouter(prefix="/users", tags=["users"])


def _profile_out(user) -> dict:
    return UserProfileOut.model_validate(user).model_dump(mode="json")


@router.get("/check-username/{username}")
def check_username(username: str, db: DBSession):
    result = users_service.check_username(db, username)
    return success_response(UsernameCheckOut(**result).model_dump(mode="json", exclude_none=True))


@router.get("/{user_id}")
def get_user(user_id: uuid.UUID, viewer: CurrentUser, db: DBSession):
    return success_response({"user": _profile_out(users_service.get_user(db, user_id))})


@router.put("/{user_id}")
def update_user(user_id: uuid.UUID, payload: UserUpdate, user: CurrentUser, db: DBSession):
    updated = users_service.update_user(db, user, user_id, payload)
    return success_response({"user": _profile_out(updated)}, message="Profile updated successfully")
