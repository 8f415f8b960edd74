from partyhub.api.v1.schemas.media import ConfirmUploadIn, MediaOut, UploadTargetOut, UploadUrlIn
from partyhub.api.v1.schemas.parties import (
    AttendeeOut,
    JoinByCodeIn,
    JoinPartyIn,
    NotificationOut,
    PageMeta,
    PartyCreate,
    PartyOut,
    PartyUpdate,
    UserSummaryOut,
    VenueIn,
    VenueOut,
)
from partyhub.api.v1.schemas.users import UsernameCheckOut, UserProfileOut, UserUpdate

__all__ = [
    "PartyCreate",
    "PartyUpdate",
    "PartyOut",
    "VenueIn",
    "VenueOut",
    "JoinPartyIn",
    "JoinByCodeIn",
    "UserSummaryOut",
    "AttendeeOut",
    "NotificationOut",
    "PageMeta",
    "UploadUrlIn",
    "ConfirmUploadIn",
    "UploadTargetOut",
    "MediaOut",
    "UserProfileOut",
    "UserUpdate",
    "UsernameCheckOut",
]
