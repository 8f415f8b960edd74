from partyhub.models.base import Base
from partyhub.models.chat_room import ChatRoom
from partyhub.models.media import Media, MediaFavorite, MediaLike
from partyhub.models.notification import Notification
from partyhub.models.party import Party
from partyhub.models.party_attendee import PartyAttendee
from partyhub.models.tag import PartyTag, Tag
from partyhub.models.user import User
from partyhub.models.venue import Venue

__all__ = [
    "Base",
    "User",
    "Party",
    "PartyAttendee",
    "Tag",
    "PartyTag",
    "Venue",
    "ChatRoom",
    "Notification",
    "Media",
    "MediaLike",
    "MediaFavorite",
]
