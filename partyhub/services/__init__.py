from partyhub.services.attendance_service import (
    join_by_access_code,
    join_party,
    leave_party,
    list_attendees,
)
from partyhub.services.parties_service import create_party, delete_party, get_party, update_party
from partyhub.services.party_queries import PartyFilters, list_parties

__all__ = [
    "create_party",
    "get_party",
    "update_party",
    "delete_party",
    "join_party",
    "join_by_access_code",
    "leave_party",
    "list_attendees",
    "PartyFilters",
    "list_parties",
]
