from __future__ import annotations

import secrets
import string
from collections.abc import Callable

from partyhub.core.config import settings
from partyhub.services.error_codes import ErrorCode
from partyhub.services.exceptions import ConflictError

ACCESS_CODE_ALPHABET = string.ascii_uppercase + string.digits


def generate_access_code(length: int | None = None) -> str:
    size = length or settings.access_code_length
    return "".join(secrets.choice(ACCESS_CODE_ALPHABET) for _ in range(size))


def is_well_formed(code: str, length: int | None = None) -> bool:
    size = length or settings.access_code_length
    return len(code) == size and all(ch in ACCESS_CODE_ALPHABET for ch in code)


def allocate_access_code(
    is_taken: Callable[[str], bool],
    attempts: int | None = None,
) -> str:
    """Draw codes until one is not taken.

    The unique constraint on parties.access_code still guards the insert;
    this only keeps collisions away from it in the common case.
    """
    for _ in range(attempts or settings.access_code_max_attempts):
        code = generate_access_code()
        if not is_taken(code):
            return code
    raise ConflictError(ErrorCode.ACCESS_CODE_UNAVAILABLE, "could not allocate a unique access code")


def codes_match(stored: str | None, supplied: str | None) -> bool:
    if not stored or not supplied:
        return False
    return secrets.compare_digest(stored.encode("utf-8"), supplied.encode("utf-8"))
