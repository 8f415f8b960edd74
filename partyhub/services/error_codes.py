from enum import Enum


class ErrorCode(str, Enum):
    PARTY_NOT_FOUND = "PARTY_NOT_FOUND"
    PRIVATE_PARTY_ACCESS_DENIED = "PRIVATE_PARTY_ACCESS_DENIED"
    INVALID_ACCESS_CODE = "INVALID_ACCESS_CODE"
    NOT_PARTY_HOST = "NOT_PARTY_HOST"
    ALREADY_ATTENDING = "ALREADY_ATTENDING"
    NOT_ATTENDING = "NOT_ATTENDING"
    HOST_CANNOT_LEAVE = "HOST_CANNOT_LEAVE"
    PARTY_FULL = "PARTY_FULL"
    PARTY_CLOSED = "PARTY_CLOSED"
    INVALID_STATUS_TRANSITION = "INVALID_STATUS_TRANSITION"
    CAPACITY_BELOW_ATTENDANCE = "CAPACITY_BELOW_ATTENDANCE"
    INVALID_DATE_RANGE = "INVALID_DATE_RANGE"
    TOO_MANY_TAGS = "TOO_MANY_TAGS"
    INVALID_PAGINATION = "INVALID_PAGINATION"
    ACCESS_CODE_UNAVAILABLE = "ACCESS_CODE_UNAVAILABLE"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    UNAUTHENTICATED = "UNAUTHENTICATED"
    RATE_LIMITED = "RATE_LIMITED"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    NOT_FOUND = "NOT_FOUND"
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"
    HTTP_ERROR = "HTTP_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    MEDIA_NOT_FOUND = "MEDIA_NOT_FOUND"
    NOT_PARTY_ATTENDEE = "NOT_PARTY_ATTENDEE"
    NOT_MEDIA_OWNER = "NOT_MEDIA_OWNER"
    INVALID_CONTENT_TYPE = "INVALID_CONTENT_TYPE"
    INVALID_MEDIA_PATH = "INVALID_MEDIA_PATH"
    UPLOAD_NOT_FOUND = "UPLOAD_NOT_FOUND"
    MEDIA_ALREADY_CONFIRMED = "MEDIA_ALREADY_CONFIRMED"
    ALREADY_LIKED = "ALREADY_LIKED"
    LIKE_NOT_FOUND = "LIKE_NOT_FOUND"
    ALREADY_FAVORITED = "ALREADY_FAVORITED"
    FAVORITE_NOT_FOUND = "FAVORITE_NOT_FOUND"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    NOT_PROFILE_OWNER = "NOT_PROFILE_OWNER"
    USERNAME_TAKEN = "USERNAME_TAKEN"
    INVALID_USERNAME = "INVALID_USERNAME"
