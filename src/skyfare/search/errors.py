"""
Error types for flight search aggregation.

Only the authorization check may abort a search. Source failures are raised
by fetchers as SourceFetchError and recorded by the coordinator as data.
"""

from enum import Enum
from typing import Optional


class ErrorCode(str, Enum):
    """Machine-readable error codes."""

    NO_SOURCES_AUTHORIZED = "NO_SOURCES_AUTHORIZED"
    SOURCE_FETCH_FAILED = "SOURCE_FETCH_FAILED"
    MALFORMED_RESPONSE = "MALFORMED_RESPONSE"
    INVALID_REQUEST = "INVALID_REQUEST"


class SkyfareError(Exception):
    """Base exception carrying an ErrorCode."""

    code: ErrorCode = ErrorCode.INVALID_REQUEST

    def __init__(self, message: str, code: Optional[ErrorCode] = None):
        super().__init__(message)
        if code is not None:
            self.code = code

    def to_dict(self) -> dict:
        return {"code": self.code.value, "message": str(self)}


class AuthorizationError(SkyfareError):
    """The caller may not run the requested operation."""

    code = ErrorCode.NO_SOURCES_AUTHORIZED


class NoSourcesAuthorized(AuthorizationError):
    """None of the airline sources are permitted for the caller."""

    user_message = "Flight search is locked for your account. Please contact an administrator to get access."

    def __init__(self, user_id: Optional[str] = None):
        who = f" for user {user_id}" if user_id else ""
        super().__init__(f"No airline sources authorized{who}")
        self.user_id = user_id


class SourceFetchError(SkyfareError):
    """One airline source failed (network, provider or payload error)."""

    code = ErrorCode.SOURCE_FETCH_FAILED

    def __init__(self, source: str, message: str, code: Optional[ErrorCode] = None):
        super().__init__(f"{source}: {message}", code=code)
        self.source = source
        self.reason = message


__all__ = [
    "AuthorizationError",
    "ErrorCode",
    "NoSourcesAuthorized",
    "SkyfareError",
    "SourceFetchError",
]
