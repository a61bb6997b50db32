"""Exceptions and client-visible error codes."""

from enum import Enum


class Error(Exception):
    """Base class for exceptions raised by ladybug."""

    pass


class ModuleLoadError(Error):
    """Raised when a route module file fails validation.

    The message is recorded verbatim in the load-error list, so it must be
    readable on its own.
    """

    pass


class ResponseAlreadySentError(Error):
    """Raised when a handler tries to respond after a response was committed."""

    pass


class SettingsError(Error):
    """Raised when settings.json cannot be read or parsed."""

    pass


class ErrorCode(str, Enum):
    """The only error codes a client ever sees."""

    NOT_FOUND = "NOT_FOUND"
    TIMEOUT = "TIMEOUT"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    BAD_REQUEST = "BAD_REQUEST"
    PAYLOAD_TOO_LARGE = "PAYLOAD_TOO_LARGE"


def error_body(message: str, code: ErrorCode, **extra) -> dict:
    """Standard ``{status: "error", message, code}`` body."""
    return {"status": "error", "message": message, "code": code.value, **extra}


class RequestBodyError(Error):
    """Raised when a request body cannot be accepted."""

    def __init__(self, message: str, status_code: int, code: ErrorCode) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
