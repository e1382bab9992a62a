"""Error taxonomy and machine-readable error payloads."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class ErrorCode(str, Enum):
    """Stable error codes surfaced to JSON callers."""

    NOT_FOUND = "NOT_FOUND"
    PARSE_FAILED = "PARSE_FAILED"
    INVALID_HANDOFF = "INVALID_HANDOFF"
    UNSUPPORTED_AGENT = "UNSUPPORTED_AGENT"
    UNSUPPORTED_MODE = "UNSUPPORTED_MODE"
    EMPTY_SESSION = "EMPTY_SESSION"
    IO_ERROR = "IO_ERROR"


class ErrorPayload(BaseModel):
    """The ``{error_code, message}`` object printed in JSON mode."""

    error_code: ErrorCode
    message: str


class BridgeError(Exception):
    """Base class for every fatal bridge failure."""

    code: ErrorCode = ErrorCode.IO_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_payload(self) -> ErrorPayload:
        return ErrorPayload(error_code=self.code, message=self.message)


class SessionNotFoundError(BridgeError):
    """No session file matched the request."""

    code = ErrorCode.NOT_FOUND


class ParseFailedError(BridgeError):
    """A session file was unreadable or its schema was not recognized."""

    code = ErrorCode.PARSE_FAILED


class InvalidHandoffError(BridgeError):
    """A handoff request object failed validation."""

    code = ErrorCode.INVALID_HANDOFF


class UnsupportedAgentError(BridgeError):
    code = ErrorCode.UNSUPPORTED_AGENT


class UnsupportedModeError(BridgeError):
    code = ErrorCode.UNSUPPORTED_MODE


class EmptySessionError(BridgeError):
    """The file parsed but held no usable turns."""

    code = ErrorCode.EMPTY_SESSION


class BridgeIOError(BridgeError):
    code = ErrorCode.IO_ERROR


def classify_error(exc: BaseException) -> ErrorPayload:
    """Map any exception to the payload a JSON caller receives.

    Bridge errors keep their own code; everything else, including plain
    ``OSError``, is reported as ``IO_ERROR``.
    """
    if isinstance(exc, BridgeError):
        return exc.to_payload()
    return ErrorPayload(error_code=ErrorCode.IO_ERROR, message=str(exc) or type(exc).__name__)
