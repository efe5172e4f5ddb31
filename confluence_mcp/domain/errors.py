from enum import Enum


class ErrorKind(str, Enum):
    """Failure categories shared by the adapter, resolver and tool registry"""
    INVALID_ARGUMENT = "InvalidArgument"
    AUTHENTICATION_FAILED = "AuthenticationFailed"
    PERMISSION_DENIED = "PermissionDenied"
    NOT_FOUND = "NotFound"
    RATE_LIMITED = "RateLimited"
    CONFLICT = "Conflict"
    NETWORK_ERROR = "NetworkError"
    INTERNAL_ERROR = "InternalError"


class ConfluenceError(Exception):
    """Base error for every failure surfaced by the Confluence tools.

    The kind is fixed per subclass and travels with the exception up to the
    tool registry, which picks the user-facing hint from it.
    """

    kind: ErrorKind = ErrorKind.INTERNAL_ERROR

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.message = message
        self.status = status


class InvalidArgumentError(ConfluenceError):
    kind = ErrorKind.INVALID_ARGUMENT


class AuthenticationFailedError(ConfluenceError):
    kind = ErrorKind.AUTHENTICATION_FAILED


class PermissionDeniedError(ConfluenceError):
    kind = ErrorKind.PERMISSION_DENIED


class NotFoundError(ConfluenceError):
    kind = ErrorKind.NOT_FOUND


class RateLimitedError(ConfluenceError):
    kind = ErrorKind.RATE_LIMITED


class ConflictError(ConfluenceError):
    kind = ErrorKind.CONFLICT


class NetworkError(ConfluenceError):
    kind = ErrorKind.NETWORK_ERROR


class InternalServerError(ConfluenceError):
    kind = ErrorKind.INTERNAL_ERROR


class ToolNotFoundError(NotFoundError):
    """Raised by the tool registry for an unregistered tool name."""

    def __init__(self, name: str):
        super().__init__(f"Unknown tool: {name}")
        self.name = name
