"""Error taxonomy for backend-facing operations.

Every failure surfaced by :mod:`scripto.sync_gateway` and
:mod:`scripto.services.auth_session` is a :class:`ScriptOError`.  The
``message`` attribute is suitable for showing to the user as-is.
"""

from __future__ import annotations


class ScriptOError(Exception):
    """Base class for all client errors.

    Attributes:
        message: A human-readable description of the failure.
    """

    default_message = "Request failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidRequest(ScriptOError):
    """The request could not be built locally (e.g. an invalid URL)."""

    default_message = "Invalid request"


class Unauthorized(ScriptOError):
    """The credential is missing or was rejected by the backend.

    Raising paths clear the local token before this propagates.
    """

    default_message = "Not authorized, please log in again"


class ServerError(ScriptOError):
    """The backend returned a structured failure.

    Attributes:
        status_code: The HTTP status of the reply, when known.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class MalformedResponse(ScriptOError):
    """The reply body could not be decoded into the expected shape."""

    default_message = "Invalid response from server"

    def __init__(self, message: str | None = None, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class TransportError(ScriptOError):
    """The request never produced an HTTP reply (DNS, timeout, reset...).

    Attributes:
        detail: The underlying transport error text.
    """

    default_message = "Network error"

    def __init__(self, detail: str | None = None, message: str | None = None) -> None:
        self.detail = detail or ""
        super().__init__(message or (f"{self.default_message}: {detail}" if detail else None))


class ConnectionRefused(TransportError):
    """The backend host actively refused the connection."""

    default_message = "Backend unreachable"

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail, message="Backend unreachable, check that the server is running")
