"""Failure conditions surfaced to the webhook caller."""

from __future__ import annotations


class HookhubError(Exception):
    """Base class; ``status`` and ``message`` become the JSON error response."""

    status: int = 500

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status is not None:
            self.status = status


class MalformedRequest(HookhubError):
    """Missing or invalid signature/event headers, or an unusable body."""

    status = 412

    def __init__(self, message: str = "Missing or invalid request arguments") -> None:
        super().__init__(message)


class Unauthorized(HookhubError):
    """The X-Hub-Signature header does not match the request body."""

    status = 401

    def __init__(self, message: str = "Invalid signature", status: int | None = None) -> None:
        super().__init__(message, status)


class DownstreamUnavailable(HookhubError):
    """The chat endpoint could not be reached, timed out, or refused the message."""

    status = 500
