"""
hangout.errors — Domain Error Taxonomy
=======================================

Every service raises one of these.  The API layer maps them to HTTP
status codes (see :mod:`hangout.api.errors`); background jobs log them.

``ExternalServiceError`` is special: it is raised only by the completion
client and is swallowed at the Senpai orchestration boundary.
"""

from __future__ import annotations


class HangoutError(Exception):
    """Base exception for all domain failures."""

    status_code = 500


class Unauthenticated(HangoutError):
    """No caller identity was supplied."""

    status_code = 401


class NotFound(HangoutError):
    """A referenced entity does not exist."""

    status_code = 404


class PermissionDenied(HangoutError):
    """The caller lacks the membership or role the operation requires."""

    status_code = 403


class ValidationError(HangoutError):
    """Malformed input (empty name, non-positive threshold, bad enum value)."""

    status_code = 400


class ExternalServiceError(HangoutError):
    """The AI completion service failed, timed out, or returned garbage."""

    status_code = 502

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status
