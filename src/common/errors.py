"""Relay error hierarchy.

    RelayError
    ├── ValidationError   required input missing (400)
    ├── NotFoundError     item, user or status column missing (404)
    └── DownstreamError   platform API or webhook call failed (500)

Routes turn these into HTTP responses; ``context`` carries details for the
server log only and is never echoed to the caller.
"""

from __future__ import annotations

from typing import Any


class RelayError(Exception):
    """Base error for every failure a relay endpoint can report."""

    status_code = 500

    def __init__(self, message: str, **context: Any) -> None:
        self.message = message
        self.context: dict[str, Any] = context
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "status_code": self.status_code,
            "context": {k: str(v) for k, v in self.context.items()},
        }


class ValidationError(RelayError):
    status_code = 400


class NotFoundError(RelayError):
    status_code = 404


class DownstreamError(RelayError):
    status_code = 500
