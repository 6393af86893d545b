"""Domain exceptions shared by the access, voting and complaint services.

Each exception maps to one user-facing outcome; the HTTP translation lives in
``campus_wellness.main``.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence


class CoreError(Exception):
    """Base class for all domain errors raised by the core services."""


class ResolutionError(CoreError):
    """Raised when the authority store cannot be reached.

    Absence of an authority record is a valid negative result and never
    raises this error.
    """


class ConflictError(CoreError):
    """Raised when a targeted mutation finds state different from what it read.

    Callers retry with fresh state.
    """


class ValidationError(CoreError):
    """Raised when a submission is missing required fields or is malformed."""

    def __init__(self, message: str, errors: Mapping[str, str] | None = None) -> None:
        super().__init__(message)
        self.errors: dict[str, str] = dict(errors or {})

    @property
    def fields(self) -> Sequence[str]:
        """Return the names of the offending fields."""
        return sorted(self.errors)


class AuthorizationError(CoreError):
    """Raised when the acting user lacks the authority for an operation."""


class InvalidTransitionError(CoreError):
    """Raised when a complaint status change would move backwards or sideways."""

    def __init__(self, current: str, requested: str) -> None:
        super().__init__(f"Cannot move complaint from {current!r} to {requested!r}")
        self.current = current
        self.requested = requested


class NotFoundError(CoreError):
    """Raised when a referenced post, complaint or department does not exist."""


class ActivityFullError(CoreError):
    """Raised when an activity has reached its participant limit."""


class NotifierError(CoreError):
    """Raised by the notifier client when a notification cannot be delivered.

    The complaint router converts this into a warning; it never fails a
    status transition.
    """
