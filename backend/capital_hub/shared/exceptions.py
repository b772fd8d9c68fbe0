from __future__ import annotations


class AppError(Exception):
    """Base for errors raised by capital operations; routes map them to HTTP."""


class NotFound(AppError):
    """The fund, or a record inside the fund, does not exist."""


class ValidationError(AppError):
    """A caller-correctable rule was broken. Raised before anything is written."""


class ConsistencyViolation(AppError):
    """Persisted state breaks an invariant (e.g. negative outstanding balance).

    Never clamped: the caller must abort and surface it.
    """


class ConcurrencyConflict(AppError):
    """A unit of work kept losing optimistic-concurrency races."""
