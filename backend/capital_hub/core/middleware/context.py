"""Request-scoped context shared by logging and the audit trail.

Values live in structlog's contextvars, so every log line emitted while a
request is handled carries them, and ``write_audit_event`` can fall back on
them when a service does not pass an actor explicitly.
"""

from __future__ import annotations

from collections.abc import Iterable

from structlog import contextvars


def bind_request(request_id: str, *, method: str, path: str) -> None:
    contextvars.clear_contextvars()
    contextvars.bind_contextvars(request_id=request_id, method=method, path=path)


def bind_actor(actor_id: str, roles: Iterable[str]) -> None:
    contextvars.bind_contextvars(actor_id=actor_id, actor_roles=sorted(roles))


def current_request_id() -> str | None:
    value = contextvars.get_contextvars().get("request_id")
    return str(value) if value is not None else None


def current_actor() -> tuple[str | None, list[str]]:
    ctx = contextvars.get_contextvars()
    actor_id = ctx.get("actor_id")
    roles = ctx.get("actor_roles")
    return (
        str(actor_id) if actor_id is not None else None,
        [str(r) for r in roles] if isinstance(roles, list) else [],
    )
