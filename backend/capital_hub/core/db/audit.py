from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from capital_hub.core.db.models import AuditEvent
from capital_hub.core.middleware.context import current_actor, current_request_id
from capital_hub.shared.utils import json_safe


def write_audit_event(
    db: Session,
    *,
    fund_id: uuid.UUID,
    actor_id: str | None = None,
    actor_roles: list[str] | None = None,
    action: str,
    entity_type: str,
    entity_id: str | uuid.UUID,
    before: dict[str, Any] | None,
    after: dict[str, Any] | None,
) -> AuditEvent:
    """Stage an insert-only audit row in the caller's transaction.

    The event commits or rolls back together with the change it describes,
    so a retried unit of work never leaves a stray event behind.
    """
    ctx_actor_id, ctx_roles = current_actor()
    actor_id = actor_id or ctx_actor_id or "system"

    event = AuditEvent(
        fund_id=fund_id,
        actor_id=actor_id,
        actor_roles=actor_roles or ctx_roles,
        action=action,
        entity_type=entity_type,
        entity_id=str(entity_id),
        before=json_safe(before),
        after=json_safe(after),
        request_id=current_request_id() or "offline",
        created_by=actor_id,
        updated_by=actor_id,
    )
    db.add(event)
    db.flush()
    return event


def get_audit_log(
    db: Session,
    *,
    fund_id: uuid.UUID,
    entity_id: str | uuid.UUID | None = None,
    entity_type: str | None = None,
    action: str | None = None,
    limit: int = 200,
) -> list[AuditEvent]:
    stmt = select(AuditEvent).where(AuditEvent.fund_id == fund_id)
    if entity_id is not None:
        stmt = stmt.where(AuditEvent.entity_id == str(entity_id))
    if entity_type:
        stmt = stmt.where(AuditEvent.entity_type == entity_type)
    if action:
        stmt = stmt.where(AuditEvent.action == action)
    stmt = stmt.order_by(AuditEvent.created_at.asc()).limit(limit)
    return list(db.execute(stmt).scalars().all())
