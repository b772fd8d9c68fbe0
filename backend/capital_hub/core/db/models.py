from __future__ import annotations

from sqlalchemy import JSON, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from capital_hub.core.db.base import AuditMetaMixin, Base, FundScopedMixin, IdMixin


class AuditEvent(Base, IdMixin, FundScopedMixin, AuditMetaMixin):
    """One capital operation as seen by the ledger: who did what to which record.

    Rows are insert-only. ``before`` and ``after`` hold column snapshots with
    money kept as decimal strings.
    """

    __tablename__ = "audit_events"

    actor_id: Mapped[str] = mapped_column(String(200), index=True)
    actor_roles: Mapped[list[str]] = mapped_column(JSON, default=list)

    # e.g. "capital_call.lp_funded", "distribution.paid"
    action: Mapped[str] = mapped_column(String(200), index=True)
    entity_type: Mapped[str] = mapped_column(String(100))
    entity_id: Mapped[str] = mapped_column(String(64))

    before: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    after: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    request_id: Mapped[str] = mapped_column(String(64), index=True)

    __table_args__ = (
        Index("ix_audit_events_fund_entity", "fund_id", "entity_type", "entity_id"),
        Index("ix_audit_events_fund_action", "fund_id", "action"),
    )
