from __future__ import annotations

import datetime as dt
import uuid
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from capital_hub.core.db.base import AuditMetaMixin, Base, FundScopedMixin, IdMixin, VersionedMixin
from capital_hub.domain.capital_calls.enums import CapitalCallPurpose, CapitalCallStatus, ResponseStatus


class CapitalCall(Base, IdMixin, FundScopedMixin, VersionedMixin, AuditMetaMixin):
    __tablename__ = "capital_calls"

    fund_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("funds.id", ondelete="RESTRICT"), index=True)
    call_number: Mapped[int] = mapped_column(Integer, nullable=False)
    call_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    due_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    purpose: Mapped[CapitalCallPurpose] = mapped_column(
        SAEnum(CapitalCallPurpose, name="capital_call_purpose_enum"),
        nullable=False,
        default=CapitalCallPurpose.investment,
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    investment_amount: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    management_fee_amount: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    partnership_expenses_amount: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    organizational_costs_amount: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    total_call_amount: Mapped[Decimal] = mapped_column(nullable=False)

    amount_received: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    amount_outstanding: Mapped[Decimal] = mapped_column(nullable=False)
    percent_funded: Mapped[Decimal] = mapped_column(Numeric(9, 4), nullable=False, default=Decimal("0"))

    status: Mapped[CapitalCallStatus] = mapped_column(
        SAEnum(CapitalCallStatus, name="capital_call_status_enum"),
        nullable=False,
        default=CapitalCallStatus.draft,
        index=True,
    )
    issued_at: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    cancelled_at: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint("fund_id", "call_number", name="uq_capital_calls_fund_number"),
        CheckConstraint("due_date >= call_date", name="ck_capital_calls_due_after_call"),
    )


class CapitalCallResponse(Base, IdMixin, FundScopedMixin, AuditMetaMixin):
    """One LP's share of a capital call."""

    __tablename__ = "capital_call_responses"

    capital_call_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("capital_calls.id", ondelete="CASCADE"),
        index=True,
    )
    lp_commitment_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("lp_commitments.id", ondelete="RESTRICT"),
        index=True,
    )
    call_amount: Mapped[Decimal] = mapped_column(nullable=False)
    funded_amount: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    funded_date: Mapped[dt.date | None] = mapped_column(Date, nullable=True)
    status: Mapped[ResponseStatus] = mapped_column(
        SAEnum(ResponseStatus, name="capital_call_response_status_enum"),
        nullable=False,
        default=ResponseStatus.pending,
    )
    payment_reference: Mapped[str | None] = mapped_column(String(128), nullable=True)

    __table_args__ = (UniqueConstraint("capital_call_id", "lp_commitment_id", name="uq_call_responses_call_lp"),)
