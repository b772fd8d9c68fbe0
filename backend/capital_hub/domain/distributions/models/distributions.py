from __future__ import annotations

import datetime as dt
import uuid
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Integer,
    JSON,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from capital_hub.core.db.base import OWNERSHIP, AuditMetaMixin, Base, FundScopedMixin, IdMixin, VersionedMixin
from capital_hub.domain.distributions.enums import AllocationStatus, DistributionStatus


class Distribution(Base, IdMixin, FundScopedMixin, VersionedMixin, AuditMetaMixin):
    __tablename__ = "distributions"

    fund_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("funds.id", ondelete="RESTRICT"), index=True)
    distribution_number: Mapped[int] = mapped_column(Integer, nullable=False)
    distribution_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    record_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    source_description: Mapped[str | None] = mapped_column(Text, nullable=True)

    total_distribution_amount: Mapped[Decimal] = mapped_column(nullable=False)
    # list[{type, amount, description}]
    breakdown: Mapped[list[dict]] = mapped_column(JSON, nullable=False, default=list)

    apply_waterfall: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    waterfall_calculation: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    gp_amount: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))

    status: Mapped[DistributionStatus] = mapped_column(
        SAEnum(DistributionStatus, name="distribution_status_enum"),
        nullable=False,
        default=DistributionStatus.draft,
        index=True,
    )
    approved_by: Mapped[str | None] = mapped_column(String(128), nullable=True)
    approved_at: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    paid_at: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (UniqueConstraint("fund_id", "distribution_number", name="uq_distributions_fund_number"),)


class DistributionAllocation(Base, IdMixin, FundScopedMixin, AuditMetaMixin):
    __tablename__ = "distribution_allocations"

    distribution_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("distributions.id", ondelete="CASCADE"),
        index=True,
    )
    lp_commitment_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("lp_commitments.id", ondelete="RESTRICT"),
        index=True,
    )
    ownership_percent: Mapped[Decimal] = mapped_column(OWNERSHIP, nullable=False)
    gross_amount: Mapped[Decimal] = mapped_column(nullable=False)
    tax_withheld: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    net_amount: Mapped[Decimal] = mapped_column(nullable=False)
    # {distribution_type: amount-as-string}
    breakdown: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    paid_date: Mapped[dt.date | None] = mapped_column(Date, nullable=True)
    payment_reference: Mapped[str | None] = mapped_column(String(128), nullable=True)
    status: Mapped[AllocationStatus] = mapped_column(
        SAEnum(AllocationStatus, name="distribution_allocation_status_enum"),
        nullable=False,
        default=AllocationStatus.pending,
    )

    __table_args__ = (
        UniqueConstraint("distribution_id", "lp_commitment_id", name="uq_distribution_allocations_dist_lp"),
    )
