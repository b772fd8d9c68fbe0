from __future__ import annotations

import datetime as dt
import uuid
from decimal import Decimal

from sqlalchemy import Date, Enum as SAEnum, ForeignKey, Index, Numeric, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from capital_hub.core.db.base import OWNERSHIP, AuditMetaMixin, Base, FundScopedMixin, IdMixin, VersionedMixin
from capital_hub.domain.funds.enums import LPCommitmentStatus


class LPCommitment(Base, IdMixin, FundScopedMixin, VersionedMixin, AuditMetaMixin):
    __tablename__ = "lp_commitments"

    fund_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("funds.id", ondelete="RESTRICT"), index=True)
    investor_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), nullable=False, index=True)
    investor_name: Mapped[str] = mapped_column(String(255), nullable=False)
    investor_type: Mapped[str | None] = mapped_column(String(64), nullable=True)

    commitment_amount: Mapped[Decimal] = mapped_column(nullable=False)
    commitment_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    commitment_currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")
    # Stored rate only; no FX consolidation is performed.
    exchange_rate: Mapped[Decimal | None] = mapped_column(Numeric(18, 8), nullable=True)

    capital_called: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    capital_called_percent: Mapped[Decimal] = mapped_column(OWNERSHIP, nullable=False, default=Decimal("0"))
    unfunded_commitment: Mapped[Decimal] = mapped_column(nullable=False)
    distributions_received: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    recallable_distributions: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))

    ownership_percent: Mapped[Decimal] = mapped_column(OWNERSHIP, nullable=False, default=Decimal("0"))

    status: Mapped[LPCommitmentStatus] = mapped_column(
        SAEnum(LPCommitmentStatus, name="lp_commitment_status_enum"),
        nullable=False,
        default=LPCommitmentStatus.active,
        index=True,
    )

    __table_args__ = (Index("ix_lp_commitments_fund_investor", "fund_id", "investor_id"),)
