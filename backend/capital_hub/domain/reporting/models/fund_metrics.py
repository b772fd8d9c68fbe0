from __future__ import annotations

import datetime as dt
import uuid
from decimal import Decimal

from sqlalchemy import DateTime, Float, ForeignKey, Integer, Numeric
from sqlalchemy.orm import Mapped, mapped_column

from capital_hub.core.db.base import AuditMetaMixin, Base, FundScopedMixin, IdMixin, VersionedMixin


class FundMetricsSnapshot(Base, IdMixin, FundScopedMixin, VersionedMixin, AuditMetaMixin):
    """Cached fund metrics projection, one row per fund.

    Every recompute overwrites all columns; no column is ever patched on its own.
    """

    __tablename__ = "fund_metrics_snapshots"

    fund_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("funds.id", ondelete="CASCADE"),
        unique=True,
        index=True,
    )

    total_commitments: Mapped[Decimal] = mapped_column(nullable=False)
    capital_called: Mapped[Decimal] = mapped_column(nullable=False)
    capital_called_percent: Mapped[Decimal] = mapped_column(Numeric(9, 4), nullable=False)
    unfunded_commitments: Mapped[Decimal] = mapped_column(nullable=False)
    distributions_paid: Mapped[Decimal] = mapped_column(nullable=False)
    recallable_capital: Mapped[Decimal] = mapped_column(nullable=False)

    total_invested: Mapped[Decimal] = mapped_column(nullable=False)
    realized_value: Mapped[Decimal] = mapped_column(nullable=False)
    unrealized_value: Mapped[Decimal] = mapped_column(nullable=False)
    total_value: Mapped[Decimal] = mapped_column(nullable=False)

    dpi: Mapped[float] = mapped_column(Float, nullable=False)
    rvpi: Mapped[float] = mapped_column(Float, nullable=False)
    tvpi: Mapped[float] = mapped_column(Float, nullable=False)
    irr: Mapped[float] = mapped_column(Float, nullable=False)
    moic: Mapped[float] = mapped_column(Float, nullable=False)

    active_investments: Mapped[int] = mapped_column(Integer, nullable=False)
    realized_investments: Mapped[int] = mapped_column(Integer, nullable=False)
    total_investments: Mapped[int] = mapped_column(Integer, nullable=False)
    lp_count: Mapped[int] = mapped_column(Integer, nullable=False)

    calculated_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), nullable=False)
