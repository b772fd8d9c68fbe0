from __future__ import annotations

import datetime as dt
from decimal import Decimal

from sqlalchemy import CheckConstraint, Date, Enum as SAEnum, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from capital_hub.core.db.base import RATE, AuditMetaMixin, Base, IdMixin, VersionedMixin
from capital_hub.domain.funds.enums import CatchUpBase, FundStatus, FundType, WaterfallType


class Fund(Base, IdMixin, VersionedMixin, AuditMetaMixin):
    """A fund and its contractual terms.

    Terms change only through an explicit fund update, never as a side effect of
    allocating calls or distributions.
    """

    __tablename__ = "funds"

    name: Mapped[str] = mapped_column(String(200), unique=True, index=True)
    short_name: Mapped[str | None] = mapped_column(String(50), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    fund_type: Mapped[FundType] = mapped_column(
        SAEnum(FundType, name="fund_type_enum"),
        nullable=False,
        default=FundType.private_equity,
    )
    status: Mapped[FundStatus] = mapped_column(
        SAEnum(FundStatus, name="fund_status_enum"),
        nullable=False,
        default=FundStatus.formation,
        index=True,
    )
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")
    inception_date: Mapped[dt.date | None] = mapped_column(Date, nullable=True)

    # Size & structure
    target_size: Mapped[Decimal] = mapped_column(nullable=False)
    hard_cap: Mapped[Decimal] = mapped_column(nullable=False)
    min_commitment: Mapped[Decimal] = mapped_column(nullable=False)
    max_commitment: Mapped[Decimal] = mapped_column(nullable=False)
    gp_commitment: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))

    # Terms (percent, 0-100)
    management_fee_rate: Mapped[Decimal] = mapped_column(RATE, nullable=False, default=Decimal("2"))
    carried_interest_rate: Mapped[Decimal] = mapped_column(RATE, nullable=False, default=Decimal("20"))
    preferred_return_rate: Mapped[Decimal] = mapped_column(RATE, nullable=False, default=Decimal("8"))
    gp_catchup_rate: Mapped[Decimal] = mapped_column(RATE, nullable=False, default=Decimal("100"))
    waterfall_type: Mapped[WaterfallType] = mapped_column(
        SAEnum(WaterfallType, name="waterfall_type_enum"),
        nullable=False,
        default=WaterfallType.european,
    )
    catch_up_base: Mapped[CatchUpBase] = mapped_column(
        SAEnum(CatchUpBase, name="catch_up_base_enum"),
        nullable=False,
        default=CatchUpBase.preferred_return,
    )

    # Allocation limits as stated in the LPA. Informational only: concentration
    # scoring uses the deployment-wide thresholds in settings.
    max_single_investment_percent: Mapped[Decimal] = mapped_column(RATE, nullable=False, default=Decimal("15"))
    max_sector_concentration_percent: Mapped[Decimal] = mapped_column(RATE, nullable=False, default=Decimal("40"))
    max_geographic_concentration_percent: Mapped[Decimal] = mapped_column(
        RATE, nullable=False, default=Decimal("60")
    )
    min_diversification: Mapped[int] = mapped_column(Integer, nullable=False, default=8)

    __table_args__ = (
        CheckConstraint("hard_cap >= target_size", name="ck_funds_hard_cap_gte_target"),
        CheckConstraint("max_commitment >= min_commitment", name="ck_funds_max_gte_min_commitment"),
    )
