from __future__ import annotations

import datetime as dt
import uuid
from decimal import Decimal

from sqlalchemy import Date, Enum as SAEnum, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from capital_hub.core.db.base import OWNERSHIP, AuditMetaMixin, Base, FundScopedMixin, IdMixin, VersionedMixin
from capital_hub.domain.portfolio.enums import ExitType, Geography, InvestmentStatus, Sector, ValuationMethod


class PortfolioInvestment(Base, IdMixin, FundScopedMixin, VersionedMixin, AuditMetaMixin):
    __tablename__ = "portfolio_investments"

    fund_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("funds.id", ondelete="RESTRICT"), index=True)
    company_name: Mapped[str] = mapped_column(String(255), nullable=False)
    company_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    sector: Mapped[Sector] = mapped_column(SAEnum(Sector, name="investment_sector_enum"), nullable=False, index=True)
    geography: Mapped[Geography] = mapped_column(
        SAEnum(Geography, name="investment_geography_enum"),
        nullable=False,
        index=True,
    )

    investment_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    initial_investment: Mapped[Decimal] = mapped_column(nullable=False)
    follow_on_investments: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    total_invested: Mapped[Decimal] = mapped_column(nullable=False)
    ownership_percent: Mapped[Decimal] = mapped_column(OWNERSHIP, nullable=False, default=Decimal("0"))
    board_seats: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    current_valuation: Mapped[Decimal] = mapped_column(nullable=False)
    valuation_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    valuation_method: Mapped[ValuationMethod] = mapped_column(
        SAEnum(ValuationMethod, name="valuation_method_enum"),
        nullable=False,
        default=ValuationMethod.cost,
    )

    realized_value: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    unrealized_value: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    total_value: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    moic: Mapped[Decimal] = mapped_column(Numeric(12, 4), nullable=False, default=Decimal("0"))

    status: Mapped[InvestmentStatus] = mapped_column(
        SAEnum(InvestmentStatus, name="investment_status_enum"),
        nullable=False,
        default=InvestmentStatus.funded,
        index=True,
    )
    impairment_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    exit_date: Mapped[dt.date | None] = mapped_column(Date, nullable=True)
    exit_type: Mapped[ExitType | None] = mapped_column(SAEnum(ExitType, name="exit_type_enum"), nullable=True)
    exit_proceeds: Mapped[Decimal | None] = mapped_column(nullable=True)
    exit_multiple: Mapped[Decimal | None] = mapped_column(Numeric(12, 4), nullable=True)


class ValuationRecord(Base, IdMixin, FundScopedMixin, AuditMetaMixin):
    """Append-only valuation history for a portfolio investment."""

    __tablename__ = "valuation_records"

    investment_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("portfolio_investments.id", ondelete="CASCADE"),
        index=True,
    )
    valuation_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    previous_valuation: Mapped[Decimal] = mapped_column(nullable=False)
    new_valuation: Mapped[Decimal] = mapped_column(nullable=False)
    change_percent: Mapped[Decimal] = mapped_column(Numeric(12, 4), nullable=False, default=Decimal("0"))
    valuation_method: Mapped[ValuationMethod] = mapped_column(
        SAEnum(ValuationMethod, name="valuation_method_enum"),
        nullable=False,
    )
    methodology: Mapped[str | None] = mapped_column(Text, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
