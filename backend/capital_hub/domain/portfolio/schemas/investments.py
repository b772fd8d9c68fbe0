from __future__ import annotations

import datetime as dt
import uuid
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from capital_hub.domain.portfolio.enums import ExitType, Geography, InvestmentStatus, Sector, ValuationMethod


class PortfolioInvestmentCreate(BaseModel):
    company_name: str = Field(min_length=1, max_length=255)
    company_description: str | None = None
    sector: Sector
    geography: Geography
    investment_date: dt.date
    initial_investment: Decimal = Field(gt=0, decimal_places=2)
    ownership_percent: Decimal = Field(default=Decimal("0"), ge=0, le=100)
    board_seats: int = Field(default=0, ge=0)
    current_valuation: Decimal | None = Field(default=None, ge=0, decimal_places=2)
    valuation_method: ValuationMethod = ValuationMethod.cost


class ValuationUpdate(BaseModel):
    valuation_date: dt.date
    new_valuation: Decimal = Field(ge=0, decimal_places=2)
    method: ValuationMethod
    methodology: str | None = None
    notes: str | None = None


class FollowOnCreate(BaseModel):
    amount: Decimal = Field(gt=0, decimal_places=2)
    investment_date: dt.date | None = None


class ExitCreate(BaseModel):
    exit_date: dt.date
    exit_type: ExitType
    exit_proceeds: Decimal = Field(ge=0, decimal_places=2)


class InvestmentStatusUpdate(BaseModel):
    status: InvestmentStatus
    notes: str | None = None


class PortfolioInvestmentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    fund_id: uuid.UUID
    company_name: str
    company_description: str | None
    sector: Sector
    geography: Geography
    investment_date: dt.date

    initial_investment: Decimal
    follow_on_investments: Decimal
    total_invested: Decimal
    ownership_percent: Decimal
    board_seats: int

    current_valuation: Decimal
    valuation_date: dt.date
    valuation_method: ValuationMethod
    realized_value: Decimal
    unrealized_value: Decimal
    total_value: Decimal
    moic: Decimal

    status: InvestmentStatus
    impairment_notes: str | None
    exit_date: dt.date | None
    exit_type: ExitType | None
    exit_proceeds: Decimal | None
    exit_multiple: Decimal | None


class ValuationRecordOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    investment_id: uuid.UUID
    valuation_date: dt.date
    previous_valuation: Decimal
    new_valuation: Decimal
    change_percent: Decimal
    valuation_method: ValuationMethod
    methodology: str | None
    notes: str | None


class AllocationRowOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    key: str
    invested: Decimal
    percent: float
    investments: int


class ConcentrationReportOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_invested: Decimal
    investment_count: int
    sector_allocation: list[AllocationRowOut]
    geographic_allocation: list[AllocationRowOut]
    largest_investment_percent: float
    top5_investments_percent: float
    herfindahl_index: float
    diversification_score: float
    notes: list[str]
