from __future__ import annotations

import datetime as dt
import uuid
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from capital_hub.domain.distributions.enums import (
    AllocationStatus,
    DistributionStatus,
    DistributionType,
    WaterfallTier,
)


class BreakdownLine(BaseModel):
    type: DistributionType
    amount: Decimal = Field(decimal_places=2)
    description: str | None = None


class DistributionCreate(BaseModel):
    distribution_date: dt.date
    record_date: dt.date
    source_description: str | None = None
    breakdown: list[BreakdownLine]
    apply_waterfall: bool = False


class DistributionPay(BaseModel):
    paid_date: dt.date | None = None


class WaterfallPreviewRequest(BaseModel):
    amount: Decimal = Field(ge=0, decimal_places=2)


class TierResultOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    tier: WaterfallTier
    label: str
    lp_share: Decimal
    gp_share: Decimal
    lp_percent: Decimal
    gp_percent: Decimal
    tier_complete: bool


class WaterfallCalculationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    distribution_amount: Decimal
    tiers: list[TierResultOut]
    total_to_lp: Decimal
    total_to_gp: Decimal
    gp_carried_interest: Decimal
    effective_carry: float


class DistributionAllocationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    lp_commitment_id: uuid.UUID
    ownership_percent: Decimal
    gross_amount: Decimal
    tax_withheld: Decimal
    net_amount: Decimal
    breakdown: dict[str, Decimal]
    paid_date: dt.date | None
    status: AllocationStatus


class DistributionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    fund_id: uuid.UUID
    distribution_number: int
    distribution_date: dt.date
    record_date: dt.date
    source_description: str | None
    total_distribution_amount: Decimal
    breakdown: list[BreakdownLine]
    apply_waterfall: bool
    waterfall_calculation: dict | None
    gp_amount: Decimal
    status: DistributionStatus

    allocations: list[DistributionAllocationOut] = Field(default_factory=list)
