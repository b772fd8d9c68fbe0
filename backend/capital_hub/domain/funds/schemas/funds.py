from __future__ import annotations

import datetime as dt
import uuid
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from capital_hub.domain.funds.enums import CatchUpBase, FundStatus, FundType, WaterfallType


class FundCreate(BaseModel):
    name: str = Field(min_length=2, max_length=200)
    short_name: str | None = Field(default=None, max_length=50)
    description: str | None = None
    fund_type: FundType = FundType.private_equity
    status: FundStatus = FundStatus.formation
    currency: str = Field(default="USD", min_length=3, max_length=3)
    inception_date: dt.date | None = None

    target_size: Decimal = Field(gt=0)
    hard_cap: Decimal = Field(gt=0)
    min_commitment: Decimal = Field(gt=0)
    max_commitment: Decimal = Field(gt=0)
    gp_commitment: Decimal = Field(default=Decimal("0"), ge=0)

    management_fee_rate: Decimal = Field(default=Decimal("2"), ge=0, le=100)
    carried_interest_rate: Decimal = Field(default=Decimal("20"), ge=0, lt=100)
    preferred_return_rate: Decimal = Field(default=Decimal("8"), ge=0, le=100)
    gp_catchup_rate: Decimal = Field(default=Decimal("100"), ge=0, le=100)
    waterfall_type: WaterfallType = WaterfallType.european
    catch_up_base: CatchUpBase = CatchUpBase.preferred_return

    # Recorded limits; concentration notes use the settings thresholds.
    max_single_investment_percent: Decimal = Field(default=Decimal("15"), ge=0, le=100)
    max_sector_concentration_percent: Decimal = Field(default=Decimal("40"), ge=0, le=100)
    max_geographic_concentration_percent: Decimal = Field(default=Decimal("60"), ge=0, le=100)
    min_diversification: int = Field(default=8, ge=0)

    @model_validator(mode="after")
    def _check_size_and_limits(self) -> "FundCreate":
        if self.hard_cap < self.target_size:
            raise ValueError("hard_cap must be greater than or equal to target_size")
        if self.max_commitment < self.min_commitment:
            raise ValueError("max_commitment must be greater than or equal to min_commitment")
        return self


class FundUpdate(BaseModel):
    """Explicit terms/limits update. Omitted fields are left unchanged."""

    name: str | None = Field(default=None, min_length=2, max_length=200)
    short_name: str | None = None
    description: str | None = None
    status: FundStatus | None = None

    target_size: Decimal | None = Field(default=None, gt=0)
    hard_cap: Decimal | None = Field(default=None, gt=0)
    min_commitment: Decimal | None = Field(default=None, gt=0)
    max_commitment: Decimal | None = Field(default=None, gt=0)
    gp_commitment: Decimal | None = Field(default=None, ge=0)

    management_fee_rate: Decimal | None = Field(default=None, ge=0, le=100)
    carried_interest_rate: Decimal | None = Field(default=None, ge=0, lt=100)
    preferred_return_rate: Decimal | None = Field(default=None, ge=0, le=100)
    gp_catchup_rate: Decimal | None = Field(default=None, ge=0, le=100)
    waterfall_type: WaterfallType | None = None
    catch_up_base: CatchUpBase | None = None

    max_single_investment_percent: Decimal | None = Field(default=None, ge=0, le=100)
    max_sector_concentration_percent: Decimal | None = Field(default=None, ge=0, le=100)
    max_geographic_concentration_percent: Decimal | None = Field(default=None, ge=0, le=100)
    min_diversification: int | None = Field(default=None, ge=0)


class FundOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    short_name: str | None
    description: str | None
    fund_type: FundType
    status: FundStatus
    currency: str
    inception_date: dt.date | None

    target_size: Decimal
    hard_cap: Decimal
    min_commitment: Decimal
    max_commitment: Decimal
    gp_commitment: Decimal

    management_fee_rate: Decimal
    carried_interest_rate: Decimal
    preferred_return_rate: Decimal
    gp_catchup_rate: Decimal
    waterfall_type: WaterfallType
    catch_up_base: CatchUpBase

    max_single_investment_percent: Decimal
    max_sector_concentration_percent: Decimal
    max_geographic_concentration_percent: Decimal
    min_diversification: int

    version: int


class AuditEventOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    created_at: dt.datetime
    actor_id: str
    actor_roles: list[str]
    action: str
    entity_type: str
    entity_id: str
    before: dict | None
    after: dict | None
    request_id: str
