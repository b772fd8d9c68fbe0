from __future__ import annotations

import datetime as dt
import uuid
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from capital_hub.domain.capital_calls.enums import CapitalCallPurpose, CapitalCallStatus, ResponseStatus


class CapitalCallCreate(BaseModel):
    call_date: dt.date
    due_date: dt.date
    purpose: CapitalCallPurpose = CapitalCallPurpose.investment
    description: str | None = None

    investment_amount: Decimal = Field(default=Decimal("0"), ge=0, decimal_places=2)
    management_fee_amount: Decimal = Field(default=Decimal("0"), ge=0, decimal_places=2)
    partnership_expenses_amount: Decimal = Field(default=Decimal("0"), ge=0, decimal_places=2)
    organizational_costs_amount: Decimal = Field(default=Decimal("0"), ge=0, decimal_places=2)


class LPFundingCreate(BaseModel):
    lp_commitment_id: uuid.UUID
    amount: Decimal = Field(decimal_places=2)
    funded_date: dt.date | None = None
    payment_reference: str | None = Field(default=None, max_length=128)


class CapitalCallResponseOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    lp_commitment_id: uuid.UUID
    call_amount: Decimal
    funded_amount: Decimal
    funded_date: dt.date | None
    status: ResponseStatus


class CapitalCallOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    fund_id: uuid.UUID
    call_number: int
    call_date: dt.date
    due_date: dt.date
    purpose: CapitalCallPurpose
    description: str | None

    investment_amount: Decimal
    management_fee_amount: Decimal
    partnership_expenses_amount: Decimal
    organizational_costs_amount: Decimal
    total_call_amount: Decimal

    amount_received: Decimal
    amount_outstanding: Decimal
    percent_funded: Decimal
    status: CapitalCallStatus

    responses: list[CapitalCallResponseOut] = Field(default_factory=list)
