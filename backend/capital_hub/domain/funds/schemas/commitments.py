from __future__ import annotations

import datetime as dt
import uuid
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from capital_hub.domain.funds.enums import LPCommitmentStatus


class LPCommitmentCreate(BaseModel):
    investor_id: uuid.UUID
    investor_name: str = Field(min_length=1, max_length=255)
    investor_type: str | None = Field(default=None, max_length=64)
    commitment_amount: Decimal = Field(gt=0, decimal_places=2)
    commitment_date: dt.date
    commitment_currency: str = Field(default="USD", min_length=3, max_length=3)
    exchange_rate: Decimal | None = Field(default=None, gt=0)


class LPCommitmentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    fund_id: uuid.UUID
    investor_id: uuid.UUID
    investor_name: str
    investor_type: str | None

    commitment_amount: Decimal
    commitment_date: dt.date
    commitment_currency: str
    exchange_rate: Decimal | None

    capital_called: Decimal
    capital_called_percent: Decimal
    unfunded_commitment: Decimal
    distributions_received: Decimal
    ownership_percent: Decimal
    status: LPCommitmentStatus
