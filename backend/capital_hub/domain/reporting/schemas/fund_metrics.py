from __future__ import annotations

import datetime as dt
import uuid
from decimal import Decimal

from pydantic import BaseModel, ConfigDict


class FundMetricsOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_commitments: Decimal
    capital_called: Decimal
    capital_called_percent: Decimal
    unfunded_commitments: Decimal
    distributions_paid: Decimal
    recallable_capital: Decimal

    total_invested: Decimal
    realized_value: Decimal
    unrealized_value: Decimal
    total_value: Decimal

    dpi: float
    rvpi: float
    tvpi: float
    irr: float
    moic: float

    active_investments: int
    realized_investments: int
    total_investments: int
    lp_count: int

    calculated_at: dt.datetime


class FundMetricsSnapshotOut(FundMetricsOut):
    fund_id: uuid.UUID
