from __future__ import annotations

import datetime as dt
import uuid
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from capital_hub.domain.reporting.enums import LPReportStatus, LPReportType


class LPReportCreate(BaseModel):
    report_type: LPReportType
    report_period_start: dt.date
    report_period_end: dt.date
    title: str = Field(min_length=1, max_length=300)
    recipient_investor_ids: list[str] = Field(default_factory=list)


class LPReportStatusUpdate(BaseModel):
    status: LPReportStatus


class LPReportOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    fund_id: uuid.UUID
    report_type: LPReportType
    report_period_start: dt.date
    report_period_end: dt.date
    title: str
    status: LPReportStatus
    performance_summary: dict[str, Any]
    portfolio_summary: dict[str, Any]
    capital_summary: dict[str, Any]
    quartile: int
    recipient_investor_ids: list[str]
    distributed_at: dt.datetime | None
    created_at: dt.datetime
