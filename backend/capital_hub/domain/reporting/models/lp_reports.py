from __future__ import annotations

import datetime as dt
import uuid

from sqlalchemy import Date, DateTime, Enum as SAEnum, ForeignKey, Integer, JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from capital_hub.core.db.base import AuditMetaMixin, Base, FundScopedMixin, IdMixin
from capital_hub.domain.reporting.enums import LPReportStatus, LPReportType


class LPReport(Base, IdMixin, FundScopedMixin, AuditMetaMixin):
    __tablename__ = "lp_reports"

    fund_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("funds.id", ondelete="RESTRICT"), index=True)
    report_type: Mapped[LPReportType] = mapped_column(SAEnum(LPReportType, name="lp_report_type_enum"), nullable=False)
    report_period_start: Mapped[dt.date] = mapped_column(Date, nullable=False)
    report_period_end: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    status: Mapped[LPReportStatus] = mapped_column(
        SAEnum(LPReportStatus, name="lp_report_status_enum"),
        nullable=False,
        default=LPReportStatus.draft,
        index=True,
    )

    # Snapshots copied from the metrics projection at creation time.
    performance_summary: Mapped[dict] = mapped_column(JSON, nullable=False)
    portfolio_summary: Mapped[dict] = mapped_column(JSON, nullable=False)
    capital_summary: Mapped[dict] = mapped_column(JSON, nullable=False)
    quartile: Mapped[int] = mapped_column(Integer, nullable=False)

    recipient_investor_ids: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    distributed_at: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
