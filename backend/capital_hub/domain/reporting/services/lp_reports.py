from __future__ import annotations

import uuid

import structlog
from sqlalchemy import select
from sqlalchemy.orm import Session

from capital_hub.core.db import repository
from capital_hub.core.db.audit import write_audit_event
from capital_hub.core.security.auth import Actor
from capital_hub.domain.reporting.enums import LPReportStatus
from capital_hub.domain.reporting.models.lp_reports import LPReport
from capital_hub.domain.reporting.schemas.lp_reports import LPReportCreate, LPReportStatusUpdate
from capital_hub.domain.reporting.services.fund_metrics import load_fund_metrics
from capital_hub.domain.reporting.services.metrics import FundMetrics
from capital_hub.shared.exceptions import NotFound, ValidationError
from capital_hub.shared.utils import json_safe, sa_model_to_dict, utcnow

logger = structlog.get_logger(__name__)

# Each status may only move to the next one; distributed is terminal.
NEXT_STATUS = {
    LPReportStatus.draft: {LPReportStatus.review},
    LPReportStatus.review: {LPReportStatus.draft, LPReportStatus.approved},
    LPReportStatus.approved: {LPReportStatus.distributed},
    LPReportStatus.distributed: set(),
}


def tvpi_quartile(tvpi: float) -> int:
    if tvpi >= 2.0:
        return 1
    if tvpi >= 1.5:
        return 2
    if tvpi >= 1.0:
        return 3
    return 4


def build_summaries(metrics: FundMetrics) -> dict[str, dict]:
    """Split one metrics projection into the three report summary blocks."""
    return {
        "performance_summary": json_safe(
            {
                "nav": metrics.total_value,
                "dpi": metrics.dpi,
                "rvpi": metrics.rvpi,
                "tvpi": metrics.tvpi,
                "irr": metrics.irr,
                "moic": metrics.moic,
                "quartile": tvpi_quartile(metrics.tvpi),
            }
        ),
        "portfolio_summary": json_safe(
            {
                "total_investments": metrics.total_investments,
                "active_investments": metrics.active_investments,
                "realized_investments": metrics.realized_investments,
                "total_invested": metrics.total_invested,
                "realized_value": metrics.realized_value,
                "unrealized_value": metrics.unrealized_value,
            }
        ),
        "capital_summary": json_safe(
            {
                "total_commitments": metrics.total_commitments,
                "capital_called": metrics.capital_called,
                "capital_called_percent": metrics.capital_called_percent,
                "distributions_paid": metrics.distributions_paid,
                "unfunded_commitments": metrics.unfunded_commitments,
                "lp_count": metrics.lp_count,
            }
        ),
    }


def create_lp_report(
    db: Session,
    *,
    fund_id: uuid.UUID,
    actor: Actor,
    payload: LPReportCreate,
) -> LPReport:
    if payload.report_period_end < payload.report_period_start:
        raise ValidationError("Report period end cannot precede its start")

    metrics = load_fund_metrics(db, fund_id)
    report = LPReport(
        fund_id=fund_id,
        report_type=payload.report_type,
        report_period_start=payload.report_period_start,
        report_period_end=payload.report_period_end,
        title=payload.title,
        status=LPReportStatus.draft,
        quartile=tvpi_quartile(metrics.tvpi),
        recipient_investor_ids=list(payload.recipient_investor_ids),
        created_by=actor.actor_id,
        updated_by=actor.actor_id,
        **build_summaries(metrics),
    )
    db.add(report)
    db.flush()

    write_audit_event(
        db,
        fund_id=fund_id,
        actor_id=actor.actor_id,
        action="lp_report.created",
        entity_type="LPReport",
        entity_id=report.id,
        before=None,
        after=sa_model_to_dict(report),
    )
    db.commit()
    db.refresh(report)
    logger.info(
        "lp_report.created",
        fund_id=str(fund_id),
        report_id=str(report.id),
        report_type=report.report_type.value,
        quartile=report.quartile,
    )
    return report


def get_lp_report(db: Session, *, fund_id: uuid.UUID, report_id: uuid.UUID) -> LPReport:
    report = db.get(LPReport, report_id)
    if not report or report.fund_id != fund_id:
        raise NotFound("LP report not found")
    return report


def list_lp_reports(db: Session, *, fund_id: uuid.UUID) -> list[LPReport]:
    repository.get_fund(db, fund_id)
    stmt = (
        select(LPReport)
        .where(LPReport.fund_id == fund_id)
        .order_by(LPReport.report_period_end.desc(), LPReport.created_at.desc())
    )
    return list(db.execute(stmt).scalars().all())


def update_lp_report_status(
    db: Session,
    *,
    fund_id: uuid.UUID,
    report_id: uuid.UUID,
    actor: Actor,
    payload: LPReportStatusUpdate,
) -> LPReport:
    report = get_lp_report(db, fund_id=fund_id, report_id=report_id)
    if payload.status not in NEXT_STATUS[report.status]:
        raise ValidationError(f"Cannot move LP report from {report.status.value} to {payload.status.value}")

    before = sa_model_to_dict(report)
    report.status = payload.status
    if payload.status == LPReportStatus.distributed:
        report.distributed_at = utcnow()
    report.updated_by = actor.actor_id
    db.flush()

    write_audit_event(
        db,
        fund_id=fund_id,
        actor_id=actor.actor_id,
        action=f"lp_report.{payload.status.value}",
        entity_type="LPReport",
        entity_id=report.id,
        before=before,
        after=sa_model_to_dict(report),
    )
    db.commit()
    db.refresh(report)
    logger.info("lp_report.status_changed", report_id=str(report.id), status=payload.status.value)
    return report
