from __future__ import annotations

import uuid

import structlog
from sqlalchemy import select
from sqlalchemy.orm import Session

from capital_hub.core.config import settings
from capital_hub.core.db import repository
from capital_hub.core.db.unit_of_work import atomically
from capital_hub.domain.reporting.models.fund_metrics import FundMetricsSnapshot
from capital_hub.domain.reporting.services.metrics import FundMetrics, project_fund_metrics

logger = structlog.get_logger(__name__)


def load_fund_metrics(db: Session, fund_id: uuid.UUID) -> FundMetrics:
    """Project metrics from the fund's current records without persisting anything.

    The four collections are read in the session's current transaction, so
    they reflect one consistent view.
    """
    repository.get_fund(db, fund_id)
    return project_fund_metrics(
        commitments=repository.get_commitments(db, fund_id),
        calls=repository.get_calls(db, fund_id),
        distributions=repository.get_distributions(db, fund_id),
        investments=repository.get_investments(db, fund_id),
        holding_years=settings.metrics_assumed_holding_years,
    )


def calculate_fund_metrics(db: Session, *, fund_id: uuid.UUID) -> FundMetrics:
    """Recompute metrics and overwrite the fund's cached snapshot row."""

    def work(session: Session) -> FundMetrics:
        metrics = load_fund_metrics(session, fund_id)
        snapshot = session.execute(
            select(FundMetricsSnapshot).where(FundMetricsSnapshot.fund_id == fund_id)
        ).scalar_one_or_none()
        if snapshot is None:
            snapshot = FundMetricsSnapshot(fund_id=fund_id, created_by="system", updated_by="system")
            session.add(snapshot)
        for key, value in metrics.to_dict().items():
            setattr(snapshot, key, value)
        session.flush()
        return metrics

    metrics = atomically(db, work, label="fund_metrics.recompute")
    logger.info(
        "fund_metrics.recomputed",
        fund_id=str(fund_id),
        capital_called=str(metrics.capital_called),
        tvpi=metrics.tvpi,
        irr=metrics.irr,
    )
    return metrics


def get_cached_fund_metrics(db: Session, *, fund_id: uuid.UUID) -> FundMetricsSnapshot | None:
    repository.get_fund(db, fund_id)
    stmt = select(FundMetricsSnapshot).where(FundMetricsSnapshot.fund_id == fund_id)
    return db.execute(stmt).scalar_one_or_none()
