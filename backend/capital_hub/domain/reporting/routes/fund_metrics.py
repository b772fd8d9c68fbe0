from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from capital_hub.core.db.session import get_db
from capital_hub.core.http.errors import to_http_exception
from capital_hub.core.security.auth import Actor
from capital_hub.core.security.dependencies import require_fund_access, require_role
from capital_hub.domain.reporting.schemas.fund_metrics import FundMetricsOut, FundMetricsSnapshotOut
from capital_hub.domain.reporting.services import fund_metrics as metrics_service
from capital_hub.shared.exceptions import AppError


router = APIRouter(
    prefix="/funds/{fund_id}/capital/metrics",
    tags=["Fund Metrics"],
    dependencies=[Depends(require_fund_access())],
)


@router.post("/recalculate", response_model=FundMetricsOut)
def recalculate_fund_metrics(
    fund_id: uuid.UUID,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_role(["GP", "FUND_ADMIN"])),
):
    try:
        metrics = metrics_service.calculate_fund_metrics(db, fund_id=fund_id)
    except AppError as e:
        raise to_http_exception(e)
    return FundMetricsOut.model_validate(metrics)


@router.get("", response_model=FundMetricsSnapshotOut)
def get_fund_metrics(
    fund_id: uuid.UUID,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_role(["GP", "FUND_ADMIN", "AUDITOR", "INVESTOR"])),
):
    try:
        snapshot = metrics_service.get_cached_fund_metrics(db, fund_id=fund_id)
    except AppError as e:
        raise to_http_exception(e)
    if snapshot is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Metrics have not been calculated")
    return snapshot
