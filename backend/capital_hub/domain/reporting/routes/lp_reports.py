from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from capital_hub.core.db.session import get_db
from capital_hub.core.http.errors import to_http_exception
from capital_hub.core.security.auth import Actor
from capital_hub.core.security.dependencies import require_fund_access, require_role
from capital_hub.domain.reporting.schemas.lp_reports import LPReportCreate, LPReportOut, LPReportStatusUpdate
from capital_hub.domain.reporting.services import lp_reports as report_service
from capital_hub.shared.exceptions import AppError


router = APIRouter(
    prefix="/funds/{fund_id}/capital/reports",
    tags=["LP Reports"],
    dependencies=[Depends(require_fund_access())],
)


@router.post("", response_model=LPReportOut, status_code=status.HTTP_201_CREATED)
def create_lp_report(
    fund_id: uuid.UUID,
    payload: LPReportCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_role(["GP", "FUND_ADMIN"])),
):
    try:
        return report_service.create_lp_report(db, fund_id=fund_id, actor=actor, payload=payload)
    except AppError as e:
        raise to_http_exception(e)


@router.get("", response_model=list[LPReportOut])
def list_lp_reports(
    fund_id: uuid.UUID,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_role(["GP", "FUND_ADMIN", "AUDITOR"])),
):
    try:
        return report_service.list_lp_reports(db, fund_id=fund_id)
    except AppError as e:
        raise to_http_exception(e)


@router.get("/{report_id}", response_model=LPReportOut)
def get_lp_report(
    fund_id: uuid.UUID,
    report_id: uuid.UUID,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_role(["GP", "FUND_ADMIN", "AUDITOR", "INVESTOR"])),
):
    try:
        return report_service.get_lp_report(db, fund_id=fund_id, report_id=report_id)
    except AppError as e:
        raise to_http_exception(e)


@router.patch("/{report_id}/status", response_model=LPReportOut)
def update_lp_report_status(
    fund_id: uuid.UUID,
    report_id: uuid.UUID,
    payload: LPReportStatusUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_role(["GP", "FUND_ADMIN"])),
):
    try:
        return report_service.update_lp_report_status(
            db, fund_id=fund_id, report_id=report_id, actor=actor, payload=payload
        )
    except AppError as e:
        raise to_http_exception(e)
