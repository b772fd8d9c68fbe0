from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from capital_hub.core.db.session import get_db
from capital_hub.core.http.errors import to_http_exception
from capital_hub.core.security.auth import Actor
from capital_hub.core.security.dependencies import require_fund_access, require_role
from capital_hub.domain.portfolio.schemas.investments import (
    ConcentrationReportOut,
    ExitCreate,
    FollowOnCreate,
    InvestmentStatusUpdate,
    PortfolioInvestmentCreate,
    PortfolioInvestmentOut,
    ValuationRecordOut,
    ValuationUpdate,
)
from capital_hub.domain.portfolio.services import investments as investment_service
from capital_hub.shared.exceptions import AppError


router = APIRouter(
    prefix="/funds/{fund_id}/capital/portfolio",
    tags=["Portfolio"],
    dependencies=[Depends(require_fund_access())],
)


@router.post("/investments", response_model=PortfolioInvestmentOut, status_code=status.HTTP_201_CREATED)
def create_portfolio_investment(
    fund_id: uuid.UUID,
    payload: PortfolioInvestmentCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_role(["GP", "INVESTMENT_TEAM"])),
):
    try:
        return investment_service.create_portfolio_investment(db, fund_id=fund_id, actor=actor, payload=payload)
    except AppError as e:
        raise to_http_exception(e)


@router.get("/investments", response_model=list[PortfolioInvestmentOut])
def list_investments(
    fund_id: uuid.UUID,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_role(["GP", "FUND_ADMIN", "INVESTMENT_TEAM", "AUDITOR"])),
):
    try:
        return investment_service.list_investments(db, fund_id=fund_id)
    except AppError as e:
        raise to_http_exception(e)


@router.get("/concentration", response_model=ConcentrationReportOut)
def get_concentration(
    fund_id: uuid.UUID,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_role(["GP", "FUND_ADMIN", "INVESTMENT_TEAM", "AUDITOR"])),
):
    try:
        report = investment_service.calculate_concentration(db, fund_id=fund_id)
    except AppError as e:
        raise to_http_exception(e)
    return ConcentrationReportOut.model_validate(report)


@router.get("/investments/{investment_id}", response_model=PortfolioInvestmentOut)
def get_investment(
    fund_id: uuid.UUID,
    investment_id: uuid.UUID,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_role(["GP", "FUND_ADMIN", "INVESTMENT_TEAM", "AUDITOR"])),
):
    try:
        return investment_service.get_investment(db, fund_id=fund_id, investment_id=investment_id)
    except AppError as e:
        raise to_http_exception(e)


@router.get("/investments/{investment_id}/valuations", response_model=list[ValuationRecordOut])
def list_valuations(
    fund_id: uuid.UUID,
    investment_id: uuid.UUID,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_role(["GP", "FUND_ADMIN", "INVESTMENT_TEAM", "AUDITOR"])),
):
    try:
        return investment_service.list_valuation_history(db, fund_id=fund_id, investment_id=investment_id)
    except AppError as e:
        raise to_http_exception(e)


@router.post("/investments/{investment_id}/valuations", response_model=PortfolioInvestmentOut)
def update_investment_valuation(
    fund_id: uuid.UUID,
    investment_id: uuid.UUID,
    payload: ValuationUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_role(["GP", "INVESTMENT_TEAM"])),
):
    try:
        return investment_service.update_investment_valuation(
            db, fund_id=fund_id, investment_id=investment_id, actor=actor, payload=payload
        )
    except AppError as e:
        raise to_http_exception(e)


@router.post("/investments/{investment_id}/follow-ons", response_model=PortfolioInvestmentOut)
def record_follow_on_investment(
    fund_id: uuid.UUID,
    investment_id: uuid.UUID,
    payload: FollowOnCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_role(["GP", "INVESTMENT_TEAM"])),
):
    try:
        return investment_service.record_follow_on_investment(
            db, fund_id=fund_id, investment_id=investment_id, actor=actor, payload=payload
        )
    except AppError as e:
        raise to_http_exception(e)


@router.post("/investments/{investment_id}/exit", response_model=PortfolioInvestmentOut)
def record_exit(
    fund_id: uuid.UUID,
    investment_id: uuid.UUID,
    payload: ExitCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_role(["GP"])),
):
    try:
        return investment_service.record_exit(db, fund_id=fund_id, investment_id=investment_id, actor=actor, payload=payload)
    except AppError as e:
        raise to_http_exception(e)


@router.patch("/investments/{investment_id}/status", response_model=PortfolioInvestmentOut)
def update_investment_status(
    fund_id: uuid.UUID,
    investment_id: uuid.UUID,
    payload: InvestmentStatusUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_role(["GP", "INVESTMENT_TEAM"])),
):
    try:
        return investment_service.update_investment_status(
            db, fund_id=fund_id, investment_id=investment_id, actor=actor, payload=payload
        )
    except AppError as e:
        raise to_http_exception(e)
