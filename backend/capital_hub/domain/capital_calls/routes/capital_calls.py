from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from capital_hub.core.db import repository
from capital_hub.core.db.session import get_db
from capital_hub.core.http.errors import to_http_exception
from capital_hub.core.security.auth import Actor
from capital_hub.core.security.dependencies import require_fund_access, require_role
from capital_hub.domain.capital_calls.models.capital_calls import CapitalCall
from capital_hub.domain.capital_calls.schemas.capital_calls import (
    CapitalCallCreate,
    CapitalCallOut,
    CapitalCallResponseOut,
    LPFundingCreate,
)
from capital_hub.domain.capital_calls.services import capital_calls as call_service
from capital_hub.shared.exceptions import AppError


router = APIRouter(
    prefix="/funds/{fund_id}/capital/calls",
    tags=["Capital Calls"],
    dependencies=[Depends(require_fund_access())],
)


def _call_out(db: Session, call: CapitalCall) -> CapitalCallOut:
    out = CapitalCallOut.model_validate(call)
    out.responses = [CapitalCallResponseOut.model_validate(r) for r in repository.get_call_responses(db, call.id)]
    return out


@router.post("", response_model=CapitalCallOut, status_code=status.HTTP_201_CREATED)
def create_capital_call(
    fund_id: uuid.UUID,
    payload: CapitalCallCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_role(["GP", "FUND_ADMIN"])),
):
    try:
        call = call_service.create_capital_call(db, fund_id=fund_id, actor=actor, payload=payload)
    except AppError as e:
        raise to_http_exception(e)
    return _call_out(db, call)


@router.get("", response_model=list[CapitalCallOut])
def list_capital_calls(
    fund_id: uuid.UUID,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_role(["GP", "FUND_ADMIN", "AUDITOR"])),
):
    try:
        calls = call_service.list_capital_calls(db, fund_id=fund_id)
    except AppError as e:
        raise to_http_exception(e)
    return [CapitalCallOut.model_validate(c) for c in calls]


@router.get("/{call_id}", response_model=CapitalCallOut)
def get_capital_call(
    fund_id: uuid.UUID,
    call_id: uuid.UUID,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_role(["GP", "FUND_ADMIN", "AUDITOR"])),
):
    try:
        call, _ = call_service.get_capital_call(db, fund_id=fund_id, call_id=call_id)
    except AppError as e:
        raise to_http_exception(e)
    return _call_out(db, call)


@router.post("/{call_id}/issue", response_model=CapitalCallOut)
def issue_capital_call(
    fund_id: uuid.UUID,
    call_id: uuid.UUID,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_role(["GP", "FUND_ADMIN"])),
):
    try:
        call = call_service.issue_capital_call(db, fund_id=fund_id, call_id=call_id, actor=actor)
    except AppError as e:
        raise to_http_exception(e)
    return _call_out(db, call)


@router.post("/{call_id}/cancel", response_model=CapitalCallOut)
def cancel_capital_call(
    fund_id: uuid.UUID,
    call_id: uuid.UUID,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_role(["GP", "FUND_ADMIN"])),
):
    try:
        call = call_service.cancel_capital_call(db, fund_id=fund_id, call_id=call_id, actor=actor)
    except AppError as e:
        raise to_http_exception(e)
    return _call_out(db, call)


@router.post("/{call_id}/fundings", response_model=CapitalCallOut)
def record_lp_funding(
    fund_id: uuid.UUID,
    call_id: uuid.UUID,
    payload: LPFundingCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_role(["FUND_ADMIN"])),
):
    try:
        call = call_service.record_lp_funding(db, fund_id=fund_id, call_id=call_id, actor=actor, payload=payload)
    except AppError as e:
        raise to_http_exception(e)
    return _call_out(db, call)
