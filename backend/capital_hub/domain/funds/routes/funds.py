from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from capital_hub.core.db.audit import get_audit_log
from capital_hub.core.db.session import get_db
from capital_hub.core.http.errors import to_http_exception
from capital_hub.core.security.auth import Actor
from capital_hub.core.security.dependencies import get_actor, require_fund_access, require_role
from capital_hub.domain.funds.schemas.funds import AuditEventOut, FundCreate, FundOut, FundUpdate
from capital_hub.domain.funds.services import funds as fund_service
from capital_hub.shared.exceptions import AppError


router = APIRouter(tags=["Funds"])


@router.post("/funds", response_model=FundOut, status_code=status.HTTP_201_CREATED)
def create_fund(
    payload: FundCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_role(["GP", "FUND_ADMIN"])),
):
    try:
        return fund_service.create_fund(db, actor=actor, payload=payload)
    except AppError as e:
        raise to_http_exception(e)


@router.get("/funds", response_model=list[FundOut])
def list_funds(db: Session = Depends(get_db), actor: Actor = Depends(get_actor)):
    return fund_service.list_funds(db, actor=actor)


@router.get(
    "/funds/{fund_id}",
    response_model=FundOut,
    dependencies=[Depends(require_fund_access())],
)
def get_fund(fund_id: uuid.UUID, db: Session = Depends(get_db), actor: Actor = Depends(get_actor)):
    try:
        return fund_service.get_fund(db, fund_id=fund_id)
    except AppError as e:
        raise to_http_exception(e)


@router.patch(
    "/funds/{fund_id}",
    response_model=FundOut,
    dependencies=[Depends(require_fund_access())],
)
def update_fund(
    fund_id: uuid.UUID,
    payload: FundUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_role(["GP", "FUND_ADMIN"])),
):
    try:
        return fund_service.update_fund(db, fund_id=fund_id, actor=actor, payload=payload)
    except AppError as e:
        raise to_http_exception(e)


@router.get(
    "/funds/{fund_id}/audit-events",
    response_model=list[AuditEventOut],
    dependencies=[Depends(require_fund_access())],
)
def list_audit_events(
    fund_id: uuid.UUID,
    entity_id: str | None = Query(default=None),
    entity_type: str | None = Query(default=None),
    action: str | None = Query(default=None),
    limit: int = Query(default=200, ge=1, le=1000),
    db: Session = Depends(get_db),
    _role_guard: Actor = Depends(require_role(["GP", "FUND_ADMIN", "AUDITOR"])),
):
    try:
        fund_service.get_fund(db, fund_id=fund_id)
    except AppError as e:
        raise to_http_exception(e)
    return get_audit_log(
        db,
        fund_id=fund_id,
        entity_id=entity_id,
        entity_type=entity_type,
        action=action,
        limit=limit,
    )
