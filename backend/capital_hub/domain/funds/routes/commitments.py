from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from capital_hub.core.db.session import get_db
from capital_hub.core.http.errors import to_http_exception
from capital_hub.core.security.auth import Actor
from capital_hub.core.security.dependencies import require_fund_access, require_role
from capital_hub.domain.funds.schemas.commitments import LPCommitmentCreate, LPCommitmentOut
from capital_hub.domain.funds.services import commitments as commitment_service
from capital_hub.shared.exceptions import AppError


router = APIRouter(
    prefix="/funds/{fund_id}/capital/commitments",
    tags=["LP Commitments"],
    dependencies=[Depends(require_fund_access())],
)


@router.post("", response_model=LPCommitmentOut, status_code=status.HTTP_201_CREATED)
def create_commitment(
    fund_id: uuid.UUID,
    payload: LPCommitmentCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_role(["GP", "FUND_ADMIN"])),
):
    try:
        return commitment_service.create_lp_commitment(db, fund_id=fund_id, actor=actor, payload=payload)
    except AppError as e:
        raise to_http_exception(e)


@router.get("", response_model=list[LPCommitmentOut])
def list_commitments(
    fund_id: uuid.UUID,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_role(["GP", "FUND_ADMIN", "AUDITOR"])),
):
    try:
        return commitment_service.list_commitments(db, fund_id=fund_id)
    except AppError as e:
        raise to_http_exception(e)
