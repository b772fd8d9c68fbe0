from __future__ import annotations

import uuid
from decimal import Decimal

import structlog
from sqlalchemy import select
from sqlalchemy.orm import Session

from capital_hub.core.config import settings
from capital_hub.core.db import repository
from capital_hub.core.db.audit import write_audit_event
from capital_hub.core.db.unit_of_work import atomically
from capital_hub.core.security.auth import Actor
from capital_hub.domain.portfolio.enums import InvestmentStatus
from capital_hub.domain.portfolio.models.investments import PortfolioInvestment, ValuationRecord
from capital_hub.domain.portfolio.schemas.investments import (
    ExitCreate,
    FollowOnCreate,
    InvestmentStatusUpdate,
    PortfolioInvestmentCreate,
    ValuationUpdate,
)
from capital_hub.domain.portfolio.services.concentration import (
    ConcentrationReport,
    InvestmentPosition,
    score_concentration,
)
from capital_hub.shared.allocation_math import ZERO, quantize_money, safe_ratio, share_percent
from capital_hub.shared.exceptions import ValidationError
from capital_hub.shared.utils import sa_model_to_dict

logger = structlog.get_logger(__name__)

MULTIPLE_QUANTUM = Decimal("0.0001")

# realized/written_off are terminal.
TERMINAL_STATUSES = {InvestmentStatus.realized, InvestmentStatus.written_off}


def _multiple(value: Decimal, invested: Decimal) -> Decimal:
    return safe_ratio(value, invested).quantize(MULTIPLE_QUANTUM)


def _audit(session: Session, *, actor: Actor, action: str, investment: PortfolioInvestment, before: dict | None):
    write_audit_event(
        session,
        fund_id=investment.fund_id,
        actor_id=actor.actor_id,
        action=action,
        entity_type="PortfolioInvestment",
        entity_id=investment.id,
        before=before,
        after=sa_model_to_dict(investment),
    )


def create_portfolio_investment(
    db: Session,
    *,
    fund_id: uuid.UUID,
    actor: Actor,
    payload: PortfolioInvestmentCreate,
) -> PortfolioInvestment:
    repository.get_fund(db, fund_id)

    initial = quantize_money(payload.initial_investment)
    valuation = quantize_money(payload.current_valuation if payload.current_valuation is not None else initial)

    investment = PortfolioInvestment(
        fund_id=fund_id,
        company_name=payload.company_name,
        company_description=payload.company_description,
        sector=payload.sector,
        geography=payload.geography,
        investment_date=payload.investment_date,
        initial_investment=initial,
        follow_on_investments=ZERO,
        total_invested=initial,
        ownership_percent=payload.ownership_percent,
        board_seats=payload.board_seats,
        current_valuation=valuation,
        valuation_date=payload.investment_date,
        valuation_method=payload.valuation_method,
        realized_value=ZERO,
        unrealized_value=valuation,
        total_value=valuation,
        moic=_multiple(valuation, initial),
        status=InvestmentStatus.funded,
        created_by=actor.actor_id,
        updated_by=actor.actor_id,
    )
    db.add(investment)
    db.flush()

    _audit(db, actor=actor, action="portfolio_investment.created", investment=investment, before=None)
    db.commit()
    db.refresh(investment)
    logger.info("portfolio_investment.created", fund_id=str(fund_id), investment_id=str(investment.id))
    return investment


def update_investment_valuation(
    db: Session,
    *,
    fund_id: uuid.UUID,
    investment_id: uuid.UUID,
    actor: Actor,
    payload: ValuationUpdate,
) -> PortfolioInvestment:
    """Append a valuation record and re-mark the investment, as one unit."""
    new_valuation = quantize_money(payload.new_valuation)

    def work(session: Session) -> PortfolioInvestment:
        investment = repository.get_investment(session, fund_id, investment_id)
        if investment.status in TERMINAL_STATUSES:
            raise ValidationError(f"Cannot revalue a {investment.status.value} investment")

        before = sa_model_to_dict(investment)
        previous = investment.current_valuation
        change = share_percent(new_valuation - previous, previous) if previous > 0 else ZERO

        session.add(
            ValuationRecord(
                fund_id=fund_id,
                investment_id=investment.id,
                valuation_date=payload.valuation_date,
                previous_valuation=previous,
                new_valuation=new_valuation,
                change_percent=change.quantize(MULTIPLE_QUANTUM),
                valuation_method=payload.method,
                methodology=payload.methodology,
                notes=payload.notes,
                created_by=actor.actor_id,
                updated_by=actor.actor_id,
            )
        )

        investment.current_valuation = new_valuation
        investment.valuation_date = payload.valuation_date
        investment.valuation_method = payload.method
        investment.unrealized_value = new_valuation
        investment.total_value = investment.realized_value + new_valuation
        investment.moic = _multiple(investment.total_value, investment.total_invested)
        investment.updated_by = actor.actor_id
        session.flush()

        _audit(session, actor=actor, action="portfolio_investment.revalued", investment=investment, before=before)
        return investment

    investment = atomically(db, work, label="portfolio_investment.revalue")
    db.refresh(investment)
    logger.info(
        "portfolio_investment.revalued",
        investment_id=str(investment.id),
        valuation=str(new_valuation),
    )
    return investment


def record_follow_on_investment(
    db: Session,
    *,
    fund_id: uuid.UUID,
    investment_id: uuid.UUID,
    actor: Actor,
    payload: FollowOnCreate,
) -> PortfolioInvestment:
    amount = quantize_money(payload.amount)

    def work(session: Session) -> PortfolioInvestment:
        investment = repository.get_investment(session, fund_id, investment_id)
        if investment.status in TERMINAL_STATUSES:
            raise ValidationError(f"Cannot add capital to a {investment.status.value} investment")

        before = sa_model_to_dict(investment)
        investment.follow_on_investments = investment.follow_on_investments + amount
        investment.total_invested = investment.total_invested + amount
        investment.moic = _multiple(investment.total_value, investment.total_invested)
        investment.updated_by = actor.actor_id
        session.flush()

        _audit(session, actor=actor, action="portfolio_investment.follow_on", investment=investment, before=before)
        return investment

    return atomically(db, work, label="portfolio_investment.follow_on")


def record_exit(
    db: Session,
    *,
    fund_id: uuid.UUID,
    investment_id: uuid.UUID,
    actor: Actor,
    payload: ExitCreate,
) -> PortfolioInvestment:
    proceeds = quantize_money(payload.exit_proceeds)

    def work(session: Session) -> PortfolioInvestment:
        investment = repository.get_investment(session, fund_id, investment_id)
        if investment.status in TERMINAL_STATUSES:
            raise ValidationError(f"Investment is already {investment.status.value}")

        before = sa_model_to_dict(investment)
        exit_multiple = _multiple(proceeds, investment.total_invested)
        investment.status = InvestmentStatus.realized
        investment.exit_date = payload.exit_date
        investment.exit_type = payload.exit_type
        investment.exit_proceeds = proceeds
        investment.exit_multiple = exit_multiple
        investment.realized_value = proceeds
        investment.unrealized_value = ZERO
        investment.total_value = proceeds
        investment.moic = exit_multiple
        investment.updated_by = actor.actor_id
        session.flush()

        _audit(session, actor=actor, action="portfolio_investment.exited", investment=investment, before=before)
        return investment

    investment = atomically(db, work, label="portfolio_investment.exit")
    logger.info(
        "portfolio_investment.exited",
        investment_id=str(investment.id),
        proceeds=str(proceeds),
        exit_type=payload.exit_type.value,
    )
    return investment


def update_investment_status(
    db: Session,
    *,
    fund_id: uuid.UUID,
    investment_id: uuid.UUID,
    actor: Actor,
    payload: InvestmentStatusUpdate,
) -> PortfolioInvestment:
    investment = repository.get_investment(db, fund_id, investment_id)
    if investment.status in TERMINAL_STATUSES:
        raise ValidationError(f"Investment is already {investment.status.value}")
    if payload.status == InvestmentStatus.realized:
        raise ValidationError("Use an exit to realize an investment")

    before = sa_model_to_dict(investment)
    investment.status = payload.status
    if payload.status == InvestmentStatus.impaired and payload.notes:
        investment.impairment_notes = payload.notes
    investment.updated_by = actor.actor_id
    db.flush()

    _audit(db, actor=actor, action="portfolio_investment.status_changed", investment=investment, before=before)
    db.commit()
    db.refresh(investment)
    logger.info(
        "portfolio_investment.status_changed",
        investment_id=str(investment.id),
        status=payload.status.value,
    )
    return investment


def list_investments(db: Session, *, fund_id: uuid.UUID) -> list[PortfolioInvestment]:
    repository.get_fund(db, fund_id)
    return repository.get_investments(db, fund_id)


def get_investment(db: Session, *, fund_id: uuid.UUID, investment_id: uuid.UUID) -> PortfolioInvestment:
    return repository.get_investment(db, fund_id, investment_id)


def list_valuation_history(db: Session, *, fund_id: uuid.UUID, investment_id: uuid.UUID) -> list[ValuationRecord]:
    investment = repository.get_investment(db, fund_id, investment_id)
    stmt = (
        select(ValuationRecord)
        .where(ValuationRecord.investment_id == investment.id)
        .order_by(ValuationRecord.valuation_date.asc(), ValuationRecord.created_at.asc())
    )
    return list(db.execute(stmt).scalars().all())


def calculate_concentration(db: Session, *, fund_id: uuid.UUID) -> ConcentrationReport:
    investments = list_investments(db, fund_id=fund_id)
    return score_concentration(
        (InvestmentPosition.from_investment(i) for i in investments),
        single_investment_threshold=settings.concentration_single_investment_threshold,
        sector_threshold=settings.concentration_sector_threshold,
        min_investments=settings.concentration_min_investments,
    )
