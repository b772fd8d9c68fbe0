"""Read side of the store adapter.

Every getter is fund-scoped: a record that exists under another fund is
reported as missing.
"""

from __future__ import annotations

import uuid

from sqlalchemy import select
from sqlalchemy.orm import Session

from capital_hub.domain.capital_calls.models.capital_calls import CapitalCall, CapitalCallResponse
from capital_hub.domain.distributions.models.distributions import Distribution, DistributionAllocation
from capital_hub.domain.funds.models.commitments import LPCommitment
from capital_hub.domain.funds.models.funds import Fund
from capital_hub.domain.portfolio.models.investments import PortfolioInvestment
from capital_hub.shared.exceptions import NotFound


def get_fund(db: Session, fund_id: uuid.UUID) -> Fund:
    fund = db.get(Fund, fund_id)
    if fund is None:
        raise NotFound("Fund not found")
    return fund


def get_commitments(db: Session, fund_id: uuid.UUID) -> list[LPCommitment]:
    stmt = (
        select(LPCommitment)
        .where(LPCommitment.fund_id == fund_id)
        .order_by(LPCommitment.commitment_date.asc(), LPCommitment.investor_name.asc())
    )
    return list(db.execute(stmt).scalars().all())


def get_calls(db: Session, fund_id: uuid.UUID) -> list[CapitalCall]:
    stmt = select(CapitalCall).where(CapitalCall.fund_id == fund_id).order_by(CapitalCall.call_number.asc())
    return list(db.execute(stmt).scalars().all())


def get_distributions(db: Session, fund_id: uuid.UUID) -> list[Distribution]:
    stmt = (
        select(Distribution)
        .where(Distribution.fund_id == fund_id)
        .order_by(Distribution.distribution_number.asc())
    )
    return list(db.execute(stmt).scalars().all())


def get_investments(db: Session, fund_id: uuid.UUID) -> list[PortfolioInvestment]:
    stmt = (
        select(PortfolioInvestment)
        .where(PortfolioInvestment.fund_id == fund_id)
        .order_by(PortfolioInvestment.investment_date.asc(), PortfolioInvestment.company_name.asc())
    )
    return list(db.execute(stmt).scalars().all())


def get_commitment(db: Session, fund_id: uuid.UUID, commitment_id: uuid.UUID) -> LPCommitment:
    commitment = db.get(LPCommitment, commitment_id)
    if commitment is None or commitment.fund_id != fund_id:
        raise NotFound("LP commitment not found")
    return commitment


def get_call(db: Session, fund_id: uuid.UUID, call_id: uuid.UUID) -> CapitalCall:
    call = db.get(CapitalCall, call_id)
    if call is None or call.fund_id != fund_id:
        raise NotFound("Capital call not found")
    return call


def get_call_responses(db: Session, call_id: uuid.UUID) -> list[CapitalCallResponse]:
    stmt = select(CapitalCallResponse).where(CapitalCallResponse.capital_call_id == call_id)
    return list(db.execute(stmt).scalars().all())


def get_distribution(db: Session, fund_id: uuid.UUID, distribution_id: uuid.UUID) -> Distribution:
    distribution = db.get(Distribution, distribution_id)
    if distribution is None or distribution.fund_id != fund_id:
        raise NotFound("Distribution not found")
    return distribution


def get_distribution_allocations(db: Session, distribution_id: uuid.UUID) -> list[DistributionAllocation]:
    stmt = select(DistributionAllocation).where(DistributionAllocation.distribution_id == distribution_id)
    return list(db.execute(stmt).scalars().all())


def get_investment(db: Session, fund_id: uuid.UUID, investment_id: uuid.UUID) -> PortfolioInvestment:
    investment = db.get(PortfolioInvestment, investment_id)
    if investment is None or investment.fund_id != fund_id:
        raise NotFound("Portfolio investment not found")
    return investment
