from __future__ import annotations

import datetime as dt
from collections.abc import Iterable, Sequence
from dataclasses import asdict, dataclass
from decimal import Decimal
from typing import Any

import structlog

from capital_hub.domain.capital_calls.enums import CapitalCallStatus
from capital_hub.domain.distributions.enums import DistributionStatus
from capital_hub.domain.portfolio.enums import InvestmentStatus
from capital_hub.shared.allocation_math import ZERO, safe_ratio, share_percent, to_decimal
from capital_hub.shared.exceptions import ConsistencyViolation
from capital_hub.shared.utils import utcnow

logger = structlog.get_logger(__name__)

PERCENT_QUANTUM_4 = Decimal("0.0001")


@dataclass(frozen=True)
class FundMetrics:
    total_commitments: Decimal
    capital_called: Decimal
    capital_called_percent: Decimal
    unfunded_commitments: Decimal
    distributions_paid: Decimal
    recallable_capital: Decimal

    total_invested: Decimal
    realized_value: Decimal
    unrealized_value: Decimal
    total_value: Decimal

    dpi: float
    rvpi: float
    tvpi: float
    irr: float
    moic: float

    active_investments: int
    realized_investments: int
    total_investments: int
    lp_count: int

    calculated_at: dt.datetime

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _sum(values: Iterable[Any]) -> Decimal:
    return sum((to_decimal(v) for v in values), ZERO)


def _status(record) -> str:
    return getattr(record.status, "value", record.status)


def simple_irr(capital_called: Decimal, distributions_paid: Decimal, unrealized_value: Decimal, years: int) -> float:
    """Annualized multiple, in percent: ``(multiple ** (1 / years) - 1) * 100``.

    Not a dated cash-flow IRR. ``years`` is an assumed holding period, and a
    zero multiple (nothing called, or nothing returned) yields 0.
    """
    multiple = float(safe_ratio(distributions_paid + unrealized_value, capital_called))
    if multiple <= 0 or years <= 0:
        return 0.0
    return (multiple ** (1.0 / years) - 1.0) * 100.0


def _check_balances(commitments: Sequence[Any], calls: Sequence[Any]) -> None:
    for c in commitments:
        if to_decimal(c.unfunded_commitment) < 0:
            logger.error(
                "fund_metrics.negative_unfunded",
                commitment_id=str(c.id),
                unfunded_commitment=str(c.unfunded_commitment),
            )
            raise ConsistencyViolation(f"LP commitment {c.id} has negative unfunded commitment")
    for call in calls:
        if to_decimal(call.amount_outstanding) < 0:
            logger.error(
                "fund_metrics.negative_outstanding",
                capital_call_id=str(call.id),
                amount_outstanding=str(call.amount_outstanding),
            )
            raise ConsistencyViolation(f"Capital call {call.id} has negative outstanding amount")


def project_fund_metrics(
    *,
    commitments: Sequence[Any],
    calls: Sequence[Any],
    distributions: Sequence[Any],
    investments: Sequence[Any],
    holding_years: int = 3,
    calculated_at: dt.datetime | None = None,
) -> FundMetrics:
    """Recompute fund metrics from the complete source record set.

    Deterministic in its inputs apart from ``calculated_at``. Negative
    per-record balances abort the projection instead of being clamped.
    """
    _check_balances(commitments, calls)

    total_commitments = _sum(c.commitment_amount for c in commitments)
    capital_called = _sum(
        c.total_call_amount for c in calls if _status(c) == CapitalCallStatus.fully_funded.value
    )
    unfunded = _sum(c.unfunded_commitment for c in commitments)
    distributions_paid = _sum(
        d.total_distribution_amount for d in distributions if _status(d) == DistributionStatus.paid.value
    )

    total_invested = _sum(i.total_invested for i in investments)
    realized_value = _sum(i.realized_value for i in investments)
    active = [i for i in investments if _status(i) == InvestmentStatus.active.value]
    unrealized_value = _sum(i.unrealized_value for i in active)
    total_value = realized_value + unrealized_value

    dpi = float(safe_ratio(distributions_paid, capital_called))
    rvpi = float(safe_ratio(unrealized_value, capital_called))
    # Paid-in based so that tvpi == dpi + rvpi holds for every record set.
    tvpi = float(safe_ratio(distributions_paid + unrealized_value, capital_called))
    moic = float(safe_ratio(total_value, total_invested))

    return FundMetrics(
        total_commitments=total_commitments,
        capital_called=capital_called,
        capital_called_percent=share_percent(capital_called, total_commitments).quantize(PERCENT_QUANTUM_4),
        unfunded_commitments=unfunded,
        distributions_paid=distributions_paid,
        recallable_capital=ZERO,
        total_invested=total_invested,
        realized_value=realized_value,
        unrealized_value=unrealized_value,
        total_value=total_value,
        dpi=dpi,
        rvpi=rvpi,
        tvpi=tvpi,
        irr=simple_irr(capital_called, distributions_paid, unrealized_value, holding_years),
        moic=moic,
        active_investments=len(active),
        realized_investments=sum(1 for i in investments if _status(i) == InvestmentStatus.realized.value),
        total_investments=len(investments),
        lp_count=len(commitments),
        calculated_at=calculated_at or utcnow(),
    )
