"""
Distribution waterfall engine.

Splits a distribution amount between LPs and the GP by running an ordered
pipeline of tiers over a shared accumulator:

1. Return of capital (100% LP)
2. Preferred return (100% LP)
3. GP catch-up (catch-up rate to GP, complement to LP)
4. Carried interest split (carry rate to GP, complement to LP)

Each tier sees only what the previous tiers left over. The engine is pure: it
reads fund terms and three amounts, and never touches a record, so it can back
both a persisted distribution and a what-if preview.

Thresholds are cent-quantized ``Decimal``; within a tier the LP share is the
consumed amount minus the GP share, so LP total + GP total always equals the
distribution amount exactly.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from capital_hub.domain.distributions.enums import WaterfallTier
from capital_hub.domain.funds.enums import CatchUpBase
from capital_hub.shared.allocation_math import (
    HUNDRED,
    ZERO,
    Number,
    percent_of,
    quantize_money,
    safe_ratio,
    to_decimal,
)
from capital_hub.shared.exceptions import ValidationError


@dataclass(frozen=True)
class WaterfallTerms:
    """The slice of fund terms the waterfall depends on (percent, 0-100)."""

    carried_interest_rate: Decimal = Decimal("20")
    preferred_return_rate: Decimal = Decimal("8")
    gp_catchup_rate: Decimal = Decimal("100")
    catch_up_base: CatchUpBase = CatchUpBase.preferred_return

    @classmethod
    def from_fund(cls, fund) -> "WaterfallTerms":
        return cls(
            carried_interest_rate=to_decimal(fund.carried_interest_rate),
            preferred_return_rate=to_decimal(fund.preferred_return_rate),
            gp_catchup_rate=to_decimal(fund.gp_catchup_rate),
            catch_up_base=CatchUpBase(fund.catch_up_base),
        )


@dataclass(frozen=True)
class TierResult:
    tier: WaterfallTier
    label: str
    lp_share: Decimal
    gp_share: Decimal
    lp_percent: Decimal
    gp_percent: Decimal
    tier_complete: bool

    @property
    def total(self) -> Decimal:
        return self.lp_share + self.gp_share

    def to_dict(self) -> dict[str, Any]:
        return {
            "tier": self.tier.value,
            "label": self.label,
            "lp_share": self.lp_share,
            "gp_share": self.gp_share,
            "lp_percent": self.lp_percent,
            "gp_percent": self.gp_percent,
            "tier_complete": self.tier_complete,
        }


@dataclass(frozen=True)
class WaterfallCalculation:
    distribution_amount: Decimal
    tiers: tuple[TierResult, ...]
    total_to_lp: Decimal
    total_to_gp: Decimal
    gp_carried_interest: Decimal
    effective_carry: float

    def tier(self, tier: WaterfallTier) -> TierResult | None:
        for result in self.tiers:
            if result.tier == tier:
                return result
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "distribution_amount": self.distribution_amount,
            "tiers": [t.to_dict() for t in self.tiers],
            "total_to_lp": self.total_to_lp,
            "total_to_gp": self.total_to_gp,
            "gp_carried_interest": self.gp_carried_interest,
            "effective_carry": self.effective_carry,
        }


@dataclass(frozen=True)
class _Inputs:
    terms: WaterfallTerms
    capital_called: Decimal
    distributions_paid: Decimal


@dataclass
class _Accumulator:
    remaining: Decimal
    lp_total: Decimal = ZERO
    gp_total: Decimal = ZERO
    preferred_paid: Decimal = ZERO
    tiers: list[TierResult] = field(default_factory=list)

    def record(self, result: TierResult) -> None:
        self.tiers.append(result)
        self.lp_total += result.lp_share
        self.gp_total += result.gp_share
        self.remaining -= result.total


def _fmt(percent: Decimal) -> str:
    return f"{percent.normalize():f}"


def _split(consumed: Decimal, gp_percent: Decimal) -> tuple[Decimal, Decimal]:
    # Rounding may not push the GP share past what the tier consumed.
    gp = min(consumed, quantize_money(percent_of(consumed, gp_percent)))
    return consumed - gp, gp


def _return_of_capital(acc: _Accumulator, inputs: _Inputs) -> TierResult:
    need = max(ZERO, inputs.capital_called - inputs.distributions_paid)
    paid = min(acc.remaining, need)
    return TierResult(
        tier=WaterfallTier.return_of_capital,
        label="Return of Capital",
        lp_share=paid,
        gp_share=ZERO,
        lp_percent=HUNDRED,
        gp_percent=ZERO,
        tier_complete=paid >= need,
    )


def _preferred_return(acc: _Accumulator, inputs: _Inputs) -> TierResult:
    rate = inputs.terms.preferred_return_rate
    hurdle = quantize_money(percent_of(inputs.capital_called, rate))
    # Anything already distributed beyond capital counts toward the hurdle.
    already_paid = max(ZERO, inputs.distributions_paid - inputs.capital_called)
    need = max(ZERO, hurdle - already_paid)
    paid = min(acc.remaining, need)
    acc.preferred_paid = paid
    return TierResult(
        tier=WaterfallTier.preferred_return,
        label=f"Preferred Return ({_fmt(rate)}%)",
        lp_share=paid,
        gp_share=ZERO,
        lp_percent=HUNDRED,
        gp_percent=ZERO,
        tier_complete=paid >= need,
    )


def _gp_catch_up(acc: _Accumulator, inputs: _Inputs) -> TierResult | None:
    terms = inputs.terms
    if acc.remaining <= 0 or terms.gp_catchup_rate <= 0:
        return None

    carry = terms.carried_interest_rate
    base = acc.preferred_paid if terms.catch_up_base == CatchUpBase.preferred_return else acc.lp_total
    if carry >= HUNDRED:
        target = ZERO
    else:
        target = max(ZERO, quantize_money(base * safe_ratio(carry, HUNDRED - carry)))

    consumed = min(acc.remaining, target)
    lp, gp = _split(consumed, terms.gp_catchup_rate)
    return TierResult(
        tier=WaterfallTier.gp_catch_up,
        label=f"GP Catch-up ({_fmt(terms.gp_catchup_rate)}%)",
        lp_share=lp,
        gp_share=gp,
        lp_percent=HUNDRED - terms.gp_catchup_rate,
        gp_percent=terms.gp_catchup_rate,
        tier_complete=consumed >= target,
    )


def _carried_interest(acc: _Accumulator, inputs: _Inputs) -> TierResult | None:
    if acc.remaining <= 0:
        return None

    carry = inputs.terms.carried_interest_rate
    lp, gp = _split(acc.remaining, carry)
    return TierResult(
        tier=WaterfallTier.carried_interest,
        label=f"Carried Interest ({_fmt(carry)}% GP)",
        lp_share=lp,
        gp_share=gp,
        lp_percent=HUNDRED - carry,
        gp_percent=carry,
        tier_complete=True,
    )


TierStep = Callable[[_Accumulator, _Inputs], "TierResult | None"]

# Order matters: each step only sees what the previous steps left in the accumulator.
TIER_PIPELINE: tuple[TierStep, ...] = (
    _return_of_capital,
    _preferred_return,
    _gp_catch_up,
    _carried_interest,
)


def compute_waterfall(
    terms: WaterfallTerms,
    capital_called: Number,
    distributions_paid: Number,
    distribution_amount: Number,
) -> WaterfallCalculation:
    """Run the tier pipeline for one distribution.

    ``capital_called`` and ``distributions_paid`` are fund totals before this
    distribution. ``distribution_amount`` is split as given, never rounded, so
    the tier shares add up to it exactly. Tiers 1 and 2 are always reported;
    tiers 3 and 4 only when something is left to split.
    """
    amount = to_decimal(distribution_amount)
    if amount < 0:
        raise ValidationError("Distribution amount cannot be negative")
    inputs = _Inputs(
        terms=terms,
        capital_called=quantize_money(capital_called),
        distributions_paid=quantize_money(distributions_paid),
    )

    acc = _Accumulator(remaining=amount)
    for step in TIER_PIPELINE:
        result = step(acc, inputs)
        if result is not None:
            acc.record(result)

    effective_carry = float(safe_ratio(acc.gp_total, amount) * HUNDRED)
    return WaterfallCalculation(
        distribution_amount=amount,
        tiers=tuple(acc.tiers),
        total_to_lp=acc.lp_total,
        total_to_gp=acc.gp_total,
        gp_carried_interest=acc.gp_total,
        effective_carry=effective_carry,
    )
