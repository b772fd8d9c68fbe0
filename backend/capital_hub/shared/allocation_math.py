"""Numeric helpers shared by the allocators, the waterfall and the metrics projection.

Money is handled as ``Decimal``. Ratios whose denominator is zero are defined as
zero: an empty fund has no meaningful multiple, and callers rely on that.
"""

from __future__ import annotations

from collections.abc import Hashable, Sequence
from decimal import ROUND_HALF_UP, Decimal
from typing import TypeVar, Union

Number = Union[Decimal, int, float, str]
K = TypeVar("K", bound=Hashable)

ZERO = Decimal("0")
HUNDRED = Decimal("100")
CENT = Decimal("0.01")
PERCENT_QUANTUM = Decimal("0.00000001")


def to_decimal(value: Number | None) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        # str() keeps the shortest repr, so 0.1 stays 0.1 instead of its binary expansion.
        return Decimal(str(value))
    return Decimal(value)


def quantize_money(amount: Number) -> Decimal:
    return to_decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


def quantize_percent(percent: Number) -> Decimal:
    return to_decimal(percent).quantize(PERCENT_QUANTUM, rounding=ROUND_HALF_UP)


def safe_ratio(numerator: Number, denominator: Number) -> Decimal:
    den = to_decimal(denominator)
    if den == 0:
        return ZERO
    return to_decimal(numerator) / den


def percent_of(amount: Number, percent: Number) -> Decimal:
    """``percent``% of ``amount`` (percent on the 0-100 scale)."""
    return to_decimal(amount) * to_decimal(percent) / HUNDRED


def share_percent(part: Number, whole: Number) -> Decimal:
    """``part`` as a 0-100 percentage of ``whole``; 0 when ``whole`` is 0."""
    return safe_ratio(part, whole) * HUNDRED


def pro_rata_share(total: Number, ownership_percent: Number) -> Decimal:
    """An owner's cent-rounded slice of ``total``."""
    return quantize_money(percent_of(total, ownership_percent))


def clamp(value: float, low: float, high: float) -> float:
    return min(high, max(low, value))


def allocate_pro_rata(total: Number, weights: Sequence[tuple[K, Number]]) -> dict[K, Decimal]:
    """Split ``total`` into cent-rounded shares by ownership percent.

    When the percents sum to 100 the rounded shares may miss the total by a few
    cents; that residue goes to the largest holder so the shares add up exactly.
    A residue larger than one cent per holder means the weights do not sum to
    100 and is left alone.
    """
    if not weights:
        return {}

    shares = {key: pro_rata_share(total, percent) for key, percent in weights}
    residue = quantize_money(total) - sum(shares.values(), ZERO)
    if residue and abs(residue) <= CENT * len(shares):
        largest_key = max(weights, key=lambda kv: to_decimal(kv[1]))[0]
        shares[largest_key] += residue
    return shares
