"""Portfolio concentration and diversification scoring.

Pure and side-effect free; safe to call on every dashboard refresh.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from capital_hub.shared.allocation_math import ZERO, clamp, share_percent, to_decimal


@dataclass(frozen=True)
class InvestmentPosition:
    sector: str
    geography: str
    total_invested: Decimal

    @classmethod
    def from_investment(cls, investment) -> "InvestmentPosition":
        return cls(
            sector=getattr(investment.sector, "value", investment.sector),
            geography=getattr(investment.geography, "value", investment.geography),
            total_invested=to_decimal(investment.total_invested),
        )


@dataclass(frozen=True)
class AllocationRow:
    key: str
    invested: Decimal
    percent: float
    investments: int


@dataclass(frozen=True)
class ConcentrationReport:
    total_invested: Decimal
    investment_count: int
    sector_allocation: tuple[AllocationRow, ...]
    geographic_allocation: tuple[AllocationRow, ...]
    largest_investment_percent: float
    top5_investments_percent: float
    herfindahl_index: float
    diversification_score: float
    notes: tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        def rows(items: tuple[AllocationRow, ...], key_name: str) -> list[dict[str, Any]]:
            return [
                {key_name: r.key, "invested": r.invested, "percent": r.percent, "investments": r.investments}
                for r in items
            ]

        return {
            "total_invested": self.total_invested,
            "investment_count": self.investment_count,
            "sector_allocation": rows(self.sector_allocation, "sector"),
            "geographic_allocation": rows(self.geographic_allocation, "geography"),
            "largest_investment_percent": self.largest_investment_percent,
            "top5_investments_percent": self.top5_investments_percent,
            "herfindahl_index": self.herfindahl_index,
            "diversification_score": self.diversification_score,
            "notes": list(self.notes),
        }


def _group(positions: list[InvestmentPosition], attr: str, total: Decimal) -> tuple[AllocationRow, ...]:
    invested: dict[str, Decimal] = {}
    counts: dict[str, int] = {}
    for p in positions:
        key = getattr(p, attr)
        invested[key] = invested.get(key, ZERO) + p.total_invested
        counts[key] = counts.get(key, 0) + 1

    rows = [
        AllocationRow(key=k, invested=v, percent=float(share_percent(v, total)), investments=counts[k])
        for k, v in invested.items()
    ]
    rows.sort(key=lambda r: r.invested, reverse=True)
    return tuple(rows)


def score_concentration(
    positions: Iterable[InvestmentPosition],
    *,
    single_investment_threshold: float = 20.0,
    sector_threshold: float = 40.0,
    min_investments: int = 8,
) -> ConcentrationReport:
    items = list(positions)
    total = sum((p.total_invested for p in items), ZERO)
    count = len(items)

    sectors = _group(items, "sector", total)
    geographies = _group(items, "geography", total)

    ranked = sorted((p.total_invested for p in items), reverse=True)
    largest = float(share_percent(ranked[0], total)) if ranked else 0.0
    top5 = float(share_percent(sum(ranked[:5], ZERO), total))

    # Shares are fractions (0-1), so a single holding gives 1.0.
    hhi = sum(float(share_percent(v, total)) ** 2 for v in ranked) / 10_000.0

    score = clamp(100.0 - largest * 2 + count * 5 - hhi * 100, 0.0, 100.0)

    notes: list[str] = []
    if largest > single_investment_threshold:
        notes.append(
            f"Largest investment ({largest:.1f}%) exceeds {single_investment_threshold:g}% threshold"
        )
    if any(row.percent > sector_threshold for row in sectors):
        notes.append(f"Sector concentration exceeds {sector_threshold:g}% threshold")
    if count < min_investments:
        notes.append(f"Only {count} investments - target minimum {min_investments}")

    return ConcentrationReport(
        total_invested=total,
        investment_count=count,
        sector_allocation=sectors,
        geographic_allocation=geographies,
        largest_investment_percent=largest,
        top5_investments_percent=top5,
        herfindahl_index=hhi,
        diversification_score=score,
        notes=tuple(notes),
    )
