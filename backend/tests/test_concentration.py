from __future__ import annotations

from decimal import Decimal

import pytest

from capital_hub.domain.portfolio.services.concentration import InvestmentPosition, score_concentration


def _positions(*amounts: str, sector: str = "technology", geography: str = "kenya") -> list[InvestmentPosition]:
    return [InvestmentPosition(sector=sector, geography=geography, total_invested=Decimal(a)) for a in amounts]


def test_three_investment_scenario():
    report = score_concentration(_positions("500000", "300000", "200000"))

    assert report.total_invested == Decimal("1000000")
    assert report.investment_count == 3
    assert report.largest_investment_percent == pytest.approx(50.0)
    assert report.top5_investments_percent == pytest.approx(100.0)
    assert report.herfindahl_index == pytest.approx(0.38)
    assert "Largest investment (50.0%) exceeds 20% threshold" in report.notes
    assert "Sector concentration exceeds 40% threshold" in report.notes
    assert "Only 3 investments - target minimum 8" in report.notes
    assert report.diversification_score == 0.0


def test_allocation_rows_group_by_sector_and_geography():
    positions = [
        *_positions("400000", sector="energy", geography="uganda"),
        *_positions("350000", "250000", sector="healthcare", geography="kenya"),
    ]
    report = score_concentration(positions)

    sectors = {row.key: row for row in report.sector_allocation}
    assert sectors["healthcare"].invested == Decimal("600000")
    assert sectors["healthcare"].investments == 2
    assert sectors["healthcare"].percent == pytest.approx(60.0)
    assert [row.key for row in report.sector_allocation] == ["healthcare", "energy"]
    assert {row.key for row in report.geographic_allocation} == {"kenya", "uganda"}


def test_well_diversified_portfolio_has_no_notes():
    positions = [
        InvestmentPosition(sector=s, geography="pan_africa", total_invested=Decimal("100000"))
        for s in ("energy", "healthcare", "education", "logistics", "technology", "agriculture", "tourism", "energy", "healthcare", "education")
    ]
    report = score_concentration(positions)
    assert report.largest_investment_percent == pytest.approx(10.0)
    assert report.notes == ()
    # 100 - 2*10 + 5*10 - 100*0.1, clamped at 100.
    assert report.diversification_score == 100.0


def test_empty_portfolio():
    report = score_concentration([])
    assert report.total_invested == Decimal("0")
    assert report.largest_investment_percent == 0.0
    assert report.herfindahl_index == 0.0
    assert report.notes == ("Only 0 investments - target minimum 8",)


def test_thresholds_are_configurable():
    report = score_concentration(
        _positions("500000", "300000", "200000"),
        single_investment_threshold=60.0,
        sector_threshold=100.0,
        min_investments=3,
    )
    assert report.notes == ()
