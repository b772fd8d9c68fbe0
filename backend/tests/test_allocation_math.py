from __future__ import annotations

from decimal import Decimal

from capital_hub.shared.allocation_math import (
    allocate_pro_rata,
    clamp,
    percent_of,
    pro_rata_share,
    quantize_money,
    safe_ratio,
    share_percent,
)


def test_safe_ratio_is_zero_for_zero_denominator():
    assert safe_ratio(Decimal("10"), Decimal("0")) == Decimal("0")
    assert share_percent(5, 0) == Decimal("0")


def test_percent_helpers():
    assert percent_of(Decimal("1000000"), Decimal("8")) == Decimal("80000")
    assert share_percent(Decimal("250"), Decimal("1000")) == Decimal("25")
    assert pro_rata_share(Decimal("100"), Decimal("33.33333333")) == Decimal("33.33")


def test_quantize_money_rounds_half_up():
    assert quantize_money(Decimal("0.005")) == Decimal("0.01")
    assert quantize_money(0.1) == Decimal("0.10")


def test_allocate_pro_rata_gives_residue_to_largest_holder():
    shares = allocate_pro_rata(
        Decimal("100.00"),
        [("a", Decimal("33.33333333")), ("b", Decimal("33.33333334")), ("c", Decimal("33.33333333"))],
    )
    assert sum(shares.values()) == Decimal("100.00")
    assert shares["b"] == Decimal("33.34")
    assert shares["a"] == shares["c"] == Decimal("33.33")


def test_allocate_pro_rata_edge_counts():
    assert allocate_pro_rata(Decimal("500"), []) == {}
    assert allocate_pro_rata(Decimal("500.55"), [("only", Decimal("100"))]) == {"only": Decimal("500.55")}


def test_allocate_pro_rata_leaves_partial_weights_alone():
    # Weights summing to 50% must not be "fixed up" to the full total.
    shares = allocate_pro_rata(Decimal("1000"), [("a", Decimal("25")), ("b", Decimal("25"))])
    assert shares == {"a": Decimal("250.00"), "b": Decimal("250.00")}


def test_clamp():
    assert clamp(-23.0, 0.0, 100.0) == 0.0
    assert clamp(140.0, 0.0, 100.0) == 100.0
    assert clamp(42.5, 0.0, 100.0) == 42.5
