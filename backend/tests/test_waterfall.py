from __future__ import annotations

from decimal import Decimal

import pytest

from capital_hub.domain.distributions.enums import WaterfallTier
from capital_hub.domain.distributions.services.waterfall import WaterfallTerms, compute_waterfall
from capital_hub.domain.funds.enums import CatchUpBase
from capital_hub.shared.exceptions import ValidationError

DEFAULT_TERMS = WaterfallTerms(
    carried_interest_rate=Decimal("20"),
    preferred_return_rate=Decimal("8"),
    gp_catchup_rate=Decimal("100"),
)


def test_simple_waterfall_scenario():
    calc = compute_waterfall(DEFAULT_TERMS, Decimal("1000000"), Decimal("0"), Decimal("1200000"))

    roc = calc.tier(WaterfallTier.return_of_capital)
    pref = calc.tier(WaterfallTier.preferred_return)
    catch_up = calc.tier(WaterfallTier.gp_catch_up)
    carry = calc.tier(WaterfallTier.carried_interest)

    assert (roc.lp_share, roc.gp_share) == (Decimal("1000000.00"), Decimal("0"))
    assert (pref.lp_share, pref.gp_share) == (Decimal("80000.00"), Decimal("0"))
    assert (catch_up.lp_share, catch_up.gp_share) == (Decimal("0.00"), Decimal("20000.00"))
    assert (carry.lp_share, carry.gp_share) == (Decimal("80000.00"), Decimal("20000.00"))

    assert calc.total_to_lp == Decimal("1160000.00")
    assert calc.total_to_gp == Decimal("40000.00")
    assert calc.effective_carry == pytest.approx(3.3333, abs=1e-3)
    assert all(t.tier_complete for t in calc.tiers)


def test_tiers_run_in_order():
    calc = compute_waterfall(DEFAULT_TERMS, Decimal("1000000"), Decimal("0"), Decimal("1200000"))
    assert [t.tier for t in calc.tiers] == [
        WaterfallTier.return_of_capital,
        WaterfallTier.preferred_return,
        WaterfallTier.gp_catch_up,
        WaterfallTier.carried_interest,
    ]


@pytest.mark.parametrize(
    "amount",
    [Decimal("0"), Decimal("0.01"), Decimal("500000"), Decimal("1050000"), Decimal("1085000.37"), Decimal("9999999.99")],
)
def test_lp_plus_gp_equals_amount(amount):
    calc = compute_waterfall(DEFAULT_TERMS, Decimal("1000000"), Decimal("250000"), amount)
    assert calc.total_to_lp + calc.total_to_gp == amount
    assert sum((t.total for t in calc.tiers), Decimal("0")) == amount


def test_amount_below_capital_stays_in_first_tier():
    calc = compute_waterfall(DEFAULT_TERMS, Decimal("1000000"), Decimal("0"), Decimal("400000"))

    roc = calc.tier(WaterfallTier.return_of_capital)
    assert roc.lp_share == Decimal("400000.00")
    assert roc.tier_complete is False
    assert calc.tier(WaterfallTier.preferred_return).lp_share == Decimal("0")
    assert calc.tier(WaterfallTier.gp_catch_up) is None
    assert calc.tier(WaterfallTier.carried_interest) is None
    assert calc.total_to_gp == Decimal("0")


def test_prior_distributions_reduce_return_of_capital_need():
    calc = compute_waterfall(DEFAULT_TERMS, Decimal("1000000"), Decimal("1000000"), Decimal("100000"))
    assert calc.tier(WaterfallTier.return_of_capital).lp_share == Decimal("0")
    assert calc.tier(WaterfallTier.preferred_return).lp_share == Decimal("80000.00")
    assert calc.tier(WaterfallTier.gp_catch_up).gp_share == Decimal("20000.00")
    assert calc.total_to_lp == Decimal("80000.00")


def test_zero_amount_has_zero_effective_carry():
    calc = compute_waterfall(DEFAULT_TERMS, Decimal("1000000"), Decimal("0"), Decimal("0"))
    assert calc.effective_carry == 0.0
    assert calc.total_to_lp == calc.total_to_gp == Decimal("0")


def test_catch_up_over_lp_total_base():
    terms = WaterfallTerms(
        carried_interest_rate=Decimal("20"),
        preferred_return_rate=Decimal("8"),
        gp_catchup_rate=Decimal("100"),
        catch_up_base=CatchUpBase.lp_total,
    )
    calc = compute_waterfall(terms, Decimal("1000000"), Decimal("0"), Decimal("1200000"))

    # Base is everything paid to LPs so far (1,080,000): target 270,000 exceeds the 120,000 left.
    catch_up = calc.tier(WaterfallTier.gp_catch_up)
    assert catch_up.gp_share == Decimal("120000.00")
    assert catch_up.tier_complete is False
    assert calc.tier(WaterfallTier.carried_interest) is None
    assert calc.total_to_lp == Decimal("1080000.00")
    assert calc.total_to_gp == Decimal("120000.00")


def test_partial_catch_up_rate_splits_the_tier():
    terms = WaterfallTerms(
        carried_interest_rate=Decimal("20"),
        preferred_return_rate=Decimal("8"),
        gp_catchup_rate=Decimal("80"),
    )
    calc = compute_waterfall(terms, Decimal("1000000"), Decimal("0"), Decimal("1200000"))
    catch_up = calc.tier(WaterfallTier.gp_catch_up)
    assert catch_up.gp_share == Decimal("16000.00")
    assert catch_up.lp_share == Decimal("4000.00")
    assert calc.total_to_lp + calc.total_to_gp == Decimal("1200000.00")


def test_zero_catch_up_rate_skips_tier():
    terms = WaterfallTerms(gp_catchup_rate=Decimal("0"))
    calc = compute_waterfall(terms, Decimal("1000000"), Decimal("0"), Decimal("1200000"))
    assert calc.tier(WaterfallTier.gp_catch_up) is None
    assert calc.tier(WaterfallTier.carried_interest).gp_share == Decimal("24000.00")


def test_sub_cent_amount_is_split_exactly():
    amount = Decimal("1085000.375")
    calc = compute_waterfall(DEFAULT_TERMS, Decimal("1000000"), Decimal("0"), amount)

    assert calc.distribution_amount == amount
    assert calc.total_to_lp + calc.total_to_gp == amount
    assert sum((t.total for t in calc.tiers), Decimal("0")) == amount
    assert all(t.lp_share >= 0 and t.gp_share >= 0 for t in calc.tiers)
    assert calc.tier(WaterfallTier.gp_catch_up).gp_share == Decimal("5000.375")


def test_negative_amount_is_rejected():
    with pytest.raises(ValidationError):
        compute_waterfall(DEFAULT_TERMS, Decimal("1000000"), Decimal("0"), Decimal("-100"))
