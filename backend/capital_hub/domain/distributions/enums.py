from __future__ import annotations

from enum import Enum


class DistributionStatus(str, Enum):
    draft = "draft"
    approved = "approved"
    paid = "paid"
    cancelled = "cancelled"


class DistributionType(str, Enum):
    return_of_capital = "return_of_capital"
    capital_gain = "capital_gain"
    dividend = "dividend"
    interest = "interest"
    withholding_tax = "withholding_tax"
    recallable = "recallable"


class WaterfallTier(str, Enum):
    return_of_capital = "return_of_capital"
    preferred_return = "preferred_return"
    gp_catch_up = "gp_catch_up"
    carried_interest = "carried_interest"


class AllocationStatus(str, Enum):
    pending = "pending"
    paid = "paid"
    held = "held"
