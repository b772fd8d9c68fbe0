from __future__ import annotations

from enum import Enum


class FundType(str, Enum):
    private_equity = "private_equity"
    venture_capital = "venture_capital"
    infrastructure = "infrastructure"
    real_estate = "real_estate"
    debt = "debt"
    mezzanine = "mezzanine"
    fund_of_funds = "fund_of_funds"
    impact = "impact"
    growth_equity = "growth_equity"
    search_fund = "search_fund"


class FundStatus(str, Enum):
    formation = "formation"
    fundraising = "fundraising"
    investing = "investing"
    harvest = "harvest"
    liquidation = "liquidation"
    closed = "closed"


class WaterfallType(str, Enum):
    american = "american"
    european = "european"


class LPCommitmentStatus(str, Enum):
    pending = "pending"
    active = "active"
    defaulted = "defaulted"
    transferred = "transferred"
    redeemed = "redeemed"


class CatchUpBase(str, Enum):
    preferred_return = "preferred_return"
    lp_total = "lp_total"
