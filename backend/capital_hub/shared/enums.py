from __future__ import annotations

from enum import Enum


class Env(str, Enum):
    dev = "dev"
    prod = "prod"
    test = "test"


class Role(str, Enum):
    """Roles carried by the actor header."""

    ADMIN = "ADMIN"
    GP = "GP"
    FUND_ADMIN = "FUND_ADMIN"
    INVESTMENT_TEAM = "INVESTMENT_TEAM"
    INVESTOR = "INVESTOR"
    AUDITOR = "AUDITOR"
