from __future__ import annotations

from enum import Enum


class LPReportType(str, Enum):
    quarterly = "quarterly"
    annual = "annual"
    capital_call = "capital_call"
    distribution = "distribution"
    k1 = "k1"
    custom = "custom"


class LPReportStatus(str, Enum):
    draft = "draft"
    review = "review"
    approved = "approved"
    distributed = "distributed"
