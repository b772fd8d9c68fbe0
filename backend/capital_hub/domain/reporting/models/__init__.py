from capital_hub.domain.reporting.models.fund_metrics import FundMetricsSnapshot
from capital_hub.domain.reporting.models.lp_reports import LPReport

__all__ = [
    "FundMetricsSnapshot",
    "LPReport",
]
