from capital_hub.domain.portfolio.models.investments import PortfolioInvestment, ValuationRecord

__all__ = [
    "PortfolioInvestment",
    "ValuationRecord",
]
