from capital_hub.domain.distributions.models.distributions import Distribution, DistributionAllocation

__all__ = [
    "Distribution",
    "DistributionAllocation",
]
