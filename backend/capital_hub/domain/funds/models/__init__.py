"""Fund domain models."""

from capital_hub.domain.funds.models.commitments import LPCommitment
from capital_hub.domain.funds.models.funds import Fund

__all__ = [
    "Fund",
    "LPCommitment",
]
