from capital_hub.domain.capital_calls.models.capital_calls import CapitalCall, CapitalCallResponse

__all__ = [
    "CapitalCall",
    "CapitalCallResponse",
]
