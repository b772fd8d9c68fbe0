from __future__ import annotations

from enum import Enum


class CapitalCallStatus(str, Enum):
    draft = "draft"
    issued = "issued"
    partially_funded = "partially_funded"
    fully_funded = "fully_funded"
    overdue = "overdue"
    cancelled = "cancelled"


class CapitalCallPurpose(str, Enum):
    investment = "investment"
    management_fee = "management_fee"
    expenses = "expenses"
    mixed = "mixed"


class ResponseStatus(str, Enum):
    pending = "pending"
    partial = "partial"
    funded = "funded"
    overdue = "overdue"
    defaulted = "defaulted"
