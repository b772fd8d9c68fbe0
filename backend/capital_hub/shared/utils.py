from __future__ import annotations

import datetime as dt
import uuid
from decimal import Decimal
from enum import Enum
from typing import Any

from sqlalchemy import inspect


def utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def json_safe(value: Any) -> Any:
    """Convert a value tree into JSON column material.

    Decimals become strings so amounts survive the round trip to the cent.
    """
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, (dt.date, dt.datetime)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {str(k): json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [json_safe(v) for v in value]
    return str(value)


def sa_model_to_dict(obj) -> dict[str, Any]:
    """Column snapshot of a mapped row, for audit before/after images."""
    return {attr.key: json_safe(getattr(obj, attr.key)) for attr in inspect(obj).mapper.column_attrs}
