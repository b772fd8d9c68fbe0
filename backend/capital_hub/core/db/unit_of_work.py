from __future__ import annotations

from collections.abc import Callable
from typing import TypeVar

import structlog
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from capital_hub.core.config import settings
from capital_hub.shared.exceptions import ConcurrencyConflict

T = TypeVar("T")

logger = structlog.get_logger(__name__)


def atomically(
    db: Session,
    work: Callable[[Session], T],
    *,
    label: str = "unit_of_work",
    max_attempts: int | None = None,
) -> T:
    """Run ``work`` and commit everything it staged, or nothing.

    ``work`` must read the state it depends on itself: after a lost
    optimistic-concurrency race the session is rolled back and ``work`` is
    called again against fresh rows. Any other exception rolls back and
    propagates unchanged.
    """
    attempts = max_attempts or settings.uow_max_attempts
    for attempt in range(1, attempts + 1):
        try:
            result = work(db)
            db.commit()
            return result
        except StaleDataError:
            db.rollback()
            logger.warning("uow.stale_retry", label=label, attempt=attempt, max_attempts=attempts)
        except Exception:
            db.rollback()
            raise

    logger.error("uow.conflict", label=label, attempts=attempts)
    raise ConcurrencyConflict(f"{label}: concurrent modification, gave up after {attempts} attempts")
