from __future__ import annotations

import importlib
from collections.abc import Generator
from functools import lru_cache

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from capital_hub.core.config import settings
from capital_hub.core.db.base import Base

MODEL_MODULES = (
    "capital_hub.core.db.models",
    "capital_hub.domain.funds.models.funds",
    "capital_hub.domain.funds.models.commitments",
    "capital_hub.domain.capital_calls.models.capital_calls",
    "capital_hub.domain.distributions.models.distributions",
    "capital_hub.domain.portfolio.models.investments",
    "capital_hub.domain.reporting.models.fund_metrics",
    "capital_hub.domain.reporting.models.lp_reports",
)


def import_model_modules() -> None:
    """Register every mapped table on ``Base.metadata``."""
    for module_name in MODEL_MODULES:
        importlib.import_module(module_name)


@lru_cache(maxsize=1)
def get_engine():
    url = settings.database_url
    # FastAPI runs sync endpoints on a thread pool.
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    engine = create_engine(url, pool_pre_ping=True, connect_args=connect_args)
    import_model_modules()
    Base.metadata.create_all(bind=engine)
    return engine


def get_session_local() -> sessionmaker[Session]:
    return sessionmaker(bind=get_engine(), autoflush=False, autocommit=False, class_=Session)


def get_db() -> Generator[Session, None, None]:
    db = get_session_local()()
    try:
        yield db
    finally:
        db.close()
