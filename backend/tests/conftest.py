from __future__ import annotations

import datetime as dt
import json
import os
import sys
import uuid
from collections.abc import Callable, Generator
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool
from sqlalchemy.orm import Session, sessionmaker

# Make `backend/` importable regardless of pytest import mode.
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from capital_hub.core.config import settings
from capital_hub.core.db.base import Base
from capital_hub.core.db.session import get_db, import_model_modules
from capital_hub.core.security.auth import Actor
from capital_hub.domain.funds.models.commitments import LPCommitment
from capital_hub.domain.funds.models.funds import Fund
from capital_hub.domain.funds.schemas.commitments import LPCommitmentCreate
from capital_hub.domain.funds.schemas.funds import FundCreate
from capital_hub.domain.funds.services.commitments import create_lp_commitment
from capital_hub.domain.funds.services.funds import create_fund
from capital_hub.main import create_app
from capital_hub.shared.enums import Env, Role

import_model_modules()


@pytest.fixture()
def db_engine():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture()
def db_session(db_engine) -> Generator[Session, None, None]:
    TestingSessionLocal = sessionmaker(bind=db_engine, autoflush=False, autocommit=False, class_=Session)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def client(db_session: Session) -> TestClient:
    settings.env = Env.test
    app = create_app()

    def _override_get_db() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    return TestClient(app)


@pytest.fixture()
def actor() -> Actor:
    return Actor(actor_id="test-admin", roles=(Role.ADMIN,), fund_ids=(), is_admin=True)


@pytest.fixture()
def fund(db_session: Session, actor: Actor) -> Fund:
    return create_fund(
        db_session,
        actor=actor,
        payload=FundCreate(
            name="East Africa Growth Fund I",
            target_size=Decimal("10000000"),
            hard_cap=Decimal("12000000"),
            min_commitment=Decimal("10000"),
            max_commitment=Decimal("5000000"),
        ),
    )


@pytest.fixture()
def add_commitment(db_session: Session, actor: Actor, fund: Fund) -> Callable[..., LPCommitment]:
    def _add(amount, name: str | None = None) -> LPCommitment:
        return create_lp_commitment(
            db_session,
            fund_id=fund.id,
            actor=actor,
            payload=LPCommitmentCreate(
                investor_id=uuid.uuid4(),
                investor_name=name or f"LP {amount}",
                commitment_amount=Decimal(str(amount)),
                commitment_date=dt.date(2024, 1, 15),
            ),
        )

    return _add


def actor_header(fund_ids: list[str] | None = None, roles: list[str] | None = None) -> dict[str, str]:
    return {
        settings.dev_actor_header: json.dumps(
            {
                "actor_id": "api-user",
                "roles": roles or ["ADMIN"],
                "fund_ids": fund_ids if fund_ids is not None else ["*"],
            }
        )
    }


@pytest.fixture()
def seeded_fund(client: TestClient) -> dict:
    client.headers.update(actor_header())
    r = client.post(
        "/funds",
        json={
            "name": "Seeded Fund",
            "target_size": "10000000",
            "hard_cap": "12000000",
            "min_commitment": "10000",
            "max_commitment": "5000000",
        },
    )
    assert r.status_code == 201, r.text
    return {"fund_id": r.json()["id"]}
