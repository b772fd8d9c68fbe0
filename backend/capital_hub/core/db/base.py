from __future__ import annotations

import datetime as dt
import uuid
from decimal import Decimal
from typing import Any

from sqlalchemy import DateTime, Integer, Numeric, String, Uuid, func
from sqlalchemy.orm import DeclarativeBase, Mapped, declared_attr, mapped_column

# Column types shared by every money, rate and ownership column.
MONEY = Numeric(20, 2)
RATE = Numeric(7, 4)
OWNERSHIP = Numeric(12, 8)


class Base(DeclarativeBase):
    # Bare ``Mapped[Decimal]`` columns are money, stored to the cent.
    type_annotation_map: dict[Any, Any] = {
        dt.datetime: DateTime(timezone=True),
        Decimal: MONEY,
    }


class IdMixin:
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        default=uuid.uuid4,
        primary_key=True,
        index=True,
    )


class FundScopedMixin:
    """Rows that belong to exactly one fund. Models add the foreign key."""

    fund_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), index=True)


class VersionedMixin:
    """Optimistic concurrency for mutable aggregate rows.

    SQLAlchemy bumps ``version`` on every UPDATE and raises ``StaleDataError``
    when the row changed underneath the session.
    """

    version: Mapped[int] = mapped_column(Integer, nullable=False)

    @declared_attr.directive
    def __mapper_args__(cls) -> dict[str, Any]:
        return {"version_id_col": cls.__table__.c.version}


class AuditMetaMixin:
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
    created_by: Mapped[str | None] = mapped_column(String(128), nullable=True)
    updated_by: Mapped[str | None] = mapped_column(String(128), nullable=True)
