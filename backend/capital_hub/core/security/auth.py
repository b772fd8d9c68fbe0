from __future__ import annotations

import json
import uuid
from collections.abc import Iterable
from dataclasses import dataclass

from starlette.requests import Request

from capital_hub.core.config import settings
from capital_hub.shared.enums import Role


@dataclass(frozen=True)
class Actor:
    """The caller behind a capital operation; its id is stamped on every row it writes."""

    actor_id: str
    roles: tuple[Role, ...]
    fund_ids: tuple[uuid.UUID, ...]
    is_admin: bool = False

    @property
    def role_names(self) -> set[str]:
        return {r.value for r in self.roles}

    def has_any_role(self, names: Iterable[str]) -> bool:
        return Role.ADMIN in self.roles or bool(self.role_names.intersection(names))

    def can_access_fund(self, fund_id: uuid.UUID) -> bool:
        return self.is_admin or fund_id in self.fund_ids


def parse_dev_actor(raw: str) -> Actor:
    """Decode the development actor header.

    Example::

        {"actor_id": "ops-1", "roles": ["FUND_ADMIN"], "fund_ids": ["*"]}

    ``"*"`` grants every fund, as does the ADMIN role.
    """
    payload = json.loads(raw)
    roles = tuple(Role(r) for r in payload.get("roles", []))
    fund_ids_raw = [str(v) for v in payload.get("fund_ids", [])]

    return Actor(
        actor_id=str(payload["actor_id"]),
        roles=roles,
        fund_ids=tuple(uuid.UUID(v) for v in fund_ids_raw if v != "*"),
        is_admin=Role.ADMIN in roles or "*" in fund_ids_raw,
    )


def actor_from_request(request: Request) -> Actor:
    raw = request.headers.get(settings.dev_actor_header)
    if not raw:
        raise PermissionError(f"Missing {settings.dev_actor_header} header")
    try:
        return parse_dev_actor(raw)
    except (KeyError, TypeError, ValueError) as e:
        raise PermissionError(f"Malformed {settings.dev_actor_header} header") from e
