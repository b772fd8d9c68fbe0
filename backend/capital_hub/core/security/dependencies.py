from __future__ import annotations

import uuid
from collections.abc import Callable

from fastapi import Depends, HTTPException, Path, Request, status

from capital_hub.core.middleware.context import bind_actor
from capital_hub.core.security.auth import Actor, actor_from_request


async def get_actor(request: Request) -> Actor:
    """Resolve the caller and bind it to the logging context.

    Async so the binding happens on the request task, where the endpoint's
    thread pool call inherits it.
    """
    try:
        actor = actor_from_request(request)
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))

    bind_actor(actor.actor_id, actor.role_names)
    return actor


def require_fund_access() -> Callable[..., uuid.UUID]:
    """Router dependency: the path's ``fund_id`` must be within the actor's fund scope."""

    def _dep(fund_id: uuid.UUID = Path(...), actor: Actor = Depends(get_actor)) -> uuid.UUID:
        if not actor.can_access_fund(fund_id):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden for this fund")
        return fund_id

    return _dep


def require_role(allowed_roles: list[str]) -> Callable[..., Actor]:
    """Endpoint dependency returning the actor when it holds one of ``allowed_roles``.

    ADMIN always passes.
    """
    allowed = frozenset(allowed_roles)

    def _inner(actor: Actor = Depends(get_actor)) -> Actor:
        if not actor.has_any_role(allowed):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient role")
        return actor

    return _inner
