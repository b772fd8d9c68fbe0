from __future__ import annotations

from fastapi import FastAPI

from capital_hub.core.logging import configure_logging
from capital_hub.core.middleware.request_id import RequestIdMiddleware
from capital_hub.domain.capital_calls.routes.capital_calls import router as capital_calls_router
from capital_hub.domain.distributions.routes.distributions import router as distributions_router
from capital_hub.domain.funds.routes.commitments import router as commitments_router
from capital_hub.domain.funds.routes.funds import router as funds_router
from capital_hub.domain.portfolio.routes.investments import router as portfolio_router
from capital_hub.domain.reporting.routes.fund_metrics import router as fund_metrics_router
from capital_hub.domain.reporting.routes.lp_reports import router as lp_reports_router


ROUTERS = (
    funds_router,
    commitments_router,
    capital_calls_router,
    distributions_router,
    portfolio_router,
    fund_metrics_router,
    lp_reports_router,
)


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(title="Capital Hub - Allocation & Fund Metrics", version="0.1.0")
    app.add_middleware(RequestIdMiddleware)

    @app.get("/health", tags=["admin"])
    def health() -> dict[str, str]:
        return {"status": "ok"}

    for router in ROUTERS:
        app.include_router(router)

    # Static Web Apps proxies the linked backend under /api/*.
    for router in ROUTERS:
        app.include_router(router, prefix="/api")

    return app


app = create_app()
