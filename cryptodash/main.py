# cryptodash/main.py
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from functools import partial
from typing import AsyncIterator, Optional

from fastapi import FastAPI

from cryptodash.api.dashboard import router as dashboard_router
from cryptodash.api.health import router as health_router
from cryptodash.config.settings import Settings, get_settings
from cryptodash.jobs.refresh_loop import start_refresh_loop, stop_refresh_loop
from cryptodash.services.coingecko import fetch_raw_coin, fetch_raw_markets
from cryptodash.services.controller import DashboardController


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def create_app(
    settings: Optional[Settings] = None,
    controller: Optional[DashboardController] = None,
) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app.state.controller = controller or DashboardController(
            fetch_markets=partial(fetch_raw_markets, settings=settings),
            fetch_coin=partial(fetch_raw_coin, settings=settings),
        )

        # The loop's first tick is the startup refresh
        if settings.POLL_ENABLED:
            app.state.refresh_loop = start_refresh_loop(
                app.state.controller.refresh, settings.POLL_INTERVAL_SECONDS
            )
        else:
            app.state.refresh_loop = None
        try:
            yield
        finally:
            await stop_refresh_loop(app.state.refresh_loop)
            app.state.refresh_loop = None

    app = FastAPI(title="Crypto Prices Dashboard", lifespan=lifespan)

    # Routers
    app.include_router(health_router)
    app.include_router(dashboard_router)

    @app.get("/")
    def root() -> dict[str, str]:
        return {"message": "Crypto Prices Dashboard", "dashboard": "/dashboard"}

    return app


configure_logging(get_settings().LOG_LEVEL)
app = create_app()
