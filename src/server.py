"""
HTTP trigger for the Datastore Layout Benchmark.

Any request to `/` synchronously runs the four-layout benchmark and returns
the report lines as plain text: 200 when every store operation succeeded
(verification failures included), 500 when any put/get/query failed. Other
paths fall through to FastAPI's 404.

The store client is created once when the app starts; if that fails the app
does not start.

Run locally:
    uvicorn --factory src.server:app_from_settings --port 8080
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, Optional

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse

from src.config import get_settings
from src.infrastructure.store import StoreClient
from src.infrastructure.store_factory import build_store_client
from src.orchestrator import RunConfig, run_benchmark
from src.reporter import ListReportSink
from src.utils.logging import configure_logging, get_logger

log = get_logger(__name__)

ALL_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]


def create_app(
    client_factory: Optional[Callable[[], StoreClient]] = None,
    run_config: Optional[RunConfig] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Parameters
    ----------
    client_factory : callable | None
        Creates the store client at startup. Defaults to `build_store_client()`.
    run_config : RunConfig | None
        Benchmark parameters for every request. Defaults to settings.
    """
    factory = client_factory or build_store_client

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app.state.store_client = factory()
        log.info(
            "Store client initialized",
            extra={"client": type(app.state.store_client).__name__},
        )
        try:
            yield
        finally:
            app.state.store_client.close()

    app = FastAPI(title="Datastore Layout Benchmark", lifespan=lifespan)

    @app.api_route("/", methods=ALL_METHODS, response_class=PlainTextResponse)
    def run(request: Request) -> PlainTextResponse:
        # Blocking store calls; FastAPI runs sync endpoints in its threadpool.
        sink = ListReportSink()
        run_benchmark(request.app.state.store_client, run_config or RunConfig(), sink=sink)
        status_code = 200 if sink.ok else 500
        return PlainTextResponse(sink.text(), status_code=status_code)

    return app


def app_from_settings() -> FastAPI:
    """Application factory for uvicorn: configures logging from settings."""
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)
    return create_app()


__all__ = ["app_from_settings", "create_app"]
