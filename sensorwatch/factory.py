from __future__ import annotations

import logging
import threading
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from starlette.middleware.trustedhost import TrustedHostMiddleware

from sensorwatch.api.router import api_router
from sensorwatch.core.clock import utc_now
from sensorwatch.core.config import Settings, load_settings
from sensorwatch.repositories.influx import InfluxMeasurementRepository, create_influx_client
from sensorwatch.services.generator import GeneratorTarget, MeasurementGenerator

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or load_settings()
    logging.getLogger("sensorwatch").setLevel(settings.log_level.upper())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        stop_event: threading.Event | None = None
        bg_thread: threading.Thread | None = None

        app.state.settings = settings
        app.state.clock = utc_now
        app.state.influx_client = create_influx_client(settings)

        if settings.generator_enabled and settings.generator_targets:
            stop_event = threading.Event()
            repo = InfluxMeasurementRepository(
                client=app.state.influx_client,
                org=settings.influx_org,
                bucket=settings.influx_bucket,
                measurement=settings.influx_measurement,
                timeout_ms=settings.influx_timeout_ms,
            )
            generator = MeasurementGenerator(
                repo=repo,
                targets=[GeneratorTarget.parse(t) for t in settings.generator_targets],
            )

            def _loop() -> None:
                while stop_event is not None and not stop_event.is_set():
                    try:
                        result = generator.tick()
                        logger.info(
                            "Generated readings for %d/%d devices",
                            result.written,
                            result.requested,
                        )
                    except Exception:
                        logger.exception("Measurement generator tick failed")
                    stop_event.wait(settings.generator_interval_seconds)

            bg_thread = threading.Thread(
                target=_loop, name="measurement-generator", daemon=True
            )
            bg_thread.start()
            logger.info(
                "Measurement generator started for %d devices every %.0fs",
                len(settings.generator_targets),
                settings.generator_interval_seconds,
            )

        yield
        if stop_event is not None:
            stop_event.set()
        if bg_thread is not None and bg_thread.is_alive():
            bg_thread.join(timeout=2.0)
        app.state.influx_client.close()

    docs_enabled = settings.docs_enabled and not settings.is_production
    app = FastAPI(
        title="Sensor Watch API",
        version="0.1.0",
        debug=settings.debug,
        docs_url="/docs" if docs_enabled else None,
        redoc_url=None,
        openapi_url="/openapi.json" if docs_enabled else None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.clock = utc_now

    app.add_middleware(GZipMiddleware, minimum_size=1024)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type"],
    )
    if settings.trusted_hosts:
        app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.trusted_hosts)

    @app.middleware("http")
    async def security_headers(request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("Referrer-Policy", "no-referrer")
        if settings.is_production:
            response.headers.setdefault(
                "Strict-Transport-Security", "max-age=31536000; includeSubDomains"
            )
        return response

    @app.get("/", tags=["meta"])
    def root():
        return {"name": "sensorwatch", "status": "ok"}

    app.include_router(api_router)
    return app
