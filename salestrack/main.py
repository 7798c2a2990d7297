"""
salestrack - sales and upsell event tracking service.

Features:
- Event recording with field-level validation
- Filtered, time-ranged event queries and dashboard summary
- Structured logging with correlation IDs
- Prometheus metrics
- Health checks (liveness and readiness)
"""
from contextlib import asynccontextmanager
from zoneinfo import ZoneInfo

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app

from . import __version__
from .adapters import EventStore, create_store
from .api.router import router
from .config import Settings, get_settings
from .health import HealthChecker
from .logging import setup_logging, get_logger
from .metrics import Metrics
from .middleware.correlation import CorrelationIdMiddleware
from .middleware.error_handler import register_error_handlers
from .middleware.metrics import MetricsMiddleware
from .middleware.validation import PayloadValidationMiddleware
from .services.event_service import EventService

logger = get_logger()


def create_app(store: EventStore | None = None, settings: Settings | None = None) -> FastAPI:
    """
    Composition root: wires settings, store, service and transport.

    Args:
        store: Event store to use (defaults to the configured adapter)
        settings: Settings override (defaults to environment settings)
    """
    settings = settings or get_settings()
    if store is None:
        store = create_store(settings)
    metrics = Metrics()
    health_checker = HealthChecker(store)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "service_starting",
            version=__version__,
            env=settings.ENV,
            store=type(store).__name__,
        )
        yield
        logger.info("service_stopping")
        metrics.mark_down()
        await store.close()

    app = FastAPI(
        title="salestrack",
        version=__version__,
        description="Sales and upsell event tracking with filterable queries and dashboard summary",
        lifespan=lifespan,
    )
    app.state.event_service = EventService(
        store, metrics=metrics, tz=ZoneInfo(settings.TIMEZONE)
    )
    app.state.metrics = metrics

    # Last added runs first: correlation id must be bound before anything logs
    app.add_middleware(PayloadValidationMiddleware, max_size=settings.MAX_EVENT_SIZE)
    app.add_middleware(MetricsMiddleware, metrics=metrics)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(CorrelationIdMiddleware)

    register_error_handlers(app)
    app.include_router(router)
    app.mount("/metrics", make_asgi_app(registry=metrics.registry))

    @app.get("/health")
    async def health():
        """Liveness probe."""
        logger.debug("health_check_liveness")
        return health_checker.liveness()

    @app.get("/health/ready")
    async def health_ready():
        """
        Readiness probe.

        Returns:
            200: Service is ready to handle traffic
            503: Service is not ready
        """
        result = await health_checker.readiness()
        status_code = 200 if result["status"] == "ready" else 503
        return JSONResponse(result, status_code=status_code)

    return app


settings = get_settings()
setup_logging(json_output=settings.LOG_JSON, level=settings.LOG_LEVEL)
app = create_app(settings=settings)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "salestrack.main:app",
        host="0.0.0.0",
        port=settings.SERVICE_PORT,
        reload=settings.ENV == "dev",
    )
