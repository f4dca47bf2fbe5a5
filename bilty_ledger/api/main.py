"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from bilty_ledger.api.errors import register_exception_handlers
from bilty_ledger.api.middleware import RequestIDMiddleware, MetricsMiddleware
from bilty_ledger.api.v1 import records, payments, summaries, options
from bilty_ledger.infrastructure.observability.logging import setup_logging
from bilty_ledger.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Bilty Ledger",
        description="Transport bilty records, outstanding balances and payment allocation",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(records.router, prefix="/v1", tags=["records"])
    app.include_router(payments.router, prefix="/v1", tags=["payments"])
    app.include_router(summaries.router, prefix="/v1", tags=["summaries"])
    app.include_router(options.router, prefix="/v1", tags=["options"])

    return app


app = create_app()
