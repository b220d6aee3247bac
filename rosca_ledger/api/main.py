"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from rosca_ledger.api.middleware import RequestIDMiddleware, MetricsMiddleware
from rosca_ledger.api.v1 import cycles, diagnostics, members
from rosca_ledger.infrastructure.observability.logging import setup_logging
from rosca_ledger.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="ROSCA Ledger",
        description="Capital, loan, loss and payout figures for savings group cycles",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(cycles.router, prefix="/v1", tags=["cycles"])
    app.include_router(members.router, prefix="/v1", tags=["members"])
    app.include_router(diagnostics.router, prefix="/v1", tags=["diagnostics"])

    return app


app = create_app()
