"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from optioil_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from optioil_gateway.api.v1 import batch, company_warnings, schedules
from optioil_gateway.infrastructure.observability.logging import setup_logging
from optioil_gateway.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="OptiOil Pricing Gateway",
        description="Company product pricing and scheduled price application service",
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
    app.include_router(batch.router, prefix="/v1", tags=["batch"])
    app.include_router(schedules.router, prefix="/v1", tags=["price-schedules"])
    app.include_router(company_warnings.router, prefix="/v1", tags=["warnings"])

    return app


app = create_app()
