"""FastAPI application for the Laundry Marketplace service."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from libs.common.config import get_settings
from libs.common.error_handler import add_exception_handlers
from libs.common.middleware import add_observability_middleware
from libs.common.rate_limit import limiter
from services.laundry_service.routers import (
    admin_router,
    auth_router,
    orders_router,
    shops_router,
)


def create_app() -> FastAPI:
    """Create and configure the Laundry Marketplace FastAPI app."""
    settings = get_settings()
    app = FastAPI(
        title="Laundry Marketplace Service",
        version="0.1.0",
        description="Customers, shop owners and admins: shops, services, checkout and order tracking.",
    )

    app.state.limiter = limiter

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Structured logging + request tracing
    add_observability_middleware(app)

    # Consistent JSON bodies for every error kind
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "laundry"}

    app.include_router(auth_router, prefix="/api")
    app.include_router(shops_router, prefix="/api")
    app.include_router(orders_router, prefix="/api")
    app.include_router(admin_router, prefix="/api")

    return app


app = create_app()
