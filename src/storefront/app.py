"""Storefront FastAPI application.

Processes cart commands synchronously over HTTP and exposes orders, metrics
and the catalog as read models. Every request runs inside the storefront
domain context.

Usage:
    uvicorn storefront.app:create_app --factory --host 0.0.0.0 --port 8000
    storefront-api
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from storefront.utils.logging import bind_shopper, clear_context, configure_logging

logger = structlog.get_logger(__name__)


def create_app() -> FastAPI:
    """Initialize the domain and build the FastAPI app."""
    from storefront.domain import storefront

    configure_logging()
    storefront.init()

    app = FastAPI(
        title="Storefront API",
        description="Wholesale/retail ordering — carts, checkout, orders and metrics",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def domain_context_middleware(request: Request, call_next):
        """Push the storefront domain context and tag logs with the shopper."""
        user_id = request.query_params.get("user_id")
        if user_id:
            bind_shopper(user_id)
        try:
            with storefront.domain_context():
                return await call_next(request)
        finally:
            clear_context()

    from storefront.api import cart_router, catalog_router, metrics_router, order_router

    app.include_router(catalog_router)
    app.include_router(cart_router)
    app.include_router(order_router)
    app.include_router(metrics_router)
    register_exception_handlers(app)

    @app.get("/health")
    async def health():
        return JSONResponse(content={"status": "ok", "domain": storefront.name})

    logger.info("storefront_app_created")
    return app


def main():
    import uvicorn

    uvicorn.run(
        "storefront.app:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        log_level="info",
    )


if __name__ == "__main__":
    main()
