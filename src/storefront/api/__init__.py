from storefront.api.routes import cart_router, catalog_router, metrics_router, order_router

__all__ = ["cart_router", "catalog_router", "metrics_router", "order_router"]
