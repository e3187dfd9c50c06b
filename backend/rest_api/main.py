"""
REST API main application.
Entry point for the FastAPI REST server.
"""

from fastapi import FastAPI

from rest_api.core import (
    configure_cors,
    lifespan,
    register_exception_handlers,
    register_middlewares,
)
from rest_api.routers.accounts import allergies_router, clients_router
from rest_api.routers.auth import router as auth_router, two_factor_router
from rest_api.routers.booking import areas_router, reservations_router
from rest_api.routers.catalog import categories_router, customization_router, menu_router
from rest_api.routers.content import (
    about_router,
    contact_router,
    locations_router,
    offers_router,
    reviews_router,
)
from rest_api.routers.public import health_router
from rest_api.routers.shop import cart_router, coupons_router, orders_router
from shared.config.settings import settings
from shared.security.rate_limit import limiter


# Create FastAPI application
app = FastAPI(
    title="Bocatto REST API",
    description="Restaurant menu, ordering and reservations API",
    version="1.0.0",
    lifespan=lifespan,
)

# Rate limiting
app.state.limiter = limiter

register_exception_handlers(app)
register_middlewares(app)
configure_cors(app)


@app.get("/")
def root():
    """Welcome message with the main resource paths."""
    return {
        "message": "Bienvenido a la API de Bocatto Restaurant",
        "version": app.version,
        "endpoints": {
            "menu": "/api/menu",
            "auth": "/api/auth",
            "cart": "/api/cart",
            "orders": "/api/orders",
            "areas": "/areas",
            "reservations": "/reservations",
            "locations": "/locations",
            "offers": "/offers",
            "categories": "/categories",
            "reviews": "/reviews",
            "coupons": "/coupons",
            "contact": "/api/contact",
            "about": "/api/about",
        },
    }


# =============================================================================
# Include Routers
# =============================================================================

app.include_router(health_router)
app.include_router(auth_router)
app.include_router(two_factor_router)
app.include_router(allergies_router)
app.include_router(clients_router)
app.include_router(menu_router)
app.include_router(customization_router)
app.include_router(categories_router)
app.include_router(areas_router)
app.include_router(reservations_router)
app.include_router(cart_router)
app.include_router(orders_router)
app.include_router(coupons_router)
app.include_router(reviews_router)
app.include_router(locations_router)
app.include_router(offers_router)
app.include_router(contact_router)
app.include_router(about_router)


# =============================================================================
# Development entry point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "rest_api.main:app",
        host="0.0.0.0",
        port=settings.rest_api_port,
        reload=settings.debug,
    )
