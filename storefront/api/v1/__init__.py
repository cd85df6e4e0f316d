"""API v1 routes aggregation"""

from fastapi import APIRouter

from .products.router import router as products_router
from .cart.router import router as cart_router

# Create v1 router
api_router = APIRouter()

# Include all routers
api_router.include_router(products_router, prefix="/products", tags=["Products"])
api_router.include_router(cart_router, prefix="/carts", tags=["Carts"])


@api_router.get("", tags=["Index"])
async def api_index():
    """Endpoint index"""
    return {
        "message": "Products and carts API",
        "endpoints": {
            "products": "/api/products",
            "carts": "/api/carts",
            "realtime": "/ws/products",
            "views": {
                "products": "/products",
                "realtime": "/realtimeproducts",
            },
        },
    }
