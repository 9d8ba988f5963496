"""Laundry service routers package."""

from services.laundry_service.routers.admin import router as admin_router
from services.laundry_service.routers.auth import router as auth_router
from services.laundry_service.routers.orders import router as orders_router
from services.laundry_service.routers.shops import router as shops_router

__all__ = [
    "admin_router",
    "auth_router",
    "orders_router",
    "shops_router",
]
