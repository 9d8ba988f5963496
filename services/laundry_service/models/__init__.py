"""Laundry service models package."""

from services.laundry_service.models.accounts import User
from services.laundry_service.models.catalog import Service, Shop
from services.laundry_service.models.commerce import AuditLog, Order, OrderItem
from services.laundry_service.models.enums import (
    AuditEntityType,
    OrderStatus,
    UserRole,
)

__all__ = [
    "AuditEntityType",
    "AuditLog",
    "Order",
    "OrderItem",
    "OrderStatus",
    "Service",
    "Shop",
    "User",
    "UserRole",
]
