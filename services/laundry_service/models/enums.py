"""Enum definitions for laundry service models."""

import enum

from libs.auth.models import UserRole


def enum_values(enum_cls):
    """Return persistent DB values for SAEnum mappings."""
    return [member.value for member in enum_cls]


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    IN_PROGRESS = "in_progress"
    READY = "ready"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    @classmethod
    def _missing_(cls, value):
        if not isinstance(value, str):
            return None
        lowered = value.strip().lower()
        lowered = LEGACY_ORDER_STATUS_LABELS.get(lowered, lowered)
        for member in cls:
            if member.value == lowered:
                return member
        return None


# Labels some older dashboards still send
LEGACY_ORDER_STATUS_LABELS = {
    "processing": "in_progress",
    "completed": "delivered",
}


class AuditEntityType(str, enum.Enum):
    USER = "user"
    SHOP = "shop"
    SERVICE = "service"
    ORDER = "order"


__all__ = ["AuditEntityType", "OrderStatus", "UserRole", "enum_values"]
