"""Order status state machine.

Orders only move forward: pending -> accepted -> in_progress -> ready ->
delivered, with cancellation possible until delivery. Steps may be skipped
(a shop can mark a pending order ready directly) but never reversed.
Re-applying the current status is always allowed so that repeating an
update is harmless.
"""

from services.laundry_service.models import OrderStatus

ALLOWED_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset(
        {
            OrderStatus.ACCEPTED,
            OrderStatus.IN_PROGRESS,
            OrderStatus.READY,
            OrderStatus.DELIVERED,
            OrderStatus.CANCELLED,
        }
    ),
    OrderStatus.ACCEPTED: frozenset(
        {
            OrderStatus.IN_PROGRESS,
            OrderStatus.READY,
            OrderStatus.DELIVERED,
            OrderStatus.CANCELLED,
        }
    ),
    OrderStatus.IN_PROGRESS: frozenset(
        {OrderStatus.READY, OrderStatus.DELIVERED, OrderStatus.CANCELLED}
    ),
    OrderStatus.READY: frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

TERMINAL_STATUSES = frozenset(
    status for status, targets in ALLOWED_TRANSITIONS.items() if not targets
)

# What a customer may do to their own order, and from where
CUSTOMER_CANCELLABLE_FROM = frozenset({OrderStatus.PENDING, OrderStatus.ACCEPTED})


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    if current == target:
        return True
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def can_customer_transition(current: OrderStatus, target: OrderStatus) -> bool:
    if current == target:
        return True
    return target == OrderStatus.CANCELLED and current in CUSTOMER_CANCELLABLE_FROM
