"""Unit tests for the order status state machine."""

import pytest
from services.laundry_service.models import OrderStatus
from services.laundry_service.order_lifecycle import (
    TERMINAL_STATUSES,
    can_customer_transition,
    can_transition,
)

FORWARD = [
    OrderStatus.PENDING,
    OrderStatus.ACCEPTED,
    OrderStatus.IN_PROGRESS,
    OrderStatus.READY,
    OrderStatus.DELIVERED,
]


@pytest.mark.unit
def test_terminal_statuses():
    assert TERMINAL_STATUSES == {OrderStatus.DELIVERED, OrderStatus.CANCELLED}


@pytest.mark.unit
def test_forward_moves_allowed_including_skips():
    for i, current in enumerate(FORWARD):
        for target in FORWARD[i + 1 :]:
            assert can_transition(current, target), (current, target)


@pytest.mark.unit
def test_backward_moves_rejected():
    for i, current in enumerate(FORWARD):
        for target in FORWARD[:i]:
            assert not can_transition(current, target), (current, target)


@pytest.mark.unit
def test_cancel_allowed_until_delivered():
    for current in FORWARD[:-1]:
        assert can_transition(current, OrderStatus.CANCELLED)
    assert not can_transition(OrderStatus.DELIVERED, OrderStatus.CANCELLED)


@pytest.mark.unit
def test_cancelled_is_final():
    for target in FORWARD:
        assert not can_transition(OrderStatus.CANCELLED, target)


@pytest.mark.unit
@pytest.mark.parametrize("status", list(OrderStatus))
def test_same_status_is_always_allowed(status):
    assert can_transition(status, status)
    assert can_customer_transition(status, status)


@pytest.mark.unit
def test_customer_may_only_cancel_early():
    assert can_customer_transition(OrderStatus.PENDING, OrderStatus.CANCELLED)
    assert can_customer_transition(OrderStatus.ACCEPTED, OrderStatus.CANCELLED)
    assert not can_customer_transition(OrderStatus.IN_PROGRESS, OrderStatus.CANCELLED)
    assert not can_customer_transition(OrderStatus.READY, OrderStatus.CANCELLED)
    assert not can_customer_transition(OrderStatus.PENDING, OrderStatus.ACCEPTED)
    assert not can_customer_transition(OrderStatus.PENDING, OrderStatus.DELIVERED)


@pytest.mark.unit
def test_status_labels_parse_case_insensitively():
    assert OrderStatus("READY") is OrderStatus.READY
    assert OrderStatus(" Pending ") is OrderStatus.PENDING
    assert OrderStatus("PROCESSING") is OrderStatus.IN_PROGRESS
    assert OrderStatus("completed") is OrderStatus.DELIVERED
    with pytest.raises(ValueError):
        OrderStatus("shipped")
