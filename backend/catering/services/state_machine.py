"""
Order status state machine.

pending -> accepted -> in_preparation -> in_delivery
        -> (awaiting_material_return, loaned material only) -> completed

cancelled is reachable from pending only. completed and cancelled are
terminal. Only pending orders belong to their owner; every later move is
staff work.
"""

from typing import Dict, FrozenSet

from catering.core.exceptions import PermissionDeniedError, StateError
from catering.models.order import Order, OrderStatus, TERMINAL_STATUSES
from catering.models.user import UserRole, STAFF_ROLES

TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.ACCEPTED, OrderStatus.CANCELLED}),
    OrderStatus.ACCEPTED: frozenset({OrderStatus.IN_PREPARATION}),
    OrderStatus.IN_PREPARATION: frozenset({OrderStatus.IN_DELIVERY}),
    OrderStatus.IN_DELIVERY: frozenset({OrderStatus.AWAITING_MATERIAL_RETURN, OrderStatus.COMPLETED}),
    OrderStatus.AWAITING_MATERIAL_RETURN: frozenset({OrderStatus.COMPLETED}),
    OrderStatus.COMPLETED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

# Transitions an order's owner may trigger themselves
OWNER_TRANSITIONS = {(OrderStatus.PENDING, OrderStatus.CANCELLED)}


def allowed_transitions(order: Order) -> FrozenSet[OrderStatus]:
    """Statuses the order may move to next, given its material loan."""
    targets = set(TRANSITIONS[order.status])
    if order.status == OrderStatus.IN_DELIVERY:
        if order.material_loan and not order.material_returned:
            targets.discard(OrderStatus.COMPLETED)
        else:
            targets.discard(OrderStatus.AWAITING_MATERIAL_RETURN)
    return frozenset(targets)


def ensure_transition(order: Order, target: OrderStatus) -> None:
    """Raise StateError unless the order may move to ``target``."""
    if order.status in TERMINAL_STATUSES:
        raise StateError(
            f'Cannot change the status of an order that is "{order.status.value}"'
        )
    if target not in allowed_transitions(order):
        if target == OrderStatus.CANCELLED:
            raise StateError(
                f'Cannot cancel an order with status "{order.status.value}". '
                "Only pending orders can be cancelled."
            )
        if target == OrderStatus.AWAITING_MATERIAL_RETURN:
            raise StateError("No loaned material is awaiting return for this order")
        if order.status == OrderStatus.IN_DELIVERY and target == OrderStatus.COMPLETED:
            raise StateError("Loaned material must be returned before completing the order")
        raise StateError(
            f'Invalid transition from "{order.status.value}" to "{target.value}"'
        )


def ensure_permitted(role: UserRole, is_owner: bool, order: Order, target: OrderStatus) -> None:
    """Raise PermissionDeniedError unless ``role`` may drive this transition."""
    if role in STAFF_ROLES:
        return
    if is_owner and (order.status, target) in OWNER_TRANSITIONS:
        return
    raise PermissionDeniedError(
        f'Only staff can move an order from "{order.status.value}" to "{target.value}"'
    )
