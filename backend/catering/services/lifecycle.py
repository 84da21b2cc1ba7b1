"""
Order Lifecycle Controller

Orchestrates order creation, customer edits and cancellation, staff status
transitions and tracking:

- Validates input and prices the order before touching the database
- Writes the order, its menu link, the history entry and the outbox event
  in a single transaction
- Checks the caller's role before every status transition

Statistics rollups and notifications are not done here; they run after
commit from the outbox relay and the notifier.
"""

import logging
from dataclasses import dataclass
from datetime import date, time
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from catering.core.database import transaction
from catering.core.exceptions import PermissionDeniedError, StateError, ValidationError
from catering.core.security import Principal
from catering.models.order import Order, OrderStatus
from catering.models.order_status_history import OrderStatusHistory, ContactMode
from catering.services.events import OrderEventOutbox
from catering.services.history import HistoryRecorder
from catering.services.order_repository import OrderDraft, OrderRepository, ReportPeriod
from catering.services.pricing import DeliveryContext, PricingEngine
from catering.services.state_machine import ensure_permitted, ensure_transition

logger = logging.getLogger(__name__)

# Statuses for which the customer cannot follow the order yet (or anymore)
UNTRACKABLE_STATUSES = (OrderStatus.PENDING, OrderStatus.CANCELLED)


@dataclass
class OrderRequest:
    menu_id: int
    service_date: date
    delivery_time: time
    headcount: int
    service_address: str
    material_loan: bool = False
    material_returned: bool = False


class OrderLifecycleController:
    """Entry point for every order mutation."""

    def __init__(self, db: Session, pricing: Optional[PricingEngine] = None):
        self.db = db
        self.pricing = pricing or PricingEngine()
        self.orders = OrderRepository(db, self.pricing)
        self.history = HistoryRecorder(db)
        self.outbox = OrderEventOutbox(db)

    # --- Customer operations ---

    def create_order(self, principal: Principal, request: OrderRequest) -> Order:
        user = self.orders.get_user(principal.user_id)
        menu = self.orders.get_menu(request.menu_id)
        self.orders.check_headcount(menu, request.headcount)
        if not request.service_address.strip():
            raise ValidationError("A service address is required")

        quote = self.pricing.quote(
            menu.price_per_person,
            menu.min_headcount,
            request.headcount,
            DeliveryContext(
                service_address=request.service_address,
                customer_address=user.postal_address,
                customer_city=user.city,
            ),
        )

        with transaction(self.db):
            order = self.orders.create(OrderDraft(
                user_id=user.id,
                menu_id=menu.id,
                service_date=request.service_date,
                delivery_time=request.delivery_time,
                headcount=request.headcount,
                service_address=request.service_address,
                menu_price=quote.menu_price,
                delivery_fee=quote.delivery_fee,
                material_loan=request.material_loan,
                material_returned=request.material_returned,
            ))
            self.history.append(order.id, None, OrderStatus.PENDING, principal.user_id)
            self.outbox.order_created(order)

        logger.info(
            f"Order {order.order_number} created by user {user.id}: "
            f"{request.headcount} x menu {menu.id}, total {quote.total:.2f}"
        )
        return order

    def get_order(self, principal: Principal, order_id: int) -> Order:
        return self.orders.get(order_id, principal.user_id)

    def list_orders(self, principal: Principal) -> List[Order]:
        return self.orders.list_for_user(principal.user_id)

    def update_order(
        self,
        principal: Principal,
        order_id: int,
        changes: Dict[str, Any],
        new_status: Optional[OrderStatus] = None,
    ) -> Order:
        """Customer edit of a pending order, optionally with a status change."""
        if not changes and new_status is None:
            raise ValidationError("At least one field must be provided")

        order = self.orders.get(order_id, principal.user_id)
        if order.status != OrderStatus.PENDING:
            raise StateError(
                f'Cannot modify an order with status "{order.status.value}". '
                "Only pending orders can be modified or cancelled."
            )
        status_changes = new_status is not None and new_status != order.status
        if status_changes:
            ensure_permitted(principal.role, True, order, new_status)
            ensure_transition(order, new_status)

        with transaction(self.db):
            if changes:
                self.orders.update(order_id, principal.user_id, changes)
            if status_changes:
                self._record_transition(principal, order, new_status)

        logger.info(f"Order {order.order_number} updated by user {principal.user_id}")
        return order

    def cancel_order(self, principal: Principal, order_id: int) -> Order:
        """Customer cancellation; only while the order is pending."""
        order = self.orders.get(order_id, principal.user_id)

        with transaction(self.db):
            previous = order.status
            self.orders.cancel(order_id, principal.user_id)
            self.history.append(order.id, previous, OrderStatus.CANCELLED, principal.user_id)

        logger.info(f"Order {order.order_number} cancelled by its owner")
        return order

    def get_tracking(self, principal: Principal, order_id: int) -> List[OrderStatusHistory]:
        """Status timeline for the owner, once staff have accepted the order."""
        order = self.orders.get(order_id, principal.user_id)
        if order.status in UNTRACKABLE_STATUSES:
            raise StateError(
                "Order tracking is only available once the order has been accepted",
                status_code=403,
            )
        return self.history.list(order.id)

    # --- Staff operations ---

    def _require_staff(self, principal: Principal) -> None:
        if not principal.is_staff:
            raise PermissionDeniedError("Access restricted to staff")

    def _record_transition(
        self,
        principal: Principal,
        order: Order,
        target: OrderStatus,
        cancellation_reason: Optional[str] = None,
        contact_mode: Optional[ContactMode] = None,
    ) -> OrderStatus:
        previous = order.status
        if previous == OrderStatus.AWAITING_MATERIAL_RETURN and target == OrderStatus.COMPLETED:
            order.material_returned = True
        self.orders.set_status(order, target)
        self.history.append(
            order.id, previous, target, principal.user_id,
            cancellation_reason=cancellation_reason,
            contact_mode=contact_mode,
        )
        return previous

    def list_all_orders(self, principal: Principal, **filters) -> List[Order]:
        self._require_staff(principal)
        return self.orders.list_all(**filters)

    def staff_summary(self, principal: Principal, period: Optional[ReportPeriod] = None) -> Dict[str, Any]:
        self._require_staff(principal)
        return self.orders.summary(period)

    def staff_history(self, principal: Principal, order_id: int) -> List[OrderStatusHistory]:
        self._require_staff(principal)
        order = self.orders.get_any(order_id)
        return self.history.list(order.id)

    def transition(
        self,
        principal: Principal,
        order_id: int,
        target: OrderStatus,
    ) -> Tuple[Order, OrderStatus]:
        """Move an order along the state machine. Returns the order and its previous status."""
        self._require_staff(principal)
        order = self.orders.get_any(order_id)
        ensure_transition(order, target)
        if target == OrderStatus.CANCELLED:
            raise ValidationError(
                f"Staff cancellations need a reason and a contact mode: "
                f"use POST /api/staff/orders/{order_id}/cancel"
            )

        with transaction(self.db):
            previous = self._record_transition(principal, order, target)

        logger.info(
            f"Order {order.order_number}: {previous.value} -> {target.value} "
            f"by user {principal.user_id}"
        )
        return order, previous

    def staff_cancel(
        self,
        principal: Principal,
        order_id: int,
        reason: str,
        contact_mode: ContactMode,
    ) -> Order:
        """Staff cancellation of a pending order, recording why and how the customer was told."""
        self._require_staff(principal)
        if not reason or not reason.strip():
            raise ValidationError("A cancellation reason is required")

        order = self.orders.get_any(order_id)
        ensure_transition(order, OrderStatus.CANCELLED)

        with transaction(self.db):
            self._record_transition(
                principal, order, OrderStatus.CANCELLED,
                cancellation_reason=reason.strip(),
                contact_mode=contact_mode,
            )

        logger.info(
            f"Order {order.order_number} cancelled by staff user {principal.user_id} "
            f"(customer contacted by {contact_mode.value})"
        )
        return order
