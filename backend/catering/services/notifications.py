"""
Customer notifications.

Delivery (email, SMS) belongs to an external service; this module defines
the port the order flow talks to and a logging adapter. Notifications run
after the order is committed and their failures never reach the caller.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict

from catering.models.order import Order
from catering.models.user import User

logger = logging.getLogger(__name__)


def order_summary(order: Order) -> Dict[str, Any]:
    """Plain snapshot of an order, safe to use after the session closes."""
    return {
        "order_id": order.id,
        "order_number": order.order_number,
        "menu_title": order.menu_title,
        "service_date": order.service_date.isoformat(),
        "delivery_time": order.delivery_time.strftime("%H:%M"),
        "headcount": order.headcount,
        "service_address": order.service_address,
        "menu_price": order.menu_price,
        "delivery_fee": order.delivery_fee,
        "total_price": order.total_price,
        "status": order.status.value,
    }


def recipient_for(user: User) -> Dict[str, Any]:
    return {"email": user.email, "first_name": user.first_name, "last_name": user.last_name}


class Notifier(ABC):
    """Port for the external notification service."""

    @abstractmethod
    def order_confirmed(self, recipient: Dict[str, Any], summary: Dict[str, Any]) -> None:
        ...

    @abstractmethod
    def material_return_requested(self, recipient: Dict[str, Any], summary: Dict[str, Any]) -> None:
        ...


class LoggingNotifier(Notifier):
    """Records notifications in the application log."""

    def order_confirmed(self, recipient, summary):
        logger.info(
            f"Order confirmation for {recipient['email']}: "
            f"{summary['order_number']} ({summary['menu_title']}, {summary['total_price']:.2f})"
        )

    def material_return_requested(self, recipient, summary):
        logger.info(
            f"Material return request for {recipient['email']}: order {summary['order_number']}"
        )


def send_notification(notifier: Notifier, kind: str, recipient: Dict[str, Any], summary: Dict[str, Any]) -> None:
    """Best-effort dispatch; logs and swallows any failure."""
    try:
        getattr(notifier, kind)(recipient, summary)
    except Exception:
        logger.exception(f"Failed to send {kind} notification for order {summary.get('order_number')}")
