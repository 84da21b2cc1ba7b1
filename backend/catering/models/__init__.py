from catering.models.user import User, UserRole
from catering.models.menu import Menu
from catering.models.order import Order, OrderMenu, OrderStatus
from catering.models.order_status_history import OrderStatusHistory, ContactMode
from catering.models.order_event import OrderEvent, OrderEventType

__all__ = [
    "User",
    "UserRole",
    "Menu",
    "Order",
    "OrderMenu",
    "OrderStatus",
    "OrderStatusHistory",
    "ContactMode",
    "OrderEvent",
    "OrderEventType",
]
