"""
Order Repository

Persistence of the authoritative order record. Every customer-facing read
goes through an ownership check; a foreign order is reported as not found.
Methods flush but never commit: the caller owns the transaction.
"""

import enum
import secrets
import time
from dataclasses import dataclass
from datetime import date, timedelta, time as dt_time
from typing import Any, Dict, List, Optional

from sqlalchemy import case, func
from sqlalchemy.orm import Session, joinedload

from catering.core.exceptions import NotFoundError, StateError, ValidationError
from catering.models.menu import Menu
from catering.models.order import Order, OrderMenu, OrderStatus
from catering.models.user import User
from catering.services.pricing import PricingEngine

# Fields a customer may change while the order is pending
EDITABLE_FIELDS = ("service_date", "delivery_time", "headcount", "material_loan", "material_returned")

# Size of the "popular menus" and "pending orders" lists in the staff summary
SUMMARY_LIST_SIZE = 10


class ReportPeriod(str, enum.Enum):
    DAY = "day"
    WEEK = "week"      # Since Monday
    MONTH = "month"
    YEAR = "year"


def period_start(period: Optional[ReportPeriod], today: date) -> Optional[date]:
    """First order date included in ``period``; None means all time."""
    if period is None:
        return None
    if period == ReportPeriod.DAY:
        return today
    if period == ReportPeriod.WEEK:
        return today - timedelta(days=today.weekday())
    if period == ReportPeriod.MONTH:
        return today.replace(day=1)
    return today.replace(month=1, day=1)


@dataclass
class OrderDraft:
    """A priced order ready to be inserted."""
    user_id: int
    menu_id: int
    service_date: date
    delivery_time: dt_time
    headcount: int
    service_address: str
    menu_price: float
    delivery_fee: float
    material_loan: bool = False
    material_returned: bool = False


def generate_order_number() -> str:
    """Microsecond timestamp plus a random suffix; no central sequence needed."""
    return f"CMD-{time.time_ns() // 1000}-{secrets.randbelow(10000):04d}"


class OrderRepository:
    """Reads and writes orders and their menu link."""

    def __init__(self, db: Session, pricing: Optional[PricingEngine] = None):
        self.db = db
        self.pricing = pricing or PricingEngine()

    def _query(self):
        return self.db.query(Order).options(
            joinedload(Order.menu_link).joinedload(OrderMenu.menu)
        )

    def get_menu(self, menu_id: int) -> Menu:
        menu = self.db.get(Menu, menu_id)
        if not menu:
            raise ValidationError(f"Menu {menu_id} does not exist")
        return menu

    def get_user(self, user_id: int) -> User:
        user = self.db.get(User, user_id)
        if not user:
            raise ValidationError(f"User {user_id} does not exist")
        return user

    @staticmethod
    def check_headcount(menu: Menu, headcount: int) -> None:
        if headcount < menu.min_headcount:
            raise ValidationError(
                f"This menu requires at least {menu.min_headcount} people"
            )

    def create(self, draft: OrderDraft) -> Order:
        """Insert a pending order and its menu link."""
        self.get_user(draft.user_id)
        menu = self.get_menu(draft.menu_id)
        self.check_headcount(menu, draft.headcount)

        order = Order(
            order_number=generate_order_number(),
            order_date=date.today(),
            service_date=draft.service_date,
            delivery_time=draft.delivery_time,
            menu_price=draft.menu_price,
            delivery_fee=draft.delivery_fee,
            headcount=draft.headcount,
            service_address=draft.service_address,
            status=OrderStatus.PENDING,
            material_loan=draft.material_loan,
            material_returned=draft.material_returned,
            user_id=draft.user_id,
        )
        self.db.add(order)
        self.db.flush()

        self.db.add(OrderMenu(order_id=order.id, menu_id=menu.id))
        self.db.flush()
        self.db.refresh(order)
        return order

    def get(self, order_id: int, owner_id: int) -> Order:
        order = self._query().filter(
            Order.id == order_id,
            Order.user_id == owner_id
        ).first()
        if not order:
            raise NotFoundError("Order not found")
        return order

    def get_any(self, order_id: int) -> Order:
        """Staff lookup, no ownership check."""
        order = self._query().filter(Order.id == order_id).first()
        if not order:
            raise NotFoundError("Order not found")
        return order

    @staticmethod
    def _ensure_pending(order: Order, action: str) -> None:
        if order.status != OrderStatus.PENDING:
            raise StateError(
                f'Cannot {action} an order with status "{order.status.value}". '
                "Only pending orders can be modified or cancelled."
            )

    def update(self, order_id: int, owner_id: int, changes: Dict[str, Any]) -> Order:
        """Apply customer edits to a pending order, re-pricing on headcount change."""
        order = self.get(order_id, owner_id)
        self._ensure_pending(order, "modify")

        unknown = set(changes) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Fields cannot be modified: {', '.join(sorted(unknown))}")

        headcount = changes.get("headcount")
        if headcount is not None and headcount != order.headcount:
            menu = order.menu
            self.check_headcount(menu, headcount)
            order.menu_price = self.pricing.menu_price(
                menu.price_per_person, menu.min_headcount, headcount
            )

        for field, value in changes.items():
            if value is not None:
                setattr(order, field, value)

        self.db.flush()
        return order

    def set_status(self, order: Order, status: OrderStatus) -> Order:
        """Persist a status change. Transition rules are checked by the caller."""
        if order.is_terminal:
            raise StateError(
                f'Cannot change the status of an order that is "{order.status.value}"'
            )
        order.status = status
        self.db.flush()
        return order

    def cancel(self, order_id: int, owner_id: int) -> Order:
        """Mark a pending order cancelled. The row is kept."""
        order = self.get(order_id, owner_id)
        self._ensure_pending(order, "cancel")
        return self.set_status(order, OrderStatus.CANCELLED)

    def list_for_user(self, owner_id: int) -> List[Order]:
        return self._query().filter(
            Order.user_id == owner_id
        ).order_by(Order.created_at.desc(), Order.id.desc()).all()

    def list_all(
        self,
        status: Optional[OrderStatus] = None,
        user_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Order]:
        """Staff listing with optional filters on status, customer and service date."""
        query = self._query()
        if status:
            query = query.filter(Order.status == status)
        if user_id:
            query = query.filter(Order.user_id == user_id)
        if start_date:
            query = query.filter(Order.service_date >= start_date)
        if end_date:
            query = query.filter(Order.service_date <= end_date)
        return query.order_by(Order.created_at.desc(), Order.id.desc()).offset(skip).limit(limit).all()

    def summary(self, period: Optional[ReportPeriod] = None, today: Optional[date] = None) -> Dict[str, Any]:
        """
        Staff dashboard figures computed from the orders themselves.

        Counts, revenue and popular menus cover orders placed within
        ``period`` (by order date). The pending list is always the most
        recent pending orders, whatever the period.
        """
        start = period_start(period, today or date.today())
        filters = [Order.order_date >= start] if start else []
        order_total = Order.menu_price + Order.delivery_fee

        total, revenue, average, completed, cancelled = self.db.query(
            func.count(Order.id),
            func.coalesce(func.sum(order_total), 0.0),
            func.coalesce(func.avg(order_total), 0.0),
            func.count(case((Order.status == OrderStatus.COMPLETED, 1))),
            func.count(case((Order.status == OrderStatus.CANCELLED, 1))),
        ).filter(*filters).one()

        by_status = self.db.query(
            Order.status, func.count(Order.id)
        ).filter(*filters).group_by(Order.status).all()

        order_count = func.count(Order.id)
        popular = self.db.query(
            Menu.id, Menu.title, order_count, func.coalesce(func.sum(Order.menu_price), 0.0)
        ).join(
            OrderMenu, OrderMenu.menu_id == Menu.id
        ).join(
            Order, Order.id == OrderMenu.order_id
        ).filter(*filters).group_by(
            Menu.id, Menu.title
        ).order_by(order_count.desc(), Menu.id).limit(SUMMARY_LIST_SIZE).all()

        pending = self._query().filter(
            Order.status == OrderStatus.PENDING
        ).order_by(Order.created_at.desc(), Order.id.desc()).limit(SUMMARY_LIST_SIZE).all()

        return {
            "period": period.value if period else "all",
            "total_orders": total,
            "revenue": round(revenue, 2),
            "average_basket": round(average, 2),
            "completed": completed,
            "cancelled": cancelled,
            "by_status": {status.value: count for status, count in by_status},
            "popular_menus": [
                {"menu_id": menu_id, "menu_title": title, "order_count": count, "revenue": round(menu_revenue, 2)}
                for menu_id, title, count, menu_revenue in popular
            ],
            "pending_orders": pending,
        }
