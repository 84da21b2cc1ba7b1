from sqlalchemy import (
    Column, Integer, String, Float, Boolean, ForeignKey, Date, Time, DateTime, Index,
    Enum as SQLEnum,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum

from catering.core.database import Base


class OrderStatus(str, enum.Enum):
    PENDING = "pending"                                    # Placed, editable by the customer
    ACCEPTED = "accepted"                                  # Validated by staff
    IN_PREPARATION = "in_preparation"                      # Kitchen is preparing it
    IN_DELIVERY = "in_delivery"                            # On its way
    AWAITING_MATERIAL_RETURN = "awaiting_material_return"  # Delivered, loaned material still out
    COMPLETED = "completed"                                # Terminal
    CANCELLED = "cancelled"                                # Terminal, only from pending


TERMINAL_STATUSES = (OrderStatus.COMPLETED, OrderStatus.CANCELLED)

order_status_enum = SQLEnum(
    OrderStatus, name="orderstatus", values_callable=lambda obj: [e.value for e in obj]
)


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    order_number = Column(String(50), unique=True, index=True, nullable=False)
    order_date = Column(Date, nullable=False)
    service_date = Column(Date, nullable=False)
    delivery_time = Column(Time, nullable=False)
    menu_price = Column(Float, nullable=False)      # After discount
    delivery_fee = Column(Float, nullable=False, default=0.0)
    headcount = Column(Integer, nullable=False)
    service_address = Column(String(500), nullable=False)
    status = Column(order_status_enum, default=OrderStatus.PENDING, nullable=False)
    material_loan = Column(Boolean, default=False, nullable=False)
    material_returned = Column(Boolean, default=False, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    user = relationship("User", back_populates="orders")
    menu_link = relationship("OrderMenu", back_populates="order", uselist=False)
    history = relationship(
        "OrderStatusHistory",
        back_populates="order",
        order_by="OrderStatusHistory.id",
    )

    __table_args__ = (
        Index('ix_orders_user_created', 'user_id', 'created_at'),
        Index('ix_orders_status', 'status'),
    )

    @property
    def total_price(self) -> float:
        return round((self.menu_price or 0.0) + (self.delivery_fee or 0.0), 2)

    @property
    def menu(self):
        return self.menu_link.menu if self.menu_link else None

    @property
    def menu_id(self):
        return self.menu_link.menu_id if self.menu_link else None

    @property
    def menu_title(self):
        return self.menu.title if self.menu else None

    @property
    def price_per_person(self):
        return self.menu.price_per_person if self.menu else None

    @property
    def customer_name(self):
        return self.user.full_name if self.user else None

    @property
    def customer_email(self):
        return self.user.email if self.user else None

    @property
    def customer_phone(self):
        return self.user.phone if self.user else None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def __repr__(self):
        return f"<Order(id={self.id}, number={self.order_number}, status={self.status})>"


class OrderMenu(Base):
    """Binds an order to the single menu it was placed for. Never changes."""
    __tablename__ = "order_menus"

    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), primary_key=True)
    menu_id = Column(Integer, ForeignKey("menus.id"), nullable=False, index=True)

    # Relationships
    order = relationship("Order", back_populates="menu_link")
    menu = relationship("Menu")

    def __repr__(self):
        return f"<OrderMenu(order_id={self.order_id}, menu_id={self.menu_id})>"
