"""
Order status history.

Append-only audit trail: one row per status transition, including the
initial null -> pending row written when the order is created.
"""

from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum

from catering.core.database import Base
from catering.models.order import order_status_enum


class ContactMode(str, enum.Enum):
    PHONE = "phone"
    EMAIL = "email"


class OrderStatusHistory(Base):
    __tablename__ = "order_status_history"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    previous_status = Column(order_status_enum, nullable=True)  # Null for the creation entry
    new_status = Column(order_status_enum, nullable=False)
    actor_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    changed_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # Only set when staff cancel an order
    cancellation_reason = Column(String(500), nullable=True)
    contact_mode = Column(SQLEnum(ContactMode, values_callable=lambda obj: [e.value for e in obj]), nullable=True)

    # Relationships
    order = relationship("Order", back_populates="history")
    actor = relationship("User")

    def __repr__(self):
        return f"<OrderStatusHistory(order_id={self.order_id}, {self.previous_status} -> {self.new_status})>"
