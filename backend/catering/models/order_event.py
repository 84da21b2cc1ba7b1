"""
Order event outbox.

Events are inserted in the same transaction as the order change they
describe and relayed to the statistics store after commit.
"""

from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, JSON, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from catering.core.database import Base


class OrderEventType:
    ORDER_CREATED = "order_created"


class OrderEvent(Base):
    __tablename__ = "order_events"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False)
    event_type = Column(String(50), nullable=False)
    payload = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    dispatched_at = Column(DateTime(timezone=True), nullable=True)  # Null until applied
    attempts = Column(Integer, default=0, nullable=False)
    last_error = Column(String(500), nullable=True)

    # Relationships
    order = relationship("Order")

    __table_args__ = (
        Index('ix_order_events_pending', 'dispatched_at', 'id'),
    )

    def __repr__(self):
        return f"<OrderEvent(id={self.id}, type={self.event_type}, order_id={self.order_id}, dispatched={self.dispatched_at is not None})>"
