from typing import List, Optional

from sqlalchemy.orm import Session

from catering.models.order import OrderStatus
from catering.models.order_status_history import OrderStatusHistory, ContactMode


class HistoryRecorder:
    """Append-only status history. There is deliberately no update or delete."""

    def __init__(self, db: Session):
        self.db = db

    def append(
        self,
        order_id: int,
        previous_status: Optional[OrderStatus],
        new_status: OrderStatus,
        actor_id: int,
        cancellation_reason: Optional[str] = None,
        contact_mode: Optional[ContactMode] = None,
    ) -> int:
        """Record one transition and return the entry id."""
        entry = OrderStatusHistory(
            order_id=order_id,
            previous_status=previous_status,
            new_status=new_status,
            actor_id=actor_id,
            cancellation_reason=cancellation_reason,
            contact_mode=contact_mode,
        )
        self.db.add(entry)
        self.db.flush()
        return entry.id

    def list(self, order_id: int) -> List[OrderStatusHistory]:
        """Entries oldest first; insertion order breaks timestamp ties."""
        return self.db.query(OrderStatusHistory).filter(
            OrderStatusHistory.order_id == order_id
        ).order_by(OrderStatusHistory.changed_at.asc(), OrderStatusHistory.id.asc()).all()
