"""
Order event outbox and relay.

Order creation writes an ``order_created`` event in its own transaction.
After commit, the relay hands pending events to the statistics aggregator
and marks the ones it applied. Anything not applied stays pending for the
next run, so each event reaches the rollups at least once.
"""

import logging
from datetime import date, datetime, timezone
from typing import Callable

from sqlalchemy.orm import Session

from catering.config import get_settings
from catering.models.order import Order
from catering.models.order_event import OrderEvent, OrderEventType
from catering.services.stats import MenuStatsAggregator

settings = get_settings()
logger = logging.getLogger(__name__)


class OrderEventOutbox:
    """Writes events inside the caller's transaction."""

    def __init__(self, db: Session):
        self.db = db

    def order_created(self, order: Order) -> OrderEvent:
        event = OrderEvent(
            order_id=order.id,
            event_type=OrderEventType.ORDER_CREATED,
            payload={
                "order_id": order.id,
                "menu_id": order.menu_id,
                "menu_title": order.menu_title,
                "service_date": order.service_date.isoformat(),
                "revenue": order.total_price,
            },
        )
        self.db.add(event)
        self.db.flush()
        return event


def _apply(event: OrderEvent, aggregator: MenuStatsAggregator) -> bool:
    if event.event_type == OrderEventType.ORDER_CREATED:
        payload = event.payload
        return aggregator.on_order_created(
            menu_id=payload["menu_id"],
            menu_title=payload["menu_title"],
            service_date=date.fromisoformat(payload["service_date"]),
            revenue=payload["revenue"],
        )
    logger.warning(f"Skipping order event {event.id} with unknown type {event.event_type}")
    return True


def relay_pending_events(
    db: Session,
    aggregator: MenuStatsAggregator,
    limit: int = None,
) -> int:
    """
    Apply pending events oldest first and commit the bookkeeping.

    Returns the number of events dispatched.
    """
    events = db.query(OrderEvent).filter(
        OrderEvent.dispatched_at.is_(None)
    ).order_by(OrderEvent.id).limit(limit or settings.outbox_batch_size).with_for_update(skip_locked=True).all()

    dispatched = 0
    for event in events:
        event.attempts += 1
        try:
            applied = _apply(event, aggregator)
        except Exception as exc:
            logger.exception(f"Order event {event.id} could not be applied")
            event.last_error = f"{type(exc).__name__}: {exc}"[:500]
            continue
        if applied:
            event.dispatched_at = datetime.now(timezone.utc)
            event.last_error = None
            dispatched += 1
        else:
            event.last_error = "Statistics store update failed"
    db.commit()

    if events:
        logger.info(f"Relayed {dispatched}/{len(events)} order events")
    return dispatched


def dispatch_order_events(
    session_factory: Callable[[], Session],
    aggregator: MenuStatsAggregator,
) -> None:
    """Background-task entry point. Never raises."""
    db = session_factory()
    try:
        relay_pending_events(db, aggregator)
    except Exception:
        db.rollback()
        logger.exception("Order event relay failed")
    finally:
        db.close()
