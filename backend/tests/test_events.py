from unittest.mock import MagicMock

from pymongo.errors import AutoReconnect

from catering.models import OrderEvent, OrderEventType
from catering.services.events import dispatch_order_events, relay_pending_events
from catering.services.stats import MenuStatsAggregator

from tests.conftest import order_request, principal_for


def test_order_creation_writes_pending_event(db, pending_order, menu):
    event = db.query(OrderEvent).one()

    assert event.order_id == pending_order.id
    assert event.event_type == OrderEventType.ORDER_CREATED
    assert event.dispatched_at is None
    assert event.payload == {
        "order_id": pending_order.id,
        "menu_id": menu.id,
        "menu_title": "Menu de Noël",
        "service_date": "2026-12-24",
        "revenue": 162.0,
    }


def test_relay_applies_and_marks_events(db, pending_order, aggregator, stats_collection):
    assert relay_pending_events(db, aggregator) == 1

    event = db.query(OrderEvent).one()
    assert event.dispatched_at is not None
    assert event.attempts == 1
    assert event.last_error is None

    doc = stats_collection.find_one({"menu_id": pending_order.menu_id})
    assert doc["order_count"] == 1
    assert doc["revenue"] == 162.0


def test_dispatched_events_are_not_replayed(db, pending_order, aggregator, stats_collection):
    relay_pending_events(db, aggregator)

    assert relay_pending_events(db, aggregator) == 0
    assert stats_collection.find_one({})["order_count"] == 1


def test_failed_event_stays_pending_until_store_recovers(db, pending_order, stats_collection):
    broken = MagicMock()
    broken.find_one.side_effect = AutoReconnect("connection reset")

    assert relay_pending_events(db, MenuStatsAggregator(broken)) == 0

    event = db.query(OrderEvent).one()
    assert event.dispatched_at is None
    assert event.attempts == 1
    assert event.last_error == "Statistics store update failed"

    assert relay_pending_events(db, MenuStatsAggregator(stats_collection)) == 1
    db.refresh(event)
    assert event.dispatched_at is not None
    assert event.attempts == 2
    assert event.last_error is None


def test_relay_respects_batch_limit(db, controller, customer, menu, aggregator):
    for _ in range(3):
        controller.create_order(principal_for(customer), order_request(menu))

    assert relay_pending_events(db, aggregator, limit=2) == 2
    assert relay_pending_events(db, aggregator, limit=2) == 1


def test_background_dispatch_never_raises(session_factory, pending_order):
    aggregator = MagicMock()
    aggregator.on_order_created.side_effect = RuntimeError("boom")

    dispatch_order_events(session_factory, aggregator)

    aggregator.on_order_created.assert_called_once()


def test_malformed_event_does_not_replay_the_batch(db, pending_order, aggregator, stats_collection):
    db.add(OrderEvent(
        order_id=pending_order.id,
        event_type=OrderEventType.ORDER_CREATED,
        payload={"order_id": pending_order.id},
    ))
    db.commit()

    assert relay_pending_events(db, aggregator) == 1

    good, broken = db.query(OrderEvent).order_by(OrderEvent.id).all()
    assert good.dispatched_at is not None
    assert broken.dispatched_at is None
    assert broken.attempts == 1
    assert broken.last_error.startswith("KeyError")

    assert relay_pending_events(db, aggregator) == 0
    assert stats_collection.find_one({})["order_count"] == 1
    db.refresh(broken)
    assert broken.attempts == 2
