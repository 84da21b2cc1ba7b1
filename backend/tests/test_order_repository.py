import re
from datetime import date, time

import pytest

from catering.core.exceptions import NotFoundError, StateError, ValidationError
from catering.models import Order, OrderStatus
from catering.services.order_repository import (
    OrderDraft, OrderRepository, ReportPeriod, generate_order_number, period_start,
)

from tests.conftest import HOME_ADDRESS


def make_draft(user, menu, headcount=4, **overrides):
    values = dict(
        user_id=user.id,
        menu_id=menu.id,
        service_date=date(2026, 12, 24),
        delivery_time=time(19, 0),
        headcount=headcount,
        service_address=HOME_ADDRESS,
        menu_price=menu.price_per_person * headcount,
        delivery_fee=0.0,
    )
    values.update(overrides)
    return OrderDraft(**values)


@pytest.fixture()
def repository(db):
    return OrderRepository(db)


def test_order_numbers_are_unique():
    numbers = {generate_order_number() for _ in range(200)}
    assert len(numbers) == 200
    assert all(re.fullmatch(r"CMD-\d+-\d{4}", n) for n in numbers)


class TestCreate:
    def test_inserts_pending_order_linked_to_menu(self, db, repository, customer, menu):
        order = repository.create(make_draft(customer, menu))
        db.commit()

        assert order.id is not None
        assert order.status == OrderStatus.PENDING
        assert order.order_date == date.today()
        assert order.menu_id == menu.id
        assert order.menu_title == "Menu de Noël"
        assert order.price_per_person == 20.0
        assert order.total_price == 80.0

    def test_unknown_menu(self, repository, customer, menu):
        with pytest.raises(ValidationError, match="Menu 999 does not exist"):
            repository.create(make_draft(customer, menu, menu_id=999))

    def test_unknown_user(self, repository, customer, menu):
        with pytest.raises(ValidationError, match="User 999 does not exist"):
            repository.create(make_draft(customer, menu, user_id=999))

    def test_headcount_below_minimum(self, db, repository, customer, menu):
        with pytest.raises(ValidationError, match="at least 4 people"):
            repository.create(make_draft(customer, menu, headcount=3))
        assert db.query(Order).count() == 0


class TestGet:
    def test_owner_reads_order(self, db, repository, customer, menu):
        order = repository.create(make_draft(customer, menu))
        db.commit()

        first = repository.get(order.id, customer.id)
        second = repository.get(order.id, customer.id)

        assert first.id == second.id == order.id
        assert first.status == second.status

    def test_foreign_order_is_not_found(self, db, repository, customer, other_customer, menu):
        order = repository.create(make_draft(customer, menu))
        db.commit()

        with pytest.raises(NotFoundError):
            repository.get(order.id, other_customer.id)

    def test_unknown_order_is_not_found(self, repository, customer):
        with pytest.raises(NotFoundError):
            repository.get(12345, customer.id)

    def test_staff_lookup_skips_ownership(self, db, repository, customer, menu):
        order = repository.create(make_draft(customer, menu))
        db.commit()

        assert repository.get_any(order.id).id == order.id


class TestUpdate:
    def test_headcount_change_reprices_menu(self, db, repository, customer, menu):
        order = repository.create(make_draft(customer, menu))
        db.commit()

        updated = repository.update(order.id, customer.id, {"headcount": 10})

        assert updated.headcount == 10
        assert updated.menu_price == 180.0

    def test_headcount_below_minimum_rejected(self, db, repository, customer, menu):
        order = repository.create(make_draft(customer, menu))
        db.commit()

        with pytest.raises(ValidationError):
            repository.update(order.id, customer.id, {"headcount": 2})

    def test_other_fields(self, db, repository, customer, menu):
        order = repository.create(make_draft(customer, menu))
        db.commit()

        updated = repository.update(order.id, customer.id, {
            "service_date": date(2026, 12, 31),
            "delivery_time": time(20, 15),
            "material_loan": True,
        })

        assert updated.service_date == date(2026, 12, 31)
        assert updated.delivery_time == time(20, 15)
        assert updated.material_loan is True
        assert updated.menu_price == 80.0

    def test_service_address_is_not_editable(self, db, repository, customer, menu):
        order = repository.create(make_draft(customer, menu))
        db.commit()

        with pytest.raises(ValidationError, match="service_address"):
            repository.update(order.id, customer.id, {"service_address": "ailleurs"})

    def test_only_pending_orders(self, db, repository, customer, menu):
        order = repository.create(make_draft(customer, menu))
        repository.set_status(order, OrderStatus.ACCEPTED)
        db.commit()

        with pytest.raises(StateError, match="Only pending orders"):
            repository.update(order.id, customer.id, {"headcount": 6})


class TestCancel:
    def test_row_is_kept(self, db, repository, customer, menu):
        order = repository.create(make_draft(customer, menu))
        db.commit()

        repository.cancel(order.id, customer.id)
        db.commit()

        assert db.query(Order).count() == 1
        assert repository.get(order.id, customer.id).status == OrderStatus.CANCELLED

    def test_terminal_status_cannot_change(self, db, repository, customer, menu):
        order = repository.create(make_draft(customer, menu))
        repository.cancel(order.id, customer.id)

        with pytest.raises(StateError):
            repository.set_status(order, OrderStatus.ACCEPTED)


class TestListing:
    def test_list_for_user_most_recent_first(self, db, repository, customer, other_customer, menu):
        first = repository.create(make_draft(customer, menu))
        second = repository.create(make_draft(customer, menu, headcount=5))
        repository.create(make_draft(other_customer, menu))
        db.commit()

        orders = repository.list_for_user(customer.id)

        assert [o.id for o in orders] == [second.id, first.id]
        assert orders[0].menu_title == "Menu de Noël"

    def test_list_all_filters(self, db, repository, customer, other_customer, menu):
        early = repository.create(make_draft(customer, menu, service_date=date(2026, 11, 1)))
        late = repository.create(make_draft(other_customer, menu, service_date=date(2026, 12, 20)))
        repository.set_status(late, OrderStatus.ACCEPTED)
        db.commit()

        assert {o.id for o in repository.list_all()} == {early.id, late.id}
        assert [o.id for o in repository.list_all(status=OrderStatus.ACCEPTED)] == [late.id]
        assert [o.id for o in repository.list_all(user_id=customer.id)] == [early.id]
        assert [o.id for o in repository.list_all(start_date=date(2026, 12, 1))] == [late.id]
        assert [o.id for o in repository.list_all(end_date=date(2026, 11, 30))] == [early.id]
        assert len(repository.list_all(limit=1)) == 1


class TestPeriodStart:
    # A Thursday
    TODAY = date(2026, 10, 15)

    @pytest.mark.parametrize("period,expected", [
        (None, None),
        (ReportPeriod.DAY, date(2026, 10, 15)),
        (ReportPeriod.WEEK, date(2026, 10, 12)),
        (ReportPeriod.MONTH, date(2026, 10, 1)),
        (ReportPeriod.YEAR, date(2026, 1, 1)),
    ])
    def test_bounds(self, period, expected):
        assert period_start(period, self.TODAY) == expected


class TestSummary:
    def test_counts_and_revenue(self, db, repository, customer, menu, second_menu):
        done = repository.create(make_draft(customer, menu, headcount=10, menu_price=180.0, delivery_fee=5.0))
        repository.create(make_draft(customer, second_menu, headcount=2, menu_price=48.0))
        dropped = repository.create(make_draft(customer, menu))
        repository.set_status(done, OrderStatus.COMPLETED)
        repository.set_status(dropped, OrderStatus.CANCELLED)
        db.commit()

        summary = repository.summary()

        assert summary["period"] == "all"
        assert summary["total_orders"] == 3
        assert summary["revenue"] == 313.0
        assert summary["average_basket"] == 104.33
        assert summary["completed"] == 1
        assert summary["cancelled"] == 1
        assert summary["by_status"] == {"completed": 1, "pending": 1, "cancelled": 1}
        assert summary["popular_menus"] == [
            {"menu_id": menu.id, "menu_title": "Menu de Noël", "order_count": 2, "revenue": 260.0},
            {"menu_id": second_menu.id, "menu_title": "Menu végétarien", "order_count": 1, "revenue": 48.0},
        ]
        assert [o.menu_id for o in summary["pending_orders"]] == [second_menu.id]

    def test_period_filters_by_order_date(self, db, repository, customer, menu):
        old = repository.create(make_draft(customer, menu))
        old.order_date = date(2025, 3, 1)
        repository.create(make_draft(customer, menu, headcount=5))
        db.commit()

        summary = repository.summary(ReportPeriod.YEAR, today=date(2026, 6, 1))

        assert summary["period"] == "year"
        assert summary["total_orders"] == 1
        assert summary["revenue"] == 100.0
        # Pending orders are listed whatever the period
        assert len(summary["pending_orders"]) == 2

    def test_empty_store(self, repository):
        summary = repository.summary(ReportPeriod.MONTH)

        assert summary["total_orders"] == 0
        assert summary["revenue"] == 0.0
        assert summary["average_basket"] == 0.0
        assert summary["popular_menus"] == []
