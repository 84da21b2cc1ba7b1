from datetime import date, time

import mongomock
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import catering.models  # noqa: F401
from catering.api.deps import get_notifier, get_stats_aggregator
from catering.core.database import Base, get_db, get_session_factory
from catering.core.security import Principal, create_access_token
from catering.main import app
from catering.models import Menu, User, UserRole
from catering.services.lifecycle import OrderLifecycleController, OrderRequest
from catering.services.notifications import Notifier
from catering.services.stats import MenuStatsAggregator

HOME_ADDRESS = "12 cours de l'Intendance"


class RecordingNotifier(Notifier):
    """Keeps every notification instead of sending it."""

    def __init__(self):
        self.sent = []

    def order_confirmed(self, recipient, summary):
        self.sent.append(("order_confirmed", recipient, summary))

    def material_return_requested(self, recipient, summary):
        self.sent.append(("material_return_requested", recipient, summary))


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def stats_collection():
    return mongomock.MongoClient()["catering_test"]["menu_order_stats"]


@pytest.fixture()
def aggregator(stats_collection):
    return MenuStatsAggregator(stats_collection)


@pytest.fixture()
def notifier():
    return RecordingNotifier()


@pytest.fixture()
def client(session_factory, aggregator, notifier):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_stats_aggregator] = lambda: aggregator
    app.dependency_overrides[get_notifier] = lambda: notifier

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def _add_user(db, email, first_name, role, city="Bordeaux", postal_address=HOME_ADDRESS):
    user = User(
        email=email,
        first_name=first_name,
        last_name="Test",
        phone="0600000000",
        city=city,
        postal_address=postal_address,
        role=role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture()
def customer(db):
    return _add_user(db, "claire@example.com", "Claire", UserRole.CUSTOMER)


@pytest.fixture()
def other_customer(db):
    return _add_user(
        db, "marc@example.com", "Marc", UserRole.CUSTOMER,
        city="Mérignac", postal_address="45 avenue de la Marne",
    )


@pytest.fixture()
def employee(db):
    return _add_user(db, "julie@example.com", "Julie", UserRole.EMPLOYEE)


@pytest.fixture()
def admin(db):
    return _add_user(db, "admin@example.com", "José", UserRole.ADMIN)


@pytest.fixture()
def menu(db):
    menu = Menu(title="Menu de Noël", min_headcount=4, price_per_person=20.0, remaining_quantity=10)
    db.add(menu)
    db.commit()
    db.refresh(menu)
    return menu


@pytest.fixture()
def second_menu(db):
    menu = Menu(title="Menu végétarien", min_headcount=2, price_per_person=24.0, remaining_quantity=30)
    db.add(menu)
    db.commit()
    db.refresh(menu)
    return menu


def principal_for(user):
    return Principal(user_id=user.id, role=user.role)


def auth_headers(user):
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


def order_request(menu, headcount=9, service_address=HOME_ADDRESS, **overrides):
    values = dict(
        menu_id=menu.id,
        service_date=date(2026, 12, 24),
        delivery_time=time(12, 30),
        headcount=headcount,
        service_address=service_address,
    )
    values.update(overrides)
    return OrderRequest(**values)


def order_payload(menu, headcount=9, service_address=HOME_ADDRESS, **overrides):
    payload = {
        "menu_id": menu.id,
        "date_prestation": "2026-12-24",
        "heure_livraison": "12:30",
        "nombre_personne": headcount,
        "adresse_prestation": service_address,
    }
    payload.update(overrides)
    return payload


@pytest.fixture()
def controller(db):
    return OrderLifecycleController(db)


@pytest.fixture()
def pending_order(controller, customer, menu):
    return controller.create_order(principal_for(customer), order_request(menu))
