from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from fieldsales import models_inspection, models_route, models_visit  # noqa: F401
from fieldsales.database import Base, get_db, register_engine_events
from fieldsales.models import Client, Vendor
from fieldsales.shared.exceptions import ExternalServiceDegraded


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    register_engine_events(engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def make_vendor(db):
    def _make(name: str = "Ana Souza") -> Vendor:
        vendor = Vendor(name=name, email=f"{name.split()[0].lower()}@example.com", active=True)
        db.add(vendor)
        db.commit()
        db.refresh(vendor)
        return vendor

    return _make


@pytest.fixture
def make_client(db):
    def _make(name: str, city: str = "Campinas") -> Client:
        client = Client(name=name, city=city)
        db.add(client)
        db.commit()
        db.refresh(client)
        return client

    return _make


class FakeClock:
    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class FakeGeocoder:
    def __init__(self, address: str = "Rua das Flores, 120 - Centro - Campinas", fail: bool = False):
        self.address = address
        self.fail = fail
        self.calls = []

    async def reverse(self, latitude: float, longitude: float):
        self.calls.append((latitude, longitude))
        if self.fail:
            raise ExternalServiceDegraded("Reverse geocode timed out after 5.0s")
        return self.address


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 6, 3, 9, 0, 0))


@pytest.fixture
def api_client(session_factory):
    from fieldsales.main import app
    from fieldsales.services.geocoding_service import get_reverse_geocoder

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_reverse_geocoder] = lambda: None
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def geocoder():
    return FakeGeocoder()


@pytest.fixture
def failing_geocoder():
    return FakeGeocoder(fail=True)
