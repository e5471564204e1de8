import os
from datetime import date, datetime

# Must be set before studio_booking.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("ADMIN_API_TOKEN", "test-admin-token")
os.environ["DB_LOG_SLOW_QUERIES"] = "false"
os.environ["SECURITY_HEADERS_ENABLED"] = "true"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from studio_booking import config  # noqa: E402
from studio_booking.database import Base, get_db  # noqa: E402
from studio_booking.domain.bookings.router import get_booking_notifier  # noqa: E402
from studio_booking.domain.bookings.service import BookingService  # noqa: E402
from studio_booking.domain.scheduling.availability_service import (  # noqa: E402
    WorkingHours,
    get_clock,
)
from studio_booking.main import app  # noqa: E402
from studio_booking.models import Booking, Client, Service  # noqa: E402
from studio_booking.rate_limiter import booking_rate_limit  # noqa: E402

# Monday
NOW = datetime(2030, 6, 3, 8, 0)
# The following Monday
BOOKING_DAY = date(2030, 6, 10)


class FixedClock:
    """Callable clock whose time tests can move"""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class RecordingNotifier:
    def __init__(self):
        self.calls = []

    def __call__(self, booking, event):
        self.calls.append((booking.id, event))


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
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
def clock():
    return FixedClock(NOW)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def booking_service(db, clock, notifier):
    return BookingService(
        db,
        clock=clock,
        notifier=notifier,
        reminder_days_before=[1],
        default_hours=WorkingHours.parse("09:00", "11:00"),
    )


@pytest.fixture
def make_service(db):
    def _make(**overrides):
        values = {
            "name": "Portrait Session",
            "duration_minutes": 60,
            "price": 150.0,
            "max_bookings_per_day": None,
            "is_active": True,
        }
        values.update(overrides)
        service = Service(**values)
        db.add(service)
        db.commit()
        db.refresh(service)
        return service

    return _make


@pytest.fixture
def make_client(db):
    def _make(**overrides):
        values = {"name": "Ada Lovelace", "email": "ada@example.com", "phone": "+15551234567"}
        values.update(overrides)
        client = Client(**values)
        db.add(client)
        db.commit()
        db.refresh(client)
        return client

    return _make


@pytest.fixture
def make_booking(db):
    def _make(client, service, start_time="09:00", end_time="10:00", status="pending", day=BOOKING_DAY):
        booking = Booking(
            client_id=client.id,
            service_id=service.id,
            booking_date=day,
            start_time=start_time,
            end_time=end_time,
            status=status,
        )
        db.add(booking)
        db.commit()
        db.refresh(booking)
        return booking

    return _make


@pytest.fixture
def api(session_factory, clock, notifier):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_booking_notifier] = lambda: notifier
    app.dependency_overrides[booking_rate_limit] = lambda: None

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {config.ADMIN_API_TOKEN}"}
