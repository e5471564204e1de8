import threading
from datetime import datetime
from types import SimpleNamespace

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.dialects import postgresql
from sqlalchemy.orm import sessionmaker

from studio_booking.database import Base
from studio_booking.domain.bookings.repository import BookingRepository
from studio_booking.domain.bookings.schemas import BookingCreate
from studio_booking.domain.bookings.service import BookingService
from studio_booking.domain.clients.schemas import ClientCreate
from studio_booking.domain.scheduling import WorkingHours
from studio_booking.errors import (
    InvalidDateError,
    NotFoundError,
    SlotUnavailableError,
    StorageError,
    ValidationError,
)
from studio_booking.models import Booking, Client, Service

from .conftest import BOOKING_DAY, NOW, FixedClock


def request(service, start="09:00", day="2030-06-10", **client_fields):
    contact = {"name": "Grace Hopper", "email": "Grace@Example.com", "phone": "(555) 201-3344"}
    contact.update(client_fields)
    return BookingCreate(
        client=ClientCreate(**contact), serviceId=service.id, date=day, startTime=start
    )


def active_count(db, service):
    return len(BookingRepository.get_active_bookings(db, service.id, BOOKING_DAY))


def test_submit_creates_pending_booking_and_client(booking_service, make_service, db):
    service = make_service()

    booking = booking_service.submit_booking(request(service))

    assert booking.status == "pending"
    assert (booking.start_time, booking.end_time) == ("09:00", "10:00")
    assert booking.booking_date == BOOKING_DAY
    client = db.query(Client).filter(Client.id == booking.client_id).one()
    assert client.email == "grace@example.com"
    assert client.phone == "+15552013344"


def test_submitted_booking_round_trips(booking_service, make_service):
    service = make_service()
    created = booking_service.submit_booking(request(service, start="10:00"))

    fetched = booking_service.get_booking(created.id)

    assert fetched.id == created.id
    assert fetched.service_id == service.id
    assert fetched.client.email == "grace@example.com"
    assert (fetched.start_time, fetched.end_time, fetched.status) == ("10:00", "11:00", "pending")


def test_submitted_slot_disappears_from_availability(booking_service, make_service):
    service = make_service()
    booking_service.submit_booking(request(service))

    slots, _ = booking_service.get_availability(service.id, "2030-06-10")

    assert [s.as_dict()["startTime"] for s in slots] == ["10:00"]


def test_existing_client_is_reused_by_email(booking_service, make_service, make_client, db):
    service = make_service()
    existing = make_client(email="grace@example.com")

    booking = booking_service.submit_booking(request(service))

    assert booking.client_id == existing.id
    assert db.query(Client).count() == 1


def test_submit_with_client_id(booking_service, make_service, make_client):
    service = make_service()
    client = make_client()

    booking = booking_service.submit_booking(
        BookingCreate(clientId=client.id, serviceId=service.id, date="2030-06-10", startTime="09:00")
    )

    assert booking.client_id == client.id


def test_notifier_called_once_on_success(booking_service, make_service, notifier):
    service = make_service()
    booking = booking_service.submit_booking(request(service))
    assert notifier.calls == [(booking.id, "created")]


def test_notifier_failure_does_not_fail_submission(booking_service, make_service):
    service = make_service()

    def broken_notifier(booking, event):
        raise RuntimeError("mail server down")

    booking_service.notifier = broken_notifier
    booking = booking_service.submit_booking(request(service))

    assert booking.id is not None
    assert booking.status == "pending"


def test_reminders_created_for_future_offsets(booking_service, make_service):
    service = make_service()
    booking_service.reminder_days_before = [14, 1]

    booking = booking_service.submit_booking(request(service))
    reminders = booking_service.get_reminders(booking.id)

    # 14 days before 2030-06-10 09:00 is already in the past for the fixed clock
    assert [r.scheduled_for for r in reminders] == [datetime(2030, 6, 9, 9, 0)]
    assert reminders[0].status == "pending"
    assert reminders[0].reminder_type == "email"


def test_invalid_contact_details_name_each_field(booking_service, make_service, db):
    service = make_service()

    with pytest.raises(ValidationError) as exc_info:
        booking_service.submit_booking(request(service, email=None, phone="123"))

    assert set(exc_info.value.fields) == {"client.email", "client.phone"}
    assert db.query(Booking).count() == 0


def test_unknown_service_is_validation_error(booking_service, make_service):
    make_service()

    with pytest.raises(ValidationError) as exc_info:
        booking_service.submit_booking(request(SimpleNamespace(id=999)))

    assert exc_info.value.fields == ["serviceId"]


def test_inactive_service_is_validation_error(booking_service, make_service):
    service = make_service(is_active=False)

    with pytest.raises(ValidationError) as exc_info:
        booking_service.submit_booking(request(service))

    assert exc_info.value.fields == ["serviceId"]


def test_client_id_and_inline_client_are_exclusive(booking_service, make_service, make_client):
    service = make_service()
    client = make_client()
    data = request(service)
    data.clientId = client.id

    with pytest.raises(ValidationError):
        booking_service.submit_booking(data)


def test_unknown_client_id(booking_service, make_service):
    service = make_service()

    with pytest.raises(ValidationError) as exc_info:
        booking_service.submit_booking(
            BookingCreate(clientId=42, serviceId=service.id, date="2030-06-10", startTime="09:00")
        )

    assert exc_info.value.fields == ["clientId"]


@pytest.mark.parametrize("start", ["09:30", "11:00", "08:00", "9am"])
def test_start_time_must_be_a_candidate_slot(booking_service, make_service, start):
    service = make_service()

    with pytest.raises(ValidationError) as exc_info:
        booking_service.submit_booking(request(service, start=start))

    assert exc_info.value.fields == ["startTime"]


def test_past_date_is_rejected(booking_service, make_service):
    service = make_service()

    with pytest.raises(InvalidDateError):
        booking_service.submit_booking(request(service, day="2030-06-01"))


def test_start_time_already_passed_today(booking_service, make_service, clock):
    service = make_service()
    clock.now = datetime(2030, 6, 3, 9, 30)

    with pytest.raises(ValidationError) as exc_info:
        booking_service.submit_booking(request(service, day="2030-06-03", start="09:00"))

    assert exc_info.value.fields == ["startTime"]


def test_taken_slot_is_unavailable(booking_service, make_service, make_client, make_booking):
    service = make_service()
    make_booking(make_client(), service, "09:00", "10:00", "confirmed")

    with pytest.raises(SlotUnavailableError):
        booking_service.submit_booking(request(service, start="09:00"))


def test_full_capacity_rejects_submission(booking_service, make_service, make_client, make_booking, db):
    service = make_service(max_bookings_per_day=1)
    make_booking(make_client(), service, "09:00", "10:00", "pending")

    with pytest.raises(SlotUnavailableError):
        booking_service.submit_booking(request(service, start="10:00"))

    assert active_count(db, service) == 1


def test_cancelled_slot_can_be_booked_again(booking_service, make_service, make_client, make_booking):
    service = make_service()
    make_booking(make_client(), service, "09:00", "10:00", "cancelled")

    booking = booking_service.submit_booking(request(service, start="09:00"))

    assert booking.status == "pending"


def test_only_one_of_two_racing_submissions_wins(booking_service, make_service, db, monkeypatch):
    """Both requests saw the slot free; the unique index decides"""
    service = make_service()
    monkeypatch.setattr(booking_service.repo, "get_active_bookings", lambda *args: [])

    winner = booking_service.submit_booking(request(service, email="first@example.com"))
    with pytest.raises(SlotUnavailableError):
        booking_service.submit_booking(request(service, email="second@example.com"))

    active = BookingRepository.get_active_bookings(db, service.id, BOOKING_DAY)
    assert [b.id for b in active] == [winner.id]
    # the loser's client was rolled back with its booking
    assert db.query(Client).filter(Client.email == "second@example.com").count() == 0


def test_capacity_race_is_first_come_first_served(
    booking_service, make_service, make_client, make_booking, db, monkeypatch
):
    service = make_service(max_bookings_per_day=1)
    first = make_booking(make_client(), service, "09:00", "10:00", "pending")

    real_lookup = BookingRepository.get_active_bookings
    calls = []

    def stale_then_fresh(session, service_id, day):
        calls.append(day)
        # the availability check ran before the competing insert committed
        return [] if len(calls) == 1 else real_lookup(session, service_id, day)

    monkeypatch.setattr(booking_service.repo, "get_active_bookings", stale_then_fresh)

    with pytest.raises(SlotUnavailableError):
        booking_service.submit_booking(request(service, start="10:00"))

    active = real_lookup(db, service.id, BOOKING_DAY)
    assert [b.id for b in active] == [first.id]


def test_unique_index_rejects_duplicate_active_slot(make_service, make_client, make_booking, db):
    from sqlalchemy.exc import IntegrityError

    service = make_service()
    client = make_client()
    make_booking(client, service, "09:00", "10:00", "pending")

    db.add(
        Booking(
            client_id=client.id,
            service_id=service.id,
            booking_date=BOOKING_DAY,
            start_time="09:00",
            end_time="10:00",
            status="confirmed",
        )
    )
    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()


def test_database_failure_is_storage_error(booking_service, make_service, monkeypatch):
    from sqlalchemy.exc import OperationalError

    service = make_service()

    def failing_flush(*args, **kwargs):
        raise OperationalError("INSERT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(booking_service.db, "flush", failing_flush)

    with pytest.raises(StorageError):
        booking_service.submit_booking(request(service))


def test_inactive_service_offers_no_availability(booking_service, make_service):
    service = make_service(is_active=False)

    with pytest.raises(NotFoundError):
        booking_service.get_availability(service.id, "2030-06-10")


def test_capacity_of_two_admits_exactly_two(booking_service, make_service, db):
    service = make_service(duration_minutes=30, max_bookings_per_day=2)

    first = booking_service.submit_booking(request(service, start="09:00"))
    slots, _ = booking_service.get_availability(service.id, "2030-06-10")
    assert [s.as_dict()["startTime"] for s in slots] == ["09:30", "10:00", "10:30"]

    second = booking_service.submit_booking(request(service, start="10:00"))
    slots, _ = booking_service.get_availability(service.id, "2030-06-10")
    assert list(slots) == []

    with pytest.raises(SlotUnavailableError):
        booking_service.submit_booking(request(service, start="10:30"))

    active = BookingRepository.get_active_bookings(db, service.id, BOOKING_DAY)
    assert [b.id for b in active] == [first.id, second.id]


def test_submission_locks_service_row_before_counting_bookings(booking_service, make_service, db):
    service = make_service(max_bookings_per_day=1)
    statements = []

    def capture(orm_execute_state):
        if orm_execute_state.is_select:
            statements.append(str(orm_execute_state.statement.compile(dialect=postgresql.dialect())))

    event.listen(db, "do_orm_execute", capture)
    try:
        booking_service.submit_booking(request(service))
    finally:
        event.remove(db, "do_orm_execute", capture)

    locks = [i for i, sql in enumerate(statements) if "FOR UPDATE" in sql]
    booking_reads = [i for i, sql in enumerate(statements) if "FROM bookings" in sql]
    assert locks, statements
    assert "FROM services" in statements[locks[0]]
    assert booking_reads and locks[0] < booking_reads[0]


def test_concurrent_sessions_racing_for_one_slot_have_one_winner(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'race.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=engine)
    make_session = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    with make_session() as setup:
        service = Service(name="Portrait Session", duration_minutes=60, price=150.0, is_active=True)
        setup.add(service)
        setup.commit()
        service_id = service.id

    barrier = threading.Barrier(2, timeout=10)
    outcomes = []

    def submit(email):
        session = make_session()
        try:
            service = BookingService(
                session,
                clock=FixedClock(NOW),
                reminder_days_before=[],
                default_hours=WorkingHours.parse("09:00", "11:00"),
            )
            barrier.wait()
            booking = service.submit_booking(request(SimpleNamespace(id=service_id), email=email))
            outcomes.append(("booked", booking.id))
        except SlotUnavailableError:
            outcomes.append(("unavailable", None))
        except Exception as e:
            outcomes.append(("error", repr(e)))
        finally:
            session.close()

    threads = [
        threading.Thread(target=submit, args=(email,))
        for email in ("first@example.com", "second@example.com")
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=60)

    try:
        assert sorted(kind for kind, _ in outcomes) == ["booked", "unavailable"], outcomes
        with make_session() as check:
            active = BookingRepository.get_active_bookings(check, service_id, BOOKING_DAY)
            assert [b.id for b in active] == [booking_id for kind, booking_id in outcomes if kind == "booked"]
    finally:
        engine.dispose()
