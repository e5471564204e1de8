from datetime import datetime

import pytest

from studio_booking.domain.bookings.repository import BookingRepository
from studio_booking.errors import InvalidTransitionError, NotFoundError


@pytest.fixture
def pending(make_service, make_client, make_booking):
    return make_booking(make_client(), make_service(), "09:00", "10:00", "pending")


def test_confirm_then_complete(booking_service, pending):
    assert booking_service.confirm(pending.id).status == "confirmed"
    assert booking_service.complete(pending.id).status == "completed"


def test_cancel_pending_and_confirmed(booking_service, make_service, make_client, make_booking):
    service = make_service()
    client = make_client()
    a = make_booking(client, service, "09:00", "10:00", "pending")
    b = make_booking(client, service, "10:00", "11:00", "confirmed")

    assert booking_service.cancel(a.id).status == "cancelled"
    assert booking_service.cancel(b.id).status == "cancelled"


def test_complete_cancelled_booking_is_invalid(booking_service, pending):
    booking_service.cancel(pending.id)

    with pytest.raises(InvalidTransitionError):
        booking_service.complete(pending.id)

    assert booking_service.get_booking(pending.id).status == "cancelled"


def test_pending_booking_cannot_be_completed(booking_service, pending):
    with pytest.raises(InvalidTransitionError):
        booking_service.complete(pending.id)


@pytest.mark.parametrize("action", ["confirm", "cancel", "complete"])
def test_terminal_statuses_do_not_move(booking_service, make_service, make_client, make_booking, action):
    booking = make_booking(make_client(), make_service(), status="completed")

    with pytest.raises(InvalidTransitionError):
        getattr(booking_service, action)(booking.id)


def test_unknown_booking(booking_service):
    with pytest.raises(NotFoundError):
        booking_service.confirm(12345)


def test_conditional_update_only_matches_expected_status(db, pending):
    assert BookingRepository.transition_status(db, pending.id, "confirmed", "completed") is False
    assert BookingRepository.transition_status(db, pending.id, "pending", "confirmed") is True
    assert BookingRepository.transition_status(db, pending.id, "pending", "confirmed") is False


def test_confirm_and_cancel_notify_client(booking_service, notifier, make_service, make_client, make_booking):
    service = make_service()
    client = make_client()
    a = make_booking(client, service, "09:00", "10:00")
    b = make_booking(client, service, "10:00", "11:00")

    booking_service.confirm(a.id)
    booking_service.complete(a.id)
    booking_service.cancel(b.id)

    assert notifier.calls == [(a.id, "confirmed"), (b.id, "cancelled")]


def test_cancelling_frees_the_slot(booking_service, pending):
    booking_service.cancel(pending.id)

    slots, _ = booking_service.get_availability(pending.service_id, "2030-06-10")

    assert [s.as_dict()["startTime"] for s in slots] == ["09:00", "10:00"]


def test_complete_elapsed_bookings(booking_service, clock, make_service, make_client, make_booking):
    service = make_service()
    client = make_client()
    ended = make_booking(client, service, "09:00", "10:00", "confirmed")
    upcoming = make_booking(client, service, "13:00", "14:00", "confirmed")
    unconfirmed = make_booking(client, service, "10:00", "11:00", "pending")
    clock.now = datetime(2030, 6, 10, 12, 0)

    summary = booking_service.complete_elapsed_bookings()

    assert summary == {"confirmed_to_completed": 1, "total_updated": 1}
    assert booking_service.get_booking(ended.id).status == "completed"
    assert booking_service.get_booking(upcoming.id).status == "confirmed"
    assert booking_service.get_booking(unconfirmed.id).status == "pending"
