"""
Booking Notification Service
Sends booking e-mails to the client and the studio inbox. Notifications are
fire-and-forget: failures are logged and never reach the booking flow.
"""

import logging
from typing import Callable

from ..config import STUDIO_NOTIFICATION_EMAIL
from ..email_service import (
    send_booking_cancelled_email,
    send_booking_confirmed_email,
    send_booking_received_email,
    send_booking_reminder_email,
    send_new_booking_notification,
)
from ..models import Booking, BookingReminder

logger = logging.getLogger(__name__)

CLIENT_EMAILS = {
    "created": send_booking_received_email,
    "confirmed": send_booking_confirmed_email,
    "cancelled": send_booking_cancelled_email,
}


def booking_snapshot(booking: Booking) -> dict:
    """Plain values of a booking so sending never touches the ORM session"""
    return {
        "booking_id": booking.id,
        "status": booking.status,
        "client_name": booking.client.name,
        "client_email": booking.client.email,
        "client_phone": booking.client.phone,
        "service_name": booking.service.name,
        "booking_date": booking.booking_date.isoformat(),
        "start_time": booking.start_time,
        "end_time": booking.end_time,
        "notes": booking.notes,
    }


async def send_booking_notification(event: str, details: dict) -> dict:
    """
    Send the e-mails for a booking event

    Args:
        event: "created", "confirmed" or "cancelled"
        details: snapshot from booking_snapshot()

    Returns:
        Dict with client_email_sent / studio_email_sent and their errors
    """
    result = {
        "client_email_sent": False,
        "studio_email_sent": False,
        "client_email_error": None,
        "studio_email_error": None,
    }
    booking_id = details.get("booking_id")

    email_func = CLIENT_EMAILS.get(event)
    if email_func is None:
        logger.warning(f"⚠️ No client e-mail for booking event '{event}'")
    else:
        try:
            logger.info(f"📧 Sending {event} e-mail for booking {booking_id} to {details['client_email']}")
            await email_func(details)
            result["client_email_sent"] = True
        except Exception as e:
            result["client_email_error"] = str(e)
            logger.error(f"❌ Failed to send {event} e-mail for booking {booking_id}: {e}")

    if event == "created":
        if STUDIO_NOTIFICATION_EMAIL:
            try:
                await send_new_booking_notification(STUDIO_NOTIFICATION_EMAIL, details)
                result["studio_email_sent"] = True
            except Exception as e:
                result["studio_email_error"] = str(e)
                logger.error(f"❌ Failed to notify studio about booking {booking_id}: {e}")
        else:
            logger.debug("STUDIO_NOTIFICATION_EMAIL not set - skipping studio notification")

    return result


class EmailBookingNotifier:
    """
    Booking notifier that hands e-mail sending to a scheduler such as
    FastAPI's BackgroundTasks.add_task, so responses never wait on Resend.
    """

    def __init__(self, schedule: Callable):
        self.schedule = schedule

    def __call__(self, booking: Booking, event: str) -> None:
        details = booking_snapshot(booking)
        self.schedule(send_booking_notification, event, details)
        logger.info(f"📨 Queued {event} notification for booking {booking.id}")


async def send_reminder(reminder: BookingReminder, booking: Booking) -> None:
    """Deliver one booking reminder; raises when it cannot be sent"""
    if reminder.reminder_type != "email":
        raise ValueError(f"Unsupported reminder channel '{reminder.reminder_type}'")
    await send_booking_reminder_email(booking_snapshot(booking))
    logger.info(f"✅ Reminder {reminder.id} sent for booking {booking.id}")
