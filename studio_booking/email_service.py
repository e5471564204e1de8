"""
Email Service using Resend
Compiles MJML templates to HTML and sends booking e-mails
"""

import logging
from datetime import date
from typing import Optional, Union

import resend
from mjml import mjml_to_html

from .config import EMAIL_FROM_ADDRESS, RESEND_API_KEY
from .domain.scheduling.time_calculator import format_time_12h
from .email_templates import (
    booking_cancelled_template,
    booking_confirmed_template,
    booking_received_template,
    booking_reminder_template,
    new_booking_notification_template,
)
from .utils.sanitization import sanitize_dict

logger = logging.getLogger(__name__)

resend.api_key = RESEND_API_KEY


class EmailNotConfiguredError(Exception):
    pass


class EmailSendError(Exception):
    pass


def compile_mjml_to_html(mjml_content: str) -> str:
    """Compile MJML template to production-ready HTML"""
    result = mjml_to_html(mjml_content)
    # mjml_to_html returns a dict with 'html' and 'errors' keys
    if isinstance(result, dict):
        if result.get("errors"):
            logger.warning(f"MJML compilation warnings: {result['errors']}")
        return result.get("html", "")
    return str(result)


async def send_email(
    to: Union[str, list[str]],
    subject: str,
    mjml_content: str,
    from_address: Optional[str] = None,
) -> dict:
    """
    Send an email through Resend

    Args:
        to: Recipient email(s)
        subject: Email subject line
        mjml_content: MJML template content (compiled to HTML here)
        from_address: Optional custom from address

    Returns:
        Resend response dict
    """
    if not RESEND_API_KEY:
        logger.error("❌ No email service configured - RESEND_API_KEY missing")
        raise EmailNotConfiguredError("Email service not configured")

    html_content = compile_mjml_to_html(mjml_content)
    recipients = [to] if isinstance(to, str) else to

    try:
        logger.info(f"📧 Sending email via Resend to: {recipients}")
        response = resend.Emails.send(
            {
                "from": from_address or EMAIL_FROM_ADDRESS,
                "to": recipients,
                "subject": subject,
                "html": html_content,
            }
        )
        logger.info(f"✅ Email sent successfully via Resend: {response}")
        return response
    except Exception as e:
        logger.error(f"❌ Email send error to {recipients}: {e}")
        raise EmailSendError(f"Failed to send email: {e}") from e


def format_booking_date(value: Union[str, date]) -> str:
    """2026-03-14 -> Saturday, March 14, 2026"""
    if isinstance(value, str):
        value = date.fromisoformat(value)
    return value.strftime("%A, %B %d, %Y").replace(" 0", " ")


def booking_email_context(details: dict) -> dict:
    """Display values for booking templates from a plain booking snapshot"""
    safe = sanitize_dict(details, ["client_name", "service_name", "notes"])
    return {
        "client_name": safe["client_name"],
        "service_name": safe["service_name"],
        "booking_date": format_booking_date(details["booking_date"]),
        "time_range": f"{format_time_12h(details['start_time'])} - {format_time_12h(details['end_time'])}",
    }


# ============================================
# Booking e-mails
# ============================================


async def send_booking_received_email(details: dict) -> dict:
    context = booking_email_context(details)
    return await send_email(
        to=details["client_email"],
        subject=f"Booking request received: {context['service_name']}",
        mjml_content=booking_received_template(**context),
    )


async def send_new_booking_notification(to: str, details: dict) -> dict:
    """Notify the studio inbox about a new pending booking"""
    context = booking_email_context(details)
    safe = sanitize_dict(details, ["client_email", "client_phone", "notes"])
    mjml_content = new_booking_notification_template(
        client_email=safe["client_email"],
        client_phone=safe["client_phone"],
        notes=safe.get("notes"),
        booking_id=details.get("booking_id"),
        **context,
    )
    return await send_email(
        to=to,
        subject=f"New Booking Request: {context['client_name']} - {context['booking_date']}",
        mjml_content=mjml_content,
    )


async def send_booking_confirmed_email(details: dict) -> dict:
    context = booking_email_context(details)
    return await send_email(
        to=details["client_email"],
        subject=f"Confirmed: {context['service_name']} on {context['booking_date']}",
        mjml_content=booking_confirmed_template(**context),
    )


async def send_booking_cancelled_email(details: dict) -> dict:
    context = booking_email_context(details)
    return await send_email(
        to=details["client_email"],
        subject=f"Cancelled: {context['service_name']} on {context['booking_date']}",
        mjml_content=booking_cancelled_template(**context),
    )


async def send_booking_reminder_email(details: dict) -> dict:
    context = booking_email_context(details)
    return await send_email(
        to=details["client_email"],
        subject=f"Reminder: {context['service_name']} on {context['booking_date']}",
        mjml_content=booking_reminder_template(**context),
    )
