"""
MJML Email Templates
Booking e-mails for clients and the studio inbox. Callers pass values that are
already HTML-escaped (see utils.sanitization).
"""

from typing import Optional

from .config import FRONTEND_URL, STUDIO_NAME

THEME = {
    "primary": "#1f2937",
    "accent": "#d97706",
    "background": "#f5f5f4",
    "card_bg": "#ffffff",
    "text_primary": "#111827",
    "text_secondary": "#374151",
    "text_muted": "#6b7280",
    "border": "#e5e7eb",
    "success": "#059669",
    "danger": "#dc2626",
}


def get_base_template(
    title: str,
    preview_text: str,
    content_sections: str,
    cta_url: Optional[str] = None,
    cta_label: Optional[str] = None,
) -> str:
    """Base MJML template wrapper for all booking emails"""

    cta_section = ""
    if cta_url and cta_label:
        cta_section = f"""
        <mj-section background-color="{THEME['card_bg']}" padding="0 40px 40px 40px">
          <mj-column>
            <mj-button href="{cta_url}" background-color="{THEME['primary']}" color="#ffffff"
              font-weight="600" border-radius="6px" padding="0" font-size="15px">
              {cta_label}
            </mj-button>
          </mj-column>
        </mj-section>
        """

    return f"""
    <mjml>
      <mj-head>
        <mj-title>{title}</mj-title>
        <mj-preview>{preview_text}</mj-preview>
        <mj-attributes>
          <mj-all font-family="Georgia, 'Times New Roman', serif" />
          <mj-text font-size="16px" line-height="1.6" color="{THEME['text_secondary']}" />
        </mj-attributes>
      </mj-head>
      <mj-body background-color="{THEME['background']}">
        <mj-section background-color="{THEME['card_bg']}" padding="32px 40px 8px 40px">
          <mj-column>
            <mj-text font-size="13px" letter-spacing="2px" color="{THEME['text_muted']}" padding="0">
              {STUDIO_NAME.upper()}
            </mj-text>
            <mj-divider border-color="{THEME['border']}" border-width="1px" padding="16px 0 0 0" />
          </mj-column>
        </mj-section>

        <mj-section background-color="{THEME['card_bg']}" padding="16px 40px 32px 40px">
          <mj-column>
            <mj-text font-size="24px" font-weight="600" color="{THEME['text_primary']}" padding="0 0 16px 0">
              {title}
            </mj-text>
            {content_sections}
          </mj-column>
        </mj-section>

        {cta_section}

        <mj-section padding="24px 20px">
          <mj-column>
            <mj-text align="center" font-size="13px" color="{THEME['text_muted']}" padding="0">
              {STUDIO_NAME}
            </mj-text>
          </mj-column>
        </mj-section>
      </mj-body>
    </mjml>
    """


def _session_block(service_name: str, booking_date: str, time_range: str, color: str) -> str:
    return f"""
    <mj-text align="center" font-size="18px" font-weight="600" color="{color}" padding="16px 0 4px 0">
      {service_name}
    </mj-text>
    <mj-text align="center" font-size="16px" color="{THEME['text_primary']}" padding="0">
      📅 {booking_date}
    </mj-text>
    <mj-text align="center" font-size="16px" color="{THEME['text_primary']}" padding="0 0 16px 0">
      ⏰ {time_range}
    </mj-text>
    """


def booking_received_template(
    client_name: str, service_name: str, booking_date: str, time_range: str
) -> str:
    """Sent to the client right after a booking request is submitted"""
    content = f"""
    <mj-text>Hi {client_name},</mj-text>
    <mj-text>
      Thanks for your booking request! We've reserved the session below and will
      confirm it shortly.
    </mj-text>
    {_session_block(service_name, booking_date, time_range, THEME['accent'])}
    <mj-text font-size="14px" color="{THEME['text_muted']}">
      Your booking is pending until the studio confirms it.
    </mj-text>
    """

    return get_base_template(
        title="We received your booking request",
        preview_text=f"{service_name} on {booking_date}",
        content_sections=content,
    )


def new_booking_notification_template(
    client_name: str,
    client_email: str,
    client_phone: str,
    service_name: str,
    booking_date: str,
    time_range: str,
    notes: Optional[str] = None,
    booking_id: Optional[int] = None,
) -> str:
    """Sent to the studio inbox for every new booking request"""
    notes_section = ""
    if notes:
        notes_section = f"""
    <mj-text font-size="14px" color="{THEME['text_muted']}" padding="12px 0 0 0">
      <strong>Notes:</strong> {notes}
    </mj-text>
    """

    content = f"""
    <mj-text>A new booking request is waiting for confirmation.</mj-text>
    {_session_block(service_name, booking_date, time_range, THEME['accent'])}
    <mj-text font-size="14px" padding="0">
      <strong>Client:</strong> {client_name}<br/>
      <strong>Email:</strong> {client_email}<br/>
      <strong>Phone:</strong> {client_phone}
    </mj-text>
    {notes_section}
    """

    return get_base_template(
        title="New Booking Request",
        preview_text=f"{client_name} requested {service_name} on {booking_date}",
        content_sections=content,
        cta_url=f"{FRONTEND_URL}/admin/bookings/{booking_id}" if booking_id else None,
        cta_label="Review Booking",
    )


def booking_confirmed_template(
    client_name: str, service_name: str, booking_date: str, time_range: str
) -> str:
    content = f"""
    <mj-text>Hi {client_name},</mj-text>
    <mj-text>Great news! Your session is confirmed.</mj-text>
    {_session_block(service_name, booking_date, time_range, THEME['success'])}
    <mj-text>We look forward to seeing you at the studio.</mj-text>
    """

    return get_base_template(
        title="Your session is confirmed ✓",
        preview_text=f"{service_name} confirmed for {booking_date}",
        content_sections=content,
    )


def booking_cancelled_template(
    client_name: str, service_name: str, booking_date: str, time_range: str
) -> str:
    content = f"""
    <mj-text>Hi {client_name},</mj-text>
    <mj-text>Your booking below has been cancelled.</mj-text>
    {_session_block(service_name, booking_date, time_range, THEME['danger'])}
    <mj-text>If this is unexpected, or you'd like to pick a new time, just book again.</mj-text>
    """

    return get_base_template(
        title="Booking cancelled",
        preview_text=f"{service_name} on {booking_date} was cancelled",
        content_sections=content,
        cta_url=f"{FRONTEND_URL}/booking",
        cta_label="Book a New Time",
    )


def booking_reminder_template(
    client_name: str, service_name: str, booking_date: str, time_range: str
) -> str:
    content = f"""
    <mj-text>Hi {client_name},</mj-text>
    <mj-text>This is a friendly reminder of your upcoming session.</mj-text>
    {_session_block(service_name, booking_date, time_range, THEME['primary'])}
    """

    return get_base_template(
        title="See you soon!",
        preview_text=f"Reminder: {service_name} on {booking_date}",
        content_sections=content,
    )
