import os
import logging
from typing import Any, Dict

from fastapi_mail import FastMail, MessageSchema, ConnectionConfig, MessageType
from jinja2 import Environment

from . import config

logger = logging.getLogger(__name__)

_templates = Environment(autoescape=True)

PAYMENT_CONFIRMATION_TEMPLATE = _templates.from_string("""
<!DOCTYPE html>
<html>
<head>
    <meta charset="UTF-8">
    <style>
        body { font-family: Arial, sans-serif; line-height: 1.6; color: #333; }
        .container { max-width: 600px; margin: 0 auto; padding: 20px; background: #0f766e; }
        .content { background: white; padding: 40px; border-radius: 10px; }
        h1 { color: #0f766e; }
        .booking-info { background: #f8f9fa; padding: 20px; border-radius: 8px; margin: 20px 0; }
        .info-row { display: flex; justify-content: space-between; padding: 10px 0; border-bottom: 1px solid #e0e0e0; }
        .info-label { font-weight: bold; color: #0f766e; }
        .footer { text-align: center; margin-top: 20px; color: white; font-size: 12px; }
    </style>
</head>
<body>
    <div class="container">
        <div class="content">
            <h1>✅ Payment confirmed!</h1>
            <p>Hello, {{ booking.client_name }}!</p>
            <p>Your booking at <b>{{ booking.place_name }}</b> is confirmed.</p>

            <div class="booking-info">
                <h3>Booking details:</h3>
                {% if booking.booking_type == "guest_house" %}
                <div class="info-row"><span class="info-label">Arrival:</span><span>{{ booking.arrival_date }}</span></div>
                <div class="info-row"><span class="info-label">Leaving:</span><span>{{ booking.leaving_date }}</span></div>
                <div class="info-row"><span class="info-label">Rooms:</span><span>{{ booking.number_of_rooms }}</span></div>
                {% else %}
                <div class="info-row"><span class="info-label">Day:</span><span>{{ booking.booking_day }}</span></div>
                <div class="info-row"><span class="info-label">Time:</span><span>{{ booking.booking_time }}</span></div>
                {% endif %}
                <div class="info-row"><span class="info-label">Guests:</span><span>{{ booking.member_number }}</span></div>
                <div class="info-row"><span class="info-label">Amount:</span><span>{{ "%.2f"|format(payment.amount) }}</span></div>
                <div class="info-row"><span class="info-label">Method:</span><span>{{ payment.method }}</span></div>
                <div class="info-row"><span class="info-label">Transaction:</span><span>{{ payment.transaction_id }}</span></div>
            </div>

            <p><a href="{{ frontend_url }}/bookings/{{ booking.id }}">View your booking</a></p>
        </div>
        <div class="footer">
            <p>© TripBook</p>
        </div>
    </div>
</body>
</html>
""")


def _connection_config() -> ConnectionConfig:
    return ConnectionConfig(
        MAIL_USERNAME=os.getenv("MAIL_USERNAME", ""),
        MAIL_PASSWORD=os.getenv("MAIL_PASSWORD", ""),
        MAIL_FROM=os.getenv("MAIL_FROM", "noreply@tripbook.app"),
        MAIL_PORT=int(os.getenv("MAIL_PORT", "587")),
        MAIL_SERVER=os.getenv("MAIL_SERVER", "smtp.gmail.com"),
        MAIL_FROM_NAME=os.getenv("MAIL_FROM_NAME", "TripBook"),
        MAIL_STARTTLS=True,
        MAIL_SSL_TLS=False,
        USE_CREDENTIALS=True,
        VALIDATE_CERTS=True,
    )


def render_payment_confirmation(booking: Dict[str, Any], payment: Dict[str, Any]) -> str:
    return PAYMENT_CONFIRMATION_TEMPLATE.render(
        booking=booking,
        payment=payment,
        frontend_url=config.FRONTEND_URL,
    )


async def send_payment_confirmation_email(booking: Dict[str, Any], payment: Dict[str, Any]) -> bool:
    """Send the payment confirmation to the booking's client"""
    if not config.MAIL_ENABLED:
        logger.info(f"Mail disabled, skipping confirmation for booking {booking['id']}")
        return False

    message = MessageSchema(
        subject=f"Booking #{booking['id']} confirmed - TripBook",
        recipients=[booking["client_email"]],
        body=render_payment_confirmation(booking, payment),
        subtype=MessageType.html
    )

    fm = FastMail(_connection_config())
    await fm.send_message(message)
    logger.info(f"📧 Payment confirmation sent for booking {booking['id']}")
    return True
