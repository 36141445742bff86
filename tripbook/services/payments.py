"""
Simulated payment processing.

A payment attempt writes a new Payment row and then updates the Booking. The
two writes are separate commits: if the booking update fails the payment row
stays, and two concurrent attempts on one booking are last-write-wins on the
booking. Confirmation side effects for a paid outcome run after the response
as background work and can never change the result.
"""
import logging
import secrets
import time
from typing import Any, Dict, List, Optional, Type

from fastapi import BackgroundTasks
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..constants import (
    PaymentMethod,
    PaymentStatus,
    Platform,
    SimulatedStatus,
    derive_payment_outcome,
)
from ..email_service import send_payment_confirmation_email
from ..errors import ForbiddenError, InternalError, InvalidArgumentError, NotFoundError
from ..models import Booking, Payment
from ..realtime import booking_room, notifier, user_room
from ..schemas import PaymentRequest, PaymentResult
from ..telegram_service import telegram_notifier

logger = logging.getLogger(__name__)

TRANSACTION_PREFIX = "FAKE"


def build_transaction_id() -> str:
    """Prefix, epoch millis and a random suffix. Unique in practice, not guaranteed."""
    return f"{TRANSACTION_PREFIX}-{int(time.time() * 1000)}-{secrets.randbelow(100000)}"


def _parse_choice(enum_cls: Type, value: Optional[str], error: str):
    try:
        return enum_cls(value)
    except ValueError:
        raise InvalidArgumentError(error)


def _booking_snapshot(booking: Booking) -> Dict[str, Any]:
    user = booking.user
    return {
        "id": booking.id,
        "booking_type": booking.booking_type,
        "place_name": booking.place.name if booking.place else "",
        "client_name": f"{user.first_name} {user.last_name}".strip() if user else "",
        "client_email": user.email if user else None,
        "admin_id": booking.admin_id,
        "arrival_date": booking.arrival_date,
        "leaving_date": booking.leaving_date,
        "number_of_rooms": booking.number_of_rooms,
        "booking_day": booking.booking_day,
        "booking_time": booking.booking_time,
        "member_number": booking.member_number,
    }


def _payment_snapshot(payment: Payment) -> Dict[str, Any]:
    return {
        "id": payment.id,
        "amount": payment.amount,
        "method": payment.method,
        "transaction_id": payment.transaction_id,
    }


async def confirm_paid_booking(booking: Dict[str, Any], payment: Dict[str, Any]) -> None:
    """Fire-and-forget confirmation: email, realtime push and admin notice."""
    try:
        await send_payment_confirmation_email(booking, payment)
    except Exception as e:
        logger.error(f"❌ Failed to send payment confirmation email for booking {booking['id']}: {e}")

    try:
        await notifier.notify_many(
            [booking_room(booking["id"]), user_room(booking["admin_id"])],
            "notificationReceived",
            {
                "type": "payment",
                "message": f"Payment confirmed for booking {booking['id']}",
                "booking_id": booking["id"],
                "payment_id": payment["id"],
            },
        )
    except Exception as e:
        logger.error(f"❌ Failed to push payment notification for booking {booking['id']}: {e}")

    try:
        await telegram_notifier.send_payment_confirmed_notification(
            booking_id=booking["id"],
            place_name=booking["place_name"],
            client_name=booking["client_name"],
            amount=payment["amount"],
            method=payment["method"],
            transaction_id=payment["transaction_id"],
        )
    except Exception as e:
        logger.error(f"❌ Failed to send Telegram payment notice for booking {booking['id']}: {e}")


def process_payment(
    db: Session,
    request: PaymentRequest,
    acting_user_id: int,
    background_tasks: BackgroundTasks,
) -> PaymentResult:
    """
    Run one simulated payment attempt against a booking.

    Raises InvalidArgumentError for bad input, NotFoundError when the booking
    does not exist, ForbiddenError when the caller is neither the booking's
    user nor its admin and InternalError when a write fails. A simulated
    ``failed`` outcome is a normal result, not an error.
    """
    if request.booking_id is None:
        raise InvalidArgumentError("bookingId is required")

    # Existence and ownership are checked before the remaining input
    booking = db.get(Booking, request.booking_id)
    if booking is None:
        raise NotFoundError("Booking not found")

    if acting_user_id not in (booking.user_id, booking.admin_id):
        logger.warning(f"User {acting_user_id} is not allowed to pay for booking {booking.id}")
        raise ForbiddenError("Not authorized to pay for this booking")

    method = _parse_choice(PaymentMethod, request.method, "Invalid payment method")
    if request.simulate_status is None:
        simulate_status = SimulatedStatus.PAID
    else:
        simulate_status = _parse_choice(SimulatedStatus, request.simulate_status, "Invalid simulated status")
    platform = _parse_choice(Platform, request.platform or Platform.WEB.value, "Invalid platform")
    if request.amount is not None and request.amount < 0:
        raise InvalidArgumentError("Amount must not be negative")

    outcome = derive_payment_outcome(simulate_status)
    if request.amount is not None:
        amount = request.amount
    elif booking.total_price is not None:
        amount = booking.total_price
    else:
        amount = 0

    payment = Payment(
        booking_id=booking.id,
        user_id=acting_user_id,
        method=method.value,
        amount=amount,
        transaction_id=build_transaction_id(),
        platform=platform.value,
        payment_status=outcome.payment_status.value,
    )
    db.add(payment)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        if "transaction_id" not in str(e.orig):
            logger.error(f"❌ Payment for booking {request.booking_id} violates a constraint: {e}")
            raise InternalError("Failed to store payment") from e
        logger.warning(f"Transaction id collision for booking {request.booking_id}: {e}")
        raise InvalidArgumentError("Could not register payment, please retry")
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"❌ Failed to store payment for booking {request.booking_id}: {e}")
        raise InternalError("Failed to store payment") from e
    payment_id = payment.id

    booking.status = outcome.booking_status.value
    booking.payment_status = outcome.payment_status.value
    booking.payment_method = method.value
    booking.platform = platform.value
    try:
        db.commit()
    except SQLAlchemyError as e:
        # The payment row above stays; no compensation
        db.rollback()
        logger.error(f"❌ Payment {payment_id} stored but booking {request.booking_id} was not updated: {e}")
        raise InternalError("Failed to update booking") from e

    logger.info(
        f"💳 Booking {booking.id}: payment {payment_id} {outcome.payment_status.value}, "
        f"booking {outcome.booking_status.value}"
    )

    if outcome.payment_status is PaymentStatus.PAID:
        background_tasks.add_task(
            confirm_paid_booking,
            _booking_snapshot(booking),
            _payment_snapshot(payment),
        )

    return PaymentResult(
        payment_status=outcome.payment_status.value,
        booking_status=outcome.booking_status.value,
        message=f"Payment {outcome.payment_status.value}",
        booking_id=booking.id,
        payment_id=payment_id,
    )


def list_payments(db: Session, booking_id: Optional[int] = None) -> List[Payment]:
    """Payment attempts, newest first"""
    query = db.query(Payment)
    if booking_id is not None:
        query = query.filter(Payment.booking_id == booking_id)
    return query.order_by(Payment.id.desc()).all()
