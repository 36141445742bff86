"""
Booking creation and lookup. Status changes after creation belong to the
payment processor.
"""
import logging
from typing import List

from fastapi import BackgroundTasks
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..constants import BookingStatus, BookingType, PaymentStatus
from ..errors import ForbiddenError, InternalError, InvalidArgumentError, NotFoundError
from ..models import Booking, Place, User
from ..schemas import BookingCreate
from ..telegram_service import telegram_notifier

logger = logging.getLogger(__name__)


def create_booking(
    db: Session,
    data: BookingCreate,
    user_id: int,
    background_tasks: BackgroundTasks,
) -> Booking:
    place = db.get(Place, data.place_id)
    if place is None:
        raise NotFoundError("Place not found")
    if place.place_type != data.booking_type.value:
        raise InvalidArgumentError(f"Place {place.id} does not accept {data.booking_type.value} bookings")

    admin_id = data.admin_id if data.admin_id is not None else place.owner_id
    if db.get(User, admin_id) is None:
        raise NotFoundError("Admin user not found")

    booking = Booking(
        booking_type=data.booking_type.value,
        place_id=place.id,
        user_id=user_id,
        admin_id=admin_id,
        member_number=data.member_number,
        room_number=data.room_number,
        total_price=data.total_price,
        platform=data.platform.value,
        status=BookingStatus.AWAITING_PAYMENT.value,
        payment_status=PaymentStatus.PENDING.value,
        payment_method=None,
    )
    # Only the fields of the booking's own variant are stored
    if data.booking_type == BookingType.GUEST_HOUSE:
        booking.arrival_date = data.arrival_date
        booking.leaving_date = data.leaving_date
        booking.number_of_rooms = data.number_of_rooms
        booking.adults = data.adults
        booking.children = data.children
    else:
        booking.booking_day = data.booking_day
        booking.booking_time = data.booking_time

    db.add(booking)
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"❌ Failed to create booking: {e}")
        raise InternalError("Failed to create booking") from e
    db.refresh(booking)

    logger.info(f"✅ Booking {booking.id} created for place {place.id}, awaiting payment")

    client = booking.user
    background_tasks.add_task(
        telegram_notifier.send_new_booking_notification,
        booking_id=booking.id,
        booking_type=booking.booking_type,
        place_name=place.name,
        client_name=f"{client.first_name} {client.last_name}".strip() if client else str(user_id),
        total_price=booking.total_price,
    )
    return booking


def get_booking(db: Session, booking_id: int, user_id: int) -> Booking:
    booking = db.get(Booking, booking_id)
    if booking is None:
        raise NotFoundError("Booking not found")
    if user_id not in (booking.user_id, booking.admin_id):
        raise ForbiddenError("Not authorized")
    return booking


def list_bookings_for_user(db: Session, user_id: int) -> List[Booking]:
    """Bookings the user made or administers, newest first"""
    return (
        db.query(Booking)
        .filter(or_(Booking.user_id == user_id, Booking.admin_id == user_id))
        .order_by(Booking.created_at.desc(), Booking.id.desc())
        .all()
    )
