"""Booking, payment and messaging enums plus the simulated payment outcome table."""

from enum import Enum
from typing import Dict, NamedTuple


class BookingType(str, Enum):
    GUEST_HOUSE = "guest_house"
    RESTAURANT = "restaurant"


class BookingStatus(str, Enum):
    AWAITING_PAYMENT = "awaiting_payment"
    CONFIRMED = "confirmed"
    CANCELED = "canceled"
    # Legacy values, still readable but never produced
    PENDING = "pending"
    PAID = "paid"


class PaymentStatus(str, Enum):
    UNPAID = "unpaid"
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"


class PaymentMethod(str, Enum):
    VISA = "visa"
    WALLET = "wallet"


class Platform(str, Enum):
    WEB = "web"
    MOBILE = "mobile"


class SimulatedStatus(str, Enum):
    """Outcome a client may ask the payment simulator to produce."""

    PAID = "paid"
    PENDING = "pending"
    FAILED = "failed"


class UserRole(str, Enum):
    USER = "user"
    OWNER = "owner"
    ADMIN = "admin"


class MessageRole(str, Enum):
    """Message author relative to the thread initiator."""

    ME = "me"
    OTHER = "other"

    def flipped(self) -> "MessageRole":
        return MessageRole.OTHER if self is MessageRole.ME else MessageRole.ME


class PaymentOutcome(NamedTuple):
    payment_status: PaymentStatus
    booking_status: BookingStatus


PAYMENT_OUTCOMES: Dict[SimulatedStatus, PaymentOutcome] = {
    SimulatedStatus.PAID: PaymentOutcome(PaymentStatus.PAID, BookingStatus.CONFIRMED),
    SimulatedStatus.PENDING: PaymentOutcome(PaymentStatus.PENDING, BookingStatus.AWAITING_PAYMENT),
    SimulatedStatus.FAILED: PaymentOutcome(PaymentStatus.FAILED, BookingStatus.CANCELED),
}


def derive_payment_outcome(simulate_status: SimulatedStatus = SimulatedStatus.PAID) -> PaymentOutcome:
    """Map a simulated gateway result to the payment and booking statuses it produces."""
    return PAYMENT_OUTCOMES[SimulatedStatus(simulate_status)]
