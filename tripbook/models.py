"""
Database models for the tourism booking and messaging backend
"""
from datetime import datetime, timezone

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from .constants import BookingStatus, PaymentStatus, Platform, UserRole
from .database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """User model (only the fields other entities reference)"""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False, default="")
    email = Column(String(255), nullable=False, unique=True, index=True)
    photo = Column(String(500), nullable=True)
    role = Column(String(20), nullable=False, default=UserRole.USER.value)
    created_at = Column(DateTime(timezone=True), default=utcnow)


class Place(Base):
    """Guest house or restaurant owned by a user"""
    __tablename__ = "places"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    place_type = Column(String(20), nullable=False)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    owner = relationship("User")


class Booking(Base):
    """Reservation for a guest house stay or a restaurant table"""
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    booking_type = Column(String(20), nullable=False)

    # Guest house fields
    arrival_date = Column(Date, nullable=True)
    leaving_date = Column(Date, nullable=True)
    number_of_rooms = Column(Integer, nullable=True)
    adults = Column(Integer, nullable=True)
    children = Column(Integer, nullable=True)

    # Restaurant fields
    booking_day = Column(Date, nullable=True)
    booking_time = Column(String(5), nullable=True)

    # Shared fields
    member_number = Column(Integer, nullable=False)
    room_number = Column(Integer, nullable=True)
    total_price = Column(Float, nullable=False, default=0)

    place_id = Column(Integer, ForeignKey("places.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    admin_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # status and payment_status only change together, in the payment processor
    status = Column(String(20), nullable=False, default=BookingStatus.AWAITING_PAYMENT.value)
    payment_status = Column(String(20), nullable=False, default=PaymentStatus.PENDING.value)
    payment_method = Column(String(20), nullable=True)
    platform = Column(String(20), nullable=False, default=Platform.WEB.value)

    created_at = Column(DateTime(timezone=True), default=utcnow)

    place = relationship("Place")
    user = relationship("User", foreign_keys=[user_id])
    admin = relationship("User", foreign_keys=[admin_id])
    payments = relationship("Payment", back_populates="booking", order_by="Payment.id")

    __table_args__ = (
        CheckConstraint("member_number >= 1", name="booking_member_number_min"),
        CheckConstraint("total_price >= 0", name="booking_total_price_min"),
    )


class Payment(Base):
    """One simulated payment attempt; rows are never updated"""
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(Integer, ForeignKey("bookings.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    payment_status = Column(String(20), nullable=False, default=PaymentStatus.PENDING.value)
    method = Column(String(20), nullable=False)
    amount = Column(Float, nullable=False)
    transaction_id = Column(String(64), nullable=False, unique=True)
    platform = Column(String(20), nullable=False, default=Platform.WEB.value)
    paid_at = Column(DateTime(timezone=True), default=utcnow)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow)

    booking = relationship("Booking", back_populates="payments")
    user = relationship("User")

    __table_args__ = (
        CheckConstraint("amount >= 0", name="payment_amount_min"),
    )


class Contact(Base):
    """Two-party conversation thread; `user` is the initiator"""
    __tablename__ = "contacts"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    contact_user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    user_unread_count = Column(Integer, nullable=False, default=0)
    contact_user_unread_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow)

    user = relationship("User", foreign_keys=[user_id])
    contact_user = relationship("User", foreign_keys=[contact_user_id])
    messages = relationship(
        "ContactMessage",
        back_populates="contact",
        order_by="ContactMessage.id",
        cascade="all, delete-orphan",
    )

    def is_participant(self, user_id) -> bool:
        if user_id is None:
            return False
        return user_id in (self.user_id, self.contact_user_id)


class ContactMessage(Base):
    """Message in a thread; role is relative to the thread initiator"""
    __tablename__ = "contact_messages"

    id = Column(Integer, primary_key=True, index=True)
    contact_id = Column(Integer, ForeignKey("contacts.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(String(10), nullable=False)
    message = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow)

    contact = relationship("Contact", back_populates="messages")
