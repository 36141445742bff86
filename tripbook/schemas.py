from pydantic import BaseModel, Field, validator, model_validator
from datetime import date, datetime
from typing import Generic, List, Optional, TypeVar

from .constants import BookingType, MessageRole, Platform

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    success: bool = True
    message: Optional[str] = None
    count: Optional[int] = None
    data: Optional[T] = None


# Users
class UserSummary(BaseModel):
    id: int
    first_name: str
    last_name: str = ""
    email: str
    photo: Optional[str] = None
    role: str

    class Config:
        from_attributes = True


# Bookings
class BookingCreate(BaseModel):
    booking_type: BookingType
    place_id: int
    admin_id: Optional[int] = None
    member_number: int = Field(..., ge=1)
    room_number: Optional[int] = Field(None, ge=1)
    total_price: float = Field(..., ge=0)
    platform: Platform = Platform.WEB

    # Guest house
    arrival_date: Optional[date] = None
    leaving_date: Optional[date] = None
    number_of_rooms: Optional[int] = Field(None, ge=1)
    adults: Optional[int] = Field(None, ge=1)
    children: Optional[int] = Field(None, ge=0)

    # Restaurant
    booking_day: Optional[date] = None
    booking_time: Optional[str] = Field(None, pattern=r"^([01]\d|2[0-3]):[0-5]\d$")

    @model_validator(mode="after")
    def check_variant_fields(self):
        if self.booking_type == BookingType.GUEST_HOUSE:
            missing = [
                name for name in ("arrival_date", "leaving_date", "number_of_rooms", "adults")
                if getattr(self, name) is None
            ]
            if missing:
                raise ValueError(f"Guest house booking requires: {', '.join(missing)}")
            if self.leaving_date <= self.arrival_date:
                raise ValueError("Leaving date must be after arrival date")
            if self.children is None:
                self.children = 0
        else:
            missing = [name for name in ("booking_day", "booking_time") if getattr(self, name) is None]
            if missing:
                raise ValueError(f"Restaurant booking requires: {', '.join(missing)}")
        return self


class BookingResponse(BaseModel):
    id: int
    booking_type: str
    place_id: int
    user_id: int
    admin_id: int
    member_number: int
    room_number: Optional[int] = None
    total_price: float
    arrival_date: Optional[date] = None
    leaving_date: Optional[date] = None
    number_of_rooms: Optional[int] = None
    adults: Optional[int] = None
    children: Optional[int] = None
    booking_day: Optional[date] = None
    booking_time: Optional[str] = None
    status: str
    payment_status: str
    payment_method: Optional[str] = None
    platform: str
    created_at: datetime

    class Config:
        from_attributes = True


# Payments
class PaymentRequest(BaseModel):
    """Simulated payment attempt; enum checks happen in the payment processor"""
    booking_id: Optional[int] = None
    method: Optional[str] = None
    amount: Optional[float] = Field(None, allow_inf_nan=False)
    platform: str = Platform.WEB.value
    simulate_status: Optional[str] = None


class PaymentResult(BaseModel):
    payment_status: str
    booking_status: str
    message: str
    booking_id: int
    payment_id: int


class PaymentResponse(BaseModel):
    id: int
    booking_id: int
    user_id: int
    payment_status: str
    method: str
    amount: float
    transaction_id: str
    platform: str
    paid_at: datetime
    created_at: datetime

    class Config:
        from_attributes = True


# Contacts
class ContactCreate(BaseModel):
    contact_user_id: int


class MessageCreate(BaseModel):
    message: str = Field(..., min_length=1, max_length=2000)

    @validator("message")
    def message_not_blank(cls, v):
        if not v.strip():
            raise ValueError("Message must not be empty")
        return v


class MessageUpdate(MessageCreate):
    pass


class MessageView(BaseModel):
    id: int
    role: MessageRole
    message: str
    created_at: datetime
    updated_at: datetime


class ContactView(BaseModel):
    """Thread as seen by one participant"""
    id: int
    user: UserSummary
    contact_user: UserSummary
    messages: List[MessageView]
    unread_count: int
    user_unread_count: int
    contact_user_unread_count: int
    created_at: datetime
    updated_at: datetime
