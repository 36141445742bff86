from datetime import date, timedelta

import pytest
from fastapi import BackgroundTasks
from pydantic import ValidationError

from tripbook.errors import ForbiddenError, InvalidArgumentError, NotFoundError
from tripbook.schemas import BookingCreate
from tripbook.services import bookings

ARRIVAL = date.today() + timedelta(days=30)


def guest_house_payload(place_id, **overrides):
    payload = {
        "booking_type": "guest_house",
        "place_id": place_id,
        "arrival_date": ARRIVAL,
        "leaving_date": ARRIVAL + timedelta(days=2),
        "number_of_rooms": 1,
        "adults": 2,
        "member_number": 2,
        "total_price": 300,
    }
    payload.update(overrides)
    return payload


def restaurant_payload(place_id, **overrides):
    payload = {
        "booking_type": "restaurant",
        "place_id": place_id,
        "booking_day": ARRIVAL,
        "booking_time": "19:30",
        "member_number": 4,
        "total_price": 0,
    }
    payload.update(overrides)
    return payload


def test_guest_house_requires_leaving_after_arrival():
    with pytest.raises(ValidationError, match="Leaving date must be after arrival date"):
        BookingCreate(**guest_house_payload(1, leaving_date=ARRIVAL))


def test_guest_house_requires_its_fields():
    with pytest.raises(ValidationError, match="number_of_rooms"):
        BookingCreate(**guest_house_payload(1, number_of_rooms=None))


def test_restaurant_requires_day_and_time():
    with pytest.raises(ValidationError, match="booking_time"):
        BookingCreate(**restaurant_payload(1, booking_time=None))


@pytest.mark.parametrize("time_value", ["7pm", "24:00", "19:60", "1930"])
def test_restaurant_time_must_be_hh_mm(time_value):
    with pytest.raises(ValidationError):
        BookingCreate(**restaurant_payload(1, booking_time=time_value))


@pytest.mark.parametrize("field, value", [("member_number", 0), ("total_price", -1), ("adults", 0)])
def test_shared_minimums(field, value):
    with pytest.raises(ValidationError):
        BookingCreate(**guest_house_payload(1, **{field: value}))


def test_children_default_to_zero():
    assert BookingCreate(**guest_house_payload(1)).children == 0


def test_create_guest_house_booking(db, guest, owner, guest_house):
    tasks = BackgroundTasks()
    booking = bookings.create_booking(db, BookingCreate(**guest_house_payload(guest_house.id)), guest.id, tasks)

    assert booking.status == "awaiting_payment"
    assert booking.payment_status == "pending"
    assert booking.payment_method is None
    assert booking.platform == "web"
    assert booking.admin_id == owner.id
    assert booking.booking_day is None
    assert len(tasks.tasks) == 1


def test_create_restaurant_booking_keeps_only_restaurant_fields(db, guest, restaurant):
    data = BookingCreate(**restaurant_payload(restaurant.id, arrival_date=ARRIVAL, platform="mobile"))
    booking = bookings.create_booking(db, data, guest.id, BackgroundTasks())

    assert booking.booking_time == "19:30"
    assert booking.arrival_date is None
    assert booking.platform == "mobile"


def test_create_booking_for_unknown_place(db, guest):
    with pytest.raises(NotFoundError):
        bookings.create_booking(db, BookingCreate(**guest_house_payload(999)), guest.id, BackgroundTasks())


def test_create_booking_for_wrong_place_type(db, guest, restaurant):
    with pytest.raises(InvalidArgumentError):
        bookings.create_booking(db, BookingCreate(**guest_house_payload(restaurant.id)), guest.id, BackgroundTasks())


def test_get_booking_is_limited_to_owner_and_admin(db, booking, guest, owner, stranger):
    assert bookings.get_booking(db, booking.id, guest.id).id == booking.id
    assert bookings.get_booking(db, booking.id, owner.id).id == booking.id
    with pytest.raises(ForbiddenError):
        bookings.get_booking(db, booking.id, stranger.id)
    with pytest.raises(NotFoundError):
        bookings.get_booking(db, 999, guest.id)


def test_list_bookings_for_user(db, booking, guest, owner, stranger):
    assert [b.id for b in bookings.list_bookings_for_user(db, guest.id)] == [booking.id]
    assert [b.id for b in bookings.list_bookings_for_user(db, owner.id)] == [booking.id]
    assert bookings.list_bookings_for_user(db, stranger.id) == []
