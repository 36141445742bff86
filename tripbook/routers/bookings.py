from fastapi import APIRouter, BackgroundTasks, Depends, status
from sqlalchemy.orm import Session
from typing import List

from .. import schemas
from ..auth import CurrentUser, get_current_user
from ..database import get_db
from ..services import bookings

router = APIRouter(prefix="/api/bookings", tags=["Bookings"])


@router.post("", response_model=schemas.ApiResponse[schemas.BookingResponse], status_code=status.HTTP_201_CREATED)
def create_booking(
    booking_data: schemas.BookingCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """Create a booking awaiting payment"""
    booking = bookings.create_booking(db, booking_data, current_user.id, background_tasks)
    return schemas.ApiResponse(data=schemas.BookingResponse.model_validate(booking))


@router.get("", response_model=schemas.ApiResponse[List[schemas.BookingResponse]])
def get_my_bookings(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    rows = bookings.list_bookings_for_user(db, current_user.id)
    return schemas.ApiResponse(
        count=len(rows),
        data=[schemas.BookingResponse.model_validate(row) for row in rows],
    )


@router.get("/{booking_id}", response_model=schemas.ApiResponse[schemas.BookingResponse])
def get_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    booking = bookings.get_booking(db, booking_id, current_user.id)
    return schemas.ApiResponse(data=schemas.BookingResponse.model_validate(booking))
