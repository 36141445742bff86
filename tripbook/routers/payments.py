from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from .. import schemas
from ..auth import CurrentUser, get_current_admin, get_current_user
from ..database import get_db
from ..services import payments

router = APIRouter(prefix="/api/payments", tags=["Payments"])


@router.post("/fake", response_model=schemas.ApiResponse[schemas.PaymentResult])
def create_fake_payment(
    payment_request: schemas.PaymentRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """Simulate a gateway response for a booking"""
    result = payments.process_payment(db, payment_request, current_user.id, background_tasks)
    return schemas.ApiResponse(message="Payment processed successfully", data=result)


@router.get("", response_model=schemas.ApiResponse[List[schemas.PaymentResponse]])
def get_payments(
    booking_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    admin: CurrentUser = Depends(get_current_admin)
):
    """All payment attempts (admin only)"""
    rows = payments.list_payments(db, booking_id)
    return schemas.ApiResponse(
        count=len(rows),
        data=[schemas.PaymentResponse.model_validate(row) for row in rows],
    )
