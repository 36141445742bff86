import logging
from fastapi import APIRouter, BackgroundTasks, Depends, status
from sqlalchemy.orm import Session
from typing import List

from .. import schemas
from ..auth import CurrentUser, get_current_user
from ..constants import MessageRole
from ..database import get_db
from ..errors import ForbiddenError, NotFoundError
from ..realtime import contact_room, notifier, user_room
from ..services import contacts

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/contact", tags=["Contacts"])


@router.get("/user/{user_id}", response_model=schemas.ApiResponse[List[schemas.ContactView]])
def get_contacts(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """All threads of a user (the user themself or an admin)"""
    if current_user.id != user_id and not current_user.is_admin:
        raise ForbiddenError("Not authorized")

    threads = contacts.get_contacts(db, user_id)
    return schemas.ApiResponse(count=len(threads), data=threads)


@router.post("", response_model=schemas.ApiResponse[schemas.ContactView], status_code=status.HTTP_201_CREATED)
def create_contact(
    contact_data: schemas.ContactCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """Open a thread with another user, or return the existing one"""
    thread = contacts.create_contact(db, current_user.id, contact_data.contact_user_id)
    return schemas.ApiResponse(data=thread)


@router.get("/{contact_id}", response_model=schemas.ApiResponse[schemas.ContactView])
def get_contact(
    contact_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    thread = contacts.get_contact_for_participant(db, contact_id, current_user.id)
    return schemas.ApiResponse(data=thread)


@router.post("/{contact_id}/message", response_model=schemas.ApiResponse[schemas.ContactView], status_code=status.HTTP_201_CREATED)
def add_message(
    contact_id: int,
    message_data: schemas.MessageCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    thread = contacts.add_message(db, contact_id, current_user.id, message_data.message)

    receiver_id = thread.contact_user.id if thread.user.id == current_user.id else thread.user.id
    last_message = thread.messages[-1]
    # The receiver sees the new message as written by the other side
    message_obj = last_message.model_copy(update={"role": MessageRole.OTHER})

    logger.info(f"📤 messageReceived for contact {contact_id}, receiver {receiver_id}")
    background_tasks.add_task(
        notifier.notify_many,
        [contact_room(contact_id), user_room(receiver_id)],
        "messageReceived",
        {
            "conversation_id": contact_id,
            "message": last_message.message,
            "message_obj": message_obj.model_dump(mode="json"),
            "sender_id": current_user.id,
            "receiver_id": receiver_id,
        },
    )
    return schemas.ApiResponse(data=thread)


@router.put("/{contact_id}/message/{message_id}", response_model=schemas.ApiResponse[schemas.ContactView])
def update_message(
    contact_id: int,
    message_id: int,
    message_data: schemas.MessageUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    thread = contacts.update_message(db, contact_id, message_id, current_user.id, message_data.message)
    return schemas.ApiResponse(data=thread)


@router.delete("/{contact_id}/message/{message_id}", response_model=schemas.ApiResponse[schemas.ContactView])
def delete_message(
    contact_id: int,
    message_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    thread = contacts.delete_message(db, contact_id, message_id, current_user.id)
    return schemas.ApiResponse(data=thread)


@router.put("/{contact_id}/read", response_model=schemas.ApiResponse[schemas.ContactView])
def mark_read(
    contact_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    thread = contacts.reset_unread_count(db, contact_id, current_user.id)
    return schemas.ApiResponse(data=thread)


@router.delete("/{contact_id}", response_model=schemas.ApiResponse[None])
def delete_contact(
    contact_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    deleted = contacts.delete_contact(db, contact_id, current_user.id)
    if deleted is None:
        raise NotFoundError("Contact not found")
    return schemas.ApiResponse(message="Contact deleted successfully")
