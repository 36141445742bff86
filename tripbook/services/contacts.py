"""
Contact (two-party conversation) service.

Every mutating operation re-checks that the acting user is one of the two
participants. All read paths return the thread normalized to the requesting
user, see ``normalization.normalize_contact``.

Concurrent appends to the same thread are not serialized. Messages are
ordered by arrival at the store and unread counters are bumped with an
atomic ``UPDATE ... SET n = n + 1``; nothing else is locked.
"""
import logging
from typing import List, Optional

from sqlalchemy import func, or_, and_, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import config
from ..constants import MessageRole
from ..errors import ForbiddenError, InternalError, InvalidArgumentError, NotFoundError
from ..models import Contact, ContactMessage, User, utcnow
from ..schemas import ContactView
from .normalization import normalize_contact

logger = logging.getLogger(__name__)


def _commit(db: Session, action: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"❌ Failed to {action}: {e}")
        raise InternalError(f"Failed to {action}") from e


def _load_for_participant(db: Session, contact_id: int, user_id: int) -> Contact:
    contact = db.get(Contact, contact_id)
    if contact is None:
        raise NotFoundError("Contact not found")
    if not contact.is_participant(user_id):
        logger.warning(f"User {user_id} is not a participant of contact {contact_id}")
        raise ForbiddenError("Not authorized")
    return contact


def _find_message(contact: Contact, message_id: int) -> ContactMessage:
    for msg in contact.messages:
        if msg.id == message_id:
            return msg
    raise NotFoundError("Message not found")


def get_contacts(db: Session, user_id: int) -> List[ContactView]:
    """All threads the user takes part in, most recently active first."""
    contacts = (
        db.query(Contact)
        .filter(or_(Contact.user_id == user_id, Contact.contact_user_id == user_id))
        .order_by(Contact.updated_at.desc(), Contact.created_at.desc(), Contact.id.desc())
        .all()
    )
    return [normalize_contact(contact, user_id) for contact in contacts]


def create_contact(db: Session, user_id: int, contact_user_id: int) -> ContactView:
    """
    Open a thread between two users, or return the one they already share.

    The pair is unordered: whoever started the existing thread, the same
    thread comes back. New threads are refused once the global cap is hit.
    """
    if user_id == contact_user_id:
        raise InvalidArgumentError("Cannot start a conversation with yourself")

    found = db.query(func.count(User.id)).filter(User.id.in_([user_id, contact_user_id])).scalar()
    if found < 2:
        raise NotFoundError("User not found")

    existing = (
        db.query(Contact)
        .filter(or_(
            and_(Contact.user_id == user_id, Contact.contact_user_id == contact_user_id),
            and_(Contact.user_id == contact_user_id, Contact.contact_user_id == user_id),
        ))
        .first()
    )
    if existing is not None:
        return normalize_contact(existing, user_id)

    total = db.query(func.count(Contact.id)).scalar()
    if total >= config.CONTACT_LIMIT:
        raise InvalidArgumentError(
            f"Contact limit reached: cannot create more than {config.CONTACT_LIMIT} contacts"
        )

    contact = Contact(
        user_id=user_id,
        contact_user_id=contact_user_id,
        user_unread_count=0,
        contact_user_unread_count=0,
    )
    db.add(contact)
    _commit(db, "create contact")
    db.refresh(contact)

    logger.info(f"✅ Contact {contact.id} created between users {user_id} and {contact_user_id}")
    return normalize_contact(contact, user_id)


def get_contact(db: Session, contact_id: int, user_id: int) -> Optional[ContactView]:
    """Normalized thread or ``None``. Does not check participation."""
    contact = db.get(Contact, contact_id)
    if contact is None:
        return None
    return normalize_contact(contact, user_id)


def get_contact_for_participant(db: Session, contact_id: int, user_id: int) -> ContactView:
    contact = _load_for_participant(db, contact_id, user_id)
    return normalize_contact(contact, user_id)


def add_message(db: Session, contact_id: int, sender_id: int, text: str) -> ContactView:
    contact = _load_for_participant(db, contact_id, sender_id)

    is_initiator = contact.user_id == sender_id
    role = MessageRole.ME if is_initiator else MessageRole.OTHER
    # The receiver's counter goes up
    counter = Contact.contact_user_unread_count if is_initiator else Contact.user_unread_count

    now = utcnow()
    db.add(ContactMessage(
        contact_id=contact.id,
        role=role.value,
        message=text,
        created_at=now,
        updated_at=now,
    ))
    db.execute(
        update(Contact)
        .where(Contact.id == contact.id)
        .values({counter: counter + 1, Contact.updated_at: now})
    )
    _commit(db, "add message")

    logger.info(f"💬 Message added to contact {contact_id} by user {sender_id}")
    db.refresh(contact)
    return normalize_contact(contact, sender_id)


def update_message(db: Session, contact_id: int, message_id: int, sender_id: int, text: str) -> ContactView:
    contact = _load_for_participant(db, contact_id, sender_id)
    msg = _find_message(contact, message_id)

    now = utcnow()
    msg.message = text
    msg.updated_at = now
    contact.updated_at = now
    _commit(db, "update message")

    db.refresh(contact)
    return normalize_contact(contact, sender_id)


def delete_message(db: Session, contact_id: int, message_id: int, sender_id: int) -> ContactView:
    """Remove one message. Unread counters are left as they are."""
    contact = _load_for_participant(db, contact_id, sender_id)
    msg = _find_message(contact, message_id)

    contact.messages.remove(msg)
    contact.updated_at = utcnow()
    _commit(db, "delete message")

    db.refresh(contact)
    return normalize_contact(contact, sender_id)


def reset_unread_count(db: Session, contact_id: int, user_id: int) -> ContactView:
    """Zero the caller's own counter. A non-participant changes nothing."""
    contact = db.get(Contact, contact_id)
    if contact is None:
        raise NotFoundError("Contact not found")

    if contact.user_id == user_id:
        contact.user_unread_count = 0
    elif contact.contact_user_id == user_id:
        contact.contact_user_unread_count = 0
    _commit(db, "reset unread count")

    db.refresh(contact)
    return normalize_contact(contact, user_id)


def delete_contact(db: Session, contact_id: int, requester_id: int) -> Optional[int]:
    """Delete the thread and its messages. Returns the id, or ``None`` if absent."""
    contact = db.get(Contact, contact_id)
    if contact is None:
        return None
    if not contact.is_participant(requester_id):
        logger.warning(f"User {requester_id} tried to delete contact {contact_id}")
        raise ForbiddenError("Not authorized")

    db.delete(contact)
    _commit(db, "delete contact")

    logger.info(f"🗑️ Contact {contact_id} deleted by user {requester_id}")
    return contact_id
