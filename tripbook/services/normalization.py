"""
Read-time projection of a contact thread onto one participant's point of view.

Message roles are stored relative to the thread initiator. A viewer who is
not the initiator sees every role flipped, so their own messages are always
tagged ``me``. The unread counter exposed as ``unread_count`` is the one that
belongs to the viewer's side. The stored thread is never modified.
"""
from ..constants import MessageRole
from ..models import Contact
from ..schemas import ContactView, MessageView, UserSummary


def normalize_contact(contact: Contact, viewer_id: int) -> ContactView:
    is_initiator = contact.user_id == viewer_id

    messages = []
    for msg in contact.messages:
        role = MessageRole(msg.role)
        messages.append(MessageView(
            id=msg.id,
            role=role if is_initiator else role.flipped(),
            message=msg.message,
            created_at=msg.created_at,
            updated_at=msg.updated_at,
        ))

    return ContactView(
        id=contact.id,
        user=UserSummary.model_validate(contact.user),
        contact_user=UserSummary.model_validate(contact.contact_user),
        messages=messages,
        unread_count=contact.user_unread_count if is_initiator else contact.contact_user_unread_count,
        user_unread_count=contact.user_unread_count,
        contact_user_unread_count=contact.contact_user_unread_count,
        created_at=contact.created_at,
        updated_at=contact.updated_at,
    )
