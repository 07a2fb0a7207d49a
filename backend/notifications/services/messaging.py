import logging

from django.utils import timezone
from rest_framework.exceptions import NotFound, PermissionDenied

from accounts.models import User
from courses.models import Course
from notifications.models import NotificationType, PersonalMessage
from notifications.services import notification_service

logger = logging.getLogger(__name__)


def can_message(sender, receiver) -> bool:
    """Students may only write to instructors of courses they are enrolled in."""
    if sender.role != User.Role.STUDENT:
        return True
    return Course.objects.filter(enrollments__student=sender, instructor=receiver).exists()


def send_message(sender, receiver_id, content: str, title: str = '') -> PersonalMessage:
    receiver = User.objects.filter(pk=receiver_id).first()
    if receiver is None:
        raise NotFound('Receiver not found')
    if not can_message(sender, receiver):
        raise PermissionDenied('Students can only message instructors of their enrolled courses')

    message = PersonalMessage.objects.create(sender=sender, receiver=receiver, title=title or '', content=content)
    notification_service.notify(
        receiver.pk,
        NotificationType.MESSAGE_RECEIVED,
        'New personal message',
        f'New message from user {sender.pk}: {title or "(no title)"}',
        '/me/messages/inbox',
    )
    logger.info('%s', {'event': 'message_sent', 'message_id': message.pk, 'sender_id': sender.pk, 'receiver_id': receiver.pk})
    return message


def mark_read(message_id, user) -> PersonalMessage:
    message = PersonalMessage.objects.filter(pk=message_id).first()
    if message is None:
        raise NotFound('Message not found')
    if message.receiver_id != user.pk:
        raise PermissionDenied('Only the receiver can mark a message as read')
    if not message.is_read:
        message.is_read = True
        message.read_at = timezone.now()
        message.save(update_fields=['is_read', 'read_at', 'updated_at'])
    return message
