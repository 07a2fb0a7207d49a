from django.conf import settings
from django.db import models


class NotificationType(models.TextChoices):
    INFO = 'INFO', 'Info'
    EXCUSE_REQUESTED = 'EXCUSE_REQUESTED', 'Excuse requested'
    EXCUSE_APPROVED = 'EXCUSE_APPROVED', 'Excuse approved'
    EXCUSE_REJECTED = 'EXCUSE_REJECTED', 'Excuse rejected'
    APPEAL_REQUESTED = 'APPEAL_REQUESTED', 'Appeal requested'
    APPEAL_ACCEPTED = 'APPEAL_ACCEPTED', 'Appeal accepted'
    APPEAL_REJECTED = 'APPEAL_REJECTED', 'Appeal rejected'
    ABSENCE_WARN = 'ABSENCE_WARN', 'Absence warning'
    ABSENCE_DANGER = 'ABSENCE_DANGER', 'Absence danger'
    ABSENCE_FAIL = 'ABSENCE_FAIL', 'Absence fail'
    MESSAGE_RECEIVED = 'MESSAGE_RECEIVED', 'Message received'
    ANNOUNCEMENT_POSTED = 'ANNOUNCEMENT_POSTED', 'Announcement posted'
    POLL_OPENED = 'POLL_OPENED', 'Poll opened'
    POLL_CLOSED = 'POLL_CLOSED', 'Poll closed'


class Notification(models.Model):
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='notifications')
    # free-form; NotificationType lists the values the server itself emits
    type = models.CharField(max_length=50, default=NotificationType.INFO)
    title = models.CharField(max_length=100)
    message = models.TextField()
    link_url = models.CharField(max_length=255, null=True, blank=True)
    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ('is_read', '-created_at')
        indexes = [models.Index(fields=['user', 'is_read'], name='notification_user_read_idx')]

    def __str__(self):
        return f'{self.user_id}:{self.type}:{self.title}'


class PersonalMessage(models.Model):
    sender = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='sent_messages')
    receiver = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='received_messages')
    title = models.CharField(max_length=200, blank=True, default='')
    content = models.TextField()
    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ('-created_at',)
        indexes = [models.Index(fields=['receiver', 'is_read'], name='message_receiver_read_idx')]

    def __str__(self):
        return f'{self.sender_id}->{self.receiver_id}: {self.title}'
