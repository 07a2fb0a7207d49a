from django.conf import settings
from django.db import models


class AuditLog(models.Model):
    """Append-only trail of privileged writes.

    `target_type` discriminates which entity `target_id` points at. Rows are
    never updated or deleted once written.
    """

    class TargetType(models.TextChoices):
        ATTENDANCE = 'ATTENDANCE', 'Attendance'
        EXCUSE_REQUEST = 'EXCUSE_REQUEST', 'Excuse request'
        APPEAL = 'APPEAL', 'Appeal'
        SESSION = 'SESSION', 'Class session'
        COURSE = 'COURSE', 'Course'
        USER = 'USER', 'User'

    class Action(models.TextChoices):
        CREATE = 'CREATE', 'Create'
        UPDATE = 'UPDATE', 'Update'
        DELETE = 'DELETE', 'Delete'
        APPROVE = 'APPROVE', 'Approve'
        REJECT = 'REJECT', 'Reject'
        ACCEPT = 'ACCEPT', 'Accept'
        ROLE_CHANGE = 'ROLE_CHANGE', 'Role change'
        OPEN = 'OPEN', 'Open'
        PAUSE = 'PAUSE', 'Pause'
        CLOSE = 'CLOSE', 'Close'

    target_type = models.CharField(max_length=30, choices=TargetType.choices)
    target_id = models.BigIntegerField()
    action = models.CharField(max_length=30, choices=Action.choices)
    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name='audit_entries',
    )
    before_value = models.JSONField(null=True, blank=True)
    after_value = models.JSONField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ('-id',)
        indexes = [
            models.Index(fields=['target_type', 'target_id'], name='audit_target_idx'),
        ]

    def __str__(self):
        return f'{self.target_type}:{self.target_id} {self.action}'

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError('AuditLog rows are append-only')
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError('AuditLog rows are append-only')
