from django.conf import settings
from django.db import models

from attendance.models import Attendance, AttendanceStatus, ClassSession


class ExcuseRequest(models.Model):
    """A student's request to have a session counted as excused."""

    class ReasonCode(models.TextChoices):
        SICK = 'SICK', 'Sick'
        OFFICIAL = 'OFFICIAL', 'Official'
        ETC = 'ETC', 'Other'

    class Status(models.TextChoices):
        PENDING = 'PENDING', 'Pending'
        APPROVED = 'APPROVED', 'Approved'
        REJECTED = 'REJECTED', 'Rejected'

    session = models.ForeignKey(ClassSession, on_delete=models.CASCADE, related_name='excuse_requests')
    student = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='excuse_requests')
    reason_code = models.CharField(max_length=16, choices=ReasonCode.choices, default=ReasonCode.ETC)
    reason_text = models.TextField(blank=True, default='')
    # path of an already uploaded evidence file; uploads are handled elsewhere
    file_path = models.CharField(max_length=255, null=True, blank=True)
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.PENDING, db_index=True)
    reviewed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name='+',
    )
    reviewed_at = models.DateTimeField(null=True, blank=True)
    reply_text = models.TextField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ('-created_at',)
        constraints = [
            models.UniqueConstraint(
                fields=['session', 'student'],
                condition=models.Q(status='PENDING'),
                name='excuse_one_pending_per_session',
            ),
        ]

    def __str__(self):
        return f'Excuse {self.pk} s={self.session_id} u={self.student_id} ({self.status})'


class Appeal(models.Model):
    """A student's dispute of a recorded attendance status."""

    class Status(models.TextChoices):
        PENDING = 'PENDING', 'Pending'
        ACCEPTED = 'ACCEPTED', 'Accepted'
        REJECTED = 'REJECTED', 'Rejected'

    attendance = models.ForeignKey(Attendance, on_delete=models.CASCADE, related_name='appeals')
    student = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='appeals')
    message = models.TextField()
    requested_status = models.PositiveSmallIntegerField(choices=AttendanceStatus.choices, null=True, blank=True)
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.PENDING, db_index=True)
    reviewed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name='+',
    )
    reviewed_at = models.DateTimeField(null=True, blank=True)
    reply_text = models.TextField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ('-created_at',)
        constraints = [
            models.UniqueConstraint(
                fields=['attendance', 'student'],
                condition=models.Q(status='PENDING'),
                name='appeal_one_pending_per_attendance',
            ),
        ]

    def __str__(self):
        return f'Appeal {self.pk} a={self.attendance_id} ({self.status})'
