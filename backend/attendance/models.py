from django.conf import settings
from django.db import models

from courses.models import Course


class AttendanceStatus(models.IntegerChoices):
    UNKNOWN = 0, 'Unknown'
    PRESENT = 1, 'Present'
    LATE = 2, 'Late'
    ABSENT = 3, 'Absent'
    EXCUSED = 4, 'Excused'


# Statuses a reviewer may set explicitly (everything but "unknown").
RECORDED_STATUSES = (
    AttendanceStatus.PRESENT,
    AttendanceStatus.LATE,
    AttendanceStatus.ABSENT,
    AttendanceStatus.EXCUSED,
)


class ClassSession(models.Model):
    """One meeting of a course, identified by (course, week, round)."""

    class Method(models.TextChoices):
        ELECTRONIC = 'ELECTRONIC', 'Electronic'
        CODE = 'CODE', 'Access code'
        ROLL_CALL = 'ROLL_CALL', 'Roll call'

    class Status(models.TextChoices):
        OPEN = 'OPEN', 'Open'
        PAUSED = 'PAUSED', 'Paused'
        CLOSED = 'CLOSED', 'Closed'

    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name='sessions')
    week = models.PositiveSmallIntegerField()
    round = models.PositiveSmallIntegerField(default=1)
    start_at = models.DateTimeField(null=True, blank=True)
    end_at = models.DateTimeField(null=True, blank=True)
    room = models.CharField(max_length=50, null=True, blank=True)
    attendance_method = models.CharField(max_length=16, choices=Method.choices, default=Method.ELECTRONIC)
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.CLOSED)
    # only set for Method.CODE
    code = models.CharField(max_length=10, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = ('course', 'week', 'round')
        ordering = ('week', 'round', 'start_at')

    def __str__(self):
        return f'{self.course_id} W{self.week}R{self.round} ({self.status})'


class Attendance(models.Model):
    session = models.ForeignKey(ClassSession, on_delete=models.CASCADE, related_name='attendances')
    student = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='attendances')
    status = models.PositiveSmallIntegerField(choices=AttendanceStatus.choices, default=AttendanceStatus.UNKNOWN)
    checked_at = models.DateTimeField(null=True, blank=True)
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name='+',
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = ('session', 'student')
        ordering = ('id',)

    def __str__(self):
        return f'{self.student_id}@{self.session_id}={self.status}'
