from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models


class Course(models.Model):
    title = models.CharField(max_length=100)
    section = models.CharField(max_length=20, null=True, blank=True)
    semester = models.CharField(max_length=20, db_index=True)
    department = models.CharField(max_length=50, null=True, blank=True)
    instructor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='taught_courses',
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ('-id',)

    def __str__(self):
        return f'{self.title} ({self.semester})'


class Enrollment(models.Model):
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name='enrollments')
    student = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='enrollments')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ('course', 'student')
        ordering = ('id',)

    def __str__(self):
        return f'{self.student_id} in {self.course_id}'


class AttendancePolicy(models.Model):
    """Per-course scoring weights and absence-warning thresholds.

    A course without a row is scored with the defaults declared on the fields.
    """

    course = models.OneToOneField(Course, on_delete=models.CASCADE, related_name='attendance_policy')
    late_to_absent = models.PositiveSmallIntegerField(default=3, validators=[MinValueValidator(1)])
    w_present = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('1.00'))
    w_late = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('0.50'))
    w_absent = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('0.00'))
    w_excused = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('1.00'))
    max_score = models.PositiveIntegerField(default=20, validators=[MinValueValidator(1)])
    missing_as_absent = models.BooleanField(default=True)
    warn_absences = models.PositiveSmallIntegerField(default=2)
    danger_absences = models.PositiveSmallIntegerField(default=4)
    fail_absences = models.PositiveSmallIntegerField(default=6)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = 'attendance policies'

    def __str__(self):
        return f'Policy for course {self.course_id}'
