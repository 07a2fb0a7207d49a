import logging
from typing import Any, Dict

from django.db import IntegrityError, transaction
from rest_framework.exceptions import NotFound, ValidationError

from accounts.models import User
from attendance_api.exceptions import Conflict
from audit.models import AuditLog
from audit.services import audit_service
from audit.services.audit_service import AuditTarget
from courses.models import Course, Enrollment

logger = logging.getLogger(__name__)

COURSE_FIELDS = ('title', 'section', 'semester', 'department')


def _resolve_instructor(instructor_id) -> User:
    instructor = User.objects.filter(pk=instructor_id).first()
    if instructor is None:
        raise NotFound('Instructor not found')
    if instructor.role not in (User.Role.INSTRUCTOR, User.Role.ADMIN):
        raise ValidationError('instructorId must refer to an INSTRUCTOR or ADMIN user')
    return instructor


def create_course(actor, data: Dict[str, Any]) -> Course:
    instructor = _resolve_instructor(data['instructor_id'])
    course = Course.objects.create(
        title=data['title'],
        section=data.get('section'),
        semester=data['semester'],
        department=data.get('department'),
        instructor=instructor,
    )
    audit_service.record(
        AuditTarget.course(course), AuditLog.Action.CREATE, actor,
        before=None, after=audit_service.snapshot_course(course),
    )
    return course


@transaction.atomic
def update_course(course: Course, actor, data: Dict[str, Any]) -> Course:
    course = Course.objects.select_for_update().get(pk=course.pk)
    before = audit_service.snapshot_course(course)
    for name in COURSE_FIELDS:
        if name in data:
            setattr(course, name, data[name])
    if 'instructor_id' in data:
        course.instructor = _resolve_instructor(data['instructor_id'])
    course.save()
    audit_service.record(
        AuditTarget.course(course), AuditLog.Action.UPDATE, actor,
        before=before, after=audit_service.snapshot_course(course),
    )
    return course


@transaction.atomic
def delete_course(course: Course, actor):
    """Delete a course that has no enrollments and no sessions yet."""
    enrollment_count = course.enrollments.count()
    session_count = course.sessions.count()
    if enrollment_count or session_count:
        raise Conflict(
            f'Course has linked data (enrollments={enrollment_count}, sessions={session_count}); '
            'remove it first'
        )
    before = audit_service.snapshot_course(course)
    target = AuditTarget.course(course)
    course.delete()
    audit_service.record(target, AuditLog.Action.DELETE, actor, before=before, after=None)


def enroll_student(course: Course, student_id) -> Enrollment:
    student = User.objects.filter(pk=student_id).first()
    if student is None:
        raise NotFound('Student not found')
    if student.role != User.Role.STUDENT:
        raise ValidationError('Only STUDENT users can be enrolled')
    if Enrollment.objects.filter(course=course, student=student).exists():
        raise Conflict('Student is already enrolled in this course')
    try:
        with transaction.atomic():
            enrollment = Enrollment.objects.create(course=course, student=student)
    except IntegrityError:
        raise Conflict('Student is already enrolled in this course')
    logger.info('%s', {'event': 'student_enrolled', 'course_id': course.pk, 'student_id': student.pk})
    return enrollment
