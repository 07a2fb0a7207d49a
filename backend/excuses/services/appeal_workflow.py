import logging
from typing import Any, Dict, Optional

from django.db import IntegrityError, transaction
from django.utils import timezone
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError

from accounts.models import User
from attendance.models import RECORDED_STATUSES, Attendance
from attendance_api.exceptions import AlreadyProcessed, Conflict
from audit.models import AuditLog
from audit.services import audit_service
from audit.services.audit_service import AuditTarget
from courses.services import access
from excuses.models import Appeal
from notifications.models import NotificationType
from notifications.services import notification_service

logger = logging.getLogger(__name__)

RESOLUTIONS = (Appeal.Status.ACCEPTED, Appeal.Status.REJECTED)
MIN_MESSAGE_LENGTH = 2


def _recorded_status(value, field: str) -> Optional[int]:
    if value is None or value == '':
        return None
    try:
        status = int(value)
    except (TypeError, ValueError):
        status = None
    if status not in RECORDED_STATUSES:
        raise ValidationError(f'{field} must be one of 1..4')
    return status


def create_appeal(attendance_id, student, message: str, requested_status=None) -> Appeal:
    """File an appeal against the student's own attendance row."""
    message = (message or '').strip()
    if len(message) < MIN_MESSAGE_LENGTH:
        raise ValidationError('message must be at least 2 characters')
    requested = _recorded_status(requested_status, 'requestedStatus')

    attendance = Attendance.objects.select_related('session__course').filter(pk=attendance_id).first()
    if attendance is None:
        raise NotFound('Attendance not found')
    if attendance.student_id != student.pk:
        raise PermissionDenied('You can only appeal your own attendance')

    pending = Appeal.objects.filter(attendance=attendance, student=student, status=Appeal.Status.PENDING).exists()
    if pending:
        raise Conflict('An appeal for this attendance is already pending')

    try:
        with transaction.atomic():
            appeal = Appeal.objects.create(
                attendance=attendance, student=student, message=message, requested_status=requested,
            )
    except IntegrityError:
        raise Conflict('An appeal for this attendance is already pending')

    session = attendance.session
    course = session.course
    notification_service.notify(
        course.instructor_id,
        NotificationType.APPEAL_REQUESTED,
        'New attendance appeal',
        f'An attendance appeal was filed for {course.title} week {session.week} '
        f'round {session.round} (studentId={student.pk}).',
        f'/appeals/{appeal.pk}',
    )
    logger.info('%s', {'event': 'appeal_created', 'appeal_id': appeal.pk, 'attendance_id': attendance.pk})
    return appeal


@transaction.atomic
def resolve_appeal(appeal_id, actor, status: str, reply_text: Optional[str] = None,
                   apply_attendance_status=None) -> Dict[str, Any]:
    """Accept or reject a pending appeal.

    On ACCEPTED the reviewer's `apply_attendance_status` wins over the
    student's requested status; the attendance row is only written (and
    audited) when the resulting status actually differs.
    """
    next_status = str(status or '').upper()
    if next_status not in RESOLUTIONS:
        raise ValidationError('status must be ACCEPTED or REJECTED')

    appeal = Appeal.objects.select_for_update().filter(pk=appeal_id).first()
    if appeal is None:
        raise NotFound('Appeal not found')
    if appeal.status != Appeal.Status.PENDING:
        raise AlreadyProcessed('Appeal has already been processed')

    attendance = Attendance.objects.select_for_update().get(pk=appeal.attendance_id)
    session = attendance.session
    course = session.course
    access.ensure_course_owner(actor, course, 'Only the course instructor can resolve this appeal')

    before_appeal = audit_service.snapshot_appeal(appeal)
    before_attendance = audit_service.snapshot_attendance(attendance)
    now = timezone.now()

    attendance_changed = False
    new_status = None
    if next_status == Appeal.Status.ACCEPTED:
        new_status = _recorded_status(apply_attendance_status, 'applyAttendanceStatus')
        if new_status is None:
            new_status = appeal.requested_status
        if new_status is not None and attendance.status != new_status:
            attendance.status = new_status
            attendance.checked_at = attendance.checked_at or now
            attendance.updated_by = actor
            attendance.save(update_fields=['status', 'checked_at', 'updated_by', 'updated_at'])
            attendance_changed = True

    appeal.status = next_status
    appeal.reviewed_by = actor
    appeal.reviewed_at = now
    if reply_text is not None:
        appeal.reply_text = str(reply_text)
    appeal.save()

    accepted = next_status == Appeal.Status.ACCEPTED
    audit_service.record(
        AuditTarget.appeal(appeal),
        AuditLog.Action.ACCEPT if accepted else AuditLog.Action.REJECT,
        actor,
        before=before_appeal,
        after=audit_service.snapshot_appeal(appeal),
    )
    if attendance_changed:
        audit_service.record(
            AuditTarget.attendance(attendance), AuditLog.Action.UPDATE, actor,
            before=before_attendance, after=audit_service.snapshot_attendance(attendance),
        )

    message = (
        f'Your attendance appeal for {course.title} week {session.week} round {session.round} '
        f'was {"accepted" if accepted else "rejected"}.'
    )
    if reply_text:
        message += f'\nReviewer reply: {reply_text}'
    notification_service.notify(
        appeal.student_id,
        NotificationType.APPEAL_ACCEPTED if accepted else NotificationType.APPEAL_REJECTED,
        'Appeal accepted' if accepted else 'Appeal rejected',
        message,
        f'/appeals/{appeal.pk}',
    )

    logger.info('%s', {
        'event': 'appeal_resolved',
        'appeal_id': appeal.pk,
        'status': next_status,
        'actor_id': getattr(actor, 'pk', None),
        'attendance_changed': attendance_changed,
    })
    return {
        'appeal': appeal,
        'attendance_changed': attendance_changed,
        'new_attendance_status': new_status,
    }


def list_appeals(user, status: Optional[str] = None, course_id=None):
    qs = Appeal.objects.select_related('attendance__session', 'student').filter(
        attendance__session__course__in=access.managed_courses(user),
    )
    if status:
        status = status.upper()
        if status not in Appeal.Status.values:
            raise ValidationError('status must be PENDING|ACCEPTED|REJECTED')
        qs = qs.filter(status=status)
    if course_id:
        qs = qs.filter(attendance__session__course_id=course_id)
    return qs.order_by('-created_at')


def get_appeal_for(user, appeal_id) -> Appeal:
    appeal = Appeal.objects.select_related('attendance__session__course').filter(pk=appeal_id).first()
    if appeal is None:
        raise NotFound('Appeal not found')
    if user.role == User.Role.STUDENT:
        if appeal.student_id != user.pk:
            raise PermissionDenied('You can only view your own appeals')
        return appeal
    access.ensure_course_owner(user, appeal.attendance.session.course, 'You cannot view this appeal')
    return appeal
