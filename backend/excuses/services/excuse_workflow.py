"""Excuse requests: PENDING -> APPROVED | REJECTED, terminal either way.

Approval marks the student's attendance for the session as excused (4),
creating the row when the student never checked in. Both the excuse change
and any attendance change are audited inside the resolving transaction.
"""
import logging
from typing import Any, Dict, Optional

from django.db import IntegrityError, transaction
from django.utils import timezone
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError

from attendance.models import Attendance, AttendanceStatus, ClassSession
from attendance_api.exceptions import AlreadyProcessed, Conflict
from audit.models import AuditLog
from audit.services import audit_service
from audit.services.audit_service import AuditTarget
from courses.services import access
from excuses.models import ExcuseRequest
from notifications.models import NotificationType
from notifications.services import notification_service

logger = logging.getLogger(__name__)

RESOLUTIONS = (ExcuseRequest.Status.APPROVED, ExcuseRequest.Status.REJECTED)


def create_excuse(session: ClassSession, student, reason_code: Optional[str] = None, reason_text: str = '',
                  file_path: Optional[str] = None) -> ExcuseRequest:
    if not access.is_enrolled(student, session.course):
        raise PermissionDenied('Only enrolled students can request an excuse')
    pending = ExcuseRequest.objects.filter(
        session=session, student=student, status=ExcuseRequest.Status.PENDING,
    ).exists()
    if pending:
        raise Conflict('An excuse request for this session is already pending')

    try:
        with transaction.atomic():
            excuse = ExcuseRequest.objects.create(
                session=session,
                student=student,
                reason_code=reason_code or ExcuseRequest.ReasonCode.ETC,
                reason_text=reason_text or '',
                file_path=file_path or None,
            )
    except IntegrityError:
        raise Conflict('An excuse request for this session is already pending')

    course = session.course
    notification_service.notify(
        course.instructor_id,
        NotificationType.EXCUSE_REQUESTED,
        'New excuse request',
        f'An excuse request was filed for week {session.week} round {session.round} '
        f'of {course.title} (studentId={student.pk}).',
        f'/excuses/{excuse.pk}',
    )
    logger.info('%s', {
        'event': 'excuse_created',
        'excuse_id': excuse.pk,
        'session_id': session.pk,
        'student_id': student.pk,
    })
    return excuse


@transaction.atomic
def resolve_excuse(excuse_id, actor, status: str, reply_text: Optional[str] = None) -> Dict[str, Any]:
    """Approve or reject a pending excuse; returns the excuse and whether attendance changed."""
    next_status = str(status or '').upper()
    if next_status not in RESOLUTIONS:
        raise ValidationError('status must be APPROVED or REJECTED')

    excuse = ExcuseRequest.objects.select_for_update().filter(pk=excuse_id).first()
    if excuse is None:
        raise NotFound('Excuse request not found')
    if excuse.status != ExcuseRequest.Status.PENDING:
        raise AlreadyProcessed('Excuse request has already been processed')

    session = ClassSession.objects.select_related('course').get(pk=excuse.session_id)
    course = session.course
    access.ensure_course_owner(actor, course, 'Only the course instructor can resolve this excuse')

    before = audit_service.snapshot_excuse(excuse)
    now = timezone.now()
    excuse.status = next_status
    excuse.reviewed_by = actor
    excuse.reviewed_at = now
    if reply_text is not None:
        excuse.reply_text = str(reply_text)
    excuse.save()

    attendance_changed = False
    if next_status == ExcuseRequest.Status.APPROVED:
        attendance, created = Attendance.objects.select_for_update().get_or_create(
            session=session,
            student_id=excuse.student_id,
            defaults={'status': AttendanceStatus.EXCUSED, 'checked_at': now, 'updated_by': actor},
        )
        attendance_before = {'status': None} if created else audit_service.snapshot_attendance(attendance)
        if created:
            attendance_changed = True
        elif attendance.status != AttendanceStatus.EXCUSED:
            attendance.status = AttendanceStatus.EXCUSED
            attendance.checked_at = attendance.checked_at or now
            attendance.updated_by = actor
            attendance.save(update_fields=['status', 'checked_at', 'updated_by', 'updated_at'])
            attendance_changed = True

    action = AuditLog.Action.APPROVE if next_status == ExcuseRequest.Status.APPROVED else AuditLog.Action.REJECT
    audit_service.record(
        AuditTarget.excuse_request(excuse), action, actor,
        before=before, after=audit_service.snapshot_excuse(excuse),
    )
    if attendance_changed:
        audit_service.record(
            AuditTarget.attendance(attendance), AuditLog.Action.UPDATE, actor,
            before=attendance_before, after=audit_service.snapshot_attendance(attendance),
        )

    approved = next_status == ExcuseRequest.Status.APPROVED
    message = (
        f'Your excuse for {course.title} week {session.week} round {session.round} '
        f'was {"approved" if approved else "rejected"}.'
    )
    if reply_text:
        message += f'\nReviewer reply: {reply_text}'
    notification_service.notify(
        excuse.student_id,
        NotificationType.EXCUSE_APPROVED if approved else NotificationType.EXCUSE_REJECTED,
        'Excuse approved' if approved else 'Excuse rejected',
        message,
        f'/excuses/{excuse.pk}',
    )

    logger.info('%s', {
        'event': 'excuse_resolved',
        'excuse_id': excuse.pk,
        'status': next_status,
        'actor_id': getattr(actor, 'pk', None),
        'attendance_changed': attendance_changed,
    })
    return {'excuse': excuse, 'attendance_changed': attendance_changed}


def get_excuse_for(user, excuse_id) -> ExcuseRequest:
    excuse = ExcuseRequest.objects.select_related('session__course').filter(pk=excuse_id).first()
    if excuse is None:
        raise NotFound('Excuse request not found')
    if excuse.student_id == user.pk:
        return excuse
    access.ensure_course_owner(user, excuse.session.course, 'You cannot view this excuse request')
    return excuse


def list_excuses(user, status: Optional[str] = None, course_id=None):
    """Excuses a reviewer can act on, newest first."""
    qs = ExcuseRequest.objects.select_related('session', 'student').filter(
        session__course__in=access.managed_courses(user),
    )
    if status:
        status = status.upper()
        if status not in ExcuseRequest.Status.values:
            raise ValidationError('status must be PENDING|APPROVED|REJECTED')
        qs = qs.filter(status=status)
    if course_id:
        qs = qs.filter(session__course_id=course_id)
    return qs.order_by('-created_at')
