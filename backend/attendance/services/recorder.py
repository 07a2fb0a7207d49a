"""Attendance writes: student self check-in, roll-call batches and corrections.

All three write paths find-or-create the single (session, student) row, so
repeating a call never produces a second row. Only corrections are audited;
check-in and roll-call are high volume and leave no audit trail.
"""
import logging
from typing import Any, Dict, Iterable, List, Optional

from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError

from attendance.models import RECORDED_STATUSES, Attendance, AttendanceStatus, ClassSession
from audit.models import AuditLog
from audit.services import audit_service
from audit.services.audit_service import AuditTarget
from courses.models import Enrollment
from courses.services import access

logger = logging.getLogger(__name__)


def get_session(session_id) -> ClassSession:
    session = ClassSession.objects.filter(pk=session_id).select_related('course').first()
    if session is None:
        raise NotFound('Session not found')
    return session


def check_in(session: ClassSession, student, code: Optional[str] = None) -> Attendance:
    """Mark `student` present in an OPEN session.

    A status already set by the instructor (late, absent, ...) is kept; only
    an unknown row is promoted to present.
    """
    if session.status != ClassSession.Status.OPEN:
        raise ValidationError('Session is not open')
    if session.attendance_method == ClassSession.Method.ROLL_CALL:
        raise ValidationError('Students cannot check in to a ROLL_CALL session')
    if not access.is_enrolled(student, session.course):
        raise PermissionDenied('Only enrolled students can check in')
    if session.attendance_method == ClassSession.Method.CODE:
        if not code or code != session.code:
            raise ValidationError('Attendance code is incorrect')

    now = timezone.now()
    attendance, created = Attendance.objects.get_or_create(
        session=session,
        student=student,
        defaults={'status': AttendanceStatus.PRESENT, 'checked_at': now},
    )
    if not created:
        changed = []
        if attendance.checked_at is None:
            attendance.checked_at = now
            changed.append('checked_at')
        if attendance.status == AttendanceStatus.UNKNOWN:
            attendance.status = AttendanceStatus.PRESENT
            changed.append('status')
        if changed:
            attendance.save(update_fields=changed + ['updated_at'])

    logger.info('%s', {
        'event': 'self_check_in',
        'session_id': session.pk,
        'student_id': student.pk,
        'created': created,
        'status': attendance.status,
    })
    return attendance


def session_summary(session: ClassSession) -> Dict[str, Any]:
    rows = list(Attendance.objects.filter(session=session).order_by('student_id'))
    summary = {'present': 0, 'late': 0, 'absent': 0, 'excused': 0, 'unknown': 0}
    keys = {
        AttendanceStatus.PRESENT: 'present',
        AttendanceStatus.LATE: 'late',
        AttendanceStatus.ABSENT: 'absent',
        AttendanceStatus.EXCUSED: 'excused',
    }
    for row in rows:
        summary[keys.get(row.status, 'unknown')] += 1
    return {'count': len(rows), 'summary': summary, 'rows': rows}


def _ensure_roll_call(session: ClassSession):
    if session.attendance_method != ClassSession.Method.ROLL_CALL:
        raise ValidationError('This session does not use ROLL_CALL')


def rollcall_sheet(session: ClassSession) -> List[Dict[str, Any]]:
    """Every enrolled student with their current status (0 when no row yet)."""
    _ensure_roll_call(session)
    rows = {
        a.student_id: a for a in Attendance.objects.filter(session=session)
    }
    sheet = []
    enrollments = Enrollment.objects.filter(course_id=session.course_id).select_related('student').order_by('student_id')
    for enrollment in enrollments:
        student = enrollment.student
        row = rows.get(student.pk)
        sheet.append({
            'studentId': student.pk,
            'name': student.name or None,
            'email': student.email,
            'department': student.department,
            'status': row.status if row else AttendanceStatus.UNKNOWN,
            'checkedAt': row.checked_at if row else None,
        })
    return sheet


def _as_int(value) -> Optional[int]:
    """Integer from JSON input; booleans and fractional numbers are rejected."""
    if isinstance(value, bool):
        return None
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _parse_status(value) -> Optional[int]:
    status = _as_int(value)
    if status not in AttendanceStatus.values:
        return None
    return status


@transaction.atomic
def apply_rollcall(session: ClassSession, actor, items: Iterable[Dict[str, Any]]) -> Dict[str, int]:
    """Upsert one status per student; malformed or foreign entries are skipped."""
    _ensure_roll_call(session)
    items = list(items or [])
    if not items:
        raise ValidationError('items must be a non-empty list')

    enrolled = set(Enrollment.objects.filter(course_id=session.course_id).values_list('student_id', flat=True))
    results = {'updated': 0, 'created': 0, 'skipped': 0}
    now = timezone.now()

    for item in items:
        if not isinstance(item, dict):
            results['skipped'] += 1
            continue
        status = _parse_status(item.get('status'))
        student_id = _as_int(item.get('studentId'))
        if status is None or student_id not in enrolled:
            results['skipped'] += 1
            continue

        attendance = Attendance.objects.select_for_update().filter(session=session, student_id=student_id).first()
        if attendance is None:
            Attendance.objects.create(
                session=session, student_id=student_id, status=status, checked_at=now, updated_by=actor,
            )
            results['created'] += 1
        else:
            attendance.status = status
            attendance.updated_by = actor
            attendance.save(update_fields=['status', 'updated_by', 'updated_at'])
            results['updated'] += 1

    logger.info('%s', {
        'event': 'rollcall_applied',
        'session_id': session.pk,
        'actor_id': getattr(actor, 'pk', None),
        **results,
    })
    return results


@transaction.atomic
def correct_attendance(attendance_id, actor, status) -> Attendance:
    """Set a recorded status directly on an existing row; always audited."""
    attendance = Attendance.objects.select_for_update().filter(pk=attendance_id).first()
    if attendance is None:
        raise NotFound('Attendance not found')
    session = ClassSession.objects.select_related('course').get(pk=attendance.session_id)
    access.ensure_course_owner(actor, session.course, 'Only the course instructor can correct attendance')

    new_status = _parse_status(status)
    if new_status not in RECORDED_STATUSES:
        raise ValidationError('status must be 1..4 (present, late, absent, excused)')

    before = audit_service.snapshot_attendance(attendance)
    attendance.status = new_status
    attendance.updated_by = actor
    attendance.save(update_fields=['status', 'updated_by', 'updated_at'])
    audit_service.record(
        AuditTarget.attendance(attendance), AuditLog.Action.UPDATE, actor,
        before=before, after=audit_service.snapshot_attendance(attendance),
    )
    return attendance


def student_attendance(student, course_id=None):
    qs = Attendance.objects.filter(student=student).select_related('session').order_by('-id')
    if course_id:
        qs = qs.filter(session__course_id=course_id)
    return qs
