import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from django.db import transaction

from audit.models import AuditLog

logger = logging.getLogger(__name__)

# Older clients and exports used the short name for excuse requests.
TARGET_TYPE_ALIASES = {
    'EXCUSE': AuditLog.TargetType.EXCUSE_REQUEST,
}


def normalize_target_type(value: Optional[str]) -> Optional[str]:
    """Return the canonical discriminator for `value`, or None if unknown/empty."""
    if not value:
        return None
    key = str(value).strip().upper()
    if key in TARGET_TYPE_ALIASES:
        return TARGET_TYPE_ALIASES[key]
    if key in AuditLog.TargetType.values:
        return key
    return None


@dataclass(frozen=True)
class AuditTarget:
    """One audited entity: the discriminator plus the row id it points at."""
    target_type: str
    target_id: int

    @classmethod
    def attendance(cls, attendance) -> 'AuditTarget':
        return cls(AuditLog.TargetType.ATTENDANCE, attendance.pk)

    @classmethod
    def excuse_request(cls, excuse) -> 'AuditTarget':
        return cls(AuditLog.TargetType.EXCUSE_REQUEST, excuse.pk)

    @classmethod
    def appeal(cls, appeal) -> 'AuditTarget':
        return cls(AuditLog.TargetType.APPEAL, appeal.pk)

    @classmethod
    def session(cls, session) -> 'AuditTarget':
        return cls(AuditLog.TargetType.SESSION, session.pk)

    @classmethod
    def course(cls, course) -> 'AuditTarget':
        return cls(AuditLog.TargetType.COURSE, course.pk)

    @classmethod
    def user(cls, user) -> 'AuditTarget':
        return cls(AuditLog.TargetType.USER, user.pk)


# Snapshots: the JSON payload stored for each target variant.

def snapshot_attendance(attendance) -> Dict[str, Any]:
    return {'status': attendance.status}


def snapshot_excuse(excuse) -> Dict[str, Any]:
    return {'status': excuse.status, 'replyText': excuse.reply_text}


def snapshot_appeal(appeal) -> Dict[str, Any]:
    return {'status': appeal.status, 'replyText': appeal.reply_text}


def snapshot_session(session) -> Dict[str, Any]:
    return {
        'status': session.status,
        'week': session.week,
        'round': session.round,
        'attendanceMethod': session.attendance_method,
    }


def snapshot_course(course) -> Dict[str, Any]:
    return {
        'title': course.title,
        'section': course.section,
        'semester': course.semester,
        'department': course.department,
        'instructorId': course.instructor_id,
    }


def snapshot_user(user) -> Dict[str, Any]:
    # never includes the password hash
    return {
        'email': user.email,
        'name': user.name,
        'role': user.role,
        'department': user.department,
    }


def record(target: AuditTarget, action: str, actor=None, before: Optional[dict] = None,
           after: Optional[dict] = None) -> Optional[AuditLog]:
    """Append an audit row for `target`.

    Runs in its own savepoint so a failed insert cannot poison the caller's
    transaction. Failures are logged and swallowed; the caller's write stands
    even when the trail is incomplete.
    """
    try:
        with transaction.atomic():
            return AuditLog.objects.create(
                target_type=target.target_type,
                target_id=target.target_id,
                action=action,
                actor=actor,
                before_value=before,
                after_value=after,
            )
    except Exception:
        logger.exception(
            'audit write failed target=%s:%s action=%s actor=%s',
            target.target_type, target.target_id, action, getattr(actor, 'pk', None),
        )
        return None
