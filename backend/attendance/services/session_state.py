"""Service layer for class session state transitions.

A session is CLOSED when created by hand. `open` reopens from PAUSED or
CLOSED, `pause` only works on an OPEN session and `close` works from OPEN or
PAUSED. Every transition locks the session row and is audited.
"""
import logging

from django.db import transaction

from attendance.models import ClassSession
from attendance_api.exceptions import InvalidTransition
from audit.models import AuditLog
from audit.services import audit_service
from audit.services.audit_service import AuditTarget

logger = logging.getLogger(__name__)

Status = ClassSession.Status


def _save_status(session: ClassSession, status: str, actor, action: str) -> ClassSession:
    before = audit_service.snapshot_session(session)
    session.status = status
    session.save(update_fields=['status', 'updated_at'])
    audit_service.record(
        AuditTarget.session(session), action, actor,
        before=before, after=audit_service.snapshot_session(session),
    )
    logger.info('%s', {
        'event': 'session_status_changed',
        'session_id': session.pk,
        'course_id': session.course_id,
        'from': before['status'],
        'to': status,
        'actor_id': getattr(actor, 'pk', None),
    })
    return session


def _lock(session: ClassSession) -> ClassSession:
    return ClassSession.objects.select_for_update().get(pk=session.pk)


@transaction.atomic
def open_session(session: ClassSession, actor) -> ClassSession:
    session = _lock(session)
    if session.status == Status.OPEN:
        raise InvalidTransition('Session is already OPEN')
    return _save_status(session, Status.OPEN, actor, AuditLog.Action.OPEN)


@transaction.atomic
def pause_session(session: ClassSession, actor) -> ClassSession:
    session = _lock(session)
    if session.status == Status.CLOSED:
        raise InvalidTransition('A CLOSED session cannot be paused')
    if session.status == Status.PAUSED:
        raise InvalidTransition('Session is already PAUSED')
    return _save_status(session, Status.PAUSED, actor, AuditLog.Action.PAUSE)


@transaction.atomic
def close_session(session: ClassSession, actor) -> ClassSession:
    session = _lock(session)
    if session.status == Status.CLOSED:
        raise InvalidTransition('Session is already CLOSED')
    return _save_status(session, Status.CLOSED, actor, AuditLog.Action.CLOSE)


TRANSITIONS = {
    'open': open_session,
    'pause': pause_session,
    'close': close_session,
}
