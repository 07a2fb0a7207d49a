"""Course-scoped view of the audit trail.

Audit rows carry no course column, so each target type is attributed to a
course through its entity: attendance and excuse requests via their
session, appeals via attendance then session, sessions directly. COURSE
rows belong to the course they name; USER rows belong to no course.
"""
from collections import Counter
from datetime import date, datetime, time
from typing import Any, Dict, Optional

from django.db.models import Q
from django.utils import timezone

from attendance.models import Attendance, ClassSession
from audit.models import AuditLog
from courses.models import Course
from excuses.models import Appeal, ExcuseRequest

DEFAULT_LIMIT = 200
MAX_LIMIT = 500

TargetType = AuditLog.TargetType


def _course_scope(course: Course) -> Q:
    sessions = ClassSession.objects.filter(course=course).values('id')
    attendance = Attendance.objects.filter(session__course=course).values('id')
    excuses = ExcuseRequest.objects.filter(session__course=course).values('id')
    appeals = Appeal.objects.filter(attendance__session__course=course).values('id')
    return (
        Q(target_type=TargetType.SESSION, target_id__in=sessions)
        | Q(target_type=TargetType.ATTENDANCE, target_id__in=attendance)
        | Q(target_type=TargetType.EXCUSE_REQUEST, target_id__in=excuses)
        | Q(target_type=TargetType.APPEAL, target_id__in=appeals)
        | Q(target_type=TargetType.COURSE, target_id=course.pk)
    )


def _session_lookup(logs) -> Dict[tuple, Optional[ClassSession]]:
    ids = {t: set() for t in TargetType.values}
    for log in logs:
        ids[log.target_type].add(log.target_id)

    lookup: Dict[tuple, Optional[ClassSession]] = {}
    for s in ClassSession.objects.filter(pk__in=ids[TargetType.SESSION]):
        lookup[(TargetType.SESSION, s.pk)] = s
    for a in Attendance.objects.filter(pk__in=ids[TargetType.ATTENDANCE]).select_related('session'):
        lookup[(TargetType.ATTENDANCE, a.pk)] = a.session
    for e in ExcuseRequest.objects.filter(pk__in=ids[TargetType.EXCUSE_REQUEST]).select_related('session'):
        lookup[(TargetType.EXCUSE_REQUEST, e.pk)] = e.session
    for ap in Appeal.objects.filter(pk__in=ids[TargetType.APPEAL]).select_related('attendance__session'):
        lookup[(TargetType.APPEAL, ap.pk)] = ap.attendance.session
    return lookup


def _day_start(day: date) -> datetime:
    return timezone.make_aware(datetime.combine(day, time.min))


def _day_end(day: date) -> datetime:
    return timezone.make_aware(datetime.combine(day, time.max))


def audit_report(course: Course, target_type: Optional[str] = None, action: Optional[str] = None,
                 date_from: Optional[date] = None, date_to: Optional[date] = None,
                 limit: int = DEFAULT_LIMIT) -> Dict[str, Any]:
    limit = min(MAX_LIMIT, max(1, limit))
    qs = AuditLog.objects.filter(_course_scope(course)).select_related('actor')
    if target_type:
        qs = qs.filter(target_type=target_type)
    if action:
        qs = qs.filter(action=action)
    if date_from:
        qs = qs.filter(created_at__gte=_day_start(date_from))
    if date_to:
        qs = qs.filter(created_at__lte=_day_end(date_to))
    logs = list(qs.order_by('-created_at', '-id')[:limit])

    sessions = _session_lookup(logs)
    by_target_type: Counter = Counter()
    by_action: Counter = Counter()
    rows = []
    for log in logs:
        by_target_type[log.target_type] += 1
        by_action[log.action] += 1
        session = sessions.get((log.target_type, log.target_id))
        actor = log.actor
        rows.append({
            'id': log.pk,
            'createdAt': log.created_at,
            'targetType': log.target_type,
            'targetId': log.target_id,
            'action': log.action,
            'courseId': course.pk,
            'session': {'id': session.pk, 'week': session.week, 'round': session.round} if session else None,
            'actor': {
                'id': actor.pk, 'name': actor.name, 'email': actor.email,
                'role': actor.role, 'department': actor.department,
            } if actor else None,
            'before': log.before_value,
            'after': log.after_value,
        })

    return {
        'courseId': course.pk,
        'courseTitle': course.title,
        'filter': {
            'targetType': target_type,
            'action': action,
            'from': date_from.isoformat() if date_from else None,
            'to': date_to.isoformat() if date_to else None,
            'limit': limit,
        },
        'count': len(rows),
        'stats': {'byTargetType': dict(by_target_type), 'byAction': dict(by_action)},
        'list': rows,
    }
