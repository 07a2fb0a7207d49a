from typing import Any, Dict, Optional

from courses.models import Course
from excuses.models import ExcuseRequest
from reports.services.common import rate

STATUSES = tuple(ExcuseRequest.Status.values)


def excuse_report(course: Course, status: Optional[str] = None, week: Optional[int] = None) -> Dict[str, Any]:
    """Excuse requests of a course with counts by status and by week."""
    qs = ExcuseRequest.objects.filter(session__course=course).select_related('session', 'student')
    if status:
        qs = qs.filter(status=status)
    if week is not None:
        qs = qs.filter(session__week=week)
    qs = qs.order_by('-created_at', '-id')

    by_status = dict.fromkeys(STATUSES, 0)
    by_week: Dict[int, Dict[str, Any]] = {}
    rows = []
    for excuse in qs:
        session = excuse.session
        student = excuse.student
        by_status[excuse.status] += 1
        bucket = by_week.setdefault(session.week, {'week': session.week, **dict.fromkeys(STATUSES, 0), 'total': 0})
        bucket[excuse.status] += 1
        bucket['total'] += 1
        rows.append({
            'id': excuse.pk,
            'status': excuse.status,
            'reasonCode': excuse.reason_code,
            'reasonText': excuse.reason_text,
            'filePath': excuse.file_path,
            'createdAt': excuse.created_at,
            'updatedAt': excuse.updated_at,
            'student': {
                'id': student.pk, 'name': student.name, 'email': student.email, 'department': student.department,
            },
            'session': {
                'id': session.pk, 'week': session.week, 'round': session.round,
                'startAt': session.start_at, 'endAt': session.end_at,
            },
        })

    return {
        'courseId': course.pk,
        'courseTitle': course.title,
        'filter': {'status': status, 'week': week},
        'count': len(rows),
        'stats': {
            'byStatus': by_status,
            'approvedRate': rate(by_status[ExcuseRequest.Status.APPROVED], len(rows)),
            'byWeek': [by_week[w] for w in sorted(by_week)],
        },
        'list': rows,
    }
