"""Per-session and per-week attendance counts for one course.

Every enrolled student is one slot per session; a student without an
attendance row (or with status 0) counts as unknown. "Attended" means
present, late or excused.
"""
from collections import OrderedDict
from typing import Any, Dict, Optional

from attendance.models import Attendance, AttendanceStatus, ClassSession
from courses.models import Course, Enrollment
from reports.services.common import rate

COUNT_KEYS = ('present', 'late', 'absent', 'excused', 'unknown')

_STATUS_KEYS = {
    AttendanceStatus.PRESENT: 'present',
    AttendanceStatus.LATE: 'late',
    AttendanceStatus.ABSENT: 'absent',
    AttendanceStatus.EXCUSED: 'excused',
}


def _rates(counts: Dict[str, int], slots: int) -> Dict[str, float]:
    attended = counts['present'] + counts['late'] + counts['excused']
    return {
        'presentRate': rate(counts['present'], slots),
        'attendedRate': rate(attended, slots),
        'absenceRate': rate(counts['absent'], slots),
        'unknownRate': rate(counts['unknown'], slots),
    }


def attendance_report(course: Course, week: Optional[int] = None) -> Dict[str, Any]:
    enrolled = Enrollment.objects.filter(course=course).count()
    sessions = ClassSession.objects.filter(course=course)
    if week is not None:
        sessions = sessions.filter(week=week)
    sessions = list(sessions.order_by('week', 'round'))

    per_session = {s.pk: dict.fromkeys(COUNT_KEYS, 0) for s in sessions}
    recorded = {s.pk: 0 for s in sessions}
    rows = Attendance.objects.filter(session__in=sessions).values_list('session_id', 'status')
    for session_id, status in rows:
        recorded[session_id] += 1
        per_session[session_id][_STATUS_KEYS.get(status, 'unknown')] += 1

    session_rows = []
    weeks: Dict[int, Dict[str, Any]] = OrderedDict()
    for session in sessions:
        counts = per_session[session.pk]
        counts['unknown'] += max(0, enrolled - recorded[session.pk])
        session_rows.append({
            'sessionId': session.pk,
            'week': session.week,
            'round': session.round,
            'startAt': session.start_at,
            'endAt': session.end_at,
            'status': session.status,
            'attendanceMethod': session.attendance_method,
            'totalSlots': enrolled,
            **counts,
            'rates': _rates(counts, enrolled),
        })

        bucket = weeks.setdefault(session.week, {
            'week': session.week, 'sessionCount': 0, 'totalSlots': 0, **dict.fromkeys(COUNT_KEYS, 0),
        })
        bucket['sessionCount'] += 1
        bucket['totalSlots'] += enrolled
        for key in COUNT_KEYS:
            bucket[key] += counts[key]

    by_week = []
    for bucket in weeks.values():
        by_week.append({**bucket, 'rates': _rates(bucket, bucket['totalSlots'])})

    return {
        'courseId': course.pk,
        'courseTitle': course.title,
        'enrolledCount': enrolled,
        'filter': {'week': week},
        'sessionsCount': len(sessions),
        'byWeek': by_week,
        'sessions': session_rows,
    }
