from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, Optional

from attendance.models import Attendance, AttendanceStatus, ClassSession
from courses.models import Course, Enrollment
from courses.services import policy as policy_service
from courses.services.policy import PolicyValues

TWO_PLACES = Decimal('0.01')


@dataclass
class StatusCounts:
    present: int = 0
    late: int = 0
    absent: int = 0
    excused: int = 0
    unknown: int = 0


def count_statuses(statuses: Iterable[Optional[int]], missing_as_absent: bool) -> StatusCounts:
    """Tally one student's statuses over all sessions of a course.

    `None` (no attendance row) and 0 (unknown) are folded into `absent` when
    the policy says so, otherwise into `unknown`.
    """
    counts = StatusCounts()
    for status in statuses:
        if status == AttendanceStatus.PRESENT:
            counts.present += 1
        elif status == AttendanceStatus.LATE:
            counts.late += 1
        elif status == AttendanceStatus.ABSENT:
            counts.absent += 1
        elif status == AttendanceStatus.EXCUSED:
            counts.excused += 1
        elif missing_as_absent:
            counts.absent += 1
        else:
            counts.unknown += 1
    return counts


def score_counts(counts: StatusCounts, total_sessions: int, policy: PolicyValues) -> Dict[str, Any]:
    late_to_absent = max(1, int(policy.late_to_absent))
    converted = counts.late // late_to_absent
    late_remain = counts.late % late_to_absent
    absent_final = counts.absent + converted

    raw = (
        counts.present * policy.w_present
        + late_remain * policy.w_late
        + absent_final * policy.w_absent
        + counts.excused * policy.w_excused
    )
    if total_sessions > 0:
        score = (Decimal(raw) / total_sessions * policy.max_score).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    else:
        score = Decimal('0.00')

    return {
        'totalSessions': total_sessions,
        'present': counts.present,
        'lateOriginal': counts.late,
        'lateRemain': late_remain,
        'absentOriginal': counts.absent,
        'absentConvertedFromLate': converted,
        'absentFinal': absent_final,
        'excused': counts.excused,
        'unknown': counts.unknown,
        'raw': float(raw),
        'score': float(score),
    }


def compute_course_scores(course: Course, policy: Optional[PolicyValues] = None) -> Dict[str, Any]:
    """Score every enrolled student of `course`, best score first."""
    if policy is None:
        policy = policy_service.resolve_policy(course)

    session_ids = list(ClassSession.objects.filter(course=course).values_list('id', flat=True))
    total_sessions = len(session_ids)

    status_map = {
        (student_id, session_id): status
        for student_id, session_id, status in Attendance.objects.filter(session_id__in=session_ids)
        .values_list('student_id', 'session_id', 'status')
    }

    rows: List[Dict[str, Any]] = []
    enrollments = Enrollment.objects.filter(course=course).select_related('student').order_by('student_id')
    for enrollment in enrollments:
        student = enrollment.student
        statuses = [status_map.get((student.pk, sid)) for sid in session_ids]
        counts = count_statuses(statuses, policy.missing_as_absent)
        row = {
            'studentId': student.pk,
            'name': student.name or None,
            'email': student.email or None,
            'department': student.department,
        }
        row.update(score_counts(counts, total_sessions, policy))
        rows.append(row)

    rows.sort(key=lambda r: r['score'], reverse=True)

    return {
        'courseId': course.pk,
        'policy': policy.as_dict(course.pk),
        'totalSessions': total_sessions,
        'count': len(rows),
        'rows': rows,
    }
