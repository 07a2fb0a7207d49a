"""At-risk student detection.

Sessions are walked in chronological order (week, round, start time) and a
missing attendance row counts as status 0 (unknown). A student is flagged
when any configured threshold is met; only flagged students are reported,
highest risk score first.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence

from attendance.models import Attendance, AttendanceStatus, ClassSession
from courses.models import Course, Enrollment

PRESENT = AttendanceStatus.PRESENT
LATE = AttendanceStatus.LATE
ABSENT = AttendanceStatus.ABSENT
EXCUSED = AttendanceStatus.EXCUSED
UNKNOWN = AttendanceStatus.UNKNOWN


@dataclass(frozen=True)
class RiskThresholds:
    absent_min: int = 3
    late_streak_min: int = 3
    absent_streak_min: int = 2
    late_or_absent_streak_min: int = 3
    include_unknown: bool = False

    def as_filter(self) -> Dict[str, Any]:
        return {
            'absentMin': self.absent_min,
            'lateStreakMin': self.late_streak_min,
            'absentStreakMin': self.absent_streak_min,
            'lateOrAbsentStreakMin': self.late_or_absent_streak_min,
            'includeUnknown': self.include_unknown,
        }


def _max_run(flags: Sequence[bool]) -> int:
    best = run = 0
    for flag in flags:
        run = run + 1 if flag else 0
        best = max(best, run)
    return best


def _tail_run(flags: Sequence[bool]) -> int:
    run = 0
    for flag in reversed(flags):
        if not flag:
            break
        run += 1
    return run


def streaks(statuses: Sequence[int], include_unknown: bool = False) -> Dict[str, int]:
    """Longest and trailing runs of late, absent and late-or-absent statuses.

    `include_unknown` only widens the late-or-absent run.
    """
    late = [s == LATE for s in statuses]
    absent = [s == ABSENT for s in statuses]
    late_or_absent = [s in (LATE, ABSENT) or (include_unknown and s == UNKNOWN) for s in statuses]
    return {
        'maxLateStreak': _max_run(late),
        'maxAbsentStreak': _max_run(absent),
        'maxLateOrAbsentStreak': _max_run(late_or_absent),
        'currentLateStreak': _tail_run(late),
        'currentAbsentStreak': _tail_run(absent),
        'currentLateOrAbsentStreak': _tail_run(late_or_absent),
    }


def totals(statuses: Sequence[int]) -> Dict[str, int]:
    result = {'present': 0, 'late': 0, 'absent': 0, 'excused': 0, 'unknown': 0}
    for status in statuses:
        if status == PRESENT:
            result['present'] += 1
        elif status == LATE:
            result['late'] += 1
        elif status == ABSENT:
            result['absent'] += 1
        elif status == EXCUSED:
            result['excused'] += 1
        else:
            result['unknown'] += 1
    result['sessionsCount'] = len(statuses)
    return result


def risk_score(absences: int, max_late_or_absent_streak: int, lates: int) -> int:
    return absences * 10 + max_late_or_absent_streak * 3 + lates * 2


def assess(statuses: Sequence[int], thresholds: RiskThresholds) -> Dict[str, Any]:
    """Totals, streaks, triggered flags and risk score for one student."""
    counts = totals(statuses)
    streak = streaks(statuses, thresholds.include_unknown)
    flags: List[str] = []
    if counts['absent'] >= thresholds.absent_min:
        flags.append(f'absences>={thresholds.absent_min}')
    if streak['maxLateStreak'] >= thresholds.late_streak_min:
        flags.append(f'lateStreak>={thresholds.late_streak_min}')
    if streak['maxAbsentStreak'] >= thresholds.absent_streak_min:
        flags.append(f'absentStreak>={thresholds.absent_streak_min}')
    if streak['maxLateOrAbsentStreak'] >= thresholds.late_or_absent_streak_min:
        flags.append(f'lateOrAbsentStreak>={thresholds.late_or_absent_streak_min}')
    return {
        'totals': counts,
        'streak': streak,
        'flags': flags,
        'riskScore': risk_score(counts['absent'], streak['maxLateOrAbsentStreak'], counts['late']),
    }


def rank_flagged(rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    flagged = [row for row in rows if row['flags']]
    return sorted(flagged, key=lambda row: (-row['riskScore'], -row['totals']['absent']))


def course_risk(course: Course, thresholds: RiskThresholds) -> Dict[str, Any]:
    sessions = list(ClassSession.objects.filter(course=course).order_by('week', 'round', 'start_at', 'id'))
    result: Dict[str, Any] = {
        'courseId': course.pk,
        'courseTitle': course.title,
        'filter': thresholds.as_filter(),
        'sessionsCount': len(sessions),
    }
    if not sessions:
        result.update({'message': 'No sessions yet; risk cannot be computed', 'count': 0, 'list': []})
        return result

    enrollments = list(Enrollment.objects.filter(course=course).select_related('student').order_by('student_id'))
    statuses: Dict[int, Dict[int, int]] = {e.student_id: {} for e in enrollments}
    rows = Attendance.objects.filter(session__in=sessions).values_list('student_id', 'session_id', 'status')
    for student_id, session_id, status in rows:
        if student_id in statuses:
            statuses[student_id][session_id] = status

    assessed = []
    for enrollment in enrollments:
        student = enrollment.student
        per_session = statuses[student.pk]
        sequence = [per_session.get(s.pk, UNKNOWN) for s in sessions]
        entry = {
            'student': {
                'id': student.pk,
                'name': student.name,
                'email': student.email,
                'department': student.department,
            },
        }
        entry.update(assess(sequence, thresholds))
        assessed.append(entry)

    flagged = rank_flagged(assessed)
    result.update({
        'enrolledCount': len(enrollments),
        'sessionsMeta': [
            {'id': s.pk, 'week': s.week, 'round': s.round, 'startAt': s.start_at, 'endAt': s.end_at}
            for s in sessions
        ],
        'count': len(flagged),
        'list': flagged,
    })
    return result

