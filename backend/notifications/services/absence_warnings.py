"""Absence-warning batch job.

For every selected course each enrolled student's absence-equivalent count
(absences plus late arrivals converted by the course policy) is compared to
the policy thresholds. Students at or above a threshold get one notification
per level; a notification that already exists for the same
(user, type, title, linkUrl) is never created twice, so the job can be rerun.
"""
import logging
from collections import Counter
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from django.conf import settings
from django.db import transaction

from accounts.models import User
from attendance.models import Attendance, AttendanceStatus
from courses.models import Course, Enrollment
from courses.services import policy as policy_service
from courses.services.policy import PolicyValues
from notifications.models import Notification, NotificationType

logger = logging.getLogger(__name__)

LEVEL_WARN = 'WARN'
LEVEL_DANGER = 'DANGER'
LEVEL_FAIL = 'FAIL'

LEVEL_TYPES = {
    LEVEL_WARN: NotificationType.ABSENCE_WARN,
    LEVEL_DANGER: NotificationType.ABSENCE_DANGER,
    LEVEL_FAIL: NotificationType.ABSENCE_FAIL,
}

LEVEL_TITLES = {
    LEVEL_WARN: 'Absence warning',
    LEVEL_DANGER: 'Absence danger',
    LEVEL_FAIL: 'Absence limit reached',
}


@dataclass(frozen=True)
class Thresholds:
    warn_absences: int
    danger_absences: int
    fail_absences: int
    late_to_absent: int

    @classmethod
    def from_policy(cls, policy: PolicyValues) -> 'Thresholds':
        return cls(
            warn_absences=policy.warn_absences,
            danger_absences=policy.danger_absences,
            fail_absences=policy.fail_absences,
            late_to_absent=max(1, int(policy.late_to_absent)),
        )

    def as_dict(self) -> Dict[str, int]:
        return {
            'warnAbsences': self.warn_absences,
            'dangerAbsences': self.danger_absences,
            'failAbsences': self.fail_absences,
            'lateToAbsent': self.late_to_absent,
        }


def absence_equivalent(absences: int, lates: int, late_to_absent: int) -> int:
    return absences + lates // max(1, late_to_absent)


def decide_level(abs_eq: int, thresholds: Thresholds) -> Optional[str]:
    """Highest threshold met wins."""
    if abs_eq >= thresholds.fail_absences:
        return LEVEL_FAIL
    if abs_eq >= thresholds.danger_absences:
        return LEVEL_DANGER
    if abs_eq >= thresholds.warn_absences:
        return LEVEL_WARN
    return None


def select_courses(actor, course_id=None, semester: Optional[str] = None, department: Optional[str] = None):
    qs = Course.objects.all()
    if course_id:
        qs = qs.filter(pk=course_id)
    else:
        qs = qs.filter(
            semester=semester or settings.DEFAULT_SEMESTER,
            department=department or settings.DEFAULT_DEPARTMENT,
        )
    if actor is not None and actor.role == User.Role.INSTRUCTOR:
        qs = qs.filter(instructor=actor)
    return qs.order_by('id')


def _create_if_missing(user_id: int, type: str, title: str, message: str, link_url: str) -> bool:
    exists = Notification.objects.filter(user_id=user_id, type=type, title=title, link_url=link_url).exists()
    if exists:
        return False
    Notification.objects.create(user_id=user_id, type=type, title=title, message=message, link_url=link_url)
    return True


def _check_course(course: Course, dry_run: bool) -> Dict[str, Any]:
    thresholds = Thresholds.from_policy(policy_service.resolve_policy(course))
    student_ids = list(Enrollment.objects.filter(course=course).values_list('student_id', flat=True))
    summary = {
        'courseId': course.pk,
        'courseTitle': course.title,
        'students': len(student_ids),
        'created': 0,
        'skipped': 0,
        'thresholds': thresholds.as_dict(),
    }
    if not student_ids:
        return summary

    absences: Counter = Counter()
    lates: Counter = Counter()
    rows = Attendance.objects.filter(session__course=course, student_id__in=student_ids).values_list('student_id', 'status')
    for student_id, status in rows:
        if status == AttendanceStatus.ABSENT:
            absences[student_id] += 1
        elif status == AttendanceStatus.LATE:
            lates[student_id] += 1

    link_url = f'/courses/{course.pk}'
    for student_id in student_ids:
        abs_eq = absence_equivalent(absences[student_id], lates[student_id], thresholds.late_to_absent)
        level = decide_level(abs_eq, thresholds)
        if level is None:
            continue
        if dry_run:
            summary['skipped'] += 1
            continue
        message = (
            f'{course.title} ({course.semester}, {course.department})\n'
            f'Absences (equivalent): {abs_eq} (absent {absences[student_id]} / late {lates[student_id]}, '
            f'{thresholds.late_to_absent} lates = 1 absence)\n'
            f'Level: {level}\n'
            'Please contact your instructor.'
        )
        if _create_if_missing(student_id, LEVEL_TYPES[level], LEVEL_TITLES[level], message, link_url):
            summary['created'] += 1
        else:
            summary['skipped'] += 1
    return summary


def run_absence_warnings(actor=None, course_id=None, semester: Optional[str] = None,
                         department: Optional[str] = None, dry_run: bool = False) -> Dict[str, Any]:
    """Run the job over the selected courses.

    `actor=None` means a trusted caller (the management command) and skips
    the instructor ownership filter. In dry-run mode the whole run executes
    in a transaction that is rolled back at the end.
    """
    with transaction.atomic():
        courses = list(select_courses(actor, course_id, semester, department))
        if not courses:
            return {'ok': True, 'message': 'No matching courses', 'created': 0, 'checkedCourses': 0}

        per_course: List[Dict[str, Any]] = [_check_course(course, dry_run) for course in courses]
        result = {
            'ok': True,
            'checkedCourses': len(courses),
            'checkedStudents': sum(c['students'] for c in per_course),
            'created': 0 if dry_run else sum(c['created'] for c in per_course),
            'skipped': sum(c['skipped'] for c in per_course),
            'perCourseSummary': per_course,
        }
        if dry_run:
            result['dryRun'] = True
            transaction.set_rollback(True)

    logger.info('%s', {
        'event': 'absence_warnings_run',
        'actor_id': getattr(actor, 'pk', None),
        'dry_run': dry_run,
        'courses': result['checkedCourses'],
        'created': result['created'],
        'skipped': result['skipped'],
    })
    return result
