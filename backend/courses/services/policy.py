import logging
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Any, Dict, Optional, Tuple

from django.db import transaction
from rest_framework.exceptions import ValidationError

from courses.models import AttendancePolicy, Course

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PolicyValues:
    """The effective attendance policy of a course.

    Built either from a stored AttendancePolicy row or, when the course has
    none, from the documented defaults below.
    """
    late_to_absent: int = 3
    w_present: Decimal = Decimal('1.00')
    w_late: Decimal = Decimal('0.50')
    w_absent: Decimal = Decimal('0.00')
    w_excused: Decimal = Decimal('1.00')
    max_score: int = 20
    missing_as_absent: bool = True
    warn_absences: int = 2
    danger_absences: int = 4
    fail_absences: int = 6
    is_default: bool = True

    @classmethod
    def from_model(cls, row: AttendancePolicy) -> 'PolicyValues':
        return cls(
            late_to_absent=row.late_to_absent,
            w_present=Decimal(row.w_present),
            w_late=Decimal(row.w_late),
            w_absent=Decimal(row.w_absent),
            w_excused=Decimal(row.w_excused),
            max_score=row.max_score,
            missing_as_absent=row.missing_as_absent,
            warn_absences=row.warn_absences,
            danger_absences=row.danger_absences,
            fail_absences=row.fail_absences,
            is_default=False,
        )

    def as_dict(self, course_id: int) -> Dict[str, Any]:
        return {
            'courseId': course_id,
            'lateToAbsent': self.late_to_absent,
            'wPresent': float(self.w_present),
            'wLate': float(self.w_late),
            'wAbsent': float(self.w_absent),
            'wExcused': float(self.w_excused),
            'maxScore': self.max_score,
            'missingAsAbsent': self.missing_as_absent,
            'warnAbsences': self.warn_absences,
            'dangerAbsences': self.danger_absences,
            'failAbsences': self.fail_absences,
            'isDefault': self.is_default,
        }


DEFAULT_POLICY = PolicyValues()

POLICY_FIELDS = (
    'late_to_absent', 'w_present', 'w_late', 'w_absent', 'w_excused',
    'max_score', 'missing_as_absent', 'warn_absences', 'danger_absences', 'fail_absences',
)


def resolve_policy(course: Course) -> PolicyValues:
    row = AttendancePolicy.objects.filter(course=course).first()
    if row is None:
        return DEFAULT_POLICY
    return PolicyValues.from_model(row)


def validate_policy(values: PolicyValues):
    if values.late_to_absent < 1:
        raise ValidationError('lateToAbsent must be at least 1')
    if values.max_score < 1:
        raise ValidationError('maxScore must be at least 1')
    for name in ('w_present', 'w_late', 'w_absent', 'w_excused'):
        if getattr(values, name) < 0:
            raise ValidationError(f'{name} must not be negative')
    if not (values.warn_absences < values.danger_absences < values.fail_absences):
        raise ValidationError('Thresholds must satisfy warnAbsences < dangerAbsences < failAbsences')


@transaction.atomic
def upsert_policy(course: Course, actor, changes: Dict[str, Any]) -> Tuple[AttendancePolicy, bool]:
    """Create or patch the policy of `course` with the snake_case `changes`.

    Fields absent from `changes` keep their stored (or default) value. The
    merged result is validated as a whole before anything is written.
    """
    row: Optional[AttendancePolicy] = AttendancePolicy.objects.select_for_update().filter(course=course).first()
    current = PolicyValues.from_model(row) if row is not None else DEFAULT_POLICY
    merged = replace(current, **{k: v for k, v in changes.items() if k in POLICY_FIELDS})
    validate_policy(merged)

    created = row is None
    if created:
        row = AttendancePolicy(course=course)
    for name in POLICY_FIELDS:
        setattr(row, name, getattr(merged, name))
    row.save()

    logger.info('%s', {
        'event': 'attendance_policy_saved',
        'course_id': course.pk,
        'actor_id': getattr(actor, 'pk', None),
        'created': created,
        'changed': sorted(changes.keys()),
    })
    return row, created
