"""Create class sessions, one at a time or as a whole semester grid.

`generate_sessions` lays a (week, round) grid over a base date: every meeting
day of every week is crossed with every time slot, the slots of one week are
sorted chronologically and numbered 1..N. Holidays leave a hole in the grid
that makeup sessions fill first. The whole batch runs in one transaction.
"""
import logging
import secrets
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Any, Dict, Iterable, List, Optional, Set

from django.db import IntegrityError, transaction
from django.db.models import Max
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from attendance.models import ClassSession
from attendance_api.exceptions import Conflict
from audit.services import audit_service
from courses.models import Course

logger = logging.getLogger(__name__)

DAY_NAMES = {'SUN': 0, 'MON': 1, 'TUE': 2, 'WED': 3, 'THU': 4, 'FRI': 5, 'SAT': 6}

MODE_SKIP_EXISTING = 'skipExisting'
MODE_ERROR_ON_CONFLICT = 'errorOnConflict'
MODE_OVERWRITE = 'overwrite'
MODES = (MODE_SKIP_EXISTING, MODE_ERROR_ON_CONFLICT, MODE_OVERWRITE)

SAMPLE_SIZE = 30


def generate_code() -> str:
    """Random 6 digit access code for CODE sessions."""
    return str(100000 + secrets.randbelow(900000))


def code_for(method: str) -> Optional[str]:
    return generate_code() if method == ClassSession.Method.CODE else None


def day_of_week(day: date) -> int:
    """0=SUN .. 6=SAT, the numbering clients send in ``meetingDays``."""
    return (day.weekday() + 1) % 7


def parse_meeting_days(values: Iterable[Any]) -> List[int]:
    """Accept 0..6 or SUN..SAT; return the sorted distinct day numbers."""
    days: Set[int] = set()
    for value in values:
        if isinstance(value, bool):
            raise ValidationError('meetingDays must look like ["MON","WED"] or [1,3]')
        if isinstance(value, int):
            if not 0 <= value <= 6:
                raise ValidationError('meetingDays must look like ["MON","WED"] or [1,3]')
            days.add(value)
            continue
        key = str(value).strip().upper()
        if key not in DAY_NAMES:
            raise ValidationError('meetingDays must look like ["MON","WED"] or [1,3]')
        days.add(DAY_NAMES[key])
    if not days:
        raise ValidationError('meetingDays must not be empty')
    return sorted(days)


def _at(day: date, start: time) -> datetime:
    return timezone.make_aware(datetime.combine(day, start))


@dataclass(frozen=True)
class TimeSlot:
    start: time
    duration_minutes: int


@dataclass(frozen=True)
class Makeup:
    day: date
    start: time
    duration_minutes: Optional[int] = None
    week: Optional[int] = None
    round: Optional[int] = None
    attendance_method: Optional[str] = None
    room: Optional[str] = None
    status: Optional[str] = None


@dataclass
class GenerationPlan:
    base_date: date
    weeks: int
    meeting_days: List[int]
    times: List[TimeSlot]
    room: Optional[str] = None
    attendance_method: str = ClassSession.Method.CODE
    default_status: str = ClassSession.Status.CLOSED
    holidays: Set[date] = field(default_factory=set)
    makeups: List[Makeup] = field(default_factory=list)
    mode: str = MODE_SKIP_EXISTING


def create_session(course: Course, actor, data: Dict[str, Any]) -> ClassSession:
    """Manual single session create; starts CLOSED."""
    week = data['week']
    round_no = data.get('round') or 1
    method = data.get('attendance_method') or ClassSession.Method.ELECTRONIC
    if ClassSession.objects.filter(course=course, week=week, round=round_no).exists():
        raise Conflict(f'Session already exists for week={week}, round={round_no}')
    try:
        with transaction.atomic():
            session = ClassSession.objects.create(
                course=course,
                week=week,
                round=round_no,
                start_at=data.get('start_at'),
                end_at=data.get('end_at'),
                room=data.get('room'),
                attendance_method=method,
                status=ClassSession.Status.CLOSED,
                code=code_for(method),
            )
    except IntegrityError:
        raise Conflict(f'Session already exists for week={week}, round={round_no}')
    logger.info('%s', {
        'event': 'session_created',
        'session_id': session.pk,
        'course_id': course.pk,
        'week': week,
        'round': round_no,
        'actor_id': getattr(actor, 'pk', None),
    })
    return session


class _Batch:
    """Conflict handling and counters shared by the regular and makeup passes."""

    def __init__(self, course: Course, mode: str):
        self.course = course
        self.mode = mode
        self.created = 0
        self.updated = 0
        self.skipped = 0

    def place(self, week: int, round_no: int, fields: Dict[str, Any], label: str):
        """Create or reconcile the session at (week, round); return (action, session, before)."""
        existing = ClassSession.objects.select_for_update().filter(
            course=self.course, week=week, round=round_no,
        ).first()
        if existing is None:
            session = ClassSession.objects.create(course=self.course, week=week, round=round_no, **fields)
            self.created += 1
            return 'created', session, None
        if self.mode == MODE_ERROR_ON_CONFLICT:
            raise Conflict(f'{label} already exists: week={week}, round={round_no}')
        if self.mode == MODE_OVERWRITE:
            before = audit_service.snapshot_session(existing)
            for name, value in fields.items():
                setattr(existing, name, value)
            existing.save()
            self.updated += 1
            return 'updated', existing, before
        self.skipped += 1
        return 'skipped', existing, None


def _session_fields(start_at: datetime, minutes: int, room, method: str, status: str) -> Dict[str, Any]:
    return {
        'start_at': start_at,
        'end_at': start_at + timedelta(minutes=minutes),
        'room': room,
        'attendance_method': method,
        'status': status,
        'code': code_for(method),
    }


@transaction.atomic
def generate_sessions(course: Course, actor, plan: GenerationPlan) -> Dict[str, Any]:
    if plan.mode not in MODES:
        raise ValidationError('mode must be one of skipExisting|errorOnConflict|overwrite')
    if not plan.times:
        raise ValidationError('times needs at least one entry')
    for makeup in plan.makeups:
        # the derived week would be 0 or negative
        if not makeup.week and makeup.day < plan.base_date:
            raise ValidationError('makeups date must not be before baseDate')

    batch = _Batch(course, plan.mode)
    results: List[Dict[str, Any]] = []
    skipped_holidays: List[Dict[str, Any]] = []
    missing_by_week: Dict[int, Set[int]] = {}
    base_dow = day_of_week(plan.base_date)

    for w in range(plan.weeks):
        week = w + 1
        slots = []
        for dow in plan.meeting_days:
            day = plan.base_date + timedelta(days=w * 7 + (dow - base_dow + 7) % 7)
            for slot in plan.times:
                slots.append((_at(day, slot.start), slot.duration_minutes, day))
        slots.sort(key=lambda s: s[0])

        for index, (start_at, minutes, day) in enumerate(slots):
            round_no = index + 1
            if day in plan.holidays:
                skipped_holidays.append({'week': week, 'round': round_no, 'date': day.isoformat()})
                missing_by_week.setdefault(week, set()).add(round_no)
                continue

            fields = _session_fields(start_at, minutes, plan.room, plan.attendance_method, plan.default_status)
            action, session, before = batch.place(week, round_no, fields, 'Session')
            entry = {'action': action, 'sessionId': session.pk, 'week': week, 'round': round_no}
            if action == 'updated':
                entry['before'] = before
                entry['after'] = audit_service.snapshot_session(session)
            results.append(entry)

    applied_makeups: List[Dict[str, Any]] = []
    for makeup in plan.makeups:
        minutes = makeup.duration_minutes or plan.times[0].duration_minutes
        start_at = _at(makeup.day, makeup.start)

        week = makeup.week
        if not week:
            week = (makeup.day - plan.base_date).days // 7 + 1

        round_no = makeup.round
        if not round_no:
            missing = missing_by_week.get(week)
            if missing:
                round_no = min(missing)
                missing.discard(round_no)
            else:
                top = ClassSession.objects.filter(course=course, week=week).aggregate(top=Max('round'))['top']
                round_no = (top or 0) + 1

        method = makeup.attendance_method or plan.attendance_method
        room = makeup.room if makeup.room is not None else plan.room
        fields = _session_fields(start_at, minutes, room, method, makeup.status or plan.default_status)
        action, session, _ = batch.place(week, round_no, fields, 'Makeup session')
        applied_makeups.append({
            'action': f'{action}_makeup', 'week': week, 'round': round_no, 'sessionId': session.pk,
        })

    missing_summary = {
        str(week): sorted(rounds) for week, rounds in sorted(missing_by_week.items()) if rounds
    }

    logger.info('%s', {
        'event': 'sessions_generated',
        'course_id': course.pk,
        'actor_id': getattr(actor, 'pk', None),
        'mode': plan.mode,
        'created': batch.created,
        'updated': batch.updated,
        'skipped': batch.skipped,
        'holidays_skipped': len(skipped_holidays),
    })

    return {
        'message': 'sessions generated',
        'courseId': course.pk,
        'created': batch.created,
        'updated': batch.updated,
        'skipped': batch.skipped,
        'skippedHolidays': skipped_holidays,
        'appliedMakeups': applied_makeups,
        'missingSummary': missing_summary,
        'sample': results[:SAMPLE_SIZE],
    }
