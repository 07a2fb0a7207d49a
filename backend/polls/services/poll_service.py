"""Free-time polls: an instructor offers candidate slots, enrolled students vote.

One vote per (poll, student); voting again moves the vote to the new option.
Votes are only accepted while the poll is OPEN and before its deadline.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError

from attendance_api.exceptions import InvalidTransition
from courses.models import Course
from courses.services import access
from notifications.models import NotificationType
from notifications.services import notification_service
from polls.models import FreeTimePoll, FreeTimePollOption, FreeTimePollVote

logger = logging.getLogger(__name__)

MIN_OPTIONS = 2


@dataclass
class OptionInput:
    label: str
    start_at: Optional[datetime] = None
    end_at: Optional[datetime] = None


def create_poll(course: Course, actor, title: str, options: List[OptionInput], description: str = '',
                deadline_at: Optional[datetime] = None) -> FreeTimePoll:
    access.ensure_course_owner(actor, course, 'Only the course instructor can create polls')
    title = (title or '').strip()
    if not title:
        raise ValidationError('title is required')
    if len(options) < MIN_OPTIONS:
        raise ValidationError('At least 2 options are required')
    labels = [(o.label or '').strip() for o in options]
    if not all(labels):
        raise ValidationError('Every option needs a label')

    with transaction.atomic():
        poll = FreeTimePoll.objects.create(
            course=course, creator=actor, title=title, description=description or '',
            status=FreeTimePoll.Status.OPEN, deadline_at=deadline_at,
        )
        FreeTimePollOption.objects.bulk_create([
            FreeTimePollOption(poll=poll, label=label, start_at=o.start_at, end_at=o.end_at)
            for label, o in zip(labels, options)
        ])

    notification_service.notify_course_students(
        course, NotificationType.POLL_OPENED, 'A free-time poll is open',
        f'{course.title}: {title}', f'/free-time-polls/{poll.pk}',
    )
    logger.info('%s', {'event': 'poll_created', 'poll_id': poll.pk, 'course_id': course.pk, 'options': len(labels)})
    return poll


def get_poll(poll_id) -> FreeTimePoll:
    poll = FreeTimePoll.objects.select_related('course').filter(pk=poll_id).first()
    if poll is None:
        raise NotFound('Poll not found')
    return poll


def get_poll_for(user, poll_id) -> FreeTimePoll:
    poll = get_poll(poll_id)
    access.ensure_course_member(user, poll.course, 'You cannot view this poll')
    return poll


def list_course_polls(user, course: Course):
    access.ensure_course_member(user, course, 'You cannot view polls of this course')
    return FreeTimePoll.objects.filter(course=course).order_by('-created_at')


@transaction.atomic
def vote(poll_id, student, option_id) -> FreeTimePollVote:
    poll = FreeTimePoll.objects.select_for_update().filter(pk=poll_id).first()
    if poll is None:
        raise NotFound('Poll not found')
    if poll.status != FreeTimePoll.Status.OPEN:
        raise ValidationError('This poll is closed')
    if poll.deadline_at and timezone.now() > poll.deadline_at:
        raise ValidationError('The poll deadline has passed')
    if not access.is_enrolled(student, poll.course):
        raise PermissionDenied('Only enrolled students can vote')

    option = FreeTimePollOption.objects.filter(pk=option_id, poll=poll).first()
    if option is None:
        raise ValidationError('Invalid option for this poll')

    ballot, created = FreeTimePollVote.objects.select_for_update().get_or_create(
        poll=poll, voter=student, defaults={'option': option},
    )
    if not created and ballot.option_id != option.pk:
        ballot.option = option
        ballot.save(update_fields=['option', 'updated_at'])
    logger.info('%s', {
        'event': 'poll_vote',
        'poll_id': poll.pk,
        'voter_id': student.pk,
        'option_id': option.pk,
        'changed': not created,
    })
    return ballot


def close_poll(poll_id, actor) -> FreeTimePoll:
    with transaction.atomic():
        poll = FreeTimePoll.objects.select_for_update().filter(pk=poll_id).first()
        if poll is None:
            raise NotFound('Poll not found')
        course = Course.objects.get(pk=poll.course_id)
        access.ensure_course_owner(actor, course, 'Only the course instructor can close this poll')
        if poll.status == FreeTimePoll.Status.CLOSED:
            raise InvalidTransition('Poll is already CLOSED')
        poll.status = FreeTimePoll.Status.CLOSED
        poll.save(update_fields=['status', 'updated_at'])

    notification_service.notify_course_students(
        course, NotificationType.POLL_CLOSED, 'A free-time poll has closed',
        f'{course.title}: {poll.title}', f'/free-time-polls/{poll.pk}',
    )
    logger.info('%s', {'event': 'poll_closed', 'poll_id': poll.pk, 'actor_id': getattr(actor, 'pk', None)})
    return poll


def results(poll: FreeTimePoll) -> Dict[str, Any]:
    counts = {option.pk: 0 for option in poll.options.all()}
    for option_id in FreeTimePollVote.objects.filter(poll=poll).values_list('option_id', flat=True):
        counts[option_id] = counts.get(option_id, 0) + 1
    return {
        'pollId': poll.pk,
        'status': poll.status,
        'counts': [
            {'optionId': option.pk, 'label': option.label, 'count': counts[option.pk]}
            for option in poll.options.all()
        ],
    }
