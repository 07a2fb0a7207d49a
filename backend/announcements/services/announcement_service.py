import logging
from typing import Dict, Optional

from django.db.models import Q
from rest_framework.exceptions import NotFound, ValidationError

from accounts.models import User
from announcements.models import Announcement, AnnouncementRead
from courses.models import Course, Enrollment
from courses.services import access
from notifications.models import NotificationType
from notifications.services import notification_service

logger = logging.getLogger(__name__)


def _visible_course_ids(user):
    if user.role == User.Role.INSTRUCTOR:
        return Course.objects.filter(instructor=user).values_list('id', flat=True)
    return Enrollment.objects.filter(student=user).values_list('course_id', flat=True)


def visible_announcements(user):
    """GLOBAL announcements plus those of the user's courses; ADMIN sees all."""
    qs = Announcement.objects.select_related('course', 'author')
    if user.role != User.Role.ADMIN:
        qs = qs.filter(
            Q(scope=Announcement.Scope.GLOBAL)
            | Q(scope=Announcement.Scope.COURSE, course_id__in=_visible_course_ids(user))
        )
    return qs.order_by('-pinned', '-created_at')


def read_map(user, announcement_ids) -> Dict[int, object]:
    rows = AnnouncementRead.objects.filter(user=user, announcement_id__in=announcement_ids)
    return {row.announcement_id: row.read_at for row in rows}


def _clean(title: str, content: str):
    title = (title or '').strip()
    content = (content or '').strip()
    if not title or not content:
        raise ValidationError('title and content are required')
    return title, content


def create_global(actor, title: str, content: str, pinned: bool = False, notify: bool = False) -> Announcement:
    title, content = _clean(title, content)
    announcement = Announcement.objects.create(
        scope=Announcement.Scope.GLOBAL, course=None, author=actor,
        title=title, content=content, pinned=bool(pinned),
    )
    if notify:
        user_ids = User.objects.filter(is_active=True).exclude(pk=actor.pk).values_list('id', flat=True)
        notification_service.notify_many(
            list(user_ids), NotificationType.ANNOUNCEMENT_POSTED, 'New announcement', title,
            f'/announcements/{announcement.pk}',
        )
    logger.info('%s', {'event': 'announcement_created', 'announcement_id': announcement.pk, 'scope': 'GLOBAL'})
    return announcement


def create_for_course(course: Course, actor, title: str, content: str, pinned: bool = False) -> Announcement:
    access.ensure_course_owner(actor, course, 'Only the course instructor can post announcements')
    title, content = _clean(title, content)
    announcement = Announcement.objects.create(
        scope=Announcement.Scope.COURSE, course=course, author=actor,
        title=title, content=content, pinned=bool(pinned),
    )
    notification_service.notify_course_students(
        course,
        NotificationType.ANNOUNCEMENT_POSTED,
        'New announcement',
        f'{course.title}: {title}',
        f'/announcements/{announcement.pk}',
    )
    logger.info('%s', {
        'event': 'announcement_created',
        'announcement_id': announcement.pk,
        'scope': 'COURSE',
        'course_id': course.pk,
    })
    return announcement


def get_announcement_for(user, announcement_id) -> Announcement:
    announcement = Announcement.objects.select_related('course', 'author').filter(pk=announcement_id).first()
    if announcement is None:
        raise NotFound('Announcement not found')
    if announcement.scope == Announcement.Scope.COURSE:
        access.ensure_course_member(user, announcement.course, 'You cannot view this announcement')
    return announcement


def mark_read(user, announcement_id) -> AnnouncementRead:
    """Idempotent; the first read time is kept."""
    announcement = get_announcement_for(user, announcement_id)
    row, _ = AnnouncementRead.objects.get_or_create(announcement=announcement, user=user)
    return row


def read_at_for(user, announcement: Announcement) -> Optional[object]:
    row = AnnouncementRead.objects.filter(announcement=announcement, user=user).first()
    return row.read_at if row else None
