"""Best-effort user notifications.

Every write runs in its own savepoint and failures are logged, never raised:
a lost notification must not undo the workflow step that triggered it.
"""
import logging
from typing import Iterable, List, Optional

from django.db import transaction

from courses.models import Enrollment
from notifications.models import Notification

logger = logging.getLogger(__name__)


def notify(user_id: int, type: str, title: str, message: str, link_url: Optional[str] = None) -> Optional[Notification]:
    try:
        with transaction.atomic():
            notification = Notification.objects.create(
                user_id=user_id, type=type, title=title, message=message, link_url=link_url,
            )
    except Exception:
        logger.exception('notification create failed type=%s user=%s', type, user_id)
        return None
    logger.info('%s', {'event': 'notification_created', 'type': type, 'user_id': user_id, 'link_url': link_url})
    return notification


def notify_many(user_ids: Iterable[int], type: str, title: str, message: str, link_url: Optional[str] = None) -> int:
    """Send the same notification to several users; returns how many were written."""
    rows: List[Notification] = [
        Notification(user_id=uid, type=type, title=title, message=message, link_url=link_url)
        for uid in dict.fromkeys(user_ids)
    ]
    if not rows:
        return 0
    try:
        with transaction.atomic():
            Notification.objects.bulk_create(rows)
    except Exception:
        logger.exception('bulk notification create failed type=%s users=%s', type, len(rows))
        return 0
    logger.info('%s', {'event': 'notifications_created', 'type': type, 'count': len(rows), 'link_url': link_url})
    return len(rows)


def notify_course_students(course, type: str, title: str, message: str, link_url: Optional[str] = None) -> int:
    student_ids = Enrollment.objects.filter(course=course).values_list('student_id', flat=True)
    return notify_many(list(student_ids), type, title, message, link_url)
