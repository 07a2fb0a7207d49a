"""Administrator-side user management; every write leaves a USER audit row."""
import logging
from typing import Any, Dict

from django.db import IntegrityError, transaction
from django.db.models import Q
from rest_framework.exceptions import NotFound, ValidationError

from accounts.models import User
from attendance_api.exceptions import Conflict
from audit.models import AuditLog
from audit.services import audit_service
from audit.services.audit_service import AuditTarget

logger = logging.getLogger(__name__)


def get_user(user_id) -> User:
    user = User.objects.filter(pk=user_id).first()
    if user is None:
        raise NotFound('User not found')
    return user


def search_users(role=None, department=None, q=None):
    qs = User.objects.all()
    if role:
        qs = qs.filter(role=role)
    if department:
        qs = qs.filter(department=department)
    if q:
        qs = qs.filter(Q(name__icontains=q) | Q(email__icontains=q))
    return qs.order_by('-id')


def _email_taken(email: str, exclude_pk=None) -> bool:
    qs = User.objects.filter(email__iexact=email)
    if exclude_pk is not None:
        qs = qs.exclude(pk=exclude_pk)
    return qs.exists()


def create_user(actor, data: Dict[str, Any]) -> User:
    email = data['email'].strip().lower()
    if _email_taken(email):
        raise Conflict('A user with this email already exists')
    try:
        with transaction.atomic():
            # the email doubles as the Django username
            user = User.objects.create_user(
                username=email,
                email=email,
                password=data['password'],
                name=data['name'],
                role=data['role'],
                department=data.get('department') or None,
            )
    except IntegrityError:
        raise Conflict('A user with this email already exists')

    audit_service.record(
        AuditTarget.user(user), AuditLog.Action.CREATE, actor,
        before=None, after=audit_service.snapshot_user(user),
    )
    logger.info('%s', {'event': 'user_created', 'user_id': user.pk, 'role': user.role, 'actor_id': actor.pk})
    return user


@transaction.atomic
def update_user(user: User, actor, data: Dict[str, Any]) -> User:
    user = User.objects.select_for_update().get(pk=user.pk)
    before = audit_service.snapshot_user(user)

    email = data.get('email')
    if email:
        email = email.strip().lower()
        if email != user.email.lower():
            if _email_taken(email, exclude_pk=user.pk):
                raise Conflict('A user with this email already exists')
            user.email = email
            user.username = email
    if 'name' in data:
        user.name = data['name'] or ''
    if 'department' in data:
        user.department = data['department'] or None
    if data.get('role'):
        user.role = data['role']
    if data.get('password'):
        user.set_password(data['password'])
    user.save()

    audit_service.record(
        AuditTarget.user(user), AuditLog.Action.UPDATE, actor,
        before=before, after=audit_service.snapshot_user(user),
    )
    return user


@transaction.atomic
def change_role(user: User, actor, role: str) -> User:
    if role not in User.Role.values:
        raise ValidationError('role must be one of ADMIN | INSTRUCTOR | STUDENT')
    user = User.objects.select_for_update().get(pk=user.pk)
    before = audit_service.snapshot_user(user)
    user.role = role
    user.save(update_fields=['role'])
    audit_service.record(
        AuditTarget.user(user), AuditLog.Action.ROLE_CHANGE, actor,
        before=before, after=audit_service.snapshot_user(user),
    )
    logger.info('%s', {'event': 'user_role_changed', 'user_id': user.pk, 'from': before['role'], 'to': role})
    return user


@transaction.atomic
def delete_user(user: User, actor) -> None:
    if user.pk == actor.pk:
        raise ValidationError('You cannot delete your own account')
    if user.taught_courses.exists():
        raise Conflict('User still teaches courses; reassign them first')
    user_id = user.pk
    before = audit_service.snapshot_user(user)
    user.delete()
    audit_service.record(
        AuditTarget(AuditLog.TargetType.USER, user_id), AuditLog.Action.DELETE, actor,
        before=before, after=None,
    )
    logger.info('%s', {'event': 'user_deleted', 'user_id': user_id, 'actor_id': actor.pk})
