from rest_framework import permissions

from accounts.models import User


class HasRole(permissions.BasePermission):
    """Allow the request only when ``request.user.role`` is in ``allowed_roles``.

    Anonymous users fail ``has_permission`` before any role is looked at, which
    DRF turns into a 401 (the first authenticator supplies the challenge).
    """

    allowed_roles: tuple = ()
    message = 'You do not have permission to perform this action.'

    def has_permission(self, request, view):
        user = getattr(request, 'user', None)
        if not user or not user.is_authenticated:
            return False
        return getattr(user, 'role', None) in self.allowed_roles


class IsAdminRole(HasRole):
    allowed_roles = (User.Role.ADMIN,)
    message = 'Only administrators can perform this action.'


class IsInstructorOrAdmin(HasRole):
    allowed_roles = (User.Role.INSTRUCTOR, User.Role.ADMIN)
    message = 'Only instructors or administrators can perform this action.'


class IsStudent(HasRole):
    allowed_roles = (User.Role.STUDENT,)
    message = 'Only students can perform this action.'
