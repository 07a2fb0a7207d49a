from rest_framework.exceptions import NotFound, PermissionDenied

from accounts.models import User
from courses.models import Course, Enrollment


def get_course(course_id) -> Course:
    course = Course.objects.filter(pk=course_id).select_related('instructor').first()
    if course is None:
        raise NotFound('Course not found')
    return course


def is_enrolled(student, course) -> bool:
    if student is None:
        return False
    return Enrollment.objects.filter(course=course, student_id=student.pk).exists()


def can_manage_course(user, course) -> bool:
    """ADMIN manages every course; an INSTRUCTOR only the courses they teach."""
    if user is None:
        return False
    if user.role == User.Role.ADMIN:
        return True
    return user.role == User.Role.INSTRUCTOR and course.instructor_id == user.pk


def can_view_course(user, course) -> bool:
    """Managers of the course plus its enrolled students."""
    if can_manage_course(user, course):
        return True
    return getattr(user, 'role', None) == User.Role.STUDENT and is_enrolled(user, course)


def ensure_course_owner(user, course, message: str = 'Only the course instructor can perform this action'):
    if not can_manage_course(user, course):
        raise PermissionDenied(message)


def ensure_course_member(user, course, message: str = 'Only course members can view this resource'):
    if not can_view_course(user, course):
        raise PermissionDenied(message)


def managed_courses(user):
    """Queryset of the courses `user` may manage."""
    qs = Course.objects.all()
    if user.role == User.Role.ADMIN:
        return qs
    if user.role == User.Role.INSTRUCTOR:
        return qs.filter(instructor=user)
    return qs.none()
