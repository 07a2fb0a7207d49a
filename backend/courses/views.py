from django.conf import settings
from django.http import HttpResponse
from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.models import User
from accounts.permissions import IsAdminRole, IsInstructorOrAdmin
from courses.models import Course, Enrollment
from courses.serializers import (
    CourseSerializer,
    CourseWriteSerializer,
    EnrollSerializer,
    EnrollmentSerializer,
    PolicyUpdateSerializer,
)
from courses.services import access, course_admin, policy as policy_service, score_export, scoring


class CourseListView(APIView):
    """Courses visible to the caller, filtered by semester and department."""
    permission_classes = (IsAuthenticated,)

    def get(self, request):
        user = request.user
        semester = (request.query_params.get('semester') or settings.DEFAULT_SEMESTER).strip()
        department = (request.query_params.get('department') or settings.DEFAULT_DEPARTMENT).strip()

        qs = Course.objects.filter(semester=semester, department=department)
        if user.role == User.Role.INSTRUCTOR:
            qs = qs.filter(instructor=user)
        elif user.role == User.Role.STUDENT:
            qs = qs.filter(enrollments__student=user)

        data = CourseSerializer(qs.order_by('-id'), many=True).data
        return Response({'list': data, 'filter': {'semester': semester, 'department': department}})


class AdminCourseCreateView(APIView):
    permission_classes = (IsAdminRole,)

    def post(self, request):
        serializer = CourseWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        course = course_admin.create_course(request.user, serializer.validated_data)
        return Response({'course': CourseSerializer(course).data}, status=status.HTTP_201_CREATED)


class AdminCourseDetailView(APIView):
    permission_classes = (IsAdminRole,)

    def patch(self, request, course_id: int):
        course = access.get_course(course_id)
        serializer = CourseWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        course = course_admin.update_course(course, request.user, serializer.validated_data)
        return Response({'course': CourseSerializer(course).data})

    def delete(self, request, course_id: int):
        course = access.get_course(course_id)
        course_admin.delete_course(course, request.user)
        return Response({'ok': True})


class AdminEnrollView(APIView):
    permission_classes = (IsAdminRole,)

    def post(self, request):
        serializer = EnrollSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        course = access.get_course(serializer.validated_data['courseId'])
        enrollment = course_admin.enroll_student(course, serializer.validated_data['studentId'])
        return Response({'enrollment': EnrollmentSerializer(enrollment).data}, status=status.HTTP_201_CREATED)


class CourseEnrollmentListView(APIView):
    permission_classes = (IsInstructorOrAdmin,)

    def get(self, request, course_id: int):
        course = access.get_course(course_id)
        access.ensure_course_owner(request.user, course)
        qs = Enrollment.objects.filter(course=course).order_by('student_id')
        data = EnrollmentSerializer(qs, many=True).data
        return Response({'courseId': course.pk, 'count': len(data), 'list': data})


class CoursePolicyView(APIView):
    permission_classes = (IsInstructorOrAdmin,)

    def get(self, request, course_id: int):
        course = access.get_course(course_id)
        access.ensure_course_owner(request.user, course)
        values = policy_service.resolve_policy(course)
        return Response({'courseId': course.pk, 'policy': values.as_dict(course.pk)})

    def put(self, request, course_id: int):
        course = access.get_course(course_id)
        access.ensure_course_owner(request.user, course)
        serializer = PolicyUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        row, created = policy_service.upsert_policy(course, request.user, serializer.validated_data)
        values = policy_service.PolicyValues.from_model(row)
        return Response({'ok': True, 'created': created, 'policy': values.as_dict(course.pk)})


class CourseScoreView(APIView):
    permission_classes = (IsInstructorOrAdmin,)

    def get(self, request, course_id: int):
        course = access.get_course(course_id)
        access.ensure_course_owner(request.user, course)
        return Response(scoring.compute_course_scores(course))


class CourseScoreExportView(APIView):
    """Download the score table as xlsx (default) or csv (``?type=csv``)."""
    permission_classes = (IsInstructorOrAdmin,)

    def get(self, request, course_id: int):
        course = access.get_course(course_id)
        access.ensure_course_owner(request.user, course)
        file_type = (request.query_params.get('type') or 'xlsx').lower()
        if file_type not in ('xlsx', 'csv'):
            raise ValidationError('type must be xlsx or csv')

        report = scoring.compute_course_scores(course)
        if file_type == 'csv':
            body = score_export.csv_bytes(report)
            content_type = 'text/csv; charset=utf-8'
        else:
            body = score_export.xlsx_bytes(report)
            content_type = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'

        response = HttpResponse(body, content_type=content_type)
        response['Content-Disposition'] = f'attachment; filename="course-{course.pk}-attendance-score.{file_type}"'
        return response
