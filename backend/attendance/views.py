from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.models import User
from accounts.permissions import IsInstructorOrAdmin, IsStudent
from attendance.models import ClassSession
from attendance.serializers import (
    AttendanceSerializer,
    CheckInSerializer,
    ClassSessionSerializer,
    CorrectionSerializer,
    GenerateSessionsSerializer,
    MyAttendanceSerializer,
    RollCallSerializer,
    SessionCreateSerializer,
)
from attendance.services import recorder, session_generator, session_state
from courses.services import access


class CourseSessionsView(APIView):
    """List (members) or create (course owner) the sessions of a course."""
    permission_classes = (IsAuthenticated,)

    def get(self, request, course_id: int):
        course = access.get_course(course_id)
        access.ensure_course_member(request.user, course)

        qs = ClassSession.objects.filter(course=course)
        week = request.query_params.get('week')
        if week:
            if not week.isdigit():
                raise ValidationError('week must be a number')
            qs = qs.filter(week=int(week))
        status_filter = request.query_params.get('status')
        if status_filter:
            qs = qs.filter(status=status_filter.upper())
        qs = qs.order_by('week', 'round')

        data = ClassSessionSerializer(qs, many=True, context={'request': request}).data
        return Response({'courseId': course.pk, 'count': len(data), 'list': data})

    def post(self, request, course_id: int):
        if request.user.role not in (User.Role.INSTRUCTOR, User.Role.ADMIN):
            self.permission_denied(request, message=IsInstructorOrAdmin.message)
        course = access.get_course(course_id)
        access.ensure_course_owner(request.user, course, 'Only the course instructor can create sessions')

        serializer = SessionCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        session = session_generator.create_session(course, request.user, serializer.validated_data)
        data = ClassSessionSerializer(session, context={'request': request}).data
        return Response({'session': data}, status=status.HTTP_201_CREATED)


class GenerateSessionsView(APIView):
    permission_classes = (IsInstructorOrAdmin,)

    def post(self, request, course_id: int):
        course = access.get_course(course_id)
        access.ensure_course_owner(request.user, course, 'Only the course instructor can create sessions')
        serializer = GenerateSessionsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = session_generator.generate_sessions(course, request.user, serializer.to_plan())
        return Response(result, status=status.HTTP_201_CREATED)


class SessionDetailView(APIView):
    permission_classes = (IsAuthenticated,)

    def get(self, request, session_id: int):
        session = recorder.get_session(session_id)
        access.ensure_course_member(request.user, session.course)
        return Response({'session': ClassSessionSerializer(session, context={'request': request}).data})


class SessionTransitionView(APIView):
    """``POST /sessions/:id/open|pause|close``."""
    permission_classes = (IsInstructorOrAdmin,)
    transition = None

    def post(self, request, session_id: int):
        session = recorder.get_session(session_id)
        access.ensure_course_owner(request.user, session.course, 'Only the course instructor can change session state')
        session = session_state.TRANSITIONS[self.transition](session, request.user)
        return Response({'session': ClassSessionSerializer(session, context={'request': request}).data})


class CheckInView(APIView):
    permission_classes = (IsStudent,)

    def post(self, request, session_id: int):
        session = recorder.get_session(session_id)
        serializer = CheckInSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        attendance = recorder.check_in(session, request.user, serializer.validated_data.get('code'))
        return Response({'attendance': AttendanceSerializer(attendance).data})


class SessionSummaryView(APIView):
    permission_classes = (IsInstructorOrAdmin,)

    def get(self, request, session_id: int):
        session = recorder.get_session(session_id)
        access.ensure_course_owner(request.user, session.course)
        result = recorder.session_summary(session)
        return Response({
            'session': ClassSessionSerializer(session, context={'request': request}).data,
            'count': result['count'],
            'summary': result['summary'],
            'list': AttendanceSerializer(result['rows'], many=True).data,
        })


class RollCallView(APIView):
    permission_classes = (IsInstructorOrAdmin,)

    def get(self, request, session_id: int):
        session = recorder.get_session(session_id)
        access.ensure_course_owner(request.user, session.course)
        sheet = recorder.rollcall_sheet(session)
        return Response({'sessionId': session.pk, 'count': len(sheet), 'list': sheet})

    def patch(self, request, session_id: int):
        session = recorder.get_session(session_id)
        access.ensure_course_owner(request.user, session.course)
        serializer = RollCallSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        results = recorder.apply_rollcall(session, request.user, serializer.validated_data['items'])
        return Response({'ok': True, 'sessionId': session.pk, 'results': results})


class AttendanceCorrectionView(APIView):
    permission_classes = (IsInstructorOrAdmin,)

    def patch(self, request, attendance_id: int):
        serializer = CorrectionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        attendance = recorder.correct_attendance(attendance_id, request.user, serializer.validated_data['status'])
        return Response({'attendance': AttendanceSerializer(attendance).data})


class MyAttendanceView(APIView):
    permission_classes = (IsStudent,)

    def get(self, request):
        course_id = request.query_params.get('courseId')
        if course_id and not course_id.isdigit():
            raise ValidationError('courseId must be a number')
        qs = recorder.student_attendance(request.user, course_id)
        data = MyAttendanceSerializer(qs, many=True, context={'request': request}).data
        return Response({'count': len(data), 'list': data})
