from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsInstructorOrAdmin
from courses.services import access
from reports.serializers import (
    AuditReportQuerySerializer,
    ExcuseReportQuerySerializer,
    RiskQuerySerializer,
    WeekQuerySerializer,
)
from reports.services import attendance_stats, audit_report, excuse_report, risk


class CourseReportView(APIView):
    """Base for reports over one course the caller manages."""
    permission_classes = (IsInstructorOrAdmin,)
    query_serializer_class = None

    def get(self, request):
        params = self.query_serializer_class(data=request.query_params)
        params.is_valid(raise_exception=True)
        course = access.get_course(params.validated_data['courseId'])
        access.ensure_course_owner(request.user, course, 'You can only view reports of your own courses')
        return Response(self.build(course, params.validated_data))

    def build(self, course, params):
        raise NotImplementedError


class AttendanceReportView(CourseReportView):
    query_serializer_class = WeekQuerySerializer

    def build(self, course, params):
        return attendance_stats.attendance_report(course, params.get('week'))


class RiskReportView(CourseReportView):
    query_serializer_class = RiskQuerySerializer

    def build(self, course, params):
        thresholds = risk.RiskThresholds(
            absent_min=params['absentMin'],
            late_streak_min=params['lateStreakMin'],
            absent_streak_min=params['absentStreakMin'],
            late_or_absent_streak_min=params['lateOrAbsentStreakMin'],
            include_unknown=params['includeUnknown'],
        )
        return risk.course_risk(course, thresholds)


class ExcuseReportView(CourseReportView):
    query_serializer_class = ExcuseReportQuerySerializer

    def build(self, course, params):
        return excuse_report.excuse_report(course, params.get('status'), params.get('week'))


class AuditReportView(CourseReportView):
    query_serializer_class = AuditReportQuerySerializer

    def build(self, course, params):
        return audit_report.audit_report(
            course,
            target_type=params.get('targetType'),
            action=params.get('action'),
            date_from=params.get('from'),
            date_to=params.get('to'),
            limit=params['limit'],
        )
