from rest_framework import serializers

from audit.models import AuditLog
from audit.services.audit_service import normalize_target_type
from excuses.models import ExcuseRequest
from reports.services import audit_report


class CourseQuerySerializer(serializers.Serializer):
    courseId = serializers.IntegerField(min_value=1)


class WeekQuerySerializer(CourseQuerySerializer):
    week = serializers.IntegerField(min_value=1, max_value=40, required=False, allow_null=True)


class RiskQuerySerializer(CourseQuerySerializer):
    absentMin = serializers.IntegerField(required=False, default=3)
    lateStreakMin = serializers.IntegerField(required=False, default=3)
    absentStreakMin = serializers.IntegerField(required=False, default=2)
    lateOrAbsentStreakMin = serializers.IntegerField(required=False, default=3)
    includeUnknown = serializers.BooleanField(required=False, default=False)


class ExcuseReportQuerySerializer(WeekQuerySerializer):
    status = serializers.CharField(required=False, allow_blank=True)

    def validate_status(self, value):
        value = (value or '').upper()
        if value and value not in ExcuseRequest.Status.values:
            raise serializers.ValidationError('status must be PENDING|APPROVED|REJECTED')
        return value or None


class AuditReportQuerySerializer(CourseQuerySerializer):
    targetType = serializers.CharField(required=False, allow_blank=True)
    action = serializers.CharField(required=False, allow_blank=True)
    to = serializers.DateField(required=False, input_formats=['%Y-%m-%d'])
    limit = serializers.IntegerField(required=False, default=audit_report.DEFAULT_LIMIT)

    def get_fields(self):
        fields = super().get_fields()
        # "from" is a Python keyword
        fields['from'] = serializers.DateField(required=False, input_formats=['%Y-%m-%d'])
        return fields

    def validate_targetType(self, value):
        if not value:
            return None
        target_type = normalize_target_type(value)
        if target_type is None:
            raise serializers.ValidationError(f'unknown targetType {value}')
        return target_type

    def validate_action(self, value):
        value = (value or '').upper()
        if value and value not in AuditLog.Action.values:
            raise serializers.ValidationError(f'unknown action {value}')
        return value or None

    def validate_limit(self, value):
        return min(audit_report.MAX_LIMIT, max(1, value))

