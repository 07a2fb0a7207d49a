from rest_framework import serializers

from attendance.serializers import ClassSessionSerializer
from excuses.models import Appeal, ExcuseRequest


class ExcuseRequestSerializer(serializers.ModelSerializer):
    sessionId = serializers.IntegerField(source='session_id', read_only=True)
    studentId = serializers.IntegerField(source='student_id', read_only=True)
    reasonCode = serializers.CharField(source='reason_code', read_only=True)
    reasonText = serializers.CharField(source='reason_text', read_only=True)
    filePath = serializers.CharField(source='file_path', read_only=True)
    reviewedBy = serializers.IntegerField(source='reviewed_by_id', read_only=True)
    reviewedAt = serializers.DateTimeField(source='reviewed_at', read_only=True)
    replyText = serializers.CharField(source='reply_text', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = ExcuseRequest
        fields = ('id', 'sessionId', 'studentId', 'reasonCode', 'reasonText', 'filePath', 'status',
                  'reviewedBy', 'reviewedAt', 'replyText', 'createdAt', 'updatedAt')


class ExcuseWithSessionSerializer(ExcuseRequestSerializer):
    session = ClassSessionSerializer(read_only=True)

    class Meta(ExcuseRequestSerializer.Meta):
        fields = ExcuseRequestSerializer.Meta.fields + ('session',)


class ExcuseCreateSerializer(serializers.Serializer):
    reasonCode = serializers.ChoiceField(choices=ExcuseRequest.ReasonCode.choices, required=False,
                                         default=ExcuseRequest.ReasonCode.ETC)
    reasonText = serializers.CharField(required=False, allow_blank=True, allow_null=True, default='')
    filePath = serializers.CharField(max_length=255, required=False, allow_blank=True, allow_null=True)


class ExcuseResolveSerializer(serializers.Serializer):
    status = serializers.CharField()
    replyText = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class AppealSerializer(serializers.ModelSerializer):
    attendanceId = serializers.IntegerField(source='attendance_id', read_only=True)
    studentId = serializers.IntegerField(source='student_id', read_only=True)
    requestedStatus = serializers.IntegerField(source='requested_status', read_only=True)
    reviewedBy = serializers.IntegerField(source='reviewed_by_id', read_only=True)
    reviewedAt = serializers.DateTimeField(source='reviewed_at', read_only=True)
    replyText = serializers.CharField(source='reply_text', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Appeal
        fields = ('id', 'attendanceId', 'studentId', 'message', 'requestedStatus', 'status',
                  'reviewedBy', 'reviewedAt', 'replyText', 'createdAt', 'updatedAt')


class AppealCreateSerializer(serializers.Serializer):
    # range checks live in the workflow so API and service reject the same input
    message = serializers.CharField(allow_blank=True, trim_whitespace=False)
    requestedStatus = serializers.IntegerField(required=False, allow_null=True)


class AppealResolveSerializer(serializers.Serializer):
    status = serializers.CharField()
    replyText = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    applyAttendanceStatus = serializers.IntegerField(required=False, allow_null=True)
