from rest_framework import serializers

from accounts.models import User
from attendance.models import Attendance, ClassSession
from attendance.services import session_generator
from attendance.services.session_generator import GenerationPlan, Makeup, TimeSlot


class ClassSessionSerializer(serializers.ModelSerializer):
    courseId = serializers.IntegerField(source='course_id', read_only=True)
    startAt = serializers.DateTimeField(source='start_at', read_only=True)
    endAt = serializers.DateTimeField(source='end_at', read_only=True)
    attendanceMethod = serializers.CharField(source='attendance_method', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = ClassSession
        fields = ('id', 'courseId', 'week', 'round', 'startAt', 'endAt', 'room',
                  'attendanceMethod', 'status', 'code', 'createdAt', 'updatedAt')

    def to_representation(self, instance):
        data = super().to_representation(instance)
        # students must type the code the instructor shows, never read it here
        request = self.context.get('request')
        user = getattr(request, 'user', None)
        if user is None or getattr(user, 'role', None) == User.Role.STUDENT:
            data.pop('code', None)
        return data


class SessionCreateSerializer(serializers.Serializer):
    week = serializers.IntegerField(min_value=1)
    round = serializers.IntegerField(min_value=1, required=False, default=1)
    startAt = serializers.DateTimeField(source='start_at', required=False, allow_null=True)
    endAt = serializers.DateTimeField(source='end_at', required=False, allow_null=True)
    room = serializers.CharField(max_length=50, required=False, allow_null=True, allow_blank=True)
    attendanceMethod = serializers.ChoiceField(
        source='attendance_method', choices=ClassSession.Method.choices,
        required=False, default=ClassSession.Method.ELECTRONIC,
    )


class AttendanceSerializer(serializers.ModelSerializer):
    sessionId = serializers.IntegerField(source='session_id', read_only=True)
    studentId = serializers.IntegerField(source='student_id', read_only=True)
    checkedAt = serializers.DateTimeField(source='checked_at', read_only=True)
    updatedBy = serializers.IntegerField(source='updated_by_id', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Attendance
        fields = ('id', 'sessionId', 'studentId', 'status', 'checkedAt', 'updatedBy', 'createdAt', 'updatedAt')


class MyAttendanceSerializer(AttendanceSerializer):
    session = ClassSessionSerializer(read_only=True)

    class Meta(AttendanceSerializer.Meta):
        fields = AttendanceSerializer.Meta.fields + ('session',)


class CheckInSerializer(serializers.Serializer):
    code = serializers.CharField(required=False, allow_blank=True, allow_null=True, trim_whitespace=False)


class RollCallSerializer(serializers.Serializer):
    # items are validated one by one in the service so bad entries are only skipped
    items = serializers.ListField(child=serializers.JSONField(), allow_empty=False)


class CorrectionSerializer(serializers.Serializer):
    status = serializers.IntegerField()


class TimeSlotSerializer(serializers.Serializer):
    start = serializers.TimeField(input_formats=['%H:%M'])
    durationMinutes = serializers.IntegerField(min_value=10, max_value=300)


class MakeupSerializer(serializers.Serializer):
    date = serializers.DateField(input_formats=['%Y-%m-%d'])
    start = serializers.TimeField(input_formats=['%H:%M'])
    durationMinutes = serializers.IntegerField(min_value=10, max_value=300, required=False, allow_null=True)
    week = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    round = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    attendanceMethod = serializers.ChoiceField(choices=ClassSession.Method.choices, required=False, allow_null=True)
    room = serializers.CharField(max_length=50, required=False, allow_null=True, allow_blank=True)
    status = serializers.ChoiceField(choices=ClassSession.Status.choices, required=False, allow_null=True)


class GenerateSessionsSerializer(serializers.Serializer):
    """Body of ``POST /courses/:id/sessions/generate``."""

    baseDate = serializers.DateField(input_formats=['%Y-%m-%d'])
    weeks = serializers.IntegerField(min_value=1, max_value=30)
    meetingDays = serializers.ListField(child=serializers.JSONField(), allow_empty=False)
    times = serializers.ListField(child=TimeSlotSerializer(), allow_empty=False)
    room = serializers.CharField(max_length=50, required=False, allow_null=True, allow_blank=True)
    attendanceMethod = serializers.ChoiceField(
        choices=ClassSession.Method.choices, required=False, default=ClassSession.Method.CODE)
    defaultStatus = serializers.ChoiceField(
        choices=ClassSession.Status.choices, required=False, default=ClassSession.Status.CLOSED)
    holidays = serializers.ListField(
        child=serializers.DateField(input_formats=['%Y-%m-%d']), required=False, default=list)
    makeups = serializers.ListField(child=MakeupSerializer(), required=False, default=list)
    mode = serializers.ChoiceField(choices=session_generator.MODES, required=False,
                                   default=session_generator.MODE_SKIP_EXISTING)

    def validate_meetingDays(self, value):
        return session_generator.parse_meeting_days(value)

    def to_plan(self) -> GenerationPlan:
        data = self.validated_data
        return GenerationPlan(
            base_date=data['baseDate'],
            weeks=data['weeks'],
            meeting_days=data['meetingDays'],
            times=[TimeSlot(start=t['start'], duration_minutes=t['durationMinutes']) for t in data['times']],
            room=data.get('room') or None,
            attendance_method=data['attendanceMethod'],
            default_status=data['defaultStatus'],
            holidays=set(data['holidays']),
            makeups=[
                Makeup(
                    day=m['date'],
                    start=m['start'],
                    duration_minutes=m.get('durationMinutes'),
                    week=m.get('week'),
                    round=m.get('round'),
                    attendance_method=m.get('attendanceMethod'),
                    room=m.get('room'),
                    status=m.get('status'),
                )
                for m in data['makeups']
            ],
            mode=data['mode'],
        )
