from rest_framework import serializers

from courses.models import Course, Enrollment


class CourseSerializer(serializers.ModelSerializer):
    instructorId = serializers.IntegerField(source='instructor_id', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Course
        fields = ('id', 'title', 'section', 'semester', 'department', 'instructorId', 'createdAt', 'updatedAt')


class CourseWriteSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=100)
    section = serializers.CharField(max_length=20, required=False, allow_null=True, allow_blank=True)
    semester = serializers.CharField(max_length=20)
    department = serializers.CharField(max_length=50, required=False, allow_null=True, allow_blank=True)
    instructorId = serializers.IntegerField(source='instructor_id')


class EnrollSerializer(serializers.Serializer):
    courseId = serializers.IntegerField()
    studentId = serializers.IntegerField()


class EnrollmentSerializer(serializers.ModelSerializer):
    courseId = serializers.IntegerField(source='course_id', read_only=True)
    studentId = serializers.IntegerField(source='student_id', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = Enrollment
        fields = ('id', 'courseId', 'studentId', 'createdAt')


class PolicyUpdateSerializer(serializers.Serializer):
    """Partial policy payload; every field is optional."""
    lateToAbsent = serializers.IntegerField(source='late_to_absent', min_value=1, required=False)
    wPresent = serializers.DecimalField(source='w_present', max_digits=5, decimal_places=2, min_value=0, required=False)
    wLate = serializers.DecimalField(source='w_late', max_digits=5, decimal_places=2, min_value=0, required=False)
    wAbsent = serializers.DecimalField(source='w_absent', max_digits=5, decimal_places=2, min_value=0, required=False)
    wExcused = serializers.DecimalField(source='w_excused', max_digits=5, decimal_places=2, min_value=0, required=False)
    maxScore = serializers.IntegerField(source='max_score', min_value=1, required=False)
    missingAsAbsent = serializers.BooleanField(source='missing_as_absent', required=False)
    warnAbsences = serializers.IntegerField(source='warn_absences', min_value=0, required=False)
    dangerAbsences = serializers.IntegerField(source='danger_absences', min_value=0, required=False)
    failAbsences = serializers.IntegerField(source='fail_absences', min_value=0, required=False)
