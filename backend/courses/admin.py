from django.contrib import admin

from courses.models import AttendancePolicy, Course, Enrollment


@admin.register(Course)
class CourseAdmin(admin.ModelAdmin):
    list_display = ('title', 'section', 'semester', 'department', 'instructor')
    list_filter = ('semester', 'department')
    search_fields = ('title',)


@admin.register(Enrollment)
class EnrollmentAdmin(admin.ModelAdmin):
    list_display = ('course', 'student', 'created_at')
    list_filter = ('course__semester',)


@admin.register(AttendancePolicy)
class AttendancePolicyAdmin(admin.ModelAdmin):
    list_display = ('course', 'late_to_absent', 'max_score', 'warn_absences', 'danger_absences', 'fail_absences')
