from django.contrib import admin

from attendance.models import Attendance, ClassSession


@admin.register(ClassSession)
class ClassSessionAdmin(admin.ModelAdmin):
    list_display = ('course', 'week', 'round', 'start_at', 'attendance_method', 'status')
    list_filter = ('status', 'attendance_method')
    ordering = ('course', 'week', 'round')


@admin.register(Attendance)
class AttendanceAdmin(admin.ModelAdmin):
    list_display = ('session', 'student', 'status', 'checked_at', 'updated_by')
    list_filter = ('status',)
