from django.contrib import admin

from excuses.models import Appeal, ExcuseRequest


@admin.register(ExcuseRequest)
class ExcuseRequestAdmin(admin.ModelAdmin):
    list_display = ('session', 'student', 'reason_code', 'status', 'reviewed_by', 'created_at')
    list_filter = ('status', 'reason_code')
    raw_id_fields = ('session', 'student', 'reviewed_by')


@admin.register(Appeal)
class AppealAdmin(admin.ModelAdmin):
    list_display = ('attendance', 'student', 'requested_status', 'status', 'reviewed_by', 'created_at')
    list_filter = ('status',)
    raw_id_fields = ('attendance', 'student', 'reviewed_by')
