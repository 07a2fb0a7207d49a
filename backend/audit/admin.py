from django.contrib import admin

from audit.models import AuditLog


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ('created_at', 'target_type', 'target_id', 'action', 'actor')
    list_filter = ('target_type', 'action')
    readonly_fields = ('target_type', 'target_id', 'action', 'actor', 'before_value', 'after_value', 'created_at')

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
