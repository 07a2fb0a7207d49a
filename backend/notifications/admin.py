from django.contrib import admin

from notifications.models import Notification, PersonalMessage


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ('user', 'type', 'title', 'is_read', 'created_at')
    list_filter = ('type', 'is_read')
    search_fields = ('title', 'user__email')


@admin.register(PersonalMessage)
class PersonalMessageAdmin(admin.ModelAdmin):
    list_display = ('sender', 'receiver', 'title', 'is_read', 'created_at')
    list_filter = ('is_read',)
