from django.contrib import admin

from announcements.models import Announcement


@admin.register(Announcement)
class AnnouncementAdmin(admin.ModelAdmin):
    list_display = ('title', 'scope', 'course', 'author', 'pinned', 'created_at')
    list_filter = ('scope', 'pinned')
    search_fields = ('title',)
