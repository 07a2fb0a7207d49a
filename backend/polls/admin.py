from django.contrib import admin

from polls.models import FreeTimePoll, FreeTimePollOption


class FreeTimePollOptionInline(admin.TabularInline):
    model = FreeTimePollOption
    extra = 0


@admin.register(FreeTimePoll)
class FreeTimePollAdmin(admin.ModelAdmin):
    list_display = ('title', 'course', 'creator', 'status', 'deadline_at', 'created_at')
    list_filter = ('status',)
    inlines = [FreeTimePollOptionInline]
