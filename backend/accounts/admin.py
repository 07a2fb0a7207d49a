from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin

from accounts.models import User


@admin.register(User)
class UserAdmin(DjangoUserAdmin):
    # inherit Django's user add/change forms which correctly handle password hashing
    list_display = ('email', 'name', 'role', 'department', 'is_active')
    list_filter = ('role', 'department', 'is_active')
    search_fields = ('email', 'name', 'username')
    ordering = ('id',)

    fieldsets = DjangoUserAdmin.fieldsets + (
        ('Attendance', {'fields': ('name', 'role', 'department')}),
    )

    add_fieldsets = DjangoUserAdmin.add_fieldsets + (
        ('Attendance', {'fields': ('email', 'name', 'role', 'department')}),
    )
