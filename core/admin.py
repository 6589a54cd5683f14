"""
Django admin registrations for projects, users, session tokens and the audit trail.
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import AuditEvent, Project, SessionToken, User


@admin.register(Project)
class ProjectAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'abbr', 'locked')
    search_fields = ('name', 'abbr')


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ('username', 'display_name', 'is_staff', 'is_superuser')
    list_filter = ('projects', 'is_staff')
    filter_horizontal = ('projects', 'groups', 'user_permissions')
    fieldsets = BaseUserAdmin.fieldsets + (
        ('Projects', {'fields': ('display_name', 'projects')}),
    )


@admin.register(SessionToken)
class SessionTokenAdmin(admin.ModelAdmin):
    list_display = ('user', 'project', 'created')
    list_filter = ('project',)
    readonly_fields = ('key', 'user', 'project', 'created')


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ('created_at', 'action', 'object_type', 'object_id', 'user')
    list_filter = ('action', 'object_type')
    search_fields = ('object_id',)
    readonly_fields = ('user', 'action', 'object_type', 'object_id', 'detail', 'created_at')
