from django.contrib import admin

from .models import AuditLog, Booking, Notification, SystemConfig, Team, Venue, VenueBlackout


@admin.register(Venue)
class VenueAdmin(admin.ModelAdmin):
    list_display = ['name', 'manager_id', 'capacity', 'buffer_time_minutes', 'is_active']
    list_filter = ['is_active']


@admin.register(Team)
class TeamAdmin(admin.ModelAdmin):
    list_display = ['name', 'country_code', 'sport', 'manager_id', 'member_count']
    list_filter = ['country_code']


@admin.register(VenueBlackout)
class VenueBlackoutAdmin(admin.ModelAdmin):
    list_display = ['venue', 'start_datetime', 'end_datetime', 'reason']


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ['id', 'venue', 'team', 'status', 'start_datetime', 'end_datetime']
    list_filter = ['status', 'venue']
    readonly_fields = ['status', 'approver_id', 'decided_at', 'cancelled_at', 'completed_at']


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ['user_id', 'type', 'title', 'is_read', 'created_at']
    list_filter = ['type', 'is_read']


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ['created_at', 'actor_id', 'action', 'entity_type', 'entity_id']
    list_filter = ['action', 'entity_type']

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


admin.site.register(SystemConfig)
