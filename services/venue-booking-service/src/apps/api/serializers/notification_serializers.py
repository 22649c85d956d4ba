# services/venue-booking-service/src/apps/api/serializers/notification_serializers.py
"""
Notification and audit log serializers
"""

from rest_framework import serializers

from apps.core.models import AuditLog, Notification


class NotificationSerializer(serializers.ModelSerializer):

    class Meta:
        model = Notification
        fields = ['id', 'type', 'title', 'message', 'booking_id', 'is_read', 'created_at']
        read_only_fields = fields


class AuditLogSerializer(serializers.ModelSerializer):

    class Meta:
        model = AuditLog
        fields = [
            'id', 'actor_id', 'action', 'entity_type', 'entity_id',
            'old_values', 'new_values', 'ip_address', 'user_agent',
            'request_id', 'created_at',
        ]
        read_only_fields = fields
