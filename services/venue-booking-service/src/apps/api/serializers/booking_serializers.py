# services/venue-booking-service/src/apps/api/serializers/booking_serializers.py
"""
Booking Serializers
"""

from rest_framework import serializers
from django.utils import timezone

from apps.core.models import Booking
from apps.core.services.state_machine import allowed_targets, effective_status


class BookingSerializer(serializers.ModelSerializer):
    """
    Booking representation.

    ``status`` is the effective status: an approved booking whose end has
    passed reads as completed. ``stored_status`` is the persisted value.
    """

    venue_id = serializers.UUIDField(read_only=True)
    venue_name = serializers.CharField(source='venue.name', read_only=True)
    team_id = serializers.UUIDField(read_only=True)
    team_name = serializers.CharField(source='team.name', read_only=True)
    status = serializers.SerializerMethodField()
    stored_status = serializers.CharField(source='status', read_only=True)
    allowed_transitions = serializers.SerializerMethodField()
    duration_minutes = serializers.SerializerMethodField()

    class Meta:
        model = Booking
        fields = [
            'id', 'venue_id', 'venue_name', 'team_id', 'team_name',
            'requester_id', 'approver_id',
            'start_datetime', 'end_datetime', 'duration_minutes',
            'participant_count', 'special_requirements',
            'status', 'stored_status', 'allowed_transitions',
            'approval_notes', 'denial_reason', 'cancellation_reason',
            'decided_at', 'cancelled_at', 'completed_at',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields

    def _now(self):
        return self.context.get('now') or timezone.now()

    def get_status(self, obj) -> str:
        return effective_status(obj, self._now())

    def get_allowed_transitions(self, obj) -> list:
        return sorted(allowed_targets(obj, self._now()))

    def get_duration_minutes(self, obj) -> int:
        return int(obj.duration.total_seconds() // 60)


class BookingCreateSerializer(serializers.Serializer):
    """Input for creating a booking."""

    venue_id = serializers.UUIDField()
    team_id = serializers.UUIDField()
    start_datetime = serializers.DateTimeField()
    end_datetime = serializers.DateTimeField()
    participant_count = serializers.IntegerField(min_value=1, default=1)
    special_requirements = serializers.CharField(required=False, allow_blank=True, default='')
    requester_id = serializers.UUIDField(required=False)
    requester_email = serializers.EmailField(required=False, allow_blank=True)

    def validate(self, attrs):
        if attrs['start_datetime'] >= attrs['end_datetime']:
            raise serializers.ValidationError({
                'end_datetime': 'End time must be after start time.'
            })
        return attrs


class BookingTransitionSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Booking.Status.choices)
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class BookingCancelSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default='')
