# services/venue-booking-service/src/apps/api/serializers/venue_serializers.py
"""
Venue, blackout and availability serializers
"""

from rest_framework import serializers

from apps.core.models import SystemConfig, Venue, VenueBlackout


class VenueSerializer(serializers.ModelSerializer):

    class Meta:
        model = Venue
        fields = [
            'id', 'name', 'manager_id', 'capacity',
            'working_start_time', 'working_end_time',
            'buffer_time_minutes', 'is_active',
        ]
        read_only_fields = fields


class VenueBlackoutSerializer(serializers.ModelSerializer):
    venue_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = VenueBlackout
        fields = ['id', 'venue_id', 'start_datetime', 'end_datetime', 'reason', 'created_by', 'created_at']
        read_only_fields = ['id', 'venue_id', 'created_by', 'created_at']

    def validate(self, attrs):
        if attrs['start_datetime'] >= attrs['end_datetime']:
            raise serializers.ValidationError({
                'end_datetime': 'End time must be after start time.'
            })
        return attrs


class AvailabilityQuerySerializer(serializers.Serializer):
    date = serializers.DateField()
    slot_minutes = serializers.IntegerField(min_value=15, max_value=240, required=False)


class TimeSlotSerializer(serializers.Serializer):
    start_datetime = serializers.DateTimeField()
    end_datetime = serializers.DateTimeField()
    start_time = serializers.CharField()
    end_time = serializers.CharField()
    available = serializers.BooleanField()


class SystemConfigSerializer(serializers.ModelSerializer):

    class Meta:
        model = SystemConfig
        fields = ['two_hour_limit_enabled', 'max_booking_duration_minutes', 'updated_at', 'updated_by']
        read_only_fields = ['updated_at', 'updated_by']
        extra_kwargs = {'max_booking_duration_minutes': {'min_value': 1}}
