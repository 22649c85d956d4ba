# services/venue-booking-service/src/apps/api/views/venue_views.py
"""
Venue API Views

Read-only venue catalogue, per-day availability and blackout windows.
"""

import logging

from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from apps.core.models import Venue
from apps.core.services import AvailabilityService, VenueService
from apps.api.serializers import (
    AvailabilityQuerySerializer,
    TimeSlotSerializer,
    VenueBlackoutSerializer,
    VenueSerializer,
)
from .base import BookingServiceViewMixin

logger = logging.getLogger(__name__)


class VenueViewSet(BookingServiceViewMixin, viewsets.ReadOnlyModelViewSet):

    queryset = Venue.objects.all()
    serializer_class = VenueSerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = ['is_active', 'manager_id']

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.availability_service = AvailabilityService()
        self.venue_service = VenueService()

    @action(detail=True, methods=['get'])
    def availability(self, request, pk=None):
        """Slots for ``?date=YYYY-MM-DD`` with an ``available`` flag each."""
        query = AvailabilityQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        slots = self.availability_service.get_available_slots(
            pk,
            query.validated_data['date'],
            slot_minutes=query.validated_data.get('slot_minutes'),
        )
        return Response({
            'venue_id': pk,
            'date': query.validated_data['date'],
            'slots': TimeSlotSerializer(slots, many=True).data,
        })

    @action(detail=True, methods=['get', 'post'], serializer_class=VenueBlackoutSerializer)
    def blackouts(self, request, pk=None):
        if request.method == 'GET':
            blackouts = self.venue_service.list_blackouts(pk)
            return Response(VenueBlackoutSerializer(blackouts, many=True).data)

        serializer = VenueBlackoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        blackout = self.venue_service.create_blackout(
            self.get_principal(),
            pk,
            serializer.validated_data['start_datetime'],
            serializer.validated_data['end_datetime'],
            reason=serializer.validated_data.get('reason', ''),
            origin=self.get_origin(),
        )
        return Response(VenueBlackoutSerializer(blackout).data, status=status.HTTP_201_CREATED)
