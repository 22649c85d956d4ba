# services/venue-booking-service/src/apps/api/views/booking_views.py
"""
Booking API Views
"""

import logging

from rest_framework import viewsets, status, filters
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django_filters.rest_framework import DjangoFilterBackend

from apps.core.services import BookingService
from apps.api.serializers import (
    BookingSerializer,
    BookingCreateSerializer,
    BookingTransitionSerializer,
    BookingCancelSerializer,
)
from .base import BookingServiceViewMixin
from .filters import BookingFilter

logger = logging.getLogger(__name__)


class BookingViewSet(BookingServiceViewMixin, viewsets.GenericViewSet):
    """
    ViewSet for bookings.

    Bookings are never edited in place. After creation they only change
    through the ``transition`` and ``cancel`` actions.
    """

    serializer_class = BookingSerializer
    permission_classes = [IsAuthenticated]
    filter_backends = [DjangoFilterBackend, filters.OrderingFilter]
    filterset_class = BookingFilter
    ordering_fields = ['start_datetime', 'created_at', 'status']
    ordering = ['start_datetime']

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.booking_service = BookingService()

    def get_queryset(self):
        """Bookings the caller may read."""
        return self.booking_service.list_bookings(self.get_principal())

    def get_serializer_class(self):
        if self.action == 'create':
            return BookingCreateSerializer
        elif self.action == 'transition':
            return BookingTransitionSerializer
        elif self.action == 'cancel':
            return BookingCancelSerializer
        return BookingSerializer

    def list(self, request, *args, **kwargs):
        queryset = self.filter_queryset(self.get_queryset())

        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(BookingSerializer(page, many=True).data)
        return Response(BookingSerializer(queryset, many=True).data)

    def retrieve(self, request, pk=None, *args, **kwargs):
        booking = self.booking_service.get_booking(self.get_principal(), pk)
        return Response(BookingSerializer(booking).data)

    def create(self, request, *args, **kwargs):
        """Request a booking. Starts in ``requested``."""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        booking = self.booking_service.create_booking(
            self.get_principal(),
            serializer.validated_data,
            origin=self.get_origin(),
        )
        return Response(BookingSerializer(booking).data, status=status.HTTP_201_CREATED)

    def destroy(self, request, pk=None, *args, **kwargs):
        """Remove a booking outright (superadmin)."""
        self.booking_service.delete_booking(self.get_principal(), pk, origin=self.get_origin())
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=['post'])
    def transition(self, request, pk=None):
        """Move a booking to approved, denied, cancelled or completed."""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        booking = self.booking_service.transition_booking(
            self.get_principal(),
            pk,
            serializer.validated_data['status'],
            notes=serializer.validated_data.get('notes'),
            origin=self.get_origin(),
        )
        return Response(BookingSerializer(booking).data)

    @action(detail=True, methods=['post'])
    def cancel(self, request, pk=None):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        self.booking_service.cancel_booking(
            self.get_principal(),
            pk,
            reason=serializer.validated_data.get('reason'),
            origin=self.get_origin(),
        )
        return Response(status=status.HTTP_204_NO_CONTENT)
