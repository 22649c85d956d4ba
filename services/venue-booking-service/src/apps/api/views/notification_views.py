# services/venue-booking-service/src/apps/api/views/notification_views.py
"""
Notification, audit log, dashboard and system configuration views
"""

from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework.permissions import IsAuthenticated
from django_filters.rest_framework import DjangoFilterBackend

from apps.core.services import (
    AuditService,
    AvailabilityService,
    NotificationService,
    SystemConfigService,
)
from apps.api.serializers import (
    AuditLogSerializer,
    NotificationSerializer,
    SystemConfigSerializer,
)
from .base import BookingServiceViewMixin
from .filters import NotificationFilter


class NotificationViewSet(BookingServiceViewMixin, viewsets.GenericViewSet):
    """The caller's own notifications."""

    serializer_class = NotificationSerializer
    permission_classes = [IsAuthenticated]
    filter_backends = [DjangoFilterBackend]
    filterset_class = NotificationFilter

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.notification_service = NotificationService()

    def get_queryset(self):
        return self.notification_service.list_for_user(self.get_principal())

    def list(self, request, *args, **kwargs):
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(self.get_serializer(page, many=True).data)
        return Response(self.get_serializer(queryset, many=True).data)

    @action(detail=True, methods=['post'])
    def read(self, request, pk=None):
        notification = self.notification_service.mark_read(self.get_principal(), pk)
        return Response(self.get_serializer(notification).data)

    @action(detail=False, methods=['post'], url_path='read-all')
    def read_all(self, request):
        updated = self.notification_service.mark_all_read(self.get_principal())
        return Response({'success': True, 'updated': updated})


class AuditLogViewSet(BookingServiceViewMixin, viewsets.GenericViewSet):
    """Audit trail, filterable by actor_id, entity_type and entity_id."""

    serializer_class = AuditLogSerializer
    permission_classes = [IsAuthenticated]

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.audit_service = AuditService()

    def get_queryset(self):
        params = self.request.query_params
        return self.audit_service.list_logs(
            self.get_principal(),
            actor_id=params.get('actor_id'),
            entity_type=params.get('entity_type'),
            entity_id=params.get('entity_id'),
        )

    def list(self, request, *args, **kwargs):
        queryset = self.get_queryset()
        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(self.get_serializer(page, many=True).data)
        return Response(self.get_serializer(queryset, many=True).data)


class DashboardView(BookingServiceViewMixin, APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        stats = AvailabilityService().get_dashboard_stats(self.get_principal())
        return Response({'success': True, **stats})


class SystemConfigView(BookingServiceViewMixin, APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response(SystemConfigSerializer(SystemConfigService().get()).data)

    def patch(self, request):
        service = SystemConfigService()
        serializer = SystemConfigSerializer(service.get(), data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        config = service.update(
            self.get_principal(),
            origin=self.get_origin(),
            **serializer.validated_data
        )
        return Response(SystemConfigSerializer(config).data)
