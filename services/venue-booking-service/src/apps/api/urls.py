# services/venue-booking-service/src/apps/api/urls.py
"""
Venue Booking API URL Configuration
"""

from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import (
    BookingViewSet,
    VenueViewSet,
    NotificationViewSet,
    AuditLogViewSet,
    DashboardView,
    SystemConfigView,
)

app_name = 'api'

router = DefaultRouter()
router.register(r'bookings', BookingViewSet, basename='booking')
router.register(r'venues', VenueViewSet, basename='venue')
router.register(r'notifications', NotificationViewSet, basename='notification')
router.register(r'audit-logs', AuditLogViewSet, basename='audit-log')

urlpatterns = [
    path('', include(router.urls)),
    path('dashboard/', DashboardView.as_view(), name='dashboard'),
    path('system-config/', SystemConfigView.as_view(), name='system-config'),
]
