# services/venue-booking-service/src/config/urls.py
"""
URL configuration for Venue Booking Service
"""

from django.contrib import admin
from django.http import JsonResponse
from django.urls import path, include
from django.conf import settings


def health(request):
    return JsonResponse({'status': 'ok', 'service': settings.SERVICE_NAME})


urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('apps.api.urls')),
    path('health/', health, name='health'),
]
