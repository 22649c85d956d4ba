# services/venue-booking-service/src/config/celery.py
"""
Celery application for the Venue Booking Service.
"""

import os

from celery import Celery

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.development')

app = Celery('venue_booking')
app.config_from_object('django.conf:settings', namespace='CELERY')
app.autodiscover_tasks()
