# services/venue-booking-service/src/config/settings/development.py
"""
Development settings for Venue Booking Service
"""

from .base import *

DEBUG = True

ALLOWED_HOSTS = ['*']

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.postgresql',
        'NAME': os.environ.get('DB_NAME', 'venue_booking_db'),
        'USER': os.environ.get('DB_USER', 'venue_booking'),
        'PASSWORD': os.environ.get('DB_PASSWORD', 'venue_booking_password'),
        'HOST': os.environ.get('DB_HOST', 'localhost'),
        'PORT': os.environ.get('DB_PORT', '5432'),
    }
}

CORS_ALLOW_ALL_ORIGINS = True

EMAIL_BACKEND = 'django.core.mail.backends.console.EmailBackend'

LOGGING['loggers'] = {'apps': {'level': 'DEBUG'}}
