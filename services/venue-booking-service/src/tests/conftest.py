# services/venue-booking-service/src/tests/conftest.py
"""
Pytest Configuration and Fixtures

Provides common fixtures for venue booking service tests.
"""

import uuid
from datetime import datetime, time, timedelta

import pytest
from django.utils import timezone
from rest_framework.test import APIClient

from shared.common.authentication import JWTTokenGenerator, TokenUser
from apps.core.models import Booking, SystemConfig, Team, Venue
from apps.core.services import Principal


# ==========================================================================
# Time helpers
# ==========================================================================

@pytest.fixture
def booking_day():
    """A day far enough ahead that nothing is effectively completed."""
    return timezone.now().date() + timedelta(days=7)


@pytest.fixture
def at(booking_day):
    """Aware datetime on the booking day: ``at(10)`` or ``at(10, 30)``."""
    def _at(hour, minute=0, day=None):
        return timezone.make_aware(datetime.combine(day or booking_day, time(hour, minute)))
    return _at


# ==========================================================================
# Principals
# ==========================================================================

@pytest.fixture
def superadmin():
    return Principal(id=uuid.uuid4(), role='superadmin')


@pytest.fixture
def manager():
    """Manages ``venue``."""
    return Principal(id=uuid.uuid4(), role='manager', country_code='NOR')


@pytest.fixture
def other_manager():
    return Principal(id=uuid.uuid4(), role='manager', country_code='SWE')


@pytest.fixture
def team_manager():
    """Manages ``team`` but no venue."""
    return Principal(id=uuid.uuid4(), role='manager', country_code='NOR')


@pytest.fixture
def customer():
    return Principal(id=uuid.uuid4(), role='customer', country_code='NOR')


@pytest.fixture
def other_customer():
    return Principal(id=uuid.uuid4(), role='customer', country_code='SWE')


# ==========================================================================
# Reference data
# ==========================================================================

@pytest.fixture
def venue(manager):
    """Venue with working hours 06:00-22:00 and no buffer."""
    return Venue.objects.create(
        name='Main Arena',
        manager_id=manager.id,
        capacity=50,
        buffer_time_minutes=0,
    )


@pytest.fixture
def buffered_venue(manager):
    return Venue.objects.create(
        name='Training Hall',
        manager_id=manager.id,
        capacity=30,
        buffer_time_minutes=15,
    )


@pytest.fixture
def unmanaged_venue():
    return Venue.objects.create(name='Outdoor Field', capacity=100, buffer_time_minutes=0)


@pytest.fixture
def team(team_manager):
    return Team.objects.create(
        name='Norway Handball',
        country_code='NOR',
        sport='Handball',
        manager_id=team_manager.id,
        member_count=18,
    )


@pytest.fixture
def foreign_team():
    return Team.objects.create(
        name='Sweden Handball',
        country_code='SWE',
        sport='Handball',
        member_count=16,
    )


@pytest.fixture
def system_config():
    return SystemConfig.load()


# ==========================================================================
# Bookings
# ==========================================================================

@pytest.fixture
def create_booking(venue, team, customer, at):
    """Factory writing bookings straight to the store, bypassing the service."""
    def _create(start=None, end=None, status=Booking.Status.REQUESTED, **kwargs):
        start = start or at(10)
        end = end or start + timedelta(hours=2)
        defaults = {
            'venue': venue,
            'team': team,
            'requester_id': customer.id,
            'participant_count': 10,
        }
        defaults.update(kwargs)
        return Booking.objects.create(
            start_datetime=start,
            end_datetime=end,
            status=status,
            **defaults
        )
    return _create


@pytest.fixture
def booking_data(venue, team, at):
    """Create payload for a 10:00-12:00 booking on ``venue``."""
    return {
        'venue_id': venue.id,
        'team_id': team.id,
        'start_datetime': at(10),
        'end_datetime': at(12),
        'participant_count': 12,
        'special_requirements': 'Goals set up at both ends',
    }


# ==========================================================================
# API
# ==========================================================================

@pytest.fixture
def api_client():
    """Provide API client for testing."""
    return APIClient()


@pytest.fixture
def auth_headers_for():
    """Bearer headers carrying a signed token for the given principal."""
    def _headers(principal):
        token = JWTTokenGenerator.generate_access_token(
            user_id=principal.id,
            role=principal.role,
            country_code=principal.country_code,
        )
        return {'HTTP_AUTHORIZATION': f'Bearer {token}'}
    return _headers


@pytest.fixture
def client_for():
    """APIClient authenticated as the given principal."""
    def _client(principal):
        client = APIClient()
        client.force_authenticate(user=TokenUser({
            'sub': str(principal.id),
            'role': principal.role,
            'country_code': principal.country_code,
        }))
        return client
    return _client
