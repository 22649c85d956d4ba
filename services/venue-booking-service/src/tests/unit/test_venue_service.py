# services/venue-booking-service/src/tests/unit/test_venue_service.py
"""
Unit Tests for VenueService and SystemConfigService
"""

import pytest

from apps.core.models import AuditLog, SystemConfig
from apps.core.services import (
    BookingNotFoundError,
    BookingUnauthorizedError,
    BookingValidationError,
    SystemConfigService,
    VenueService,
)


@pytest.mark.django_db
class TestBlackouts:

    def setup_method(self):
        self.service = VenueService()

    def test_venue_manager_creates_blackout(self, manager, venue, at, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=True):
            blackout = self.service.create_blackout(manager, venue.id, at(6), at(9), reason='Cleaning')

        assert blackout.created_by == manager.id
        entry = AuditLog.objects.get()
        assert entry.entity_type == 'venue_blackout'
        assert entry.new_values['reason'] == 'Cleaning'

    def test_other_manager_cannot(self, other_manager, venue, at):
        with pytest.raises(BookingUnauthorizedError):
            self.service.create_blackout(other_manager, venue.id, at(6), at(9))

    def test_customer_cannot(self, customer, venue, at):
        with pytest.raises(BookingUnauthorizedError):
            self.service.create_blackout(customer, venue.id, at(6), at(9))

    def test_superadmin_can_black_out_any_venue(self, superadmin, unmanaged_venue, at):
        blackout = self.service.create_blackout(superadmin, unmanaged_venue.id, at(6), at(9))
        assert blackout.venue == unmanaged_venue

    def test_inverted_window_rejected(self, manager, venue, at):
        with pytest.raises(BookingValidationError):
            self.service.create_blackout(manager, venue.id, at(9), at(6))

    def test_existing_bookings_are_kept(self, manager, venue, create_booking, at):
        booking = create_booking(start=at(10), end=at(12))
        self.service.create_blackout(manager, venue.id, at(9), at(13))
        booking.refresh_from_db()
        assert booking.status == 'requested'

    def test_list_blackouts_window(self, manager, venue, at):
        morning = self.service.create_blackout(manager, venue.id, at(6), at(8))
        evening = self.service.create_blackout(manager, venue.id, at(18), at(20))

        assert list(self.service.list_blackouts(venue.id)) == [morning, evening]
        assert list(self.service.list_blackouts(venue.id, start=at(12))) == [evening]

    def test_unknown_venue(self, manager, at):
        with pytest.raises(BookingNotFoundError):
            self.service.list_blackouts('not-a-uuid')


@pytest.mark.django_db
class TestSystemConfigService:

    def setup_method(self):
        self.service = SystemConfigService()

    def test_superadmin_updates(self, superadmin, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=True):
            config = self.service.update(superadmin, max_booking_duration_minutes=180)

        assert config.max_booking_duration_minutes == 180
        assert config.updated_by == superadmin.id
        assert SystemConfig.load().max_booking_duration_minutes == 180

        entry = AuditLog.objects.get()
        assert entry.entity_type == 'system_config'
        assert entry.old_values['max_booking_duration_minutes'] == 120
        assert entry.new_values['max_booking_duration_minutes'] == 180

    @pytest.mark.parametrize('principal_name', ['manager', 'customer'])
    def test_others_cannot_update(self, request, principal_name):
        with pytest.raises(BookingUnauthorizedError):
            self.service.update(request.getfixturevalue(principal_name), two_hour_limit_enabled=False)
        assert SystemConfig.load().two_hour_limit_enabled is True

    def test_unknown_field_rejected(self, superadmin):
        with pytest.raises(BookingValidationError):
            self.service.update(superadmin, id=5)

    def test_non_positive_maximum_rejected(self, superadmin):
        with pytest.raises(BookingValidationError):
            self.service.update(superadmin, max_booking_duration_minutes=0)
