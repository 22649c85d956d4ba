# services/venue-booking-service/src/tests/unit/test_tasks.py
"""
Unit Tests for Celery tasks
"""

import uuid
from datetime import timedelta
from smtplib import SMTPException
from unittest import mock

import pytest
from django.utils import timezone

from apps.core.models import AuditLog, Booking, Notification
from apps.core.tasks import (
    deliver_notification,
    record_audit,
    send_booking_reminders,
    send_notification_email,
)

Status = Booking.Status


@pytest.mark.django_db
class TestSendBookingReminders:

    def soon(self, minutes):
        return timezone.now() + timedelta(minutes=minutes)

    def test_reminds_approved_bookings_starting_soon(self, create_booking, customer):
        booking = create_booking(start=self.soon(5), status=Status.APPROVED)

        result = send_booking_reminders.apply().get()

        assert result == {'sent': 1, 'failed': 0}
        notification = Notification.objects.get()
        assert notification.type == Notification.Type.BOOKING_REMINDER
        assert notification.user_id == customer.id
        booking.refresh_from_db()
        assert booking.reminder_sent_at is not None

    def test_each_booking_reminded_once(self, create_booking):
        create_booking(start=self.soon(5), status=Status.APPROVED)

        send_booking_reminders()
        result = send_booking_reminders()

        assert result == {'sent': 0, 'failed': 0}
        assert Notification.objects.count() == 1

    def test_skips_far_future_and_undecided(self, create_booking):
        create_booking(start=self.soon(60), status=Status.APPROVED)
        create_booking(start=self.soon(5), end=self.soon(6), status=Status.REQUESTED)

        assert send_booking_reminders() == {'sent': 0, 'failed': 0}

    def test_failure_is_counted_and_released(self, create_booking):
        booking = create_booking(start=self.soon(5), status=Status.APPROVED)

        with mock.patch(
            'apps.core.services.NotificationService.notify', side_effect=RuntimeError('db down')
        ):
            result = send_booking_reminders()

        assert result == {'sent': 0, 'failed': 1}
        booking.refresh_from_db()
        assert booking.reminder_sent_at is None

    def test_failure_is_logged_with_traceback(self, create_booking):
        create_booking(start=self.soon(5), status=Status.APPROVED)

        with mock.patch(
            'apps.core.services.NotificationService.notify', side_effect=RuntimeError('db down')
        ), mock.patch('apps.core.tasks.logger') as logger:
            send_booking_reminders()

        logger.exception.assert_called_once()
        logger.error.assert_not_called()

    def test_reminder_is_mailed_when_address_known(self, create_booking, mailoutbox):
        create_booking(start=self.soon(5), status=Status.APPROVED, requester_email='ole@example.com')

        send_booking_reminders()

        assert len(mailoutbox) == 1
        assert mailoutbox[0].to == ['ole@example.com']
        assert mailoutbox[0].subject == 'Booking Reminder'
        assert Notification.objects.get().email_sent

    def test_reminder_without_address_stays_in_app(self, create_booking, mailoutbox):
        create_booking(start=self.soon(5), status=Status.APPROVED)

        send_booking_reminders()

        assert mailoutbox == []
        assert not Notification.objects.get().email_sent


@pytest.mark.django_db
class TestDeliverNotification:

    def test_approval_is_mailed(self, customer, mailoutbox):
        deliver_notification.delay(
            str(customer.id), Notification.Type.BOOKING_APPROVED, 'Booking Approved', 'See you',
            email='ole@example.com',
        )

        notification = Notification.objects.get()
        assert notification.user_id == customer.id
        assert notification.email_sent
        assert len(mailoutbox) == 1
        assert mailoutbox[0].body == 'See you'

    def test_request_notice_is_not_mailed(self, manager, mailoutbox):
        deliver_notification.delay(
            str(manager.id), Notification.Type.BOOKING_REQUESTED, 'New Booking Request', 'Please decide',
            email='manager@example.com',
        )

        assert mailoutbox == []
        assert not Notification.objects.get().email_sent

    def test_without_address_nothing_is_mailed(self, customer, mailoutbox):
        deliver_notification.delay(
            str(customer.id), Notification.Type.BOOKING_APPROVED, 'Booking Approved', 'See you'
        )

        assert mailoutbox == []
        assert Notification.objects.count() == 1


@pytest.mark.django_db
class TestSendNotificationEmail:

    def make_notification(self, customer):
        return Notification.objects.create(
            user_id=customer.id, type=Notification.Type.BOOKING_APPROVED,
            title='Booking Approved', message='See you',
        )

    def test_smtp_failure_leaves_flag_unset(self, customer, mailoutbox):
        notification = self.make_notification(customer)

        with mock.patch('apps.core.tasks.send_mail', side_effect=SMTPException('relay refused')):
            result = send_notification_email(str(notification.id), 'ole@example.com')

        assert result['success'] is False
        notification.refresh_from_db()
        assert not notification.email_sent

    def test_missing_notification(self):
        result = send_notification_email(str(uuid.uuid4()), 'ole@example.com')
        assert result == {'success': False, 'error': 'Notification not found'}


@pytest.mark.django_db
class TestRecordAudit:

    def test_origin_is_restored(self, manager):
        record_audit.delay(
            str(manager.id), AuditLog.Action.UPDATE, 'system_config', '1',
            old_values={'max_booking_duration_minutes': 120},
            new_values={'max_booking_duration_minutes': 90},
            origin={'ip_address': '10.0.0.9', 'user_agent': 'pytest', 'request_id': 'req-9'},
        )

        entry = AuditLog.objects.get()
        assert entry.actor_id == manager.id
        assert entry.ip_address == '10.0.0.9'
        assert entry.request_id == 'req-9'
        assert entry.new_values == {'max_booking_duration_minutes': 90}
