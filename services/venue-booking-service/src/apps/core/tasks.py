# services/venue-booking-service/src/apps/core/tasks.py
"""
Celery Tasks for Venue Booking Service
"""

import logging
from datetime import timedelta
from typing import Any, Dict, Optional

from celery import shared_task
from django.conf import settings
from django.core.mail import send_mail
from django.db import transaction
from django.utils import timezone

logger = logging.getLogger(__name__)


# =============================================================================
# Booking side effects
# =============================================================================

@shared_task(ignore_result=True)
def deliver_notification(
    user_id: str,
    notification_type: str,
    title: str,
    message: str,
    booking_id: Optional[str] = None,
    email: Optional[str] = None,
) -> str:
    """
    Write an in-app notification.

    When ``email`` is given and the type is mailed, a copy goes out through
    ``send_notification_email``.
    """
    from .services import NotificationService
    from .services.notification_service import EMAIL_NOTIFICATION_TYPES

    with transaction.atomic():
        notification = NotificationService().notify(
            user_id, notification_type, title, message, booking_id=booking_id
        )

    if email and notification_type in EMAIL_NOTIFICATION_TYPES:
        send_notification_email.delay(str(notification.id), email)

    return str(notification.id)


@shared_task(ignore_result=True)
def record_audit(
    actor_id: str,
    action: str,
    entity_type: str,
    entity_id: str,
    old_values: Optional[dict] = None,
    new_values: Optional[dict] = None,
    origin: Optional[dict] = None,
) -> str:
    """Append one audit entry. ``origin`` holds RequestOrigin fields."""
    from .services import AuditService, RequestOrigin

    with transaction.atomic():
        entry = AuditService().record(
            actor_id,
            action,
            entity_type,
            entity_id,
            old_values=old_values,
            new_values=new_values,
            origin=RequestOrigin(**origin) if origin else None,
        )
    return str(entry.id)


@shared_task(ignore_result=True)
def send_notification_email(notification_id: str, recipient_email: str) -> Dict[str, Any]:
    """
    Mail a notification to its recipient.

    Delivery is attempted once; a failure is logged and ``email_sent`` stays
    false.
    """
    from .models import Notification

    try:
        notification = Notification.objects.get(id=notification_id)
    except Notification.DoesNotExist:
        logger.warning(f"Notification {notification_id} vanished before it was mailed")
        return {'success': False, 'error': 'Notification not found'}

    try:
        send_mail(
            subject=notification.title,
            message=notification.message,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[recipient_email],
            fail_silently=False,
        )
    except Exception as e:
        logger.exception(f"Failed to email notification {notification_id}: {e}")
        return {'success': False, 'error': str(e)}

    Notification.objects.filter(id=notification.id).update(email_sent=True)
    logger.info(f"Notification {notification_id} emailed to {recipient_email}")
    return {'success': True, 'recipient': recipient_email}


# =============================================================================
# Scheduled
# =============================================================================

@shared_task
def send_booking_reminders() -> Dict[str, Any]:
    """
    Remind requesters of approved bookings that start soon.

    Runs every minute from beat. Each booking is reminded at most once;
    ``reminder_sent_at`` is claimed before the notification is written.
    Bookings with a requester email also get the reminder by mail.
    """
    from .models import Booking, Notification
    from .services import NotificationService

    now = timezone.now()
    horizon = now + timedelta(minutes=settings.BOOKING_REMINDER_LEAD_MINUTES)
    due = (
        Booking.objects
        .select_related('venue', 'team')
        .filter(
            status=Booking.Status.APPROVED,
            reminder_sent_at__isnull=True,
            start_datetime__gt=now,
            start_datetime__lte=horizon,
        )
    )

    service = NotificationService()
    sent = failed = 0

    for booking in due:
        try:
            with transaction.atomic():
                claimed = Booking.objects.filter(
                    pk=booking.pk, reminder_sent_at__isnull=True
                ).update(reminder_sent_at=now)
                if not claimed:
                    continue
                title, message = service.compose(Notification.Type.BOOKING_REMINDER, booking)
                notification = service.notify(
                    booking.requester_id,
                    Notification.Type.BOOKING_REMINDER,
                    title,
                    message,
                    booking_id=booking.id,
                )
            sent += 1
        except Exception as e:
            failed += 1
            logger.exception(f"Failed to send reminder for booking {booking.id}: {e}")
            continue

        if booking.requester_email:
            send_notification_email.delay(str(notification.id), booking.requester_email)

    if sent or failed:
        logger.info(f"Booking reminders: {sent} sent, {failed} failed")

    return {'sent': sent, 'failed': failed}
