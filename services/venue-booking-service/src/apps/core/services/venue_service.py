# services/venue-booking-service/src/apps/core/services/venue_service.py
"""
Venue and system configuration management
"""

import logging
import uuid
from datetime import datetime
from typing import Optional

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.db.models import QuerySet
from django.forms.models import model_to_dict

from apps.core.models import AuditLog, SystemConfig, Venue, VenueBlackout

from . import BookingNotFoundError, BookingValidationError
from .authorization import Action, Principal, Relation, authorize, require_principal
from .conflict_detector import find_conflicts
from .side_effects import RequestOrigin, SideEffectOutbox

logger = logging.getLogger(__name__)


class VenueService:
    """Blackout windows for venues."""

    def get_venue(self, venue_id) -> Venue:
        try:
            return Venue.objects.get(id=venue_id)
        except (Venue.DoesNotExist, DjangoValidationError, ValueError):
            raise BookingNotFoundError(f"Venue {venue_id} not found")

    def list_blackouts(self, venue_id, start: Optional[datetime] = None, end: Optional[datetime] = None) -> QuerySet:
        venue = self.get_venue(venue_id)
        queryset = VenueBlackout.objects.filter(venue=venue)
        if end:
            queryset = queryset.filter(start_datetime__lt=end)
        if start:
            queryset = queryset.filter(end_datetime__gt=start)
        return queryset.order_by('start_datetime')

    @transaction.atomic
    def create_blackout(
        self,
        principal: Optional[Principal],
        venue_id,
        start: datetime,
        end: datetime,
        reason: str = '',
        origin: Optional[RequestOrigin] = None,
    ) -> VenueBlackout:
        principal = require_principal(principal)
        venue = self.get_venue(venue_id)
        relations = {Relation.MANAGES_VENUE} if venue.manager_id == principal.id else set()
        authorize(principal, Action.MANAGE_VENUE, relations)

        if start >= end:
            raise BookingValidationError('start_datetime must be before end_datetime', field='end_datetime')

        blackout = VenueBlackout.objects.create(
            venue=venue,
            start_datetime=start,
            end_datetime=end,
            reason=reason or '',
            created_by=principal.id,
        )

        # Existing bookings are left alone; managers cancel them explicitly
        affected = find_conflicts(venue, start, end).count()
        if affected:
            logger.warning(
                f"Blackout {blackout.id} on venue {venue.id} overlaps {affected} active bookings"
            )

        outbox = SideEffectOutbox()
        outbox.audit(
            principal.id,
            AuditLog.Action.CREATE,
            'venue_blackout',
            blackout.id,
            new_values={
                'venue_id': str(venue.id),
                'start_datetime': start.isoformat(),
                'end_datetime': end.isoformat(),
                'reason': blackout.reason,
            },
            origin=origin,
        )
        outbox.commit()
        return blackout


class SystemConfigService:
    """Booking limits shared by every venue."""

    EDITABLE_FIELDS = ('two_hour_limit_enabled', 'max_booking_duration_minutes')

    def get(self) -> SystemConfig:
        return SystemConfig.load()

    @transaction.atomic
    def update(
        self,
        principal: Optional[Principal],
        origin: Optional[RequestOrigin] = None,
        **changes,
    ) -> SystemConfig:
        principal = authorize(principal, Action.MANAGE_SYSTEM_CONFIG)

        unknown = set(changes) - set(self.EDITABLE_FIELDS)
        if unknown:
            raise BookingValidationError(f"Unknown settings: {', '.join(sorted(unknown))}")
        if 'max_booking_duration_minutes' in changes and int(changes['max_booking_duration_minutes']) < 1:
            raise BookingValidationError(
                'max_booking_duration_minutes must be positive', field='max_booking_duration_minutes'
            )

        config = SystemConfig.objects.select_for_update().get(pk=SystemConfig.load().pk)
        old_values = model_to_dict(config, fields=self.EDITABLE_FIELDS)
        for field, value in changes.items():
            setattr(config, field, value)
        config.updated_by = principal.id
        config.save()

        outbox = SideEffectOutbox()
        outbox.audit(
            principal.id,
            AuditLog.Action.UPDATE,
            'system_config',
            config.pk,
            old_values=old_values,
            new_values=model_to_dict(config, fields=self.EDITABLE_FIELDS),
            origin=origin,
        )
        outbox.commit()

        logger.info(f"System config updated by {principal.id}: {changes}")
        return config
