# services/venue-booking-service/src/apps/core/services/audit_service.py
"""
Audit Service
"""

import logging
import uuid
from typing import Optional

from django.db.models import QuerySet

from apps.core.models import AuditLog

from .authorization import Action, Principal, authorize
from .side_effects import RequestOrigin

logger = logging.getLogger(__name__)


class AuditService:

    def record(
        self,
        actor_id: uuid.UUID,
        action: str,
        entity_type: str,
        entity_id,
        old_values: Optional[dict] = None,
        new_values: Optional[dict] = None,
        origin: Optional[RequestOrigin] = None,
    ) -> AuditLog:
        origin = origin or RequestOrigin()
        entry = AuditLog.objects.create(
            actor_id=actor_id,
            action=action,
            entity_type=entity_type,
            entity_id=str(entity_id),
            old_values=old_values,
            new_values=new_values,
            ip_address=origin.ip_address,
            user_agent=origin.user_agent,
            request_id=origin.request_id,
        )
        logger.debug(f"Audit {action} {entity_type}:{entity_id} by {actor_id}")
        return entry

    def list_logs(
        self,
        principal: Optional[Principal],
        actor_id: Optional[uuid.UUID] = None,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
    ) -> QuerySet:
        """Audit trail, newest first. Superadmin only."""
        authorize(principal, Action.VIEW_AUDIT_LOG)

        queryset = AuditLog.objects.all()
        if actor_id:
            queryset = queryset.filter(actor_id=actor_id)
        if entity_type:
            queryset = queryset.filter(entity_type=entity_type)
        if entity_id:
            queryset = queryset.filter(entity_id=str(entity_id))
        return queryset.order_by('-created_at')
