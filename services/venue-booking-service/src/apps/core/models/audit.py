# services/venue-booking-service/src/apps/core/models/audit.py
"""
Audit Log Model

Append-only record of every mutation, with before/after snapshots.
"""

from django.db import models

from shared.common.mixins import UUIDPrimaryKeyMixin, AppendOnlyMixin


class AuditLog(AppendOnlyMixin, UUIDPrimaryKeyMixin):

    class Action(models.TextChoices):
        CREATE = 'CREATE', 'Create'
        UPDATE = 'UPDATE', 'Update'
        DELETE = 'DELETE', 'Delete'

    actor_id = models.UUIDField(db_index=True)
    action = models.CharField(max_length=10, choices=Action.choices)
    entity_type = models.CharField(max_length=50)
    entity_id = models.CharField(max_length=64)
    old_values = models.JSONField(null=True, blank=True)
    new_values = models.JSONField(null=True, blank=True)

    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.TextField(blank=True)
    request_id = models.CharField(max_length=64, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'audit_logs'
        ordering = ['-created_at']
        indexes = [
            models.Index(
                fields=['entity_type', 'entity_id', 'created_at'],
                name='idx_audit_entity'
            ),
        ]

    def __str__(self):
        return f"{self.action} {self.entity_type}:{self.entity_id} by {self.actor_id}"
