# services/venue-booking-service/src/apps/core/services/side_effects.py
"""
Side-effect outbox

Notifications and audit records are best-effort: they must never undo or
fail the booking mutation that triggered them. Work is collected during the
operation and, once the surrounding transaction commits, handed to Celery.
The request only pays for the enqueue; the writes happen on a worker.
A failing effect is logged and counted, then dispatch moves on to the next
one. Nothing is retried.
"""

import logging
from dataclasses import asdict, dataclass
from typing import Any, Callable, List, Optional, Tuple

from django.db import DEFAULT_DB_ALIAS, transaction

from apps.core import tasks
from shared.common.middleware import get_client_ip

logger = logging.getLogger(__name__)


def _id(value) -> Optional[str]:
    return None if value is None else str(value)


@dataclass(frozen=True)
class RequestOrigin:
    """Where a mutation came from, for the audit trail."""

    ip_address: Optional[str] = None
    user_agent: str = ''
    request_id: str = ''

    @classmethod
    def from_request(cls, request) -> 'RequestOrigin':
        return cls(
            ip_address=get_client_ip(request) or None,
            user_agent=request.META.get('HTTP_USER_AGENT', ''),
            request_id=getattr(request, 'request_id', '') or '',
        )


class SideEffectOutbox:
    """
    Queue of callables run after commit.

    Usage inside an atomic block::

        outbox = SideEffectOutbox()
        outbox.audit(actor_id, AuditLog.Action.CREATE, 'booking', booking.id, ...)
        outbox.commit()

    If the transaction rolls back, nothing queued runs.
    """

    def __init__(self, using: str = DEFAULT_DB_ALIAS):
        self.using = using
        self._effects: List[Tuple[str, Callable, tuple, dict]] = []
        self.dispatched = 0
        self.failed = 0

    def __len__(self) -> int:
        return len(self._effects)

    def add(self, name: str, func: Callable, *args: Any, **kwargs: Any) -> None:
        self._effects.append((name, func, args, kwargs))

    def notify(
        self,
        user_id,
        notification_type: str,
        title: str,
        message: str,
        booking_id=None,
        email: Optional[str] = None,
    ) -> None:
        self.add(
            f"notify:{notification_type}",
            tasks.deliver_notification.delay,
            _id(user_id),
            str(notification_type),
            title,
            message,
            booking_id=_id(booking_id),
            email=email or None,
        )

    def audit(
        self,
        actor_id,
        action: str,
        entity_type: str,
        entity_id,
        old_values: Optional[dict] = None,
        new_values: Optional[dict] = None,
        origin: Optional[RequestOrigin] = None,
    ) -> None:
        self.add(
            f"audit:{action}",
            tasks.record_audit.delay,
            _id(actor_id),
            str(action),
            entity_type,
            _id(entity_id),
            old_values=old_values,
            new_values=new_values,
            origin=asdict(origin) if origin else None,
        )

    def commit(self) -> None:
        """Hand the queue to the transaction; runs immediately in autocommit."""
        if self._effects:
            transaction.on_commit(self.dispatch, using=self.using)

    def dispatch(self) -> None:
        effects, self._effects = self._effects, []
        for name, func, args, kwargs in effects:
            try:
                with transaction.atomic(using=self.using):
                    func(*args, **kwargs)
            except Exception as exc:
                self.failed += 1
                logger.exception(
                    f"Side effect {name} failed: {exc}",
                    extra={'side_effect': name, 'exception_type': type(exc).__name__}
                )
            else:
                self.dispatched += 1
