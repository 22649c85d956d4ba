# services/venue-booking-service/src/apps/core/services/authorization.py
"""
Authorization Policy

One table decides every booking action:

    (role, action) -> ALWAYS | NEVER | any-of(relations)

The table is pure data and ``is_allowed`` is a pure function over it, so the
policy is testable without a database or a request. Relations such as "manages
this venue" are computed by the caller from freshly loaded rows and passed in.
Anything missing from the table is denied.
"""

import logging
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Iterable, Optional

from shared.common.constants import UserRole

from . import BookingUnauthorizedError

logger = logging.getLogger(__name__)


class Action(str, Enum):
    CREATE_BOOKING = 'create_booking'
    BOOK_ON_BEHALF = 'book_on_behalf'
    READ_BOOKING = 'read_booking'
    DECIDE_BOOKING = 'decide_booking'
    COMPLETE_BOOKING = 'complete_booking'
    CANCEL_BOOKING = 'cancel_booking'
    DELETE_BOOKING = 'delete_booking'
    MANAGE_VENUE = 'manage_venue'
    MANAGE_TEAM = 'manage_team'
    VIEW_AUDIT_LOG = 'view_audit_log'
    MANAGE_SYSTEM_CONFIG = 'manage_system_config'


class Relation(str, Enum):
    MANAGES_VENUE = 'manages_venue'
    MANAGES_TEAM = 'manages_team'
    REQUESTER = 'requester'
    SAME_COUNTRY = 'same_country'


ALWAYS = frozenset({'*'})


def any_of(*relations: Relation) -> FrozenSet:
    return frozenset(relations)


SUPERADMIN, MANAGER, CUSTOMER = UserRole.SUPERADMIN, UserRole.MANAGER, UserRole.CUSTOMER

POLICY = {
    # superadmin
    **{(SUPERADMIN, action): ALWAYS for action in Action},

    # manager
    (MANAGER, Action.CREATE_BOOKING): ALWAYS,
    (MANAGER, Action.BOOK_ON_BEHALF): any_of(Relation.MANAGES_VENUE, Relation.MANAGES_TEAM),
    (MANAGER, Action.READ_BOOKING): ALWAYS,
    (MANAGER, Action.DECIDE_BOOKING): any_of(Relation.MANAGES_VENUE),
    (MANAGER, Action.COMPLETE_BOOKING): any_of(Relation.MANAGES_VENUE),
    (MANAGER, Action.CANCEL_BOOKING): any_of(Relation.MANAGES_VENUE, Relation.MANAGES_TEAM),
    (MANAGER, Action.MANAGE_VENUE): any_of(Relation.MANAGES_VENUE),
    (MANAGER, Action.MANAGE_TEAM): any_of(Relation.MANAGES_TEAM),

    # customer
    (CUSTOMER, Action.CREATE_BOOKING): ALWAYS,
    (CUSTOMER, Action.READ_BOOKING): any_of(Relation.REQUESTER, Relation.SAME_COUNTRY),
    (CUSTOMER, Action.CANCEL_BOOKING): any_of(Relation.REQUESTER),
}


@dataclass(frozen=True)
class Principal:
    """The authenticated actor of a core call."""

    id: uuid.UUID
    role: str
    country_code: Optional[str] = None
    email: Optional[str] = None

    @classmethod
    def from_user(cls, user) -> Optional['Principal']:
        """Build from an authenticated request user; None when anonymous."""
        if user is None or not getattr(user, 'is_authenticated', False):
            return None
        return cls(
            id=uuid.UUID(str(user.id)),
            role=getattr(user, 'role', None),
            country_code=getattr(user, 'country_code', None),
            email=getattr(user, 'email', None),
        )


def _rule(role, action: Action) -> FrozenSet:
    try:
        role = UserRole(role)
    except ValueError:
        return frozenset()
    return POLICY.get((role, action), frozenset())


def is_allowed(role, action: Action, relations: Iterable[Relation] = ()) -> bool:
    """True when ``role`` may perform ``action`` given the relations that hold."""
    rule = _rule(role, action)
    if rule is ALWAYS:
        return True
    return bool(rule & frozenset(relations))


def allowed_without_relation(role, action: Action) -> bool:
    return _rule(role, action) is ALWAYS


def qualifying_relations(role, action: Action) -> FrozenSet:
    """Relations that would grant ``action``; used to scope list queries."""
    rule = _rule(role, action)
    return frozenset() if rule is ALWAYS else rule


def require_principal(principal: Optional[Principal]) -> Principal:
    if principal is None:
        raise BookingUnauthorizedError('Authentication required')
    return principal


def authorize(principal: Optional[Principal], action: Action, relations: Iterable[Relation] = ()) -> Principal:
    """Raise BookingUnauthorizedError unless the policy allows the action."""
    principal = require_principal(principal)
    relations = frozenset(relations)
    if not is_allowed(principal.role, action, relations):
        logger.info(
            f"Denied {action.value} for {principal.role} {principal.id}",
            extra={'relations': sorted(r.value for r in relations)}
        )
        raise BookingUnauthorizedError(
            f"Role '{principal.role}' may not perform {action.value}",
            action=action.value,
        )
    return principal
