"""
Shared Constants Module.

Constants shared by the venue booking services.
"""
from enum import Enum


# =============================================================================
# USER & AUTHENTICATION
# =============================================================================

class UserRole(str, Enum):
    """Roles carried in the access token."""
    SUPERADMIN = "superadmin"
    MANAGER = "manager"
    CUSTOMER = "customer"
