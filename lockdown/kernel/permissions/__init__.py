"""
Permission Core - role capabilities and item capability checks.
"""

from lockdown.kernel.permissions.principal import Principal
from lockdown.kernel.permissions.roles import ROLE_CAPABILITIES, capabilities_for_role
from lockdown.kernel.permissions.permission_service import (
    DELETE_ITEM,
    EDIT_ITEM,
    CapabilityDenied,
    PermissionService,
)

__all__ = [
    "Principal",
    "ROLE_CAPABILITIES",
    "capabilities_for_role",
    "DELETE_ITEM",
    "EDIT_ITEM",
    "CapabilityDenied",
    "PermissionService",
]
