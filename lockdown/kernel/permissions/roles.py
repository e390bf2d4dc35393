"""
Role to capability table.

Primitive capabilities are what a principal holds; item capabilities
("edit_item", "delete_item") are mapped onto primitives per item by
PermissionService.
"""

from typing import Dict, FrozenSet, Union

from lockdown.kernel.models.user import UserRole

READ = "read"
EDIT_ITEMS = "edit_items"
EDIT_OTHERS_ITEMS = "edit_others_items"
EDIT_PUBLISHED_ITEMS = "edit_published_items"
PUBLISH_ITEMS = "publish_items"
DELETE_ITEMS = "delete_items"
DELETE_OTHERS_ITEMS = "delete_others_items"
DELETE_PUBLISHED_ITEMS = "delete_published_items"
MANAGE_SETTINGS = "manage_settings"

_AUTHOR = frozenset({
    READ,
    EDIT_ITEMS,
    EDIT_PUBLISHED_ITEMS,
    PUBLISH_ITEMS,
    DELETE_ITEMS,
    DELETE_PUBLISHED_ITEMS,
})
_EDITOR = _AUTHOR | {EDIT_OTHERS_ITEMS, DELETE_OTHERS_ITEMS}

ROLE_CAPABILITIES: Dict[UserRole, FrozenSet[str]] = {
    UserRole.ADMINISTRATOR: _EDITOR | {MANAGE_SETTINGS},
    UserRole.EDITOR: _EDITOR,
    UserRole.AUTHOR: _AUTHOR,
    UserRole.CONTRIBUTOR: frozenset({READ, EDIT_ITEMS, DELETE_ITEMS}),
    UserRole.SUBSCRIBER: frozenset({READ}),
}


def capabilities_for_role(role: Union[UserRole, str]) -> FrozenSet[str]:
    """Primitive capabilities of ``role``; unknown roles get none."""
    try:
        return ROLE_CAPABILITIES[UserRole(role)]
    except ValueError:
        return frozenset()
