"""
Permission service - the host's capability checks.

Item capabilities are first mapped onto primitive role capabilities
(ownership and publication status decide which), then every check is routed
through the CapabilityGate so locked and protected items are enforced
uniformly.
"""

from typing import List, Optional

from lockdown.engines.restrictions.gate import (
    CapabilityDecision,
    CapabilityGate,
    CapabilityQuery,
)
from lockdown.kernel.models.content import ContentItem, ItemStatus
from lockdown.kernel.permissions import roles
from lockdown.kernel.permissions.principal import Principal

EDIT_ITEM = "edit_item"
DELETE_ITEM = "delete_item"

# Item capability -> (own, others', published) primitives
_ITEM_CAPABILITY_MAP = {
    EDIT_ITEM: (roles.EDIT_ITEMS, roles.EDIT_OTHERS_ITEMS, roles.EDIT_PUBLISHED_ITEMS),
    DELETE_ITEM: (roles.DELETE_ITEMS, roles.DELETE_OTHERS_ITEMS, roles.DELETE_PUBLISHED_ITEMS),
}

_PUBLISHED_STATUSES = {ItemStatus.PUBLISH.value, ItemStatus.PRIVATE.value}


class CapabilityDenied(Exception):
    """Raised when a principal lacks a capability."""

    def __init__(self, decision: CapabilityDecision, item_id: Optional[int] = None):
        self.decision = decision
        self.item_id = item_id
        if decision.restricted:
            message = f"Item {item_id} is {decision.reason}; '{decision.capability}' is not allowed"
        else:
            message = f"Missing capability '{decision.capability}'"
        super().__init__(message)


class PermissionService:
    """
    Service for checking capabilities.

    Usage:
        permissions = PermissionService(gate)
        if permissions.user_can(principal, EDIT_ITEM, item):
            ...
    """

    def __init__(self, gate: CapabilityGate):
        self.gate = gate

    def map_item_capability(
        self,
        capability: str,
        principal: Principal,
        item: Optional[ContentItem],
    ) -> List[str]:
        """
        Primitive capabilities required for ``capability`` on ``item``.

        Capabilities that are not item capabilities, or checks without an
        item, require themselves.
        """
        primitives = _ITEM_CAPABILITY_MAP.get(capability)
        if primitives is None or item is None:
            return [capability]

        own, others, published = primitives
        required = [own]
        if item.author_id is None or item.author_id != principal.user_id:
            required.append(others)
        status = item.status.value if hasattr(item.status, "value") else item.status
        if status in _PUBLISHED_STATUSES:
            required.append(published)
        return required

    def user_can(
        self,
        principal: Principal,
        capability: str,
        item: Optional[ContentItem] = None,
    ) -> CapabilityDecision:
        """Decide ``capability`` for ``principal``, optionally on ``item``."""
        required = self.map_item_capability(capability, principal, item)
        host_allowed = all(principal.has(cap) for cap in required)
        query = CapabilityQuery(
            capability=capability,
            granted=principal.capabilities,
            item_id=item.id if item is not None else None,
            host_allowed=host_allowed,
        )
        return self.gate.evaluate(query)

    def require(
        self,
        principal: Principal,
        capability: str,
        item: Optional[ContentItem] = None,
    ) -> CapabilityDecision:
        """Like :meth:`user_can` but raises CapabilityDenied when refused."""
        decision = self.user_can(principal, capability, item)
        if not decision.allowed:
            raise CapabilityDenied(decision, item.id if item is not None else None)
        return decision
