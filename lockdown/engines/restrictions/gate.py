"""
Capability gate - amends the host's capability decisions for locked and
protected items.

Locked items refuse every recognized capability kind; protected items
refuse only the delete kind. Edits to protected items are allowed here and
partially reverted later by the MutationGuard.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional

from lockdown.engines.restrictions.hooks import ExtensionPoint, ExtensionRegistry
from lockdown.engines.restrictions.policy import AdminCapabilityPolicy
from lockdown.engines.restrictions.registry import ItemIdRegistry


class CapabilityKind(str, Enum):
    """How a recognized capability is restricted."""
    EDIT = "edit"      # refused on locked items
    DELETE = "delete"  # refused on locked and protected items


DEFAULT_CAPABILITIES: Dict[str, CapabilityKind] = {
    "edit_item": CapabilityKind.EDIT,
    "delete_item": CapabilityKind.DELETE,
}


@dataclass(frozen=True)
class CapabilityQuery:
    """One capability check, as decided by the host before restrictions."""

    capability: str
    granted: FrozenSet[str] = frozenset()
    item_id: Optional[int] = None
    host_allowed: bool = True


@dataclass(frozen=True)
class CapabilityDecision:
    """Outcome of a capability check."""

    capability: str
    allowed: bool
    restricted: bool = False        # True when the gate, not the host, refused
    reason: Optional[str] = None    # "locked" or "protected" when restricted

    def __bool__(self) -> bool:
        return self.allowed


def _as_kind(value: Any) -> Optional[CapabilityKind]:
    if isinstance(value, CapabilityKind):
        return value
    if isinstance(value, str):
        try:
            return CapabilityKind(value)
        except ValueError:
            pass
    # Any other truthy marker counts as the stricter kind
    return CapabilityKind.DELETE if value else None


class CapabilityGate:
    """Evaluates capability queries against the item id registry."""

    def __init__(
        self,
        registry: ItemIdRegistry,
        policy: AdminCapabilityPolicy,
        extensions: ExtensionRegistry,
    ):
        self.registry = registry
        self.policy = policy
        self.extensions = extensions

    def recognized_capabilities(self) -> Dict[str, CapabilityKind]:
        capabilities = self.extensions.apply(
            ExtensionPoint.CAPABILITIES, dict(DEFAULT_CAPABILITIES)
        )
        if not isinstance(capabilities, dict):
            return dict(DEFAULT_CAPABILITIES)
        recognized = {}
        for name, value in capabilities.items():
            kind = _as_kind(value)
            if kind is not None:
                recognized[name] = kind
        return recognized

    def evaluate(self, query: CapabilityQuery) -> CapabilityDecision:
        passthrough = CapabilityDecision(query.capability, query.host_allowed)

        if not self.registry.has_any():
            return passthrough

        kind = self.recognized_capabilities().get(query.capability)
        if kind is None:
            return passthrough

        if self.policy.is_bypass(query.granted):
            return passthrough

        if not query.item_id:
            return passthrough

        reason = None
        if self.registry.is_locked(query.item_id):
            reason = "locked"
        elif kind is CapabilityKind.DELETE and self.registry.is_protected(query.item_id):
            reason = "protected"

        if reason is None or not query.host_allowed:
            return passthrough

        return CapabilityDecision(query.capability, False, restricted=True, reason=reason)
