"""
Restrictions Engine - locked and protected content items.

- ItemIdRegistry: the locked/protected id sets
- CapabilityGate: refuses edit/delete capabilities on restricted items
- MutationGuard: reverts status, password and future-date changes
- AdminCapabilityPolicy: the capability that bypasses all of the above
- RevertNotice: one-shot redirect marker shown after a reversion
"""

from lockdown.engines.restrictions.hooks import (
    ExtensionPoint,
    ExtensionRegistry,
)
from lockdown.engines.restrictions.policy import AdminCapabilityPolicy
from lockdown.engines.restrictions.registry import ItemIdRegistry, coerce_ids
from lockdown.engines.restrictions.gate import (
    CapabilityDecision,
    CapabilityGate,
    CapabilityKind,
    CapabilityQuery,
)
from lockdown.engines.restrictions.guard import (
    AmendedUpdate,
    ItemSnapshot,
    MutationGuard,
)
from lockdown.engines.restrictions.notice import (
    AdminNotice,
    RevertNotice,
    consume_notices,
)

__all__ = [
    "ExtensionPoint",
    "ExtensionRegistry",
    "AdminCapabilityPolicy",
    "ItemIdRegistry",
    "coerce_ids",
    "CapabilityDecision",
    "CapabilityGate",
    "CapabilityKind",
    "CapabilityQuery",
    "AmendedUpdate",
    "ItemSnapshot",
    "MutationGuard",
    "AdminNotice",
    "RevertNotice",
    "consume_notices",
]
