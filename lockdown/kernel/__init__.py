"""
Kernel Layer

Host-side foundations the restriction engine plugs into:
- Content items and their persistence
- Key-value settings store
- Role-based capability model
- Append-only audit log
"""

from lockdown.kernel.models import (
    Base,
    User,
    UserRole,
    ContentItem,
    ItemStatus,
    Setting,
    EventLog,
    EventType,
)

__all__ = [
    "Base",
    "User",
    "UserRole",
    "ContentItem",
    "ItemStatus",
    "Setting",
    "EventLog",
    "EventType",
]
