"""
Kernel Data Models

Core SQLAlchemy models: users, content items, the settings store and the
audit log.
"""

from lockdown.kernel.models.base import Base, TimestampMixin, generate_uuid
from lockdown.kernel.models.user import User, UserRole
from lockdown.kernel.models.content import ContentItem, ItemStatus
from lockdown.kernel.models.setting import Setting
from lockdown.kernel.models.event_log import EventLog, EventType

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    "generate_uuid",
    # User
    "User",
    "UserRole",
    # Content
    "ContentItem",
    "ItemStatus",
    # Settings
    "Setting",
    # Event Log
    "EventLog",
    "EventType",
]
