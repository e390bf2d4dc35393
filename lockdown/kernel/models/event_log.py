"""
Append-only event log for the audit trail.

Reversions, prunes and settings changes are recorded here before commit.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import DateTime, String, Text, func, Index, JSON, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from lockdown.kernel.models.base import Base, generate_uuid


class EventType(str, Enum):
    """All event types for the audit log."""
    
    # Item events
    ITEM_UPDATED = "item.updated"
    ITEM_UPDATE_REVERTED = "item.update_reverted"
    ITEM_TRASHED = "item.trashed"
    ITEM_DELETED = "item.deleted"
    
    # Lockdown events
    LOCKDOWN_SETTINGS_SAVED = "lockdown.settings_saved"
    LOCKDOWN_IDS_PRUNED = "lockdown.ids_pruned"


class EventLog(Base):
    """
    Immutable audit event log.
    
    This table is append-only - no updates or deletes allowed.
    """
    
    __tablename__ = "event_logs"
    
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    event_type: Mapped[EventType] = mapped_column(
        String(100),
        nullable=False,
        index=True,
    )
    
    # Entity reference; item ids are integers, settings are keyed by name
    entity_type: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
    )
    entity_id: Mapped[str] = mapped_column(
        String(191),
        nullable=False,
        index=True,
    )
    
    # Actor (None for system events)
    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(),
        nullable=True,
        index=True,
    )
    
    payload: Mapped[dict] = mapped_column(
        JSON,
        nullable=False,
        default=dict,
    )
    ip_address: Mapped[Optional[str]] = mapped_column(
        String(45),  # IPv6 max length
        nullable=True,
    )
    user_agent: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        index=True,
    )
    
    __table_args__ = (
        Index("ix_event_logs_entity", "entity_type", "entity_id"),
        Index("ix_event_logs_type_time", "event_type", "created_at"),
    )
    
    def __repr__(self) -> str:
        return f"<EventLog {self.event_type} {self.entity_type}:{self.entity_id}>"
