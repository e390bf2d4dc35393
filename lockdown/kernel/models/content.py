"""
Content item model - the posts, pages and other entries that can be
locked or protected.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from lockdown.kernel.models.base import Base, TimestampMixin


class ItemStatus(str, Enum):
    """Publication status of a content item."""
    PUBLISH = "publish"
    FUTURE = "future"
    DRAFT = "draft"
    PENDING = "pending"
    PRIVATE = "private"
    TRASH = "trash"


class ContentItem(Base, TimestampMixin):
    """
    A single content item.

    ``published_at`` is the date as submitted. SQLite keeps only its wall
    time, so comparisons use ``published_at_gmt``, the same instant
    normalized to UTC.
    """
    
    __tablename__ = "content_items"
    
    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )
    item_type: Mapped[str] = mapped_column(
        String(50),
        default="post",
        nullable=False,
    )
    title: Mapped[str] = mapped_column(
        String(500),
        default="",
        nullable=False,
    )
    content: Mapped[str] = mapped_column(
        Text,
        default="",
        nullable=False,
    )
    status: Mapped[ItemStatus] = mapped_column(
        String(20),
        default=ItemStatus.DRAFT,
        nullable=False,
    )
    password: Mapped[str] = mapped_column(
        String(255),
        default="",
        nullable=False,
    )
    published_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    published_at_gmt: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    author_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    
    __table_args__ = (
        Index("ix_content_items_type_status", "item_type", "status"),
    )
    
    def __repr__(self) -> str:
        return f"<ContentItem {self.item_type} {self.id} {self.status}>"
