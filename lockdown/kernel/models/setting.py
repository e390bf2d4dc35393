"""
Key-value settings record.
"""

from typing import Any

from sqlalchemy import JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from lockdown.kernel.models.base import Base, TimestampMixin


class Setting(Base, TimestampMixin):
    """One named configuration value, stored as JSON and overwritten wholesale."""
    
    __tablename__ = "settings"
    
    key: Mapped[str] = mapped_column(
        String(191),
        primary_key=True,
    )
    value: Mapped[Any] = mapped_column(
        JSON,
        nullable=True,
    )
    
    def __repr__(self) -> str:
        return f"<Setting {self.key}>"
