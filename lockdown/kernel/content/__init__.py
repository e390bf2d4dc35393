"""
Content Core - item persistence and mutation pipeline.
"""

from lockdown.kernel.content.content_service import (
    ContentService,
    DeleteResult,
    ItemNotFound,
    UpdateResult,
)

__all__ = [
    "ContentService",
    "DeleteResult",
    "ItemNotFound",
    "UpdateResult",
]
