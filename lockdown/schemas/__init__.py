"""
Pydantic schemas for API request/response validation.
"""

from lockdown.schemas.common import ErrorResponse, HealthResponse
from lockdown.schemas.item import (
    ItemCreate,
    ItemUpdate,
    ItemResponse,
    ItemUpdateResponse,
    ItemDeleteResponse,
    ItemCapabilitiesResponse,
    ItemEventResponse,
)
from lockdown.schemas.lockdown import (
    ItemSummary,
    LockdownSettingsUpdate,
    LockdownSettingsResponse,
    SearchResponse,
    AdminNoticeResponse,
    NoticesResponse,
)

__all__ = [
    "ErrorResponse",
    "HealthResponse",
    "ItemCreate",
    "ItemUpdate",
    "ItemResponse",
    "ItemUpdateResponse",
    "ItemDeleteResponse",
    "ItemCapabilitiesResponse",
    "ItemEventResponse",
    "ItemSummary",
    "LockdownSettingsUpdate",
    "LockdownSettingsResponse",
    "SearchResponse",
    "AdminNoticeResponse",
    "NoticesResponse",
]
