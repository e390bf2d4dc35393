"""
Lockdown settings, picker search and notice schemas.
"""

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class ItemSummary(BaseModel):
    """Picker entry."""
    
    model_config = ConfigDict(from_attributes=True)
    
    id: int
    title: str
    item_type: str
    status: str


class LockdownSettingsUpdate(BaseModel):
    """Administrator submission replacing both id lists."""
    
    locked_ids: List[int] = Field(default_factory=list)
    protected_ids: List[int] = Field(default_factory=list)


class LockdownSettingsResponse(BaseModel):
    """Persisted id lists plus the items they resolve to, for the picker."""
    
    locked_ids: List[int]
    protected_ids: List[int]
    locked: List[ItemSummary] = []
    protected: List[ItemSummary] = []


class SearchResponse(BaseModel):
    items: List[ItemSummary]
    offset: int
    page_size: int


class AdminNoticeResponse(BaseModel):
    level: str
    message: str


class NoticesResponse(BaseModel):
    notices: List[AdminNoticeResponse]
    location: str
