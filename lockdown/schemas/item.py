"""
Content item schemas.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from lockdown.kernel.models.content import ItemStatus


class ItemCreate(BaseModel):
    """Item creation request."""
    
    item_type: str = Field("post", min_length=1, max_length=50)
    title: str = Field("", max_length=500)
    content: str = ""
    status: ItemStatus = ItemStatus.DRAFT
    password: str = Field("", max_length=255)
    published_at: Optional[datetime] = None


class ItemUpdate(BaseModel):
    """Item update request. Unset fields keep their stored values."""
    
    title: Optional[str] = Field(None, max_length=500)
    content: Optional[str] = None
    status: Optional[ItemStatus] = None
    password: Optional[str] = Field(None, max_length=255)
    published_at: Optional[datetime] = None
    redirect_to: Optional[str] = None

    @field_validator("title", "content", "status")
    @classmethod
    def reject_null(cls, v):
        # Omit the field to keep the stored value
        if v is None:
            raise ValueError("Field may not be null")
        return v


class ItemResponse(BaseModel):
    """Item response."""
    
    model_config = ConfigDict(from_attributes=True)
    
    id: int
    item_type: str
    title: str
    content: str
    status: str
    password: str
    published_at: Optional[datetime]
    published_at_gmt: Optional[datetime]
    author_id: Optional[uuid.UUID]
    created_at: datetime
    updated_at: datetime


class ItemUpdateResponse(BaseModel):
    """Item update result, with any fields the lockdown forced back."""
    
    item: ItemResponse
    amended: bool = False
    reverted_fields: List[str] = []
    location: str


class ItemDeleteResponse(BaseModel):
    item_id: int
    trashed: bool
    pruned: bool = False


class ItemCapabilitiesResponse(BaseModel):
    """Effective capabilities of the acting principal on one item."""
    
    item_id: int
    edit: bool
    delete: bool
    locked: bool
    protected: bool


class ItemEventResponse(BaseModel):
    """One audit log entry for an item."""
    
    model_config = ConfigDict(from_attributes=True)
    
    id: uuid.UUID
    event_type: str
    user_id: Optional[uuid.UUID]
    payload: dict
    created_at: datetime
