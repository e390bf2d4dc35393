"""
Content item endpoints.

Every mutation runs through the restriction engine: capability checks via
the CapabilityGate, updates via the MutationGuard, permanent deletes prune
the lockdown lists.
"""

from typing import List

from fastapi import APIRouter, HTTPException, Query, status

from lockdown.api.deps import (
    Content,
    CurrentPrincipal,
    DbSession,
    LockdownAdmin,
    Permissions,
    Registry,
)
from lockdown.kernel.events.event_store import EventStore
from lockdown.kernel.permissions import DELETE_ITEM, EDIT_ITEM
from lockdown.schemas.common import ErrorResponse
from lockdown.schemas.item import (
    ItemCapabilitiesResponse,
    ItemCreate,
    ItemDeleteResponse,
    ItemEventResponse,
    ItemResponse,
    ItemUpdate,
    ItemUpdateResponse,
)

router = APIRouter()

_DENIED = {
    status.HTTP_403_FORBIDDEN: {"model": ErrorResponse},
    status.HTTP_404_NOT_FOUND: {"model": ErrorResponse},
}


@router.post("", response_model=ItemResponse, status_code=status.HTTP_201_CREATED)
async def create_item(
    data: ItemCreate,
    principal: CurrentPrincipal,
    content: Content,
):
    """Create a content item owned by the acting principal."""
    item = await content.create_item(
        principal,
        item_type=data.item_type,
        title=data.title,
        content=data.content,
        status=data.status,
        password=data.password,
        published_at=data.published_at,
    )
    return ItemResponse.model_validate(item)


@router.get("/{item_id}", response_model=ItemResponse)
async def get_item(
    item_id: int,
    principal: CurrentPrincipal,
    content: Content,
):
    """Get an item by ID."""
    item = await content.get_item(item_id)
    if not item:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Item not found",
        )
    return ItemResponse.model_validate(item)


@router.patch("/{item_id}", response_model=ItemUpdateResponse, responses=_DENIED)
async def update_item(
    item_id: int,
    data: ItemUpdate,
    principal: CurrentPrincipal,
    content: Content,
):
    """
    Update an item.

    On a published protected item, status, password and future-date changes
    by non-administrators are reverted; the response's ``location`` then
    carries the one-shot notice marker.
    """
    changes = data.model_dump(exclude_unset=True, exclude={"redirect_to"})
    result = await content.update_item(
        principal,
        item_id,
        changes,
        location=data.redirect_to,
    )
    return ItemUpdateResponse(
        item=ItemResponse.model_validate(result.item),
        amended=result.amended,
        reverted_fields=list(result.reverted),
        location=result.location,
    )


@router.delete("/{item_id}", response_model=ItemDeleteResponse, responses=_DENIED)
async def delete_item(
    item_id: int,
    principal: CurrentPrincipal,
    content: Content,
    force: bool = Query(False, description="Delete permanently instead of trashing"),
):
    """Trash an item, or delete it permanently with ``force``."""
    result = await content.delete_item(principal, item_id, force=force)
    return ItemDeleteResponse(
        item_id=result.item_id,
        trashed=result.trashed,
        pruned=result.pruned,
    )


@router.get("/{item_id}/capabilities", response_model=ItemCapabilitiesResponse)
async def get_item_capabilities(
    item_id: int,
    principal: CurrentPrincipal,
    content: Content,
    permissions: Permissions,
    registry: Registry,
):
    """Effective edit/delete capabilities of the acting principal on an item."""
    item = await content.get_item_or_raise(item_id)
    return ItemCapabilitiesResponse(
        item_id=item.id,
        edit=permissions.user_can(principal, EDIT_ITEM, item).allowed,
        delete=permissions.user_can(principal, DELETE_ITEM, item).allowed,
        locked=registry.is_locked(item.id),
        protected=registry.is_protected(item.id),
    )


@router.get("/{item_id}/history", response_model=List[ItemEventResponse])
async def get_item_history(
    item_id: int,
    admin: LockdownAdmin,
    db: DbSession,
    limit: int = Query(50, ge=1, le=200),
):
    """Audit log entries for an item, newest first, including reverted updates."""
    events = await EventStore(db).get_entity_history("item", item_id, limit=limit)
    return [ItemEventResponse.model_validate(e) for e in events]
