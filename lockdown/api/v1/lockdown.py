"""
Lockdown administration endpoints: the locked/protected lists, the picker
search and the one-shot reversion notices.
"""

from fastapi import APIRouter, Query, Request

from lockdown.api.deps import (
    AppSettings,
    DbSession,
    LockdownAdmin,
    Registry,
    Search,
    get_client_ip,
)
from lockdown.engines.restrictions import consume_notices
from lockdown.kernel.events.event_store import EventStore
from lockdown.kernel.models.event_log import EventType
from lockdown.schemas.lockdown import (
    AdminNoticeResponse,
    ItemSummary,
    LockdownSettingsResponse,
    LockdownSettingsUpdate,
    NoticesResponse,
    SearchResponse,
)

router = APIRouter()


async def _settings_response(registry, search) -> LockdownSettingsResponse:
    locked_ids = registry.raw_locked_ids()
    protected_ids = registry.raw_protected_ids()
    items = await search.get_items(sorted(set(locked_ids) | set(protected_ids)))
    return LockdownSettingsResponse(
        locked_ids=locked_ids,
        protected_ids=protected_ids,
        locked=[ItemSummary.model_validate(i) for i in items if registry.is_locked(i.id)],
        protected=[ItemSummary.model_validate(i) for i in items if registry.is_protected(i.id)],
    )


@router.get("/settings", response_model=LockdownSettingsResponse)
async def get_lockdown_settings(
    admin: LockdownAdmin,
    registry: Registry,
    search: Search,
):
    """Persisted lists plus the items they resolve to, for preloading the picker."""
    return await _settings_response(registry, search)


@router.put("/settings", response_model=LockdownSettingsResponse)
async def save_lockdown_settings(
    request: Request,
    data: LockdownSettingsUpdate,
    admin: LockdownAdmin,
    registry: Registry,
    search: Search,
    db: DbSession,
):
    """Replace both lists."""
    await registry.save(data.locked_ids, data.protected_ids)
    await EventStore(db).log(
        event_type=EventType.LOCKDOWN_SETTINGS_SAVED,
        entity_type="setting",
        entity_id=registry.settings_key,
        user_id=admin.user_id,
        payload={
            "locked_ids": registry.raw_locked_ids(),
            "protected_ids": registry.raw_protected_ids(),
        },
        ip_address=get_client_ip(request),
    )
    return await _settings_response(registry, search)


@router.get("/search", response_model=SearchResponse)
async def search_items(
    admin: LockdownAdmin,
    search: Search,
    settings: AppSettings,
    term: str = Query("", max_length=200),
    offset: int = Query(0, ge=0),
):
    """One page of pickable items matching ``term``."""
    items = await search.search(term, offset)
    return SearchResponse(
        items=[ItemSummary.model_validate(i) for i in items],
        offset=offset,
        page_size=settings.search_page_size,
    )


@router.get("/notices", response_model=NoticesResponse)
async def get_notices(
    location: str = Query(..., description="URL of the screen being rendered"),
):
    """
    Notices for a screen, and its URL with the one-shot markers removed.

    Clients replace the address bar with the returned location so a reload
    does not show the notice again.
    """
    notices, clean_location = consume_notices(location)
    return NoticesResponse(
        notices=[AdminNoticeResponse(level=n.level, message=n.message) for n in notices],
        location=clean_location,
    )
