"""
Content service - item create, update and delete.

Updates pass through the MutationGuard before persistence; permanent
deletes notify the ItemIdRegistry so the id is pruned from both lists.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from lockdown.engines.restrictions.guard import ItemSnapshot, MutationGuard, as_utc
from lockdown.engines.restrictions.registry import ItemIdRegistry
from lockdown.kernel.events.event_store import EventStore
from lockdown.kernel.models.content import ContentItem, ItemStatus
from lockdown.kernel.models.event_log import EventType
from lockdown.kernel.permissions import roles
from lockdown.kernel.permissions.permission_service import (
    DELETE_ITEM,
    EDIT_ITEM,
    PermissionService,
)
from lockdown.kernel.permissions.principal import Principal
from lockdown.logging_config import get_logger

logger = get_logger(__name__)

EDITABLE_FIELDS = ("title", "content", "status", "password", "published_at")
# NOT NULL columns; a None for these keeps the stored value
REQUIRED_FIELDS = frozenset({"title", "content", "status"})
PUBLISHING_STATUSES = frozenset({
    ItemStatus.PUBLISH.value,
    ItemStatus.FUTURE.value,
    ItemStatus.PRIVATE.value,
})


class ItemNotFound(Exception):
    """Raised when an item id does not resolve to an item."""

    def __init__(self, item_id: int):
        self.item_id = item_id
        super().__init__(f"Item {item_id} not found")


@dataclass
class UpdateResult:
    item: ContentItem
    amended: bool
    reverted: Tuple[str, ...]
    location: str


@dataclass
class DeleteResult:
    item_id: int
    trashed: bool
    pruned: bool = False


def _enum_val(value: Any) -> Any:
    """Plain value of an enum member (SQLite hands back plain strings)."""
    return value.value if hasattr(value, "value") else value


def _normalize_gmt(value: Optional[datetime]) -> Optional[datetime]:
    return as_utc(value) if value is not None else None


class ContentService:
    """
    Service for content item mutations.

    Usage:
        service = ContentService(session, permissions, guard, registry)
        result = await service.update_item(principal, item_id, {"title": "New"})
    """

    def __init__(
        self,
        session: AsyncSession,
        permissions: PermissionService,
        guard: MutationGuard,
        registry: ItemIdRegistry,
        edit_location_template: str = "/admin/items/{item_id}/edit?message=1",
    ):
        self.session = session
        self.permissions = permissions
        self.guard = guard
        self.registry = registry
        self.edit_location_template = edit_location_template
        self.event_store = EventStore(session)

    async def get_item(self, item_id: int) -> Optional[ContentItem]:
        return await self.session.get(ContentItem, item_id)

    async def get_item_or_raise(self, item_id: int) -> ContentItem:
        item = await self.get_item(item_id)
        if item is None:
            raise ItemNotFound(item_id)
        return item

    async def create_item(
        self,
        principal: Principal,
        item_type: str,
        title: str = "",
        content: str = "",
        status: str = ItemStatus.DRAFT.value,
        password: str = "",
        published_at: Optional[datetime] = None,
    ) -> ContentItem:
        status = _enum_val(status)
        self.permissions.require(principal, roles.EDIT_ITEMS)
        if status in PUBLISHING_STATUSES:
            self.permissions.require(principal, roles.PUBLISH_ITEMS)
        if published_at is None and status == ItemStatus.PUBLISH.value:
            published_at = datetime.now(timezone.utc)

        item = ContentItem(
            item_type=item_type,
            title=title,
            content=content,
            status=status,
            password=password,
            published_at=published_at,
            published_at_gmt=_normalize_gmt(published_at),
            author_id=principal.user_id,
        )
        self.session.add(item)
        await self.session.flush()
        await self.session.refresh(item)
        return item

    async def update_item(
        self,
        principal: Principal,
        item_id: int,
        changes: Dict[str, Any],
        location: Optional[str] = None,
    ) -> UpdateResult:
        """
        Apply ``changes`` to an item on behalf of ``principal``.

        The full proposed field map (stored values overlaid with
        ``changes``) goes through the MutationGuard; the returned location
        carries the reversion marker when anything was forced back.
        """
        item = await self.get_item_or_raise(item_id)
        self.permissions.require(principal, EDIT_ITEM, item)

        current = ItemSnapshot.from_item(item)
        proposed: Dict[str, Any] = {
            "title": item.title,
            "content": item.content,
            "status": current.status,
            "password": current.password,
            "published_at": current.published_at,
            "published_at_gmt": current.published_at_gmt,
        }
        for key in EDITABLE_FIELDS:
            if key not in changes:
                continue
            if changes[key] is None and key in REQUIRED_FIELDS:
                continue
            proposed[key] = _enum_val(changes[key])
        if "published_at" in changes:
            proposed["published_at_gmt"] = _normalize_gmt(changes["published_at"])

        if proposed["status"] != current.status and proposed["status"] in PUBLISHING_STATUSES:
            self.permissions.require(principal, roles.PUBLISH_ITEMS)

        result = self.guard.guard(proposed, current, principal)
        fields = result.fields

        item.title = fields["title"]
        item.content = fields["content"]
        item.status = fields["status"]
        item.password = fields["password"] or ""
        item.published_at = fields["published_at"]
        item.published_at_gmt = fields["published_at_gmt"]
        await self.session.flush()
        # onupdate columns are expired by the flush
        await self.session.refresh(item)

        await self.event_store.log(
            event_type=EventType.ITEM_UPDATED,
            entity_type="item",
            entity_id=item.id,
            user_id=principal.user_id,
            payload={"changed": sorted(k for k in changes if k in EDITABLE_FIELDS)},
        )
        if result.amended:
            await self.event_store.log(
                event_type=EventType.ITEM_UPDATE_REVERTED,
                entity_type="item",
                entity_id=item.id,
                user_id=principal.user_id,
                payload={"reverted": list(result.reverted)},
            )

        location = location or self.edit_location_template.format(item_id=item.id)
        if result.notice is not None:
            location = result.notice.apply(location)

        return UpdateResult(
            item=item,
            amended=result.amended,
            reverted=result.reverted,
            location=location,
        )

    async def delete_item(
        self,
        principal: Principal,
        item_id: int,
        force: bool = False,
    ) -> DeleteResult:
        """
        Trash an item, or permanently delete it when ``force`` is set or it
        is already in the trash.
        """
        item = await self.get_item_or_raise(item_id)
        self.permissions.require(principal, DELETE_ITEM, item)

        status = _enum_val(item.status)
        if not force and status != ItemStatus.TRASH.value:
            item.status = ItemStatus.TRASH.value
            await self.session.flush()
            await self.event_store.log(
                event_type=EventType.ITEM_TRASHED,
                entity_type="item",
                entity_id=item_id,
                user_id=principal.user_id,
                payload={"previous_status": status},
            )
            return DeleteResult(item_id=item_id, trashed=True)

        item_type = item.item_type
        await self.session.delete(item)
        await self.session.flush()
        await self.event_store.log(
            event_type=EventType.ITEM_DELETED,
            entity_type="item",
            entity_id=item_id,
            user_id=principal.user_id,
            payload={"item_type": item_type},
        )

        pruned = await self.registry.on_item_deleted(item_id)
        if pruned:
            await self.event_store.log(
                event_type=EventType.LOCKDOWN_IDS_PRUNED,
                entity_type="setting",
                entity_id=self.registry.settings_key,
                user_id=principal.user_id,
                payload={"item_id": item_id},
            )
        logger.info("Item deleted", extra={"item_id": item_id, "pruned": pruned})
        return DeleteResult(item_id=item_id, trashed=False, pruned=pruned)
