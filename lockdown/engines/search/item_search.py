"""
Item search for the lockdown picker.

Paginated title/content search over items in the pickable statuses,
excluding item types that are never worth locking.
"""

from typing import List, Optional, Sequence

from pydantic import BaseModel, Field
from sqlalchemy import and_, desc, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from lockdown.config import Settings
from lockdown.engines.restrictions.hooks import ExtensionPoint, ExtensionRegistry
from lockdown.kernel.models.content import ContentItem, ItemStatus

DEFAULT_EXCLUDED_TYPES = ("nav_menu_item", "revision")
COMMERCE_EXCLUDED_TYPES = ("product_variation", "shop_order", "shop_coupon")
SEARCHABLE_STATUSES = (
    ItemStatus.PUBLISH.value,
    ItemStatus.PENDING.value,
    ItemStatus.DRAFT.value,
    ItemStatus.FUTURE.value,
)


class SearchQuery(BaseModel):
    """Assembled picker query; passed through the SEARCH_QUERY extension point."""

    term: str = ""
    offset: int = Field(0, ge=0)
    limit: Optional[int] = Field(10, ge=1)  # None disables paging
    statuses: List[str] = Field(default_factory=lambda: list(SEARCHABLE_STATUSES))
    excluded_types: List[str] = Field(default_factory=list)
    include_ids: Optional[List[int]] = None


class ItemSearchService:
    """
    Search service backing the picker.

    Usage:
        service = ItemSearchService(session, extensions, settings)
        items = await service.search("about", offset=0)
    """

    def __init__(
        self,
        session: AsyncSession,
        extensions: ExtensionRegistry,
        settings: Settings,
    ):
        self.session = session
        self.extensions = extensions
        self.settings = settings

    def excluded_item_types(self) -> List[str]:
        excluded = list(DEFAULT_EXCLUDED_TYPES)
        if self.settings.commerce_enabled:
            excluded.extend(COMMERCE_EXCLUDED_TYPES)
        excluded = self.extensions.apply(ExtensionPoint.EXCLUDED_ITEM_TYPES, excluded)
        return [str(t) for t in excluded or ()]

    def build_query(
        self,
        term: str = "",
        offset: int = 0,
        limit: Optional[int] = None,
        include_ids: Optional[Sequence[int]] = None,
    ) -> SearchQuery:
        query = SearchQuery(
            term=term or "",
            offset=max(offset, 0),
            limit=limit,
            excluded_types=self.excluded_item_types(),
            include_ids=list(include_ids) if include_ids is not None else None,
        )
        return self.extensions.apply(ExtensionPoint.SEARCH_QUERY, query)

    async def search(self, term: str = "", offset: int = 0) -> List[ContentItem]:
        """One page of items matching ``term``, starting at ``offset``."""
        query = self.build_query(term, offset, limit=self.settings.search_page_size)
        return await self.execute(query)

    async def get_items(self, item_ids: Sequence[int]) -> List[ContentItem]:
        """All pickable items among ``item_ids``, unpaged."""
        if not item_ids:
            return []
        return await self.execute(self.build_query(include_ids=item_ids))

    async def execute(self, query: SearchQuery) -> List[ContentItem]:
        conditions = [ContentItem.status.in_(query.statuses)]
        if query.excluded_types:
            conditions.append(ContentItem.item_type.not_in(query.excluded_types))
        if query.include_ids is not None:
            conditions.append(ContentItem.id.in_(query.include_ids))
        term = query.term.strip()
        if term:
            conditions.append(
                or_(
                    ContentItem.title.icontains(term, autoescape=True),
                    ContentItem.content.icontains(term, autoescape=True),
                )
            )

        stmt = (
            select(ContentItem)
            .where(and_(*conditions))
            .order_by(desc(ContentItem.published_at), desc(ContentItem.id))
            .offset(query.offset)
        )
        if query.limit is not None:
            stmt = stmt.limit(query.limit)

        result = await self.session.execute(stmt)
        return list(result.scalars().all())
