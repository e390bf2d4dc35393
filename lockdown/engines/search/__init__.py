"""
Search Engine - item lookup for the lockdown picker.
"""

from lockdown.engines.search.item_search import (
    ItemSearchService,
    SearchQuery,
    DEFAULT_EXCLUDED_TYPES,
    COMMERCE_EXCLUDED_TYPES,
    SEARCHABLE_STATUSES,
)

__all__ = [
    "ItemSearchService",
    "SearchQuery",
    "DEFAULT_EXCLUDED_TYPES",
    "COMMERCE_EXCLUDED_TYPES",
    "SEARCHABLE_STATUSES",
]
