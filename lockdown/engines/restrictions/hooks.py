"""
Extension points - named, overridable transforms the host can register.

Each point has a documented default value computed by the engine; every
transform registered against the point receives the current value and
returns the replacement. Transforms run in ascending priority, then in
registration order.

    extensions = ExtensionRegistry()

    @extensions.on(ExtensionPoint.LOCKED_IDS)
    def lock_homepage(ids):
        return ids | {HOMEPAGE_ID}
"""

import itertools
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, TypeVar

from lockdown.logging_config import get_logger

logger = get_logger(__name__)

T = TypeVar("T")
Transform = Callable[[Any], Any]

DEFAULT_PRIORITY = 10


class ExtensionPoint(str, Enum):
    """The fixed set of extension points, with the default each one transforms."""

    # frozenset[int]: raw persisted locked ids
    LOCKED_IDS = "lockdown.locked_ids"
    # frozenset[int]: raw persisted protected ids
    PROTECTED_IDS = "lockdown.protected_ids"
    # str: Settings.admin_capability
    ADMIN_CAPABILITY = "lockdown.admin_capability"
    # dict[str, CapabilityKind]: {"edit_item": EDIT, "delete_item": DELETE}
    CAPABILITIES = "lockdown.capabilities"
    # list[str]: item types hidden from the picker search
    EXCLUDED_ITEM_TYPES = "lockdown.excluded_item_types"
    # SearchQuery: the assembled picker query
    SEARCH_QUERY = "lockdown.search_query"


@dataclass(order=True)
class _Registration:
    priority: int
    sequence: int
    transform: Transform = field(compare=False)


class ExtensionRegistry:
    """Holds host transforms per extension point."""

    def __init__(self) -> None:
        self._registrations: Dict[ExtensionPoint, List[_Registration]] = defaultdict(list)
        self._sequence = itertools.count()

    def register(
        self,
        point: ExtensionPoint,
        transform: Transform,
        priority: int = DEFAULT_PRIORITY,
    ) -> Transform:
        """Register ``transform`` against ``point``. Returns the transform."""
        point = ExtensionPoint(point)
        registrations = self._registrations[point]
        registrations.append(_Registration(priority, next(self._sequence), transform))
        registrations.sort()
        logger.debug(
            "Extension registered",
            extra={"extension_point": point.value, "priority": priority},
        )
        return transform

    def on(self, point: ExtensionPoint, priority: int = DEFAULT_PRIORITY) -> Callable[[Transform], Transform]:
        """Decorator form of :meth:`register`."""

        def decorator(transform: Transform) -> Transform:
            return self.register(point, transform, priority)

        return decorator

    def remove(self, point: ExtensionPoint, transform: Transform) -> bool:
        """Unregister every registration of ``transform`` on ``point``."""
        point = ExtensionPoint(point)
        registrations = self._registrations[point]
        kept = [r for r in registrations if r.transform is not transform]
        removed = len(kept) != len(registrations)
        self._registrations[point] = kept
        return removed

    def has(self, point: ExtensionPoint) -> bool:
        return bool(self._registrations.get(ExtensionPoint(point)))

    def apply(self, point: ExtensionPoint, value: T) -> T:
        """Run ``value`` through every transform registered on ``point``."""
        for registration in self._registrations.get(ExtensionPoint(point), ()):
            value = registration.transform(value)
        return value
