"""
Item id registry - the locked and protected item id sets.

Raw sets are loaded from the settings store; the effective sets are the raw
sets after the LOCKED_IDS / PROTECTED_IDS extension transforms and are what
every membership test uses.
"""

from typing import Any, Dict, FrozenSet, Iterable, List, Optional

from lockdown.engines.restrictions.hooks import ExtensionPoint, ExtensionRegistry
from lockdown.kernel.settings_store import SettingsStore
from lockdown.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_SETTINGS_KEY = "lockdown"
LOCKED_KEY = "locked_ids"
PROTECTED_KEY = "protected_ids"


def _coerce_id(value: Any) -> Optional[int]:
    """Return ``value`` as a positive item id, or None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if isinstance(value, str) and value.strip().isdigit():
        item_id = int(value.strip())
        return item_id if item_id > 0 else None
    return None


def coerce_ids(raw: Any) -> Dict[int, None]:
    """
    Normalize a stored or submitted id list.

    Accepts a list/tuple/set of ids, or a mapping keyed by id (the form the
    settings screen submits). Anything else yields no ids. Order is kept and
    duplicates dropped.
    """
    if isinstance(raw, dict):
        candidates: Iterable[Any] = raw.keys()
    elif isinstance(raw, (list, tuple, set, frozenset)):
        candidates = raw
    else:
        return {}

    ids: Dict[int, None] = {}
    for candidate in candidates:
        item_id = _coerce_id(candidate)
        if item_id is not None:
            ids[item_id] = None
    return ids


class ItemIdRegistry:
    """
    Request-scoped holder of the locked and protected id sets.

    Usage:
        registry = ItemIdRegistry(SettingsStore(session), extensions)
        await registry.load()
        if registry.is_locked(item.id):
            ...
    """

    def __init__(
        self,
        store: SettingsStore,
        extensions: ExtensionRegistry,
        settings_key: str = DEFAULT_SETTINGS_KEY,
    ):
        self.store = store
        self.extensions = extensions
        self.settings_key = settings_key
        self._locked: Dict[int, None] = {}
        self._protected: Dict[int, None] = {}
        self._effective: Dict[ExtensionPoint, FrozenSet[int]] = {}

    async def load(self) -> "ItemIdRegistry":
        """Populate both raw sets from the settings store. Never raises on bad data."""
        options = await self.store.get(self.settings_key, {})
        if not isinstance(options, dict):
            logger.warning(
                "Malformed lockdown settings ignored",
                extra={"settings_key": self.settings_key, "value_type": type(options).__name__},
            )
            options = {}

        self._locked = coerce_ids(options.get(LOCKED_KEY))
        self._protected = coerce_ids(options.get(PROTECTED_KEY))
        self._effective.clear()
        return self

    # Raw (persisted) views

    def raw_locked_ids(self) -> List[int]:
        return list(self._locked)

    def raw_protected_ids(self) -> List[int]:
        return list(self._protected)

    # Effective views

    def locked_ids(self) -> FrozenSet[int]:
        return self._effective_ids(ExtensionPoint.LOCKED_IDS, self._locked)

    def protected_ids(self) -> FrozenSet[int]:
        return self._effective_ids(ExtensionPoint.PROTECTED_IDS, self._protected)

    def is_locked(self, item_id: int) -> bool:
        return item_id in self.locked_ids()

    def is_protected(self, item_id: int) -> bool:
        return item_id in self.protected_ids()

    def has_any(self) -> bool:
        """True if either effective set is non-empty."""
        return bool(self.locked_ids()) or bool(self.protected_ids())

    # Mutation

    async def on_item_deleted(self, item_id: int) -> bool:
        """
        Prune a permanently deleted item from both raw sets and persist.

        Returns True if the id was present in either set.
        """
        was_locked = item_id in self._locked
        was_protected = item_id in self._protected
        self._locked.pop(item_id, None)
        self._protected.pop(item_id, None)
        self._effective.clear()
        await self._persist()

        removed = was_locked or was_protected
        if removed:
            logger.info(
                "Pruned deleted item from lockdown lists",
                extra={"item_id": item_id, "was_locked": was_locked, "was_protected": was_protected},
            )
        return removed

    async def save(self, locked: Any, protected: Any) -> None:
        """Replace both raw sets with an administrator's submission and persist."""
        self._locked = coerce_ids(locked)
        self._protected = coerce_ids(protected)
        self._effective.clear()
        await self._persist()
        logger.info(
            "Lockdown lists saved",
            extra={"locked_count": len(self._locked), "protected_count": len(self._protected)},
        )

    async def _persist(self) -> None:
        await self.store.update(
            self.settings_key,
            {
                LOCKED_KEY: list(self._locked),
                PROTECTED_KEY: list(self._protected),
            },
        )

    def _effective_ids(self, point: ExtensionPoint, raw: Dict[int, None]) -> FrozenSet[int]:
        cached = self._effective.get(point)
        if cached is None:
            transformed = self.extensions.apply(point, frozenset(raw))
            cached = frozenset(coerce_ids(transformed))
            self._effective[point] = cached
        return cached
