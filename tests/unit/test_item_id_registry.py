"""
Tests for the locked/protected id registry.
"""

import pytest

from lockdown.engines.restrictions import ExtensionPoint, ItemIdRegistry, coerce_ids
from tests.conftest import InMemorySettingsStore, lockdown_record


class TestCoerceIds:
    """Test id list normalization."""

    def test_keeps_order_and_drops_duplicates(self):
        assert list(coerce_ids([5, 3, 5, 9])) == [5, 3, 9]

    def test_digit_strings_are_ids(self):
        assert list(coerce_ids(["12", " 4 "])) == [12, 4]

    def test_invalid_entries_are_dropped(self):
        assert list(coerce_ids([0, -3, "abc", None, True, 2.5, 8])) == [8]

    def test_mapping_keys_are_ids(self):
        assert list(coerce_ids({"5": "on", "7": "on"})) == [5, 7]

    @pytest.mark.parametrize("raw", [None, "", "1,2", 5])
    def test_non_collections_yield_nothing(self, raw):
        assert coerce_ids(raw) == {}


class TestRegistryLoad:
    """Test loading the persisted lists."""

    @pytest.mark.asyncio
    async def test_loads_both_lists(self, make_registry):
        registry = await make_registry(locked=[5, 3], protected=[9])

        assert registry.raw_locked_ids() == [5, 3]
        assert registry.raw_protected_ids() == [9]
        assert registry.is_locked(5)
        assert registry.is_protected(9)
        assert not registry.is_locked(9)
        assert registry.has_any()

    @pytest.mark.asyncio
    async def test_missing_record_is_empty(self, extensions):
        registry = await ItemIdRegistry(InMemorySettingsStore(), extensions).load()

        assert registry.raw_locked_ids() == []
        assert registry.raw_protected_ids() == []
        assert not registry.has_any()

    @pytest.mark.asyncio
    async def test_malformed_record_is_empty(self, make_registry):
        registry = await make_registry(raw="not-a-mapping")

        assert not registry.has_any()

    @pytest.mark.asyncio
    async def test_malformed_list_is_empty(self, make_registry):
        registry = await make_registry(raw={"locked_ids": "5", "protected_ids": [9]})

        assert registry.raw_locked_ids() == []
        assert registry.raw_protected_ids() == [9]


class TestEffectiveIds:
    """Test extension transforms over the raw lists."""

    @pytest.mark.asyncio
    async def test_extension_adds_id_without_persisting(self, make_registry, extensions):
        extensions.register(ExtensionPoint.LOCKED_IDS, lambda ids: ids | {42})
        registry = await make_registry(locked=[5])

        assert registry.is_locked(42)
        assert registry.locked_ids() == frozenset({5, 42})
        assert registry.raw_locked_ids() == [5]

    @pytest.mark.asyncio
    async def test_extension_can_empty_a_list(self, make_registry, extensions):
        extensions.register(ExtensionPoint.PROTECTED_IDS, lambda ids: frozenset())
        registry = await make_registry(protected=[9])

        assert not registry.is_protected(9)
        assert not registry.has_any()

    @pytest.mark.asyncio
    async def test_effective_sets_are_computed_once(self, make_registry, extensions):
        calls = []

        def track(ids):
            calls.append(ids)
            return ids

        extensions.register(ExtensionPoint.LOCKED_IDS, track)
        registry = await make_registry(locked=[5])

        registry.is_locked(5)
        registry.is_locked(6)
        registry.has_any()

        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_garbage_from_extension_is_coerced(self, make_registry, extensions):
        extensions.register(ExtensionPoint.LOCKED_IDS, lambda ids: None)
        registry = await make_registry(locked=[5])

        assert registry.locked_ids() == frozenset()


class TestRegistryMutation:
    """Test pruning and saving."""

    @pytest.mark.asyncio
    async def test_deleted_item_is_pruned_from_both_lists(self, extensions):
        store = InMemorySettingsStore({"lockdown": lockdown_record([5, 9], [9, 12])})
        registry = await ItemIdRegistry(store, extensions).load()

        assert await registry.on_item_deleted(9) is True

        assert store.values["lockdown"] == lockdown_record([5], [12])
        assert not registry.is_locked(9)
        assert not registry.is_protected(9)

    @pytest.mark.asyncio
    async def test_deleting_unlisted_item_still_persists(self, extensions):
        store = InMemorySettingsStore({"lockdown": lockdown_record([5], [])})
        registry = await ItemIdRegistry(store, extensions).load()

        assert await registry.on_item_deleted(77) is False

        assert store.writes == 1
        assert store.values["lockdown"] == lockdown_record([5], [])

    @pytest.mark.asyncio
    async def test_save_replaces_both_lists(self, extensions):
        store = InMemorySettingsStore({"lockdown": lockdown_record([1], [2])})
        registry = await ItemIdRegistry(store, extensions).load()

        await registry.save({"3": "on", "4": "on"}, ["8", "8", "bad"])

        assert store.values["lockdown"] == lockdown_record([3, 4], [8])
        assert registry.is_locked(3)
        assert not registry.is_locked(1)
        assert registry.is_protected(8)

    @pytest.mark.asyncio
    async def test_save_invalidates_cached_effective_sets(self, make_registry):
        registry = await make_registry(locked=[1])
        assert registry.is_locked(1)

        await registry.save([], [])

        assert not registry.is_locked(1)
        assert not registry.has_any()
