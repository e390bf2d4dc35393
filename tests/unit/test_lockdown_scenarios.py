"""
End-to-end behaviour of the gate and guard together for a small site:
item 7 locked, items 42 and 5 protected, item 9 in neither list.
"""

from datetime import datetime, timezone

import pytest

from lockdown.engines.restrictions import (
    AdminCapabilityPolicy,
    CapabilityGate,
    CapabilityQuery,
    ItemSnapshot,
    MutationGuard,
)

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
PUBLISHED_AT = datetime(2024, 1, 15, tzinfo=timezone.utc)


@pytest.fixture
def build_engine(make_registry, extensions):
    async def _build():
        registry = await make_registry(locked=[7], protected=[42, 5])
        policy = AdminCapabilityPolicy(extensions)
        return (
            CapabilityGate(registry, policy, extensions),
            MutationGuard(registry, policy, clock=lambda: NOW),
        )

    return _build


def can(gate, principal, capability, item_id):
    return gate.evaluate(
        CapabilityQuery(capability=capability, granted=principal.capabilities, item_id=item_id)
    ).allowed


def snapshot(item_id, status="publish", password="opensesame"):
    return ItemSnapshot(
        id=item_id,
        status=status,
        password=password,
        published_at=PUBLISHED_AT,
        published_at_gmt=PUBLISHED_AT,
    )


@pytest.mark.asyncio
async def test_protected_published_item_keeps_status_and_password(build_engine, editor_principal):
    _, guard = await build_engine()
    current = snapshot(42)

    result = guard.guard(
        {"status": "draft", "password": "changed", "title": "New"},
        current,
        editor_principal,
    )

    assert result.fields == {"status": "publish", "password": "opensesame", "title": "New"}
    assert result.amended is True
    assert result.notice is not None


@pytest.mark.asyncio
async def test_locked_item_capabilities(build_engine, editor_principal, admin_principal):
    gate, _ = await build_engine()

    assert not can(gate, editor_principal, "edit_item", 7)
    assert not can(gate, editor_principal, "delete_item", 7)
    assert can(gate, admin_principal, "edit_item", 7)
    assert can(gate, admin_principal, "delete_item", 7)


@pytest.mark.asyncio
async def test_unlisted_item_passes_through(build_engine, editor_principal, admin_principal):
    gate, guard = await build_engine()
    update = {"status": "draft", "password": "x", "published_at": datetime(2030, 1, 1, tzinfo=timezone.utc)}

    for principal in (editor_principal, admin_principal):
        assert can(gate, principal, "edit_item", 9)
        assert can(gate, principal, "delete_item", 9)
        result = guard.guard(update, snapshot(9), principal)
        assert result.fields == update
        assert result.amended is False


@pytest.mark.asyncio
async def test_protected_draft_item_passes_through(build_engine, editor_principal):
    _, guard = await build_engine()
    update = {"status": "trash", "password": ""}

    result = guard.guard(update, snapshot(5, status="draft"), editor_principal)

    assert result.fields == update
    assert result.amended is False
