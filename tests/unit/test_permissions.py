"""
Tests for role capabilities, the bypass policy and item capability checks.
"""

import uuid

import pytest

from lockdown.engines.restrictions import (
    AdminCapabilityPolicy,
    CapabilityGate,
    ExtensionPoint,
)
from lockdown.kernel.models.content import ContentItem
from lockdown.kernel.models.user import UserRole
from lockdown.kernel.permissions import (
    DELETE_ITEM,
    EDIT_ITEM,
    CapabilityDenied,
    PermissionService,
    Principal,
    capabilities_for_role,
)
from lockdown.kernel.permissions import roles


def item(item_id, author_id=None, status="publish"):
    return ContentItem(id=item_id, item_type="post", title="", status=status, author_id=author_id)


@pytest.fixture
def build_permissions(make_registry, extensions):
    async def _build(locked=(), protected=()):
        registry = await make_registry(locked=locked, protected=protected)
        gate = CapabilityGate(registry, AdminCapabilityPolicy(extensions), extensions)
        return PermissionService(gate)

    return _build


class TestRoles:
    """Test the role table."""

    def test_only_administrator_manages_settings(self):
        assert roles.MANAGE_SETTINGS in capabilities_for_role(UserRole.ADMINISTRATOR)
        for role in (UserRole.EDITOR, UserRole.AUTHOR, UserRole.CONTRIBUTOR, UserRole.SUBSCRIBER):
            assert roles.MANAGE_SETTINGS not in capabilities_for_role(role)

    def test_role_by_name(self):
        assert capabilities_for_role("editor") == capabilities_for_role(UserRole.EDITOR)

    def test_unknown_role_has_nothing(self):
        assert capabilities_for_role("ghost") == frozenset()


class TestAdminCapabilityPolicy:
    """Test bypass capability resolution."""

    def test_default(self, extensions):
        policy = AdminCapabilityPolicy(extensions)

        assert policy.bypass_capability() == "manage_settings"
        assert policy.is_bypass({"read", "manage_settings"})
        assert not policy.is_bypass({"read"})

    def test_configured_default(self, extensions):
        policy = AdminCapabilityPolicy(extensions, default="manage_options")

        assert policy.bypass_capability() == "manage_options"

    def test_extension_override(self, extensions):
        extensions.register(ExtensionPoint.ADMIN_CAPABILITY, lambda name: "manage_lockdown")
        policy = AdminCapabilityPolicy(extensions)

        assert policy.bypass_capability() == "manage_lockdown"
        assert not policy.is_bypass({"manage_settings"})

    @pytest.mark.parametrize("bad", ["", None, 5])
    def test_invalid_override_falls_back(self, extensions, bad):
        extensions.register(ExtensionPoint.ADMIN_CAPABILITY, lambda name: bad)

        assert AdminCapabilityPolicy(extensions).bypass_capability() == "manage_settings"


class TestItemCapabilityMapping:
    """Test mapping item capabilities onto primitives."""

    @pytest.mark.asyncio
    async def test_own_published_item(self, build_permissions, author_principal):
        permissions = await build_permissions()

        required = permissions.map_item_capability(
            EDIT_ITEM, author_principal, item(1, author_principal.user_id)
        )

        assert required == [roles.EDIT_ITEMS, roles.EDIT_PUBLISHED_ITEMS]

    @pytest.mark.asyncio
    async def test_others_draft_item(self, build_permissions, author_principal):
        permissions = await build_permissions()

        required = permissions.map_item_capability(
            DELETE_ITEM, author_principal, item(1, uuid.uuid4(), status="draft")
        )

        assert required == [roles.DELETE_ITEMS, roles.DELETE_OTHERS_ITEMS]

    @pytest.mark.asyncio
    async def test_non_item_capability_requires_itself(self, build_permissions, author_principal):
        permissions = await build_permissions()

        assert permissions.map_item_capability(
            roles.PUBLISH_ITEMS, author_principal, item(1)
        ) == [roles.PUBLISH_ITEMS]


class TestUserCan:
    """Test host decisions combined with the gate."""

    @pytest.mark.asyncio
    async def test_contributor_cannot_edit_own_published_item(
        self, build_permissions, contributor_principal
    ):
        permissions = await build_permissions()

        decision = permissions.user_can(
            contributor_principal, EDIT_ITEM, item(1, contributor_principal.user_id)
        )

        assert decision.allowed is False
        assert decision.restricted is False

    @pytest.mark.asyncio
    async def test_author_cannot_edit_others_item(self, build_permissions, author_principal):
        permissions = await build_permissions()

        assert not permissions.user_can(author_principal, EDIT_ITEM, item(1, uuid.uuid4()))

    @pytest.mark.asyncio
    async def test_editor_refused_on_locked_item(self, build_permissions, editor_principal):
        permissions = await build_permissions(locked=[3])

        decision = permissions.user_can(editor_principal, EDIT_ITEM, item(3, uuid.uuid4()))

        assert decision.restricted is True
        assert decision.reason == "locked"

    @pytest.mark.asyncio
    async def test_require_raises_with_item_id(self, build_permissions, editor_principal):
        permissions = await build_permissions(protected=[3])

        with pytest.raises(CapabilityDenied) as exc_info:
            permissions.require(editor_principal, DELETE_ITEM, item(3, uuid.uuid4()))

        assert exc_info.value.item_id == 3
        assert exc_info.value.decision.reason == "protected"
        assert "protected" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_require_without_item(self, build_permissions):
        permissions = await build_permissions(locked=[3])

        with pytest.raises(CapabilityDenied, match="manage_settings"):
            permissions.require(Principal(user_id=None), roles.MANAGE_SETTINGS)

    @pytest.mark.asyncio
    async def test_admin_allowed_on_locked_item(self, build_permissions, admin_principal):
        permissions = await build_permissions(locked=[3])

        decision = permissions.require(admin_principal, DELETE_ITEM, item(3, uuid.uuid4()))

        assert decision.allowed is True
