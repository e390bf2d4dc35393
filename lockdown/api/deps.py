"""
FastAPI dependencies for the acting principal, database sessions and the
request-scoped restriction engine.
"""

import uuid
from typing import Annotated, Optional

from fastapi import Depends, Header, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from lockdown.config import Settings, get_settings
from lockdown.database import get_db
from lockdown.engines.restrictions import (
    AdminCapabilityPolicy,
    CapabilityGate,
    ExtensionRegistry,
    ItemIdRegistry,
    MutationGuard,
)
from lockdown.engines.search import ItemSearchService
from lockdown.kernel.content import ContentService
from lockdown.kernel.models.user import User
from lockdown.kernel.permissions import PermissionService, Principal
from lockdown.kernel.settings_store import SettingsStore
from lockdown.logging_config import principal_id_var

USER_ID_HEADER = "X-User-ID"


DbSession = Annotated[AsyncSession, Depends(get_db)]
AppSettings = Annotated[Settings, Depends(get_settings)]


async def get_current_principal(
    db: DbSession,
    x_user_id: Annotated[Optional[str], Header(alias=USER_ID_HEADER)] = None,
) -> Principal:
    """
    Resolve the acting principal.

    Authentication happens upstream; the gateway forwards the verified
    user id in the X-User-ID header.
    """
    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    try:
        user_id = uuid.UUID(x_user_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid user id",
        )

    user = await db.get(User, user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is disabled",
        )

    principal_id_var.set(str(user.id))
    return Principal.from_user(user)


CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]


def get_extensions(request: Request) -> ExtensionRegistry:
    """The application's extension registry (set up in lockdown.main)."""
    return request.app.state.extensions


Extensions = Annotated[ExtensionRegistry, Depends(get_extensions)]


async def get_registry(
    db: DbSession,
    extensions: Extensions,
    settings: AppSettings,
) -> ItemIdRegistry:
    """Load the locked/protected id sets once per request."""
    registry = ItemIdRegistry(SettingsStore(db), extensions, settings.settings_key)
    return await registry.load()


Registry = Annotated[ItemIdRegistry, Depends(get_registry)]


def get_policy(extensions: Extensions, settings: AppSettings) -> AdminCapabilityPolicy:
    return AdminCapabilityPolicy(extensions, settings.admin_capability)


Policy = Annotated[AdminCapabilityPolicy, Depends(get_policy)]


def get_permission_service(
    registry: Registry,
    policy: Policy,
    extensions: Extensions,
) -> PermissionService:
    return PermissionService(CapabilityGate(registry, policy, extensions))


Permissions = Annotated[PermissionService, Depends(get_permission_service)]


def get_content_service(
    db: DbSession,
    registry: Registry,
    policy: Policy,
    permissions: Permissions,
    settings: AppSettings,
) -> ContentService:
    return ContentService(
        db,
        permissions,
        MutationGuard(registry, policy),
        registry,
        edit_location_template=settings.edit_location_template,
    )


Content = Annotated[ContentService, Depends(get_content_service)]


def get_search_service(
    db: DbSession,
    extensions: Extensions,
    settings: AppSettings,
) -> ItemSearchService:
    return ItemSearchService(db, extensions, settings)


Search = Annotated[ItemSearchService, Depends(get_search_service)]


async def require_lockdown_admin(
    principal: CurrentPrincipal,
    permissions: Permissions,
    policy: Policy,
) -> Principal:
    """Require the bypass capability, which also guards the lockdown settings."""
    capability = policy.bypass_capability()
    if not permissions.user_can(principal, capability):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Capability '{capability}' required",
        )
    return principal


LockdownAdmin = Annotated[Principal, Depends(require_lockdown_admin)]


def get_client_ip(request: Request) -> Optional[str]:
    """Extract client IP from request."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None
