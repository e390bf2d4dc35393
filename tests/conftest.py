"""
Pytest fixtures for lockdown tests.
"""

import copy
import uuid
from datetime import datetime, timezone
from typing import Any, AsyncGenerator, Dict, Optional

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from lockdown.engines.restrictions import (
    AdminCapabilityPolicy,
    CapabilityGate,
    ExtensionRegistry,
    ItemIdRegistry,
    MutationGuard,
)
from lockdown.kernel.content import ContentService
from lockdown.kernel.models.base import Base
from lockdown.kernel.models.content import ContentItem, ItemStatus
from lockdown.kernel.models.user import User, UserRole
from lockdown.kernel.permissions import PermissionService, Principal, capabilities_for_role
from lockdown.kernel.settings_store import SettingsStore


# Single shared in-memory connection per test
TEST_DATABASE_URL = "sqlite+aiosqlite://"

FIXED_NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
PUBLISHED_AT = datetime(2024, 1, 15, 9, 30, tzinfo=timezone.utc)


class InMemorySettingsStore:
    """SettingsStore stand-in for tests that don't need a database."""

    def __init__(self, values: Optional[Dict[str, Any]] = None):
        self.values = copy.deepcopy(values or {})
        self.writes = 0

    async def get(self, key: str, default: Optional[Any] = None) -> Any:
        if key not in self.values:
            return default
        return copy.deepcopy(self.values[key])

    async def update(self, key: str, value: Any) -> None:
        self.values[key] = copy.deepcopy(value)
        self.writes += 1


def lockdown_record(locked=(), protected=()) -> dict:
    return {"locked_ids": list(locked), "protected_ids": list(protected)}


def make_principal(role: UserRole) -> Principal:
    return Principal(
        user_id=uuid.uuid4(),
        role=role.value,
        capabilities=capabilities_for_role(role),
    )


# Extension registry and restriction engine

@pytest.fixture
def extensions() -> ExtensionRegistry:
    return ExtensionRegistry()


@pytest.fixture
def policy(extensions: ExtensionRegistry) -> AdminCapabilityPolicy:
    return AdminCapabilityPolicy(extensions)


@pytest.fixture
def make_registry(extensions: ExtensionRegistry):
    """Factory for a loaded registry over an in-memory store."""

    async def _make(locked=(), protected=(), raw: Any = None):
        values = {"lockdown": raw if raw is not None else lockdown_record(locked, protected)}
        store = InMemorySettingsStore(values)
        return await ItemIdRegistry(store, extensions).load()

    return _make


@pytest.fixture
def admin_principal() -> Principal:
    return make_principal(UserRole.ADMINISTRATOR)


@pytest.fixture
def editor_principal() -> Principal:
    return make_principal(UserRole.EDITOR)


@pytest.fixture
def author_principal() -> Principal:
    return make_principal(UserRole.AUTHOR)


@pytest.fixture
def contributor_principal() -> Principal:
    return make_principal(UserRole.CONTRIBUTOR)


# Database

@pytest_asyncio.fixture(scope="function")
async def db_engine():
    """Create a test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async_session_maker = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session_maker() as session:
        yield session
        await session.rollback()


async def _create_user(session: AsyncSession, role: UserRole) -> User:
    user = User(
        id=uuid.uuid4(),
        email=f"{role.value}@example.com",
        display_name=f"Test {role.value.title()}",
        role=role.value,
    )
    session.add(user)
    await session.flush()
    return user


@pytest_asyncio.fixture
async def admin_user(db_session: AsyncSession) -> User:
    return await _create_user(db_session, UserRole.ADMINISTRATOR)


@pytest_asyncio.fixture
async def editor_user(db_session: AsyncSession) -> User:
    return await _create_user(db_session, UserRole.EDITOR)


@pytest_asyncio.fixture
async def author_user(db_session: AsyncSession) -> User:
    return await _create_user(db_session, UserRole.AUTHOR)


@pytest_asyncio.fixture
async def contributor_user(db_session: AsyncSession) -> User:
    return await _create_user(db_session, UserRole.CONTRIBUTOR)


async def create_item(
    session: AsyncSession,
    author: Optional[User] = None,
    title: str = "Test Item",
    item_type: str = "post",
    status: str = ItemStatus.PUBLISH.value,
    published_at: Optional[datetime] = PUBLISHED_AT,
    password: str = "",
    content: str = "",
) -> ContentItem:
    """Insert an item directly, bypassing capability checks."""
    item = ContentItem(
        item_type=item_type,
        title=title,
        content=content,
        status=status,
        password=password,
        published_at=published_at,
        published_at_gmt=published_at,
        author_id=author.id if author is not None else None,
    )
    session.add(item)
    await session.flush()
    return item


@pytest_asyncio.fixture
async def published_item(db_session: AsyncSession, author_user: User) -> ContentItem:
    return await create_item(db_session, author_user, title="About Us")


@pytest_asyncio.fixture
async def other_item(db_session: AsyncSession, author_user: User) -> ContentItem:
    return await create_item(db_session, author_user, title="Contact")


@pytest.fixture
def build_content_service(db_session: AsyncSession, extensions: ExtensionRegistry):
    """
    Factory wiring a ContentService over the test session with the given
    lockdown lists persisted first.
    """

    async def _build(locked=(), protected=(), clock=None) -> ContentService:
        store = SettingsStore(db_session)
        await store.update("lockdown", lockdown_record(locked, protected))
        registry = await ItemIdRegistry(store, extensions).load()
        policy = AdminCapabilityPolicy(extensions)
        permissions = PermissionService(CapabilityGate(registry, policy, extensions))
        guard = MutationGuard(registry, policy, clock=clock or (lambda: FIXED_NOW))
        return ContentService(db_session, permissions, guard, registry)

    return _build
