"""
Mutation guard - reverts disallowed changes to published protected items.

A non-bypass principal editing a published protected item may change its
content freely, but cannot unpublish it, change its password, or move its
date into the future. Those fields are forced back to their stored values
and the update goes through with everything else intact.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from lockdown.engines.restrictions.notice import RevertNotice
from lockdown.engines.restrictions.policy import AdminCapabilityPolicy
from lockdown.engines.restrictions.registry import ItemIdRegistry
from lockdown.kernel.models.content import ContentItem, ItemStatus
from lockdown.kernel.permissions.principal import Principal
from lockdown.logging_config import get_logger

logger = get_logger(__name__)

PUBLISHED = ItemStatus.PUBLISH.value


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _status_value(status: Any) -> Any:
    return status.value if isinstance(status, ItemStatus) else status


def as_utc(value: Any) -> Optional[datetime]:
    """Aware UTC datetime for ``value``; naive datetimes are read as UTC."""
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError:
            return None
    if not isinstance(value, datetime):
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class ItemSnapshot:
    """The persisted values the guard compares a proposal against."""

    id: int
    status: str
    password: str = ""
    published_at: Optional[datetime] = None
    published_at_gmt: Optional[datetime] = None

    @classmethod
    def from_item(cls, item: ContentItem) -> "ItemSnapshot":
        return cls(
            id=item.id,
            status=_status_value(item.status),
            password=item.password or "",
            published_at=item.published_at,
            published_at_gmt=item.published_at_gmt,
        )


@dataclass
class AmendedUpdate:
    """A proposed update after the guard has run."""

    fields: Dict[str, Any]
    amended: bool = False
    reverted: Tuple[str, ...] = ()
    notice: Optional[RevertNotice] = None


class MutationGuard:
    """Runs before an item update is persisted."""

    def __init__(
        self,
        registry: ItemIdRegistry,
        policy: AdminCapabilityPolicy,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.registry = registry
        self.policy = policy
        self.clock = clock

    def guard(
        self,
        update: Mapping[str, Any],
        current: Optional[ItemSnapshot],
        principal: Principal,
    ) -> AmendedUpdate:
        """
        Return ``update`` with disallowed fields forced back to ``current``.

        ``current`` is None when the item could not be loaded; nothing is
        reverted then. Locked items are not checked here since their edit
        capability is already refused by the gate.
        """
        fields = dict(update)
        unchanged = AmendedUpdate(fields=fields)

        if self.policy.is_bypass(principal.capabilities) or not self.registry.has_any():
            return unchanged
        if current is None or not self.registry.is_protected(current.id):
            return unchanged
        if _status_value(current.status) != PUBLISHED:
            return unchanged

        reverted = []

        if "status" in fields and _status_value(fields["status"]) != PUBLISHED:
            fields["status"] = current.status
            reverted.append("status")

        if "password" in fields and (fields["password"] or "") != current.password:
            fields["password"] = current.password
            reverted.append("password")

        if "published_at" in fields and self._is_future_change(fields["published_at"], current):
            fields["published_at"] = current.published_at
            fields["published_at_gmt"] = current.published_at_gmt
            reverted.append("published_at")

        if not reverted:
            return unchanged

        logger.info(
            "Reverted changes to protected item",
            extra={"item_id": current.id, "reverted": reverted},
        )
        return AmendedUpdate(
            fields=fields,
            amended=True,
            reverted=tuple(reverted),
            notice=RevertNotice(item_id=current.id, fields=tuple(reverted)),
        )

    def _is_future_change(self, proposed: Any, current: ItemSnapshot) -> bool:
        proposed_at = as_utc(proposed)
        # published_at loses its offset on some backends; the GMT column does not
        stored = current.published_at_gmt or current.published_at
        if proposed_at is None or proposed_at == as_utc(stored):
            return False
        # A date equal to now is not in the future
        return proposed_at > as_utc(self.clock())
