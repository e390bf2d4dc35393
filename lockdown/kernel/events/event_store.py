"""
Audit trail for content items and the lockdown settings.

Events are added to the caller's session and written with the rest of the
unit of work, so a rolled-back update leaves no trace here.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Union

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from lockdown.kernel.models.event_log import EventLog, EventType


def _jsonable(value: Any) -> Any:
    """Payload value in a form the JSON column accepts."""
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_jsonable(v) for v in value]
    return value


class EventStore:
    """
    Append-only event log access.

    Usage:
        events = EventStore(session)
        await events.log(
            event_type=EventType.ITEM_UPDATE_REVERTED,
            entity_type="item",
            entity_id=item.id,
            user_id=principal.user_id,
            payload={"reverted": ["status", "password"]},
        )
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def log(
        self,
        event_type: EventType,
        entity_type: str,
        entity_id: Union[int, str],
        user_id: Optional[uuid.UUID] = None,
        payload: Optional[Dict[str, Any]] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> EventLog:
        """
        Record one event.

        ``entity_type`` is "item" (``entity_id`` an item id) or "setting"
        (``entity_id`` a settings key). ``user_id`` is None for system events.
        """
        event = EventLog(
            event_type=EventType(event_type).value,
            entity_type=entity_type,
            entity_id=str(entity_id),
            user_id=user_id,
            payload=_jsonable(payload or {}),
            ip_address=ip_address,
            user_agent=user_agent,
        )
        self.session.add(event)
        return event

    async def get_entity_history(
        self,
        entity_type: str,
        entity_id: Union[int, str],
        event_types: Optional[Sequence[EventType]] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[EventLog]:
        """Events recorded for one entity, newest first."""
        stmt = select(EventLog).where(
            EventLog.entity_type == entity_type,
            EventLog.entity_id == str(entity_id),
        )
        if event_types:
            stmt = stmt.where(EventLog.event_type.in_([EventType(t).value for t in event_types]))

        stmt = stmt.order_by(desc(EventLog.created_at)).offset(offset).limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
