"""
The acting principal of a request.
"""

import uuid
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Optional

from lockdown.kernel.models.user import User
from lockdown.kernel.permissions.roles import capabilities_for_role


@dataclass(frozen=True)
class Principal:
    """A user together with their effective primitive capabilities."""

    user_id: Optional[uuid.UUID]
    role: Optional[str] = None
    capabilities: FrozenSet[str] = field(default_factory=frozenset)

    @classmethod
    def from_user(cls, user: User, extra_capabilities: Iterable[str] = ()) -> "Principal":
        role = user.role.value if hasattr(user.role, "value") else str(user.role)
        return cls(
            user_id=user.id,
            role=role,
            capabilities=capabilities_for_role(role) | frozenset(extra_capabilities),
        )

    def has(self, capability: str) -> bool:
        return capability in self.capabilities
