"""
Key-value settings store backed by the ``settings`` table.
"""

import copy
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from lockdown.kernel.models.setting import Setting


class SettingsStore:
    """
    Named configuration records, read whole and overwritten whole.

    There is no locking: concurrent writers to the same key follow
    last-writer-wins.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, key: str, default: Optional[Any] = None) -> Any:
        """Return the stored value for ``key``, or ``default`` when absent."""
        setting = await self.session.get(Setting, key)
        if setting is None or setting.value is None:
            return default
        return copy.deepcopy(setting.value)

    async def update(self, key: str, value: Any) -> None:
        """Create or overwrite the record for ``key``."""
        setting = await self.session.get(Setting, key)
        if setting is None:
            self.session.add(Setting(key=key, value=copy.deepcopy(value)))
        else:
            setting.value = copy.deepcopy(value)
        await self.session.flush()
