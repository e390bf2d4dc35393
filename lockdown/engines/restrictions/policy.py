"""
Admin capability policy - which capability bypasses every restriction.
"""

from typing import Iterable

from lockdown.engines.restrictions.hooks import ExtensionPoint, ExtensionRegistry

DEFAULT_ADMIN_CAPABILITY = "manage_settings"


class AdminCapabilityPolicy:
    """
    Resolves the single bypass capability.

    The same resolved name is used by the capability gate, the mutation
    guard and the lockdown settings endpoints.
    """

    def __init__(
        self,
        extensions: ExtensionRegistry,
        default: str = DEFAULT_ADMIN_CAPABILITY,
    ):
        self.extensions = extensions
        self.default = default

    def bypass_capability(self) -> str:
        name = self.extensions.apply(ExtensionPoint.ADMIN_CAPABILITY, self.default)
        if not isinstance(name, str) or not name:
            return self.default
        return name

    def is_bypass(self, capabilities: Iterable[str]) -> bool:
        """True if ``capabilities`` include the bypass capability."""
        return self.bypass_capability() in frozenset(capabilities)
