"""ToolsetPolicy — decides which capabilities are exposed.

Pure logic, no I/O. A capability is visible when both checks pass:

1. **mode** — ``readOnly`` admits only tools whose ``destructiveHint`` is
   false; ``all`` admits everything.
2. **allow-list** — if ``available_tools`` is non-empty, the tool name must
   be listed.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from gitmcp.server.models import ToolsetConfig, ToolsetMode

if TYPE_CHECKING:
    from collections.abc import Iterable

    from gitmcp.server.models import ToolCapability

logger = logging.getLogger(__name__)


class ToolsetPolicy:
    """Evaluate capabilities against a :class:`ToolsetConfig`."""

    def __init__(self, config: ToolsetConfig | None = None) -> None:
        self._config = config or ToolsetConfig()
        self._allowed = frozenset(self._config.available_tools)

    @property
    def config(self) -> ToolsetConfig:
        return self._config

    def is_visible(self, capability: ToolCapability) -> bool:
        """Return whether *capability* is exposed under this policy."""
        return self._mode_allows(capability) and self._list_allows(capability)

    def filter(self, capabilities: Iterable[ToolCapability]) -> list[ToolCapability]:
        """Return the visible capabilities, preserving declaration order."""
        capabilities = list(capabilities)
        unknown = self._allowed - {c.name for c in capabilities}
        if unknown:
            logger.debug("Ignoring unknown tools in allow-list: %s", ", ".join(sorted(unknown)))
        return [c for c in capabilities if self.is_visible(c)]

    def _mode_allows(self, capability: ToolCapability) -> bool:
        if self._config.mode == ToolsetMode.ALL:
            return True
        return capability.definition.annotations.destructive_hint is False

    def _list_allows(self, capability: ToolCapability) -> bool:
        if not self._allowed:
            return True
        return capability.name in self._allowed


def is_visible(capability: ToolCapability, config: ToolsetConfig) -> bool:
    """Functional shortcut for ``ToolsetPolicy(config).is_visible(capability)``."""
    return ToolsetPolicy(config).is_visible(capability)
