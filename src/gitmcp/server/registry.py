"""CapabilityRegistry — the set of currently advertised tools."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from gitmcp.server.errors import SchemaError, ToolNotFoundError
from gitmcp.server.policy import ToolsetPolicy

if TYPE_CHECKING:
    from collections.abc import Iterable

    from gitmcp.server.models import ToolCapability, ToolDefinition, ToolsetConfig

logger = logging.getLogger(__name__)


class CapabilityRegistry:
    """Holds the static base list and the visible subset derived from it.

    The base list is fixed at construction. ``list()`` and ``resolve()``
    consult the same visible view, so a tool hidden by policy cannot be
    reached by name.

    Usage::

        registry = CapabilityRegistry(GIT_TOOLS, ToolsetConfig(mode="readOnly"))
        names = [d.name for d in registry.list()]
        capability = registry.resolve("get_git_log")
    """

    def __init__(
        self,
        capabilities: Iterable[ToolCapability],
        config: ToolsetConfig | None = None,
    ) -> None:
        self._base: tuple[ToolCapability, ...] = tuple(capabilities)
        self._check_unique(self._base)
        self._policy = ToolsetPolicy(config)
        self._visible: dict[str, ToolCapability] = self._evaluate(self._policy)

    @property
    def config(self) -> ToolsetConfig:
        return self._policy.config

    @property
    def base(self) -> tuple[ToolCapability, ...]:
        """Every registered capability, visible or not."""
        return self._base

    def list(self) -> list[ToolDefinition]:
        """Return the visible tool definitions in declaration order."""
        return [c.definition for c in self._visible.values()]

    def names(self) -> tuple[str, ...]:
        """Return the visible tool names in declaration order."""
        return tuple(self._visible)

    def resolve(self, name: str) -> ToolCapability:
        """Return the visible capability called *name*.

        Raises:
            ToolNotFoundError: If no visible capability has that name.
        """
        capability = self._visible.get(name)
        if capability is None:
            raise ToolNotFoundError(name)
        return capability

    def reconfigure(self, config: ToolsetConfig) -> bool:
        """Re-filter the base list under *config*.

        Returns ``True`` if the visible set changed.
        """
        previous = self.names()
        policy = ToolsetPolicy(config)
        self._visible = self._evaluate(policy)
        self._policy = policy
        changed = self.names() != previous
        logger.info(
            "Toolset reconfigured (mode=%s): %d visible tool(s)%s",
            config.mode.value,
            len(self._visible),
            "" if changed else ", unchanged",
        )
        return changed

    def __contains__(self, name: object) -> bool:
        return name in self._visible

    def __len__(self) -> int:
        return len(self._visible)

    def _evaluate(self, policy: ToolsetPolicy) -> dict[str, ToolCapability]:
        return {c.name: c for c in policy.filter(self._base)}

    @staticmethod
    def _check_unique(capabilities: tuple[ToolCapability, ...]) -> None:
        seen: set[str] = set()
        for capability in capabilities:
            if capability.name in seen:
                raise SchemaError("duplicate tool name", tool_name=capability.name)
            seen.add(capability.name)
