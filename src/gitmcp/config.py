"""Server configuration loading.

Configuration is assembled, in increasing precedence, from an optional YAML
file, then environment variables and CLI options (the CLI binds each option
to its ``GIT_TOOLS_*`` variable).
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, Any

import yaml
from pydantic import ValidationError

from gitmcp.server.models import ServerConfig

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

ENV_PREFIX = "GIT_TOOLS_"


class ConfigError(Exception):
    """Raised when configuration fails parsing or validation."""


class ConfigLoader:
    """Load a YAML configuration file into a raw mapping.

    Example file::

        name: git-tools-server
        toolsetConfig:
          mode: readOnly
          availableTools: [get_git_log, get_current_branch]
        dynamicToolDiscovery:
          enabled: true
    """

    def __init__(self, path: Path) -> None:
        self._path = path

    def load(self) -> dict[str, Any]:
        """Read YAML, interpolate env vars, and return the mapping.

        Environment variables in the form ``${VAR}`` or ``$VAR`` are expanded
        using :func:`os.path.expandvars` before YAML parsing.

        Raises:
            ConfigError: On read errors, YAML parse errors or a non-mapping document.
        """
        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"Cannot read {self._path}: {exc}") from exc

        expanded = os.path.expandvars(raw)

        try:
            data: Any = yaml.safe_load(expanded)
        except yaml.YAMLError as exc:
            raise ConfigError(f"YAML parse error: {exc}") from exc

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError("Configuration YAML must be a mapping")
        return data


def parse_tool_list(value: str | Sequence[str] | None) -> list[str]:
    """Split a comma-separated tool list, dropping blanks."""
    if value is None:
        return []
    items = value.split(",") if isinstance(value, str) else list(value)
    return [item.strip() for item in items if item.strip()]


def _pop_section(data: dict[str, Any], *keys: str) -> dict[str, Any]:
    """Pop the first present of *keys* from *data*; it must be a mapping."""
    section: Any = None
    for key in keys:
        value = data.pop(key, None)
        if section is None:
            section = value
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ConfigError(f"'{keys[0]}' must be a mapping, got {type(section).__name__}")
    return dict(section)


def build_config(
    *,
    config_file: Path | None = None,
    name: str | None = None,
    toolset_mode: str | None = None,
    available_tools: str | Sequence[str] | None = None,
    dynamic_tool_discovery: bool | None = None,
    instructions: str | None = None,
) -> ServerConfig:
    """Merge the optional *config_file* with explicit overrides.

    ``None`` means "not given"; an empty *available_tools* list is a real
    value and clears any allow-list from the file.

    Raises:
        ConfigError: If the file cannot be loaded or the result is invalid.
    """
    data = ConfigLoader(config_file).load() if config_file else {}

    toolset = _pop_section(data, "toolsetConfig", "toolset")
    discovery = _pop_section(data, "dynamicToolDiscovery", "dynamic_tool_discovery")

    if name is not None:
        data["name"] = name
    if instructions is not None:
        data["instructions"] = instructions
    if toolset_mode is not None:
        toolset["mode"] = toolset_mode
    if available_tools is not None:
        toolset.pop("available_tools", None)
        toolset["availableTools"] = parse_tool_list(available_tools)
    if dynamic_tool_discovery is not None:
        discovery["enabled"] = dynamic_tool_discovery

    data["toolsetConfig"] = toolset
    data["dynamicToolDiscovery"] = discovery

    try:
        return ServerConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc
