"""Tests for the capability registry."""

from __future__ import annotations

import pytest

from gitmcp.server.errors import SchemaError, ToolNotFoundError
from gitmcp.server.models import ToolsetConfig, ToolsetMode
from gitmcp.server.registry import CapabilityRegistry
from tests.helpers import make_tool


@pytest.fixture
def tools() -> list:
    return [
        make_tool("alpha"),
        make_tool("delete_everything", destructive=True),
        make_tool("beta"),
    ]


class TestConstruction:
    def test_duplicate_names_rejected(self) -> None:
        with pytest.raises(SchemaError, match="duplicate") as exc_info:
            CapabilityRegistry([make_tool("same"), make_tool("same")])
        assert exc_info.value.tool_name == "same"

    def test_duplicates_rejected_even_when_hidden(self) -> None:
        with pytest.raises(SchemaError):
            CapabilityRegistry(
                [make_tool("same", destructive=True), make_tool("same", destructive=True)]
            )

    def test_empty_registry(self) -> None:
        registry = CapabilityRegistry([])
        assert registry.list() == []
        assert len(registry) == 0

    def test_default_config_is_read_only(self, tools: list) -> None:
        registry = CapabilityRegistry(tools)
        assert registry.config.mode is ToolsetMode.READ_ONLY
        assert registry.names() == ("alpha", "beta")


class TestListing:
    def test_list_in_declaration_order(self, tools: list) -> None:
        registry = CapabilityRegistry(tools, ToolsetConfig(mode=ToolsetMode.ALL))
        assert [d.name for d in registry.list()] == ["alpha", "delete_everything", "beta"]

    def test_list_is_stable(self, tools: list) -> None:
        registry = CapabilityRegistry(tools)
        assert registry.list() == registry.list()

    def test_base_keeps_hidden_tools(self, tools: list) -> None:
        registry = CapabilityRegistry(tools)
        assert [c.name for c in registry.base] == ["alpha", "delete_everything", "beta"]

    def test_contains(self, tools: list) -> None:
        registry = CapabilityRegistry(tools)
        assert "alpha" in registry
        assert "delete_everything" not in registry
        assert "nope" not in registry


class TestResolve:
    def test_resolve_visible(self, tools: list) -> None:
        registry = CapabilityRegistry(tools)
        assert registry.resolve("beta") is tools[2]

    def test_resolve_unknown(self, tools: list) -> None:
        registry = CapabilityRegistry(tools)
        with pytest.raises(ToolNotFoundError) as exc_info:
            registry.resolve("missing")
        assert exc_info.value.name == "missing"

    def test_resolve_hidden_is_not_found(self, tools: list) -> None:
        registry = CapabilityRegistry(tools)
        with pytest.raises(ToolNotFoundError):
            registry.resolve("delete_everything")

    def test_resolve_filtered_by_allow_list(self, tools: list) -> None:
        registry = CapabilityRegistry(tools, ToolsetConfig(available_tools=["alpha"]))
        assert registry.resolve("alpha").name == "alpha"
        with pytest.raises(ToolNotFoundError):
            registry.resolve("beta")


class TestReconfigure:
    def test_reconfigure_exposes_destructive(self, tools: list) -> None:
        registry = CapabilityRegistry(tools)
        changed = registry.reconfigure(ToolsetConfig(mode=ToolsetMode.ALL))
        assert changed is True
        assert registry.names() == ("alpha", "delete_everything", "beta")
        assert registry.resolve("delete_everything").name == "delete_everything"

    def test_reconfigure_without_change(self, tools: list) -> None:
        registry = CapabilityRegistry(tools)
        assert registry.reconfigure(ToolsetConfig(available_tools=["alpha", "beta"])) is False
        assert registry.config.available_tools == ["alpha", "beta"]

    def test_reconfigure_hides_tools(self, tools: list) -> None:
        registry = CapabilityRegistry(tools, ToolsetConfig(mode=ToolsetMode.ALL))
        assert registry.reconfigure(ToolsetConfig(available_tools=["beta"])) is True
        assert registry.names() == ("beta",)
        with pytest.raises(ToolNotFoundError):
            registry.resolve("alpha")
