"""
Unit tests for domain value objects.
"""

import pytest
import uuid

from toolhub.domain.value_objects.namespaced_tool_name import (
    NamespacedToolName,
    is_namespaced,
    normalize_server_name,
)
from toolhub.domain.value_objects.session_id import SessionId
from toolhub.domain.exceptions.domain_exceptions import (
    InvalidSessionIdError,
    InvalidToolNameError,
)


class TestNormalizeServerName:
    """Tests for server name normalization."""

    def test_lowercases_and_replaces_spaces(self):
        assert normalize_server_name("Echo MCP") == "echo_mcp"

    def test_collapses_runs_of_special_characters(self):
        assert normalize_server_name("My -- Server!!v2") == "my_server_v2"

    def test_strips_leading_and_trailing_underscores(self):
        assert normalize_server_name("  (GitHub)  ") == "github"

    def test_already_normalized_is_unchanged(self):
        assert normalize_server_name("files_2") == "files_2"

    def test_distinct_names_can_collide(self):
        """Normalization is not injective."""
        assert normalize_server_name("My Server") == normalize_server_name("my-server")


class TestIsNamespaced:
    """Tests for MCP prefix detection."""

    def test_prefixed_name(self):
        assert is_namespaced("mcp__echo__ping") is True

    def test_prefix_is_case_insensitive(self):
        assert is_namespaced("MCP__Echo__ping") is True

    def test_builtin_name(self):
        assert is_namespaced("execute_command") is False

    def test_single_underscore_is_not_a_prefix(self):
        assert is_namespaced("mcp_echo_ping") is False


class TestNamespacedToolName:
    """Tests for NamespacedToolName value object."""

    def test_build_renders_namespaced_name(self):
        name = NamespacedToolName.build("Echo MCP", "ping")
        assert str(name) == "mcp__echo_mcp__ping"

    @pytest.mark.parametrize(
        "server, tool",
        [
            ("Echo MCP", "ping"),
            ("GitHub (work)", "create_issue"),
            ("files", "read__file"),
            ("a.b.c", "x"),
        ],
    )
    def test_parse_recovers_normalized_server_and_tool(self, server, tool):
        parsed = NamespacedToolName.parse(str(NamespacedToolName.build(server, tool)))
        assert parsed.server == normalize_server_name(server)
        assert parsed.tool == tool

    def test_parse_splits_on_first_separator(self):
        parsed = NamespacedToolName.parse("mcp__files__read__file")
        assert parsed.server == "files"
        assert parsed.tool == "read__file"

    def test_parse_accepts_uppercase_prefix(self):
        parsed = NamespacedToolName.parse("MCP__echo__ping")
        assert parsed.server == "echo"
        assert parsed.tool == "ping"

    def test_parse_without_prefix_raises(self):
        with pytest.raises(InvalidToolNameError):
            NamespacedToolName.parse("execute_command")

    def test_parse_without_separator_raises(self):
        with pytest.raises(InvalidToolNameError) as exc_info:
            NamespacedToolName.parse("mcp__echo")
        assert "Expected 'mcp__serverName__toolName'" in str(exc_info.value)

    def test_empty_segments_are_incomplete(self):
        parsed = NamespacedToolName.parse("mcp____ping")
        assert parsed.server == ""
        assert parsed.is_complete is False

    def test_immutability(self):
        name = NamespacedToolName.build("echo", "ping")
        with pytest.raises(AttributeError):
            name.tool = "other"  # type: ignore


class TestSessionId:
    """Tests for SessionId value object."""

    def test_valid_uuid_hex(self):
        value = uuid.uuid4().hex
        session_id = SessionId(value)
        assert session_id.value == value

    def test_valid_dashed_uuid(self):
        value = str(uuid.uuid4())
        assert SessionId(value).value == value

    def test_generate_creates_hex_id(self):
        session_id = SessionId.generate()
        assert len(session_id.value) == 32
        assert "-" not in session_id.value

    def test_generate_creates_unique_ids(self):
        assert SessionId.generate() != SessionId.generate()

    def test_str_returns_value(self):
        session_id = SessionId.generate()
        assert str(session_id) == session_id.value

    def test_invalid_format(self):
        with pytest.raises(InvalidSessionIdError):
            SessionId("not-a-session")

    def test_invalid_empty_string(self):
        with pytest.raises(InvalidSessionIdError):
            SessionId("")

    def test_invalid_none(self):
        with pytest.raises(InvalidSessionIdError):
            SessionId(None)  # type: ignore
