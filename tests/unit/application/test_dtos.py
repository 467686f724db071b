"""
Unit tests for application layer DTOs.
"""

from datetime import datetime, timezone

import pytest
from freezegun import freeze_time
from pydantic import ValidationError

from toolhub.application.dtos.server_dtos import (
    ServerCreateRequest,
    ServerUpdateRequest,
    TransportType,
)
from toolhub.application.dtos.tool_dtos import ToolCallRequest, ToolCallResponse
from toolhub.application.use_cases.manage_servers import to_server_dto
from toolhub.domain.entities.server_config import ServerConfig, TransportKind


class TestServerDTOs:
    """Tests for server configuration DTOs."""

    def test_create_request_defaults(self):
        request = ServerCreateRequest(name="Echo", command="python")

        assert request.transport == TransportType.STDIO
        assert request.args == []
        assert request.env == {}
        assert request.enabled is True

    def test_create_request_rejects_unknown_transport(self):
        with pytest.raises(ValidationError):
            ServerCreateRequest(name="Echo", transport="websocket")

    def test_update_request_tracks_only_provided_fields(self):
        request = ServerUpdateRequest(enabled=False)
        assert request.model_dump(exclude_unset=True) == {"enabled": False}

    def test_server_dto_never_exposes_the_secret(self):
        server = ServerConfig(
            name="Remote",
            transport=TransportKind.HTTP,
            base_url="https://mcp.example.com",
            api_key_encrypted="s3cret",
        )

        dto = to_server_dto(server)
        data = dto.model_dump()

        assert dto.has_api_key is True
        assert "s3cret" not in str(data)
        assert "api_key_encrypted" not in data
        assert data["transport"] == TransportType.HTTP

    @freeze_time("2024-03-01 08:00:00")
    def test_server_dto_carries_creation_time(self):
        server = ServerConfig(name="Local", transport=TransportKind.STDIO, command="uvx")

        dto = to_server_dto(server)

        assert dto.created_at == datetime(2024, 3, 1, 8, 0, 0, tzinfo=timezone.utc)
        assert dto.model_dump(mode="json")["created_at"] == "2024-03-01T08:00:00Z"


class TestToolDTOs:
    """Tests for tool DTOs."""

    def test_call_request_defaults(self):
        request = ToolCallRequest(name="mcp__echo__ping")
        assert request.arguments == {}
        assert request.scope is None

    def test_call_request_requires_name(self):
        with pytest.raises(ValidationError):
            ToolCallRequest(arguments={})

    def test_call_response_serialization(self):
        response = ToolCallResponse(text="Error: boom", is_error=True)
        assert response.model_dump() == {"text": "Error: boom", "is_error": True}
