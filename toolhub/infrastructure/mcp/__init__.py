# MCP (Model Context Protocol) Infrastructure
#
# This module provides:
# - JSON-RPC framing and process supervision for stdio MCP servers
# - Stdio and HTTP clients, the stdio client cache and the tool registry
# - The platform's own MCP endpoint (request handler and SSE sessions)
