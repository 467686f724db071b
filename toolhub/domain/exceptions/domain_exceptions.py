class DomainError(Exception):
    """Base exception for all domain-level errors."""

    pass


class ConfigurationError(DomainError):
    """Raised when an MCP server configuration cannot be used to build a client."""

    pass


class ServerNotFoundError(DomainError):
    """Raised when a requested MCP server configuration does not exist."""

    pass


class InvalidToolNameError(DomainError):
    """Raised when a tool name is not in the namespaced MCP format."""

    pass


class InvalidSessionIdError(DomainError):
    """Raised when a session ID is not a valid UUID."""

    pass


class ServerUnreachableError(DomainError):
    """Raised when a configured MCP server cannot be reached for live discovery."""

    pass
