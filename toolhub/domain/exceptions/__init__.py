from .domain_exceptions import (
    DomainError,
    ConfigurationError,
    ServerNotFoundError,
    ServerUnreachableError,
    InvalidToolNameError,
    InvalidSessionIdError,
)

__all__ = [
    "DomainError",
    "ConfigurationError",
    "ServerNotFoundError",
    "ServerUnreachableError",
    "InvalidToolNameError",
    "InvalidSessionIdError",
]
