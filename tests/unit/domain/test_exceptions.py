"""
Unit tests for domain exceptions.
"""

import pytest

from toolhub.domain.exceptions import (
    DomainError,
    ConfigurationError,
    ServerNotFoundError,
    ServerUnreachableError,
    InvalidToolNameError,
    InvalidSessionIdError,
)


class TestDomainExceptions:
    """Tests for domain exception hierarchy."""

    def test_domain_error_is_base(self):
        """Test that DomainError is the base exception."""
        error = DomainError("Base error")
        assert isinstance(error, Exception)
        assert str(error) == "Base error"

    @pytest.mark.parametrize(
        "exception_class",
        [
            ConfigurationError,
            ServerNotFoundError,
            ServerUnreachableError,
            InvalidToolNameError,
            InvalidSessionIdError,
        ],
    )
    def test_all_errors_inherit_from_domain_error(self, exception_class):
        error = exception_class("message")
        assert isinstance(error, DomainError)
        assert str(error) == "message"

    def test_catching_domain_error(self):
        """Test that all domain errors can be caught with DomainError."""
        with pytest.raises(DomainError):
            raise ConfigurationError("MCP server 'x' has no command configured.")
