import uuid
from dataclasses import dataclass

from ..exceptions.domain_exceptions import InvalidSessionIdError


@dataclass(frozen=True)
class SessionId:
    """Immutable identifier of one open SSE stream."""

    value: str

    def __post_init__(self) -> None:
        try:
            uuid.UUID(hex=self.value)
        except (ValueError, TypeError, AttributeError) as e:
            raise InvalidSessionIdError(
                f"Invalid session ID format: {self.value}"
            ) from e

    @classmethod
    def generate(cls) -> "SessionId":
        """Generate a new unique session ID (32 hex characters, no dashes)."""
        return cls(value=uuid.uuid4().hex)

    def __str__(self) -> str:
        return self.value
