import re
from dataclasses import dataclass

from ..exceptions.domain_exceptions import InvalidToolNameError

MCP_PREFIX = "mcp__"
SEPARATOR = "__"

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def normalize_server_name(name: str) -> str:
    """Lowercase a server name and collapse every non-alphanumeric run to ``_``.

    Distinct names can normalize to the same segment ("My Server" and
    "my-server" both become ``my_server``).
    """
    return _NON_ALNUM.sub("_", name.lower()).strip("_")


def is_namespaced(name: str) -> bool:
    """Return True if ``name`` carries the MCP namespace prefix."""
    return name[: len(MCP_PREFIX)].lower() == MCP_PREFIX


@dataclass(frozen=True)
class NamespacedToolName:
    """A tool name qualified by the normalized name of the server that owns it.

    Rendered as ``mcp__{server}__{tool}``. The server segment never contains
    ``__`` so splitting on the first separator recovers both parts, even when
    the tool name itself contains ``__``.
    """

    server: str
    tool: str

    @classmethod
    def build(cls, server_name: str, tool_name: str) -> "NamespacedToolName":
        return cls(server=normalize_server_name(server_name), tool=tool_name)

    @classmethod
    def parse(cls, name: str) -> "NamespacedToolName":
        """Split a namespaced name back into ``(server, tool)``.

        Raises:
            InvalidToolNameError: If the prefix or the inner separator is missing.
        """
        if not is_namespaced(name):
            raise InvalidToolNameError(
                f"'{name}' is not a namespaced MCP tool name."
            )

        remainder = name[len(MCP_PREFIX):]
        index = remainder.find(SEPARATOR)
        if index < 0:
            raise InvalidToolNameError(
                f"Invalid MCP tool name format '{name}'. "
                "Expected 'mcp__serverName__toolName'."
            )
        return cls(server=remainder[:index], tool=remainder[index + len(SEPARATOR):])

    @property
    def is_complete(self) -> bool:
        return bool(self.server) and bool(self.tool)

    def __str__(self) -> str:
        return f"{MCP_PREFIX}{self.server}{SEPARATOR}{self.tool}"
