"""
Session registry for the HTTP+SSE MCP transport.

A client opens ``GET /mcp/sse`` and is told where to POST (``endpoint`` event).
Responses to those POSTs are queued to the session and written to the open
stream as ``message`` events. A session exists only while its stream is open.
"""

import asyncio
import json
import logging
from typing import Any, AsyncIterator, Dict, Optional

from toolhub.domain.exceptions.domain_exceptions import InvalidSessionIdError
from toolhub.domain.value_objects.session_id import SessionId

logger = logging.getLogger(__name__)

DEFAULT_MESSAGES_PATH = "/mcp/messages"

_CLOSE = object()


def format_event(event: str, data: str) -> str:
    return f"event: {event}\ndata: {data}\n\n"


class SseSession:
    """One open SSE stream and its outbound queue (single reader, many writers)."""

    def __init__(self, session_id: SessionId, messages_path: str, registry: "SseSessionRegistry"):
        self.id = session_id
        self._messages_path = messages_path
        self._registry = registry
        self._queue: asyncio.Queue = asyncio.Queue()
        self._closed = False

    @property
    def endpoint(self) -> str:
        return f"{self._messages_path}?session={self.id}"

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, envelope: dict[str, Any]) -> None:
        """Queue an envelope for the stream; ignored once the session closed."""
        if self._closed:
            return
        self._queue.put_nowait(json.dumps(envelope, separators=(",", ":")))

    def close(self) -> None:
        """End the stream after the messages already queued."""
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_CLOSE)

    async def events(self) -> AsyncIterator[str]:
        """Render the stream: the ``endpoint`` event, then one event per message.

        The session is discarded however the stream ends (client disconnect,
        write failure, cancellation or shutdown).
        """
        try:
            yield format_event("endpoint", self.endpoint)
            while True:
                item = await self._queue.get()
                if item is _CLOSE:
                    break
                yield format_event("message", item)
        finally:
            self._closed = True
            self._registry.discard(str(self.id))
            logger.info("SSE session %s closed", self.id)


class SseSessionRegistry:
    """Open SSE sessions by id."""

    def __init__(self, messages_path: str = DEFAULT_MESSAGES_PATH):
        self._messages_path = messages_path
        self._sessions: Dict[str, SseSession] = {}

    def open(self) -> SseSession:
        session = SseSession(SessionId.generate(), self._messages_path, self)
        self._sessions[str(session.id)] = session
        logger.info("SSE session %s opened", session.id)
        return session

    def get(self, session_id: Optional[str]) -> Optional[SseSession]:
        """The live session for ``session_id``; None if unknown or malformed."""
        if not session_id:
            return None
        try:
            key = str(SessionId(session_id))
        except InvalidSessionIdError:
            return None
        session = self._sessions.get(key)
        if session is None or session.closed:
            return None
        return session

    def discard(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)

    def close_all(self) -> None:
        """End every open stream (application shutdown)."""
        for session in list(self._sessions.values()):
            session.close()
        self._sessions.clear()

    def __len__(self) -> int:
        return len(self._sessions)
