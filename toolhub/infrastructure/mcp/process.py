"""
Process supervision for stdio MCP servers.

A :class:`ProcessHandle` wraps one child process started with redirected
stdin/stdout/stderr. The handle does not read the pipes itself; the stdio
client owns the two reader loops. The handle only knows how to start the
process, report whether it has exited and shut it down (close stdin, grace
period, then kill the whole process group).
"""

import asyncio
import logging
import os
import signal
import sys
from enum import Enum
from typing import Optional, Sequence

from toolhub.domain.entities.server_config import ServerConfig
from toolhub.infrastructure.mcp.client.errors import McpClientError

logger = logging.getLogger(__name__)

# Python children otherwise block-buffer stdout when it is a pipe, and uv
# compiles bytecode lazily, which can stall the first request for minutes.
FORCED_ENV = {
    "PYTHONUNBUFFERED": "1",
    "UV_COMPILE_BYTECODE": "1",
}

# Upper bound for a single JSON-RPC line (tool catalogs can be large)
STREAM_LIMIT_BYTES = 16 * 1024 * 1024


class ProcessState(Enum):
    STARTING = "starting"
    RUNNING = "running"
    EXITED = "exited"
    DISPOSED = "disposed"


def build_environment(server_env: dict[str, str]) -> dict[str, str]:
    """Inherited environment + forced unbuffered output + server variables (server wins)."""
    env = dict(os.environ)
    env.update(FORCED_ENV)
    env.update(server_env or {})
    return env


class ProcessHandle:
    """One supervised child process."""

    def __init__(
        self,
        name: str,
        argv: Sequence[str],
        cwd: Optional[str] = None,
        env: Optional[dict[str, str]] = None,
    ):
        self.name = name
        self.argv = list(argv)
        self.cwd = cwd
        self.env = env
        self._process: Optional[asyncio.subprocess.Process] = None
        self._disposed = False

    async def start(self) -> None:
        self._process = await asyncio.create_subprocess_exec(
            *self.argv,
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=self.cwd,
            env=self.env,
            limit=STREAM_LIMIT_BYTES,
            start_new_session=sys.platform != "win32",
        )

    @property
    def state(self) -> ProcessState:
        if self._disposed:
            return ProcessState.DISPOSED
        if self._process is None:
            return ProcessState.STARTING
        if self._process.returncode is not None:
            return ProcessState.EXITED
        return ProcessState.RUNNING

    @property
    def pid(self) -> Optional[int]:
        return self._process.pid if self._process else None

    @property
    def returncode(self) -> Optional[int]:
        return self._process.returncode if self._process else None

    @property
    def stdin(self) -> asyncio.StreamWriter:
        assert self._process is not None and self._process.stdin is not None
        return self._process.stdin

    @property
    def stdout(self) -> asyncio.StreamReader:
        assert self._process is not None and self._process.stdout is not None
        return self._process.stdout

    @property
    def stderr(self) -> asyncio.StreamReader:
        assert self._process is not None and self._process.stderr is not None
        return self._process.stderr

    def has_exited(self) -> bool:
        """Non-blocking: True once the child has been reaped."""
        return self._process is not None and self._process.returncode is not None

    async def wait(self, timeout: Optional[float] = None) -> Optional[int]:
        """Wait for exit; returns the exit code, or None if ``timeout`` elapsed."""
        if self._process is None:
            return None
        try:
            return await asyncio.wait_for(self._process.wait(), timeout)
        except asyncio.TimeoutError:
            return None

    async def terminate(self, grace_seconds: float) -> Optional[int]:
        """Close stdin, wait up to ``grace_seconds``, then kill the process group.

        The group is killed even when the child exited on its own, so that
        grandchildren it left behind do not outlive the server.
        """
        if self._process is None or self._disposed:
            return self.returncode

        try:
            if not self.has_exited():
                self._close_stdin()
                code = await self.wait(grace_seconds)
                if code is None:
                    logger.warning(
                        "stdio MCP server '%s' (PID %s) ignored stdin close; killing it",
                        self.name,
                        self.pid,
                    )
                    self._kill_tree()
                    await self.wait(grace_seconds)

            # Launchers like npx can exit and leave their children in the group
            self._kill_tree()
        finally:
            self._disposed = True

        return self.returncode

    def _close_stdin(self) -> None:
        stdin = self._process.stdin if self._process else None
        if stdin is None or stdin.is_closing():
            return
        try:
            stdin.close()
        except (BrokenPipeError, ConnectionResetError):
            pass

    def _kill_tree(self) -> None:
        assert self._process is not None
        if hasattr(os, "killpg"):
            try:
                os.killpg(self._process.pid, signal.SIGKILL)
                return
            except ProcessLookupError:
                return
            except PermissionError:
                pass
        try:
            self._process.kill()
        except ProcessLookupError:
            pass


class ProcessSupervisor:
    """Spawns stdio MCP server processes from their configuration."""

    async def start(self, server: ServerConfig) -> ProcessHandle:
        """Spawn the server process and return as soon as it is running.

        The MCP handshake is not performed here.

        Raises:
            ConfigurationError: If the config has no command.
            McpClientError: If the executable cannot be started.
        """
        server.validate()

        handle = ProcessHandle(
            name=server.name,
            argv=[server.command, *server.args],
            cwd=server.cwd or None,
            env=build_environment(server.env),
        )

        try:
            await handle.start()
        except OSError as e:
            raise McpClientError(
                "spawn_failed",
                f"Could not start stdio MCP server '{server.name}': {e}",
                details={"command": server.command or ""},
            ) from e

        logger.info(
            "Started stdio MCP server '%s' (PID %s): %s",
            server.name,
            handle.pid,
            " ".join(handle.argv),
        )
        return handle
