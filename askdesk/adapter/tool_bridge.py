"""
Tool Bridge for the query executor MCP server

Each orchestration cycle opens one short-lived MCP session over stdio:
connect -> list tools -> invoke one tool -> disconnect. A fresh executor
process is spawned per session and torn down on every exit path
(success, tool error, timeout, exception). There is no connection pool.

Usage:
    bridge = ToolBridge(timeout=120.0)
    async with bridge.session() as session:
        tools = await session.list_tools()
        rows = await session.invoke("query_database", {"sql": "SELECT 1"})
"""

import asyncio
import logging
import os
import shutil
import sys
from contextlib import AsyncExitStack, asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Callable, Dict, List, Optional, Sequence

from fastmcp import Client
from fastmcp.client.transports import StdioTransport
from mcp.shared.exceptions import McpError

from ..common.errors import (
    ConnectFailed,
    NoToolsAvailable,
    ToolExecutionError,
    ToolTimeout,
)
from ..common.schemas import ToolDescriptor

logger = logging.getLogger("askdesk.adapter.tool_bridge")

DEFAULT_EXECUTOR_MODULE = "askdesk.executor.server"


def _content_text(content: Sequence[Any]) -> str:
    """Join the text parts of an MCP tool result."""
    return "\n".join(
        getattr(part, "text", "") for part in content or []
        if getattr(part, "type", "") == "text"
    )


class ToolSession:
    """An open MCP session. Only valid inside ``ToolBridge.session()``."""

    def __init__(self, client: Client, timeout: float) -> None:
        self._client = client
        self.timeout = timeout

    async def list_tools(self) -> List[ToolDescriptor]:
        """
        Fetch the executor's declared tools.

        Raises:
            NoToolsAvailable: the executor declares zero tools
            ConnectFailed: the listing request itself failed
        """
        try:
            tools = await self._client.list_tools()
        except McpError as e:
            raise ConnectFailed(f"Failed to list tools: {e}") from e
        except Exception as e:
            raise ConnectFailed(f"Lost connection while listing tools: {e}") from e

        if not tools:
            raise NoToolsAvailable("No tools available from MCP server")

        descriptors = [
            ToolDescriptor(
                name=tool.name,
                description=tool.description or "",
                input_schema=dict(tool.inputSchema or {}),
            )
            for tool in tools
        ]
        logger.debug("Available tools: %s", [d.name for d in descriptors])
        return descriptors

    async def invoke(
        self,
        name: str,
        arguments: Dict[str, Any],
        timeout: Optional[float] = None,
    ) -> str:
        """
        Call one tool and return its text content.

        Raises:
            ToolTimeout: no response within ``timeout`` seconds
            ToolExecutionError: the tool answered with ``isError``, the
                call was rejected at the protocol level, or the transport broke
        """
        timeout = timeout or self.timeout
        logger.info("Calling tool %s with args: %s", name, arguments)

        try:
            result = await asyncio.wait_for(
                self._client.call_tool_mcp(name, arguments),
                timeout=timeout,
            )
        except asyncio.TimeoutError as e:
            raise ToolTimeout(f"Tool '{name}' did not respond within {timeout:g}s") from e
        except McpError as e:
            raise ToolExecutionError(f"Tool '{name}' failed: {e}") from e
        except Exception as e:
            raise ToolExecutionError(f"Tool '{name}' transport failed: {e}") from e

        text = _content_text(result.content)
        if result.isError:
            raise ToolExecutionError(text or f"Tool '{name}' reported an error")
        return text


class ToolBridge:
    """
    Spawns the query executor and relays tool calls to it.

    By default the bundled executor module is started with the current
    interpreter. ``server_path`` runs a script instead (with ``command`` as
    the interpreter, e.g. ``node``). Tests inject ``client_factory``.
    """

    def __init__(
        self,
        server_path: str = "",
        command: str = "",
        args: Optional[Sequence[str]] = None,
        env: Optional[Dict[str, str]] = None,
        cwd: Optional[str] = None,
        timeout: float = 120.0,
        client_factory: Optional[Callable[[], Client]] = None,
    ) -> None:
        self.server_path = server_path
        self.command = command or sys.executable
        self.args = list(args or [])
        self.env = dict(env or {})
        self.cwd = cwd
        self.timeout = timeout
        self._client_factory = client_factory

    @classmethod
    def for_server(cls, server: Any, timeout: float = 120.0) -> "ToolBridge":
        """Bridge to an in-process FastMCP server (no subprocess)."""
        return cls(timeout=timeout, client_factory=lambda: Client(server))

    def _create_client(self) -> Client:
        if self._client_factory is not None:
            return self._client_factory()

        if self.server_path:
            script = Path(self.server_path).expanduser()
            if not script.is_file():
                raise ConnectFailed(f"MCP server script not found at {script}")
            args = [str(script), *self.args]
        else:
            args = self.args or ["-m", DEFAULT_EXECUTOR_MODULE]

        if shutil.which(self.command) is None:
            raise ConnectFailed(f"MCP server executable not found: {self.command}")

        transport = StdioTransport(
            command=self.command,
            args=args,
            env={**os.environ, **self.env},
            cwd=self.cwd,
            keep_alive=False,
        )
        return Client(transport)

    @asynccontextmanager
    async def session(self) -> AsyncIterator[ToolSession]:
        """Open a session; the connection is closed on every exit path."""
        client = self._create_client()
        async with AsyncExitStack() as stack:
            try:
                await stack.enter_async_context(client)
            except Exception as e:
                raise ConnectFailed(f"Could not connect to query executor: {e}") from e
            try:
                yield ToolSession(client, self.timeout)
            finally:
                logger.debug("Cleaning up MCP client connection")

    async def list_tools(self) -> List[ToolDescriptor]:
        async with self.session() as session:
            return await session.list_tools()

    async def run_tool(
        self,
        name: str,
        arguments: Dict[str, Any],
        timeout: Optional[float] = None,
    ) -> str:
        """Full cycle: connect, check the tool exists, invoke, disconnect."""
        async with self.session() as session:
            tools = await session.list_tools()
            if name not in {t.name for t in tools}:
                raise ToolExecutionError(f"Tool '{name}' is not offered by the executor")
            return await session.invoke(name, arguments, timeout=timeout)
