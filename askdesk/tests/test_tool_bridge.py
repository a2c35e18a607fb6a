"""Tests for the Tool Bridge session lifecycle and error mapping."""

import asyncio
from types import SimpleNamespace

import pytest
from sqlalchemy import create_engine, text

from askdesk.adapter.tool_bridge import ToolBridge
from askdesk.common.errors import (
    ConnectFailed,
    NoToolsAvailable,
    ToolExecutionError,
    ToolTimeout,
)
from askdesk.executor.server import QueryExecutorApp


def _text_result(body, is_error=False):
    return SimpleNamespace(content=[SimpleNamespace(type="text", text=body)], isError=is_error)


QUERY_TOOL = SimpleNamespace(
    name="query_database",
    description="Execute an SQL SELECT query",
    inputSchema={"type": "object", "properties": {"sql": {"type": "string"}}},
)


class FakeClient:
    """Stands in for fastmcp.Client and records connect/disconnect."""

    instances = []

    def __init__(self, tools=(QUERY_TOOL,), result=None, delay=0.0, fail_connect=False,
                 call_error=None, list_error=None):
        self.tools = list(tools)
        self.result = result or _text_result("[]")
        self.delay = delay
        self.fail_connect = fail_connect
        self.call_error = call_error
        self.list_error = list_error
        self.connected = False
        self.closed = False
        self.calls = []
        FakeClient.instances.append(self)

    async def __aenter__(self):
        if self.fail_connect:
            raise OSError("spawn failed")
        self.connected = True
        return self

    async def __aexit__(self, *exc_info):
        self.connected = False
        self.closed = True

    async def list_tools(self):
        if self.list_error:
            raise self.list_error
        return self.tools

    async def call_tool_mcp(self, name, arguments):
        self.calls.append((name, arguments))
        await asyncio.sleep(self.delay)
        if self.call_error:
            raise self.call_error
        return self.result


def _bridge(**client_kwargs):
    FakeClient.instances = []
    timeout = client_kwargs.pop("timeout", 120.0)
    return ToolBridge(timeout=timeout, client_factory=lambda: FakeClient(**client_kwargs))


class TestToolSession:
    @pytest.mark.asyncio
    async def test_list_and_invoke(self):
        bridge = _bridge(result=_text_result('[{"id": 1}]'))

        async with bridge.session() as session:
            tools = await session.list_tools()
            output = await session.invoke("query_database", {"sql": "SELECT 1"})

        assert tools[0].name == "query_database"
        assert tools[0].input_schema["properties"]["sql"]["type"] == "string"
        assert output == '[{"id": 1}]'
        assert FakeClient.instances[0].closed

    @pytest.mark.asyncio
    async def test_no_tools(self):
        bridge = _bridge(tools=[])

        with pytest.raises(NoToolsAvailable):
            async with bridge.session() as session:
                await session.list_tools()
        assert FakeClient.instances[0].closed

    @pytest.mark.asyncio
    async def test_tool_error_payload(self):
        bridge = _bridge(result=_text_result(
            "Invalid SQL query: Only SELECT statements are allowed.", is_error=True
        ))

        with pytest.raises(ToolExecutionError, match="Only SELECT"):
            async with bridge.session() as session:
                await session.invoke("query_database", {"sql": "DROP TABLE orders"})
        assert FakeClient.instances[0].closed

    @pytest.mark.asyncio
    async def test_timeout_tears_down_connection(self):
        bridge = _bridge(delay=5.0, timeout=0.05)

        with pytest.raises(ToolTimeout):
            async with bridge.session() as session:
                await session.invoke("query_database", {"sql": "SELECT SLEEP(10)"})

        client = FakeClient.instances[0]
        assert client.calls == [("query_database", {"sql": "SELECT SLEEP(10)"})]
        assert client.closed
        assert not client.connected

    @pytest.mark.asyncio
    async def test_per_call_timeout_overrides_default(self):
        bridge = _bridge(delay=5.0)

        with pytest.raises(ToolTimeout):
            async with bridge.session() as session:
                await session.invoke("query_database", {"sql": "SELECT 1"}, timeout=0.05)
        assert FakeClient.instances[0].closed

    @pytest.mark.asyncio
    async def test_exception_in_body_still_closes(self):
        bridge = _bridge()

        with pytest.raises(KeyError):
            async with bridge.session():
                raise KeyError("boom")
        assert FakeClient.instances[0].closed

    @pytest.mark.asyncio
    async def test_transport_failure_during_call(self):
        bridge = _bridge(call_error=RuntimeError("Server session was closed unexpectedly"))

        with pytest.raises(ToolExecutionError, match="closed unexpectedly") as exc_info:
            async with bridge.session() as session:
                await session.invoke("query_database", {"sql": "SELECT 1"})

        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert FakeClient.instances[0].closed

    @pytest.mark.asyncio
    async def test_transport_failure_during_listing(self):
        bridge = _bridge(list_error=RuntimeError("Client is not connected"))

        with pytest.raises(ConnectFailed, match="not connected"):
            await bridge.list_tools()
        assert FakeClient.instances[0].closed

    @pytest.mark.asyncio
    async def test_connect_failure(self):
        bridge = _bridge(fail_connect=True)

        with pytest.raises(ConnectFailed, match="spawn failed"):
            async with bridge.session():
                pass


class TestToolBridgeTransport:
    @pytest.mark.asyncio
    async def test_missing_script(self, tmp_path):
        bridge = ToolBridge(server_path=str(tmp_path / "missing-server.js"), command="node")

        with pytest.raises(ConnectFailed, match="not found"):
            await bridge.list_tools()

    @pytest.mark.asyncio
    async def test_missing_executable(self):
        bridge = ToolBridge(command="definitely-not-an-executable-askdesk")

        with pytest.raises(ConnectFailed, match="executable not found"):
            await bridge.list_tools()

    @pytest.mark.asyncio
    async def test_run_tool_unknown_name(self):
        bridge = _bridge()

        with pytest.raises(ToolExecutionError, match="not offered"):
            await bridge.run_tool("drop_everything", {})
        assert FakeClient.instances[0].calls == []


class TestToolBridgeWithExecutor:
    @pytest.fixture
    def bridge(self, tmp_path):
        engine = create_engine(
            f"sqlite:///{tmp_path / 'shop.db'}",
            connect_args={"check_same_thread": False},
        )
        with engine.begin() as conn:
            conn.execute(text("CREATE TABLE menu (name TEXT, price REAL)"))
            conn.execute(text("INSERT INTO menu VALUES ('shiro', 95.0)"))
        yield ToolBridge.for_server(QueryExecutorApp(engine).mcp)
        engine.dispose()

    @pytest.mark.asyncio
    async def test_run_tool(self, bridge):
        output = await bridge.run_tool("query_database", {"sql": "SELECT name FROM menu"})
        assert output == '[{"name": "shiro"}]'

    @pytest.mark.asyncio
    async def test_select_only_enforced_remotely(self, bridge):
        with pytest.raises(ToolExecutionError, match="Only SELECT"):
            await bridge.run_tool("query_database", {"sql": "DELETE FROM menu"})
