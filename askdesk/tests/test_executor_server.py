"""Tests for the query executor MCP server (in-memory, SQLite-backed)."""

import json

import pytest
from fastmcp import Client
from sqlalchemy import create_engine, text

from askdesk.executor.server import QueryExecutorApp, is_select


@pytest.fixture
def engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'shop.db'}",
        connect_args={"check_same_thread": False},
    )
    with engine.begin() as conn:
        conn.execute(text(
            "CREATE TABLE orders (id INTEGER PRIMARY KEY, item TEXT, total REAL, ordered_on TEXT)"
        ))
        conn.execute(text(
            "INSERT INTO orders (item, total, ordered_on) VALUES "
            "('injera', 120.0, '2026-10-16'), ('doro wat', 340.5, '2026-10-16')"
        ))
    yield engine
    engine.dispose()


@pytest.fixture
def mcp_server(engine):
    return QueryExecutorApp(engine, mcp_server_name="test-executor").mcp


class TestIsSelect:
    @pytest.mark.parametrize("sql", ["SELECT 1", "  select * from orders", "Select\n1"])
    def test_select_accepted(self, sql):
        assert is_select(sql)

    @pytest.mark.parametrize("sql", ["DELETE FROM orders", "UPDATE orders SET total=0", "", "with x as (select 1) select * from x"])
    def test_other_rejected(self, sql):
        assert not is_select(sql)


@pytest.mark.asyncio
async def test_only_query_tool_registered(mcp_server):
    async with Client(mcp_server) as client:
        tools = await client.list_tools()

    assert [t.name for t in tools] == ["query_database"]
    assert "sql" in tools[0].inputSchema["properties"]


@pytest.mark.asyncio
async def test_select_returns_json_rows(mcp_server):
    async with Client(mcp_server) as client:
        result = await client.call_tool_mcp(
            "query_database", {"sql": "SELECT item, total FROM orders ORDER BY id"}
        )

    assert not result.isError
    rows = json.loads(result.content[0].text)
    assert rows == [
        {"item": "injera", "total": 120.0},
        {"item": "doro wat", "total": 340.5},
    ]


@pytest.mark.asyncio
async def test_empty_result_is_empty_array(mcp_server):
    async with Client(mcp_server) as client:
        result = await client.call_tool_mcp(
            "query_database", {"sql": "SELECT * FROM orders WHERE ordered_on = '2026-10-17'"}
        )

    assert not result.isError
    assert result.content[0].text == "[]"


@pytest.mark.asyncio
async def test_non_select_rejected_as_tool_error(mcp_server, engine):
    async with Client(mcp_server) as client:
        result = await client.call_tool_mcp("query_database", {"sql": "DELETE FROM orders"})

    assert result.isError
    assert "Only SELECT statements are allowed" in result.content[0].text
    with engine.connect() as conn:
        assert conn.execute(text("SELECT COUNT(*) FROM orders")).scalar() == 2


@pytest.mark.asyncio
async def test_database_error_reported(mcp_server):
    async with Client(mcp_server) as client:
        result = await client.call_tool_mcp("query_database", {"sql": "SELECT * FROM missing_table"})

    assert result.isError
    assert "missing_table" in result.content[0].text
