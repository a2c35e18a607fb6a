"""
Query executor MCP server for askdesk.

Transport: stdio only (spawned per question by the Tool Bridge).

Exposes a single tool, ``query_database``, which runs read-only SQL against
the configured database and returns the rows as a JSON array. Statements
that do not start with SELECT are rejected with a tool error.
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import Annotated, Any, Dict, List

from dotenv import load_dotenv
from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from mcp.types import ToolAnnotations
from pydantic import Field
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from ..common.config import load_config

logger = logging.getLogger("askdesk.executor")

SELECT_ONLY_MESSAGE = "Invalid SQL query: Only SELECT statements are allowed."


def is_select(sql: str) -> bool:
    return sql.strip().lower().startswith("select")


class QueryExecutorApp:
    """
    Main application class for the query executor server.

    The engine is injected so tests can run against SQLite.
    """

    def __init__(self, engine: Engine, mcp_server_name: str = "askdesk-query-executor") -> None:
        self.engine = engine
        self.mcp = FastMCP(name=mcp_server_name)

        @self.mcp.tool(
            name="query_database",
            description="Execute an SQL SELECT query on the business database and return the rows as JSON.",
            annotations=ToolAnnotations(readOnlyHint=True, destructiveHint=False),
        )
        async def tool_query_database(
            sql: Annotated[str, Field(description="SQL SELECT query to execute")],
        ) -> str:
            """
            Run a read-only query.

            Returns:
                str: JSON array of row objects
            """
            logger.info("Executing SQL query: %s", sql)
            if not is_select(sql):
                raise ToolError(SELECT_ONLY_MESSAGE)
            try:
                rows = await asyncio.to_thread(self.run_select, sql)
            except SQLAlchemyError as e:
                logger.error("Error executing tool: %s", e)
                raise ToolError(json.dumps({"error": str(e)})) from e
            return json.dumps(rows, default=str)

    def run_select(self, sql: str) -> List[Dict[str, Any]]:
        with self.engine.connect() as conn:
            result = conn.execute(text(sql))
            return [dict(row._mapping) for row in result]

    def run(self) -> None:
        """Runs the MCP server using stdio transport."""
        self.mcp.run(transport="stdio")


def main() -> None:
    load_dotenv()
    # stdout carries the protocol; logs go to stderr
    logging.basicConfig(stream=sys.stderr, level=logging.INFO)

    config = load_config()
    parser = argparse.ArgumentParser(description="Run the askdesk query executor (stdio).")
    parser.add_argument(
        "--database-url",
        default=config.database.resolved_url,
        help="SQLAlchemy database URL.",
    )
    parser.add_argument(
        "--server-name",
        default="askdesk-query-executor",
        help="Advertised MCP server name.",
    )
    args = parser.parse_args()

    engine = create_engine(args.database_url, pool_pre_ping=True)
    app = QueryExecutorApp(engine, mcp_server_name=args.server_name)
    logger.info("MCP server connected and running.")
    try:
        app.run()
    finally:
        engine.dispose()


if __name__ == "__main__":
    main()
