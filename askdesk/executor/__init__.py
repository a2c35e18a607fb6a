"""Read-only SQL executor exposed as an MCP server."""
