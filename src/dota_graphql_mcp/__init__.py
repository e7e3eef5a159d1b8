"""dota-graphql-mcp: MCP server exposing a searchable GraphQL schema for Dota 2 analytics."""

import asyncio
import logging
import os
import sys

from dota_graphql_mcp.server import mcp

_TRANSPORTS = ("stdio", "sse", "streamable-http")


def main() -> None:
    """CLI entry point: index the schema, then serve MCP (stdio by default)."""
    # stdout belongs to the stdio transport
    logging.basicConfig(
        stream=sys.stderr,
        level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    transport = os.environ.get("MCP_TRANSPORT", "stdio")
    if transport not in _TRANSPORTS:
        sys.exit(f"MCP_TRANSPORT must be one of {', '.join(_TRANSPORTS)}, got {transport!r}")

    from dota_graphql_mcp.tools import initialize_on_startup

    asyncio.run(initialize_on_startup())
    mcp.run(transport=transport)
