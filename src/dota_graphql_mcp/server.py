"""MCP server definition; tool modules register themselves via FastMCP decorators."""

import os

from mcp.server.fastmcp import FastMCP

mcp = FastMCP(
    name=os.environ.get("NAME", "dota-graphql-mcp"),
    instructions=(
        "Dota 2 analytics over the STRATZ GraphQL API. Start with search-schema to find "
        "relevant fields, use introspect-type to explore a type, then run the query with "
        "query-graphql. The dota.* tools answer common player/match/hero questions directly."
    ),
    host=os.environ.get("HOST", "127.0.0.1"),
    port=int(os.environ.get("PORT", "3001")),
)

# Import tool modules so @mcp.tool() decorators execute at import time.
import dota_graphql_mcp.dota_tools as _dota_tools  # noqa: F401, E402
import dota_graphql_mcp.tools as _tools  # noqa: F401, E402
