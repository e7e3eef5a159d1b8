"""MCP schema tools: search-schema, introspect-type, get-query-examples,
query-graphql and debug-schema-status, plus the full-schema resource.

All schema tools share one process-wide :class:`SchemaIndex`, initialized at
startup and lazily retried on first use if that failed.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os

import httpx

from dota_graphql_mcp import cache, examples, graphql_client, introspection
from dota_graphql_mcp.errors import QueryError, SchemaMCPError
from dota_graphql_mcp.index import SchemaIndex
from dota_graphql_mcp.server import mcp

log = logging.getLogger("dota-graphql-mcp")

_MIN_TYPE_DEPTH = 1
_MAX_TYPE_DEPTH = 3

schema_index = SchemaIndex()
_init_lock = asyncio.Lock()


def _allow_mutations() -> bool:
    return os.environ.get("ALLOW_MUTATIONS", "false").lower() == "true"


# ---------------------------------------------------------------------------
# Schema initialization
# ---------------------------------------------------------------------------


async def _load_introspection(refresh: bool = False) -> dict:
    """Return the raw introspection payload from SCHEMA file, disk cache or endpoint."""
    schema_path = os.environ.get("SCHEMA")
    if schema_path:
        log.info("Loading schema from %s", schema_path)
        return introspection.load_local_introspection(schema_path)

    url = graphql_client.endpoint()
    if not refresh and cache.is_cached(url):
        payload = cache.load_introspection(url)
        if payload is not None:
            log.info("Introspection cache hit for %s", url)
            return payload

    payload = await introspection.fetch_introspection(url, graphql_client.headers())
    cache.save_introspection(url, payload)
    return payload


async def ensure_schema(refresh: bool = False) -> SchemaIndex:
    """Index the schema unless that already happened; *refresh* forces a rebuild.

    Build failures propagate so the calling tool can report them.
    """
    if schema_index.initialized and not refresh:
        return schema_index
    async with _init_lock:
        if schema_index.initialized and not refresh:
            return schema_index
        payload = await _load_introspection(refresh)
        schema_index.index_schema(introspection.parse_introspection(payload))
    return schema_index


async def initialize_on_startup() -> None:
    try:
        await ensure_schema()
    except (SchemaMCPError, httpx.HTTPError, OSError) as exc:
        log.warning("Schema initialization failed on startup, will retry on first request: %s", exc)


# ---------------------------------------------------------------------------
# Tool: search-schema
# ---------------------------------------------------------------------------


@mcp.tool(name="search-schema")
async def search_schema(keywords: list[str], max_results: int = 10) -> str:
    """ALWAYS START HERE: search GraphQL schema fields by keywords.

    Finds only the relevant fields instead of dumping the whole schema. Use
    broad keywords first (player, match, hero), then narrow down (winrate,
    performance).

    Args:
        keywords: Search keywords, e.g. player, match, hero, winrate, steam, league, items.
        max_results: Maximum number of fields to return.

    Returns:
        Field paths with types, depth and descriptions, a query template, and
        contextual examples.
    """
    try:
        index = await ensure_schema()
    except (SchemaMCPError, httpx.HTTPError, OSError) as exc:
        log.error("search-schema: schema initialization failed: %s", exc)
        return f"Schema search failed: {exc}"

    results = index.search_fields(keywords, max_results)
    if not results:
        suggestions = examples.suggest_keywords(" ".join(keywords))
        patterns = examples.SEARCH_PATTERNS
        steps = examples.workflow_guidance(" ".join(keywords))
        return (
            f"No fields found for keywords: {', '.join(keywords)}\n\n"
            f"Try these Dota 2 related keywords instead:\n{', '.join(suggestions)}\n\n"
            "Common search patterns:\n"
            f"- Player data: {', '.join(patterns['player'])}\n"
            f"- Match data: {', '.join(patterns['match'])}\n"
            f"- Hero data: {', '.join(patterns['hero'])}"
            "\n\nSuggested workflow:\n"
            + "\n".join(f"{i}. {step}" for i, step in enumerate(steps, start=1))
        )

    lines: list[str] = []
    for r in results:
        line = f"{r.field.path} ({r.field.type_name}) - depth: {r.field.depth}"
        if r.field.description:
            line += f" - {r.field.description}"
        lines.append(line)

    template = index.generate_query_template([r.field for r in results])
    text = (
        f"Found {len(results)} relevant fields:\n\n"
        + "\n".join(lines)
        + f"\n\n=== Query Template ===\n{template}"
    )

    contextual = examples.matching_templates(keywords, limit=2)
    if contextual:
        text += "\n\n=== Contextual Examples ===\n" + "\n\n".join(
            ex.render(with_notes=False) for ex in contextual
        )
    return text


# ---------------------------------------------------------------------------
# Tool: introspect-type
# ---------------------------------------------------------------------------


@mcp.tool(name="introspect-type")
async def introspect_type(type_name: str, max_depth: int = 2) -> str:
    """DEEP DIVE: show the structure of one GraphQL type with controlled depth.

    Use after search-schema to explore a type such as PlayerType or MatchType.

    Args:
        type_name: GraphQL type name from search results.
        max_depth: 1 = the type only, 2 = plus its nested types, 3 = one level deeper.
    """
    depth = max(_MIN_TYPE_DEPTH, min(max_depth, _MAX_TYPE_DEPTH))
    try:
        index = await ensure_schema()
        return index.get_type_definition(type_name, depth)
    except (SchemaMCPError, httpx.HTTPError, OSError) as exc:
        log.error("introspect-type %s failed: %s", type_name, exc)
        return f"Type introspection failed: {exc}"


# ---------------------------------------------------------------------------
# Tool: get-query-examples
# ---------------------------------------------------------------------------


@mcp.tool(name="get-query-examples")
async def get_query_examples(category: str = "all") -> str:
    """GUIDANCE: curated query examples, workflows and tips for Dota 2 analysis.

    Args:
        category: One of player, match, hero, league, workflow, all.
    """
    try:
        return examples.format_examples(category)
    except ValueError as exc:
        return f"Failed to get examples: {exc}"


# ---------------------------------------------------------------------------
# Tool: query-graphql
# ---------------------------------------------------------------------------


@mcp.tool(name="query-graphql")
async def query_graphql(query: str, variables: str | None = None) -> str:
    """EXECUTE: run a GraphQL query against the Dota 2 API.

    Start from the templates returned by search-schema and pass dynamic values
    as variables. Mutations are rejected unless ALLOW_MUTATIONS=true.

    Args:
        query: GraphQL document, e.g. query($id: Long!) { player(steamAccountId: $id) { ... } }
        variables: JSON object string, e.g. '{"id": 123456789}'.
    """
    try:
        if graphql_client.is_mutation(query) and not _allow_mutations():
            return (
                "Mutations are not allowed unless you enable them in the configuration. "
                "Please use a query operation instead."
            )
    except QueryError as exc:
        return str(exc)

    parsed_variables: dict[str, object] | None = None
    if variables:
        try:
            parsed_variables = json.loads(variables)
        except json.JSONDecodeError as exc:
            return f"Invalid variables JSON: {exc}"
        if not isinstance(parsed_variables, dict):
            return "Invalid variables JSON: expected an object"

    try:
        data = await graphql_client.execute(query, parsed_variables, use_cache=False)
    except QueryError as exc:
        return f"The GraphQL response has errors, please fix the query: {exc}"
    except (SchemaMCPError, httpx.HTTPError, OSError) as exc:
        log.error("query-graphql failed: %s", exc)
        return f"Failed to execute GraphQL query: {exc}"
    return json.dumps({"data": data}, indent=2)


# ---------------------------------------------------------------------------
# Tool: debug-schema-status
# ---------------------------------------------------------------------------


@mcp.tool(name="debug-schema-status")
async def debug_schema_status(include_headers: bool = False, clear_cache: bool = False) -> str:
    """DEBUG: schema initialization status, API connectivity and index statistics.

    Use this if search-schema returns no results. Forces a schema re-index.

    Args:
        include_headers: Include the request headers in the output.
        clear_cache: Drop the on-disk introspection cache before re-indexing.
    """
    status = schema_index.status()
    lines = [
        "=== Schema Debug Information ===",
        f"Schema initialized: {status.initialized}",
        f"Endpoint: {graphql_client.endpoint()}",
        f"Index size: {status.index_size} keywords",
        f"Indexed fields: {status.field_count}",
        f"Cached type definitions: {status.cached_types}",
        f"Generation: {status.generation}",
    ]

    try:
        if include_headers:
            lines.append(f"Headers: {json.dumps(graphql_client.headers(), indent=2)}")
        code, body = await graphql_client.ping()
        lines.append(f"API Test Status: {code}")
        if code >= 400:
            lines.append(f"API Error Response: {body}")
    except (SchemaMCPError, httpx.HTTPError, OSError) as exc:
        lines.append(f"API Connection Error: {exc}")

    if clear_cache:
        cache.clear(graphql_client.endpoint())
        lines.append("Introspection cache: CLEARED")

    try:
        await ensure_schema(refresh=True)
        lines.append("Schema reinitialization: SUCCESS")
        lines.append(f"Index size after reinit: {schema_index.index_size} keywords")
    except (SchemaMCPError, httpx.HTTPError, OSError) as exc:
        lines.append(f"Schema reinitialization: FAILED - {exc}")

    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Resource: full schema SDL
# ---------------------------------------------------------------------------


@mcp.resource("graphql://schema", name="graphql-schema", mime_type="text/plain")
async def graphql_schema() -> str:
    """The complete GraphQL schema in SDL. Large; prefer search-schema."""
    payload = await _load_introspection()
    return introspection.print_sdl(payload)
