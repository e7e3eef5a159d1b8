"""Async GraphQL HTTP client using httpx.

Features:
- Automatic retry with exponential backoff for transient network errors
- Short-lived in-memory response cache keyed by query + variables
- Endpoint, headers and timeout configured via environment variables
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import time

import httpx
from graphql import GraphQLSyntaxError, OperationDefinitionNode, OperationType, parse

from dota_graphql_mcp.errors import ConfigError, ProtocolError, QueryError, TransportError

_DEFAULT_ENDPOINT = "https://api.stratz.com/graphql"
_MAX_RETRIES = 3
_BACKOFF_BASE = 1.0  # seconds: 1, 2, 4
_DEFAULT_RESPONSE_TTL = 300  # 5 minutes

log = logging.getLogger("dota-graphql-mcp")

_TRANSIENT_ERRORS = (httpx.ConnectError, httpx.ConnectTimeout, httpx.ReadTimeout)

# (query, variables) json -> (stored_at, data)
_response_cache: dict[str, tuple[float, dict]] = {}


def endpoint() -> str:
    return os.environ.get("ENDPOINT", _DEFAULT_ENDPOINT)


def headers() -> dict[str, str]:
    """Request headers: JSON content type, ``HEADERS`` env JSON, bearer token."""
    result: dict[str, str] = {"Content-Type": "application/json"}
    raw = os.environ.get("HEADERS", "{}")
    try:
        extra = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"HEADERS must be a valid JSON string: {exc}") from exc
    if not isinstance(extra, dict):
        raise ConfigError("HEADERS must be a JSON object")
    result.update({str(k): str(v) for k, v in extra.items()})

    token = os.environ.get("STRATZ_API_TOKEN")
    if token and "Authorization" not in result:
        result["Authorization"] = f"Bearer {token}"
    return result


def _timeout() -> float:
    return float(os.environ.get("GRAPHQL_TIMEOUT", "30"))


def _response_ttl() -> float:
    return float(os.environ.get("RESPONSE_CACHE_TTL", str(_DEFAULT_RESPONSE_TTL)))


def _make_client(request_headers: dict[str, str]) -> httpx.AsyncClient:
    """Create an AsyncClient (caller manages lifecycle)."""
    return httpx.AsyncClient(headers=request_headers, timeout=_timeout())


async def _request_with_retry(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    **kwargs: object,
) -> httpx.Response:
    """Execute an HTTP request with automatic retry on transient errors.

    Retries up to _MAX_RETRIES times with exponential backoff (1s, 2s, 4s).
    """
    last_exc: Exception | None = None
    for attempt in range(_MAX_RETRIES):
        try:
            resp = await client.request(method, url, **kwargs)
            return resp
        except _TRANSIENT_ERRORS as exc:
            last_exc = exc
            if attempt < _MAX_RETRIES - 1:
                wait = _BACKOFF_BASE * (2**attempt)
                log.warning(
                    "Retry %d/%d for %s %s: %s (wait %.1fs)",
                    attempt + 1,
                    _MAX_RETRIES,
                    method,
                    url,
                    type(exc).__name__,
                    wait,
                )
                await asyncio.sleep(wait)
    raise last_exc  # type: ignore[misc]


async def post_graphql(
    url: str,
    payload: dict[str, object],
    request_headers: dict[str, str] | None = None,
) -> dict:
    """POST a GraphQL payload and return the decoded JSON body.

    Raises:
        TransportError: network failure or non-2xx status.
        ProtocolError: the body is not a JSON object.
    """
    async with _make_client(request_headers or {"Content-Type": "application/json"}) as client:
        try:
            resp = await _request_with_retry(client, "POST", url, json=payload)
        except httpx.HTTPError as exc:
            raise TransportError(f"GraphQL request failed: {type(exc).__name__}: {exc}") from exc

    if not resp.is_success:
        raise TransportError(
            f"GraphQL request failed: {resp.status_code} {resp.reason_phrase}\n{resp.text}",
            status_code=resp.status_code,
        )
    try:
        body = resp.json()
    except ValueError as exc:
        raise ProtocolError(f"GraphQL response is not valid JSON: {exc}") from exc
    if not isinstance(body, dict):
        raise ProtocolError("GraphQL response is not a JSON object")
    return body


async def execute(
    query: str,
    variables: dict[str, object] | None = None,
    *,
    use_cache: bool = True,
) -> dict:
    """Run *query* against the configured endpoint and return its ``data``.

    Raises:
        QueryError: the server answered with GraphQL ``errors``.
        TransportError / ProtocolError: see :func:`post_graphql`.
    """
    cache_key = json.dumps({"query": query, "variables": variables}, sort_keys=True)
    if use_cache:
        cached = _response_cache.get(cache_key)
        if cached is not None and time.monotonic() - cached[0] < _response_ttl():
            log.debug("Response cache hit (%d chars query)", len(query))
            return cached[1]

    payload: dict[str, object] = {"query": query}
    if variables is not None:
        payload["variables"] = variables
    body = await post_graphql(endpoint(), payload, headers())

    errors = body.get("errors")
    if errors:
        raise QueryError(f"GraphQL errors: {json.dumps(errors, indent=2)}", errors=errors)

    data = body.get("data") or {}
    if use_cache:
        _store_response(cache_key, data)
    return data


def _store_response(cache_key: str, data: dict) -> None:
    """Cache *data* and drop every entry that has outlived the TTL."""
    now = time.monotonic()
    ttl = _response_ttl()
    for key in [k for k, (stored_at, _) in _response_cache.items() if now - stored_at >= ttl]:
        del _response_cache[key]
    _response_cache[cache_key] = (now, data)


def clear_response_cache() -> None:
    _response_cache.clear()


def is_mutation(query: str) -> bool:
    """Return True if any operation in *query* is a mutation.

    Raises:
        QueryError: *query* is not syntactically valid GraphQL.
    """
    try:
        document = parse(query)
    except GraphQLSyntaxError as exc:
        raise QueryError(f"Invalid GraphQL query: {exc.message}") from exc
    return any(
        isinstance(definition, OperationDefinitionNode)
        and definition.operation == OperationType.MUTATION
        for definition in document.definitions
    )


async def ping() -> tuple[int, str]:
    """Send ``{ __typename }`` and return ``(status_code, body_text)``."""
    async with _make_client(headers()) as client:
        resp = await _request_with_retry(
            client, "POST", endpoint(), json={"query": "{ __typename }"}
        )
    return resp.status_code, resp.text
