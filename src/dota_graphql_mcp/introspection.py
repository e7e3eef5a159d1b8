"""Obtain a GraphQL schema description and normalize it into a SchemaDescriptor.

Two sources:
- a remote endpoint, via the standard introspection query
- a local file holding either a saved introspection result (JSON) or SDL text
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any

from graphql import (
    GraphQLError,
    build_client_schema,
    build_schema,
    get_introspection_query,
    introspection_from_schema,
    print_schema,
)

from dota_graphql_mcp import graphql_client
from dota_graphql_mcp.errors import NotFoundError, ProtocolError
from dota_graphql_mcp.schema import (
    ArgumentDef,
    FieldDef,
    ListType,
    NamedType,
    NonNullType,
    SchemaDescriptor,
    TypeDef,
    TypeKind,
    TypeRef,
)

log = logging.getLogger("dota-graphql-mcp")

_SDL_SUFFIXES = (".graphql", ".graphqls", ".gql")


# ---------------------------------------------------------------------------
# Remote
# ---------------------------------------------------------------------------


async def fetch_introspection(endpoint: str, headers: dict[str, str] | None = None) -> dict:
    """Run the introspection query against *endpoint* and return ``{"__schema": ...}``.

    Raises:
        TransportError: network failure or non-success HTTP status.
        ProtocolError: the response is not well-formed introspection data.
    """
    payload = {
        "query": get_introspection_query(descriptions=True),
        "operationName": "IntrospectionQuery",
    }
    body = await graphql_client.post_graphql(endpoint, payload, headers)
    data = body.get("data")
    if not isinstance(data, dict) or not isinstance(data.get("__schema"), dict):
        errors = body.get("errors")
        if errors:
            raise ProtocolError(f"Introspection failed: {json.dumps(errors)}")
        raise ProtocolError("Introspection response has no data.__schema")
    types = data["__schema"].get("types") or []
    log.info("Fetched introspection from %s (%d types)", endpoint, len(types))
    return data


async def fetch_remote_schema(
    endpoint: str, headers: dict[str, str] | None = None
) -> SchemaDescriptor:
    """Introspect *endpoint* and return the normalized schema."""
    return parse_introspection(await fetch_introspection(endpoint, headers))


# ---------------------------------------------------------------------------
# Local
# ---------------------------------------------------------------------------


def load_local_introspection(path: str | Path) -> dict:
    """Read a saved schema file and return ``{"__schema": ...}``.

    JSON files may hold ``{"data": {"__schema": ...}}`` or ``{"__schema": ...}``.
    Files ending in .graphql/.graphqls/.gql are parsed as SDL.

    Raises:
        NotFoundError: the file is missing or unreadable.
        ProtocolError: the content is neither introspection JSON nor valid SDL.
    """
    file_path = Path(path)
    try:
        text = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise NotFoundError(f"Schema file {file_path} is missing or unreadable: {exc}") from exc

    if file_path.suffix.lower() in _SDL_SUFFIXES:
        return _introspection_from_sdl(text)

    try:
        raw = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ProtocolError(f"Schema file {file_path} is not valid JSON: {exc}") from exc
    return _unwrap(raw)


def load_local_schema(path: str | Path) -> SchemaDescriptor:
    """Read a saved schema file and return the normalized schema."""
    return parse_introspection(load_local_introspection(path))


def _introspection_from_sdl(text: str) -> dict:
    try:
        return dict(introspection_from_schema(build_schema(text)))
    except (GraphQLError, TypeError) as exc:
        raise ProtocolError(f"Invalid GraphQL SDL: {exc}") from exc


def _unwrap(raw: Any) -> dict:
    if isinstance(raw, dict) and isinstance(raw.get("data"), dict):
        raw = raw["data"]
    if not isinstance(raw, dict) or not isinstance(raw.get("__schema"), dict):
        raise ProtocolError("Introspection data has no __schema object")
    return raw


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------


def parse_introspection(payload: dict) -> SchemaDescriptor:
    """Convert a raw introspection payload into a :class:`SchemaDescriptor`.

    Raises:
        ProtocolError: the payload does not follow the introspection format.
    """
    schema = _unwrap(payload)["__schema"]
    raw_types = schema.get("types")
    if not isinstance(raw_types, list):
        raise ProtocolError("__schema.types must be a list")

    types: dict[str, TypeDef] = {}
    for raw in raw_types:
        type_def = _parse_type(raw)
        types[type_def.name] = type_def

    return SchemaDescriptor(
        types=MappingProxyType(types),
        query_type=_root_name(schema, "queryType"),
        mutation_type=_root_name(schema, "mutationType"),
        subscription_type=_root_name(schema, "subscriptionType"),
    )


def _root_name(schema: dict, key: str) -> str | None:
    ref = schema.get(key)
    if isinstance(ref, dict):
        return ref.get("name")
    return None


def _parse_type(raw: Any) -> TypeDef:
    if not isinstance(raw, dict) or not raw.get("name"):
        raise ProtocolError(f"Malformed type entry: {raw!r}")
    try:
        kind = TypeKind(raw.get("kind"))
    except ValueError as exc:
        raise ProtocolError(f"Unknown type kind for {raw['name']}: {raw.get('kind')}") from exc

    fields: dict[str, FieldDef] = {}
    if kind.has_fields:
        for raw_field in raw.get("fields") or []:
            field_def = _parse_field(raw_field)
            fields[field_def.name] = field_def

    return TypeDef(
        name=raw["name"],
        kind=kind,
        description=raw.get("description"),
        fields=MappingProxyType(fields),
        enum_values=tuple(_require_name(v, "enum value") for v in raw.get("enumValues") or []),
        possible_types=tuple(
            _require_name(t, "possible type") for t in raw.get("possibleTypes") or []
        ),
    )


def _parse_field(raw: Any) -> FieldDef:
    if not isinstance(raw, dict) or not raw.get("name"):
        raise ProtocolError(f"Malformed field entry: {raw!r}")
    args = tuple(
        ArgumentDef(
            name=_require_name(arg, "argument"),
            type=_parse_type_ref(arg.get("type")),
            default_value=arg.get("defaultValue"),
        )
        for arg in raw.get("args") or []
    )
    return FieldDef(
        name=raw["name"],
        type=_parse_type_ref(raw.get("type")),
        description=raw.get("description"),
        args=args,
    )


def _require_name(raw: Any, what: str) -> str:
    if not isinstance(raw, dict) or not raw.get("name"):
        raise ProtocolError(f"Malformed {what} entry: {raw!r}")
    return raw["name"]


def _parse_type_ref(raw: Any) -> TypeRef:
    if not isinstance(raw, dict):
        raise ProtocolError(f"Malformed type reference: {raw!r}")
    kind = raw.get("kind")
    if kind == "NON_NULL":
        return NonNullType(_parse_type_ref(raw.get("ofType")))
    if kind == "LIST":
        return ListType(_parse_type_ref(raw.get("ofType")))
    name = raw.get("name")
    if not name:
        raise ProtocolError(f"Named type reference without a name: {raw!r}")
    return NamedType(name)


# ---------------------------------------------------------------------------
# SDL rendering
# ---------------------------------------------------------------------------


def print_sdl(payload: dict) -> str:
    """Render a full introspection payload as GraphQL SDL."""
    try:
        return print_schema(build_client_schema(_unwrap(payload)))
    except (GraphQLError, TypeError) as exc:
        raise ProtocolError(f"Cannot build schema from introspection: {exc}") from exc
