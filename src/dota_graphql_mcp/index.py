"""Keyword search index over the fields of a GraphQL schema.

The index maps lower-cased keywords to every field occurrence reachable from a
root operation type (Query / Mutation / Subscription) within ``_MAX_DEPTH``
levels. A field is filed under:

- its own name (``matches``)
- each word of the type it resolves to (``MatchPlayerType`` -> ``match``, ``player``)
- each word of its description

Searching combines exact keyword hits with substring ("fuzzy") hits and ranks
them so shallow, exactly named fields come first. The index never mutates a
published snapshot: :meth:`SchemaIndex.index_schema` builds everything locally
and swaps it in with a single assignment, so readers always see a complete
index.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field

from dota_graphql_mcp.errors import EmptyIndexError, NotInitializedError, TypeNotFoundError
from dota_graphql_mcp.schema import (
    ArgumentDef,
    BUILTIN_SCALARS,
    FieldDescriptor,
    FieldDef,
    SchemaDescriptor,
    TypeDef,
    TypeKind,
    named_type,
    type_signature,
)

log = logging.getLogger("dota-graphql-mcp")

_MAX_DEPTH = 3
_MIN_WORD_LEN = 3
_FUZZY_FACTOR = 0.7
_MAX_TYPE_FIELDS = 10
_MAX_TEMPLATE_FIELDS = 5

_TYPE_SUFFIX = re.compile(r"type$", re.IGNORECASE)
_CAMEL_BOUNDARY = re.compile(r"_|(?<=[a-z0-9])(?=[A-Z])")


@dataclass(frozen=True, slots=True)
class SearchResult:
    field: FieldDescriptor
    relevance: float

    def to_dict(self) -> dict[str, object]:
        return {**self.field.to_dict(), "relevanceScore": self.relevance}


@dataclass(frozen=True, slots=True)
class IndexStatus:
    initialized: bool
    index_size: int
    field_count: int
    cached_types: int
    generation: int


@dataclass(frozen=True)
class _Snapshot:
    schema: SchemaDescriptor
    field_index: Mapping[str, tuple[FieldDescriptor, ...]]
    field_count: int
    generation: int
    # (type_name, max_depth) -> rendered definition; lives and dies with the snapshot
    type_cache: dict[tuple[str, int], str] = field(default_factory=dict)


def type_words(type_name: str) -> list[str]:
    """Split a type name into index words: ``MatchPlayerType`` -> ``["match", "player"]``."""
    stripped = _TYPE_SUFFIX.sub("", type_name)
    return [w.lower() for w in _CAMEL_BOUNDARY.split(stripped) if len(w) >= _MIN_WORD_LEN]


def description_words(description: str | None) -> list[str]:
    if not description:
        return []
    return [w for w in description.lower().split() if len(w) >= _MIN_WORD_LEN]


def calculate_relevance(field_desc: FieldDescriptor, keyword: str) -> float:
    """Score a field against one keyword.

    Exact name match 10, name substring 5, description substring +3, minus 0.5
    per level of depth.
    """
    keyword = keyword.lower()
    name = field_desc.name.lower()
    score = 0.0
    if name == keyword:
        score += 10
    elif keyword in name:
        score += 5
    if field_desc.description and keyword in field_desc.description.lower():
        score += 3
    score -= field_desc.depth * 0.5
    return score


class SchemaIndex:
    """Searchable view of one schema generation."""

    def __init__(self) -> None:
        self._snapshot: _Snapshot | None = None
        self._generation = 0

    # -- state --------------------------------------------------------------

    @property
    def initialized(self) -> bool:
        return self._snapshot is not None

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def index_size(self) -> int:
        snapshot = self._snapshot
        return len(snapshot.field_index) if snapshot else 0

    def status(self) -> IndexStatus:
        snapshot = self._snapshot
        if snapshot is None:
            return IndexStatus(False, 0, 0, 0, self._generation)
        return IndexStatus(
            initialized=True,
            index_size=len(snapshot.field_index),
            field_count=snapshot.field_count,
            cached_types=len(snapshot.type_cache),
            generation=snapshot.generation,
        )

    def _require_snapshot(self) -> _Snapshot:
        snapshot = self._snapshot
        if snapshot is None:
            raise NotInitializedError()
        return snapshot

    # -- building -----------------------------------------------------------

    def index_schema(self, schema: SchemaDescriptor) -> int:
        """Build a fresh index for *schema* and publish it.

        Returns the number of indexed field occurrences.

        Raises:
            EmptyIndexError: no root operation type contributed a single field.
                The previously published index (if any) is left untouched.
        """
        field_index: dict[str, list[FieldDescriptor]] = {}
        indexed = 0
        for label, root in schema.root_types():
            if not root.kind.has_fields:
                log.warning("Root type %s (%s) is not an object type", label, root.kind.value)
                continue
            count = _index_type(schema, root, label, 0, label, set(), field_index)
            log.debug("Indexed %d fields for %s", count, label)
            indexed += count

        if indexed == 0 or not field_index:
            raise EmptyIndexError()

        self._generation += 1
        self._snapshot = _Snapshot(
            schema=schema,
            field_index={key: tuple(fields) for key, fields in field_index.items()},
            field_count=indexed,
            generation=self._generation,
        )
        log.info(
            "Schema indexing complete: %d fields, %d keywords (generation %d)",
            indexed,
            len(field_index),
            self._generation,
        )
        return indexed

    # -- querying -----------------------------------------------------------

    def search_fields(self, keywords: Iterable[str], max_results: int = 10) -> list[SearchResult]:
        """Return up to *max_results* fields matching any of *keywords*, best first.

        An uninitialized index or a keyword set that matches nothing yields an
        empty list.
        """
        snapshot = self._snapshot
        if snapshot is None:
            log.warning("Schema index is empty - schema not initialized?")
            return []
        if max_results <= 0:
            return []

        results: dict[str, SearchResult] = {}

        def consider(candidates: Iterable[FieldDescriptor], keyword: str, factor: float) -> None:
            for candidate in candidates:
                relevance = calculate_relevance(candidate, keyword) * factor
                current = results.get(candidate.path)
                if current is None or current.relevance < relevance:
                    results[candidate.path] = SearchResult(candidate, relevance)

        for raw_keyword in keywords:
            keyword = raw_keyword.strip().lower()
            if not keyword:
                continue
            direct = snapshot.field_index.get(keyword, ())
            consider(direct, keyword, 1.0)

            fuzzy = 0
            for key, fields in snapshot.field_index.items():
                if keyword in key or key in keyword:
                    fuzzy += len(fields)
                    consider(fields, keyword, _FUZZY_FACTOR)
            log.debug("Keyword %r: %d direct, %d fuzzy matches", keyword, len(direct), fuzzy)

        # sorted() is stable, so equal scores keep discovery order
        ranked = sorted(results.values(), key=lambda r: r.relevance, reverse=True)
        return ranked[:max_results]

    def get_type_definition(self, type_name: str, max_depth: int = 2) -> str:
        """Render *type_name* in SDL-like notation, expanding nested types up to *max_depth*.

        Raises:
            NotInitializedError: no schema has been indexed yet.
            TypeNotFoundError: *type_name* is not part of the current schema.
        """
        snapshot = self._require_snapshot()
        cache_key = (type_name, max_depth)
        cached = snapshot.type_cache.get(cache_key)
        if cached is not None:
            return cached

        type_def = snapshot.schema.get(type_name)
        if type_def is None:
            raise TypeNotFoundError(type_name)

        if max_depth < 1:
            definition = type_def.name
        else:
            blocks: list[str] = []
            _render_type(snapshot.schema, type_def, max_depth, 0, set(), blocks)
            definition = "\n\n".join(blocks)

        snapshot.type_cache[cache_key] = definition
        return definition

    def generate_query_template(self, fields: Sequence[FieldDescriptor]) -> str:
        """Build a query skeleton from up to five root ``Query`` fields in *fields*.

        Leaf-typed fields are selected bare; composite fields get an empty
        selection with a comment naming the type that still needs sub-fields.
        """
        snapshot = self._snapshot
        lines: list[str] = []
        for field_desc in [f for f in fields if f.parent_type == "Query"][:_MAX_TEMPLATE_FIELDS]:
            if _is_leaf(snapshot.schema if snapshot else None, field_desc.type_name):
                lines.append(f"  {field_desc.name}")
            else:
                lines.append(
                    f"  {field_desc.name} {{\n"
                    f"    # {field_desc.type_name} - add specific fields\n"
                    f"  }}"
                )
        return "query {\n" + "\n".join(lines) + "\n}"


# ---------------------------------------------------------------------------
# Internal: traversal
# ---------------------------------------------------------------------------


def _add(index: dict[str, list[FieldDescriptor]], key: str, field_desc: FieldDescriptor) -> None:
    index.setdefault(key, []).append(field_desc)


def _index_type(
    schema: SchemaDescriptor,
    type_def: TypeDef,
    parent_name: str,
    depth: int,
    path: str,
    visited: set[str],
    index: dict[str, list[FieldDescriptor]],
) -> int:
    """Index the fields of *type_def* and recurse into composite field types.

    *visited* belongs to this branch only: every child receives its own copy,
    so siblings may each walk into the same type.
    """
    if type_def.name in visited or depth > _MAX_DEPTH:
        return 0
    visited.add(type_def.name)

    indexed = 0
    for field_def in type_def.fields.values():
        target_name = named_type(field_def.type)
        field_desc = FieldDescriptor(
            name=field_def.name,
            type_name=target_name,
            parent_type=parent_name,
            depth=depth,
            path=f"{path}.{field_def.name}",
            description=field_def.description,
        )
        _add(index, field_def.name.lower(), field_desc)
        indexed += 1

        for word in type_words(target_name):
            _add(index, word, field_desc)
        for word in description_words(field_def.description):
            _add(index, word, field_desc)

        target = schema.get(target_name)
        if target is not None and target.kind.has_fields:
            indexed += _index_type(
                schema, target, target.name, depth + 1, field_desc.path, set(visited), index
            )
    return indexed


# ---------------------------------------------------------------------------
# Internal: rendering
# ---------------------------------------------------------------------------


def _render_type(
    schema: SchemaDescriptor,
    type_def: TypeDef,
    max_depth: int,
    depth: int,
    visited: set[str],
    blocks: list[str],
) -> None:
    # visited is shared by the whole render: a type is expanded at most once
    visited.add(type_def.name)
    blocks.append(_render_block(type_def))
    if depth + 1 >= max_depth:
        return
    for field_def in list(type_def.fields.values())[:_MAX_TYPE_FIELDS]:
        nested = schema.get(named_type(field_def.type))
        if nested is not None and nested.kind.has_fields and nested.name not in visited:
            _render_type(schema, nested, max_depth, depth + 1, visited, blocks)


def _render_block(type_def: TypeDef) -> str:
    kind = type_def.kind
    if kind.has_fields:
        keyword = "type" if kind is TypeKind.OBJECT else "interface"
        all_fields = list(type_def.fields.values())
        lines = [f"  {_render_field(f)}" for f in all_fields[:_MAX_TYPE_FIELDS]]
        hidden = len(all_fields) - _MAX_TYPE_FIELDS
        if hidden > 0:
            lines.append(f"  # ... {hidden} more fields")
        return f"{keyword} {type_def.name} {{\n" + "\n".join(lines) + "\n}"
    if kind is TypeKind.ENUM:
        lines = [f"  {value}" for value in type_def.enum_values[:_MAX_TYPE_FIELDS]]
        hidden = len(type_def.enum_values) - _MAX_TYPE_FIELDS
        if hidden > 0:
            lines.append(f"  # ... {hidden} more values")
        return f"enum {type_def.name} {{\n" + "\n".join(lines) + "\n}"
    if kind is TypeKind.UNION:
        return f"union {type_def.name} = " + " | ".join(type_def.possible_types)
    if kind is TypeKind.INPUT_OBJECT:
        return f"input {type_def.name}"
    return f"scalar {type_def.name}"


def _render_field(field_def: FieldDef) -> str:
    args = ""
    if field_def.args:
        args = "(" + ", ".join(_render_argument(a) for a in field_def.args) + ")"
    return f"{field_def.name}{args}: {type_signature(field_def.type)}"


def _render_argument(arg: ArgumentDef) -> str:
    text = f"{arg.name}: {type_signature(arg.type)}"
    if arg.default_value is not None:
        text += f" = {arg.default_value}"
    return text


def _is_leaf(schema: SchemaDescriptor | None, type_name: str) -> bool:
    if schema is not None:
        type_def = schema.get(type_name)
        if type_def is not None:
            return type_def.kind in (TypeKind.SCALAR, TypeKind.ENUM)
    return type_name in BUILTIN_SCALARS
