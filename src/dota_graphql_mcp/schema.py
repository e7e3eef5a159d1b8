"""Normalized, immutable description of a GraphQL schema.

Built once from an introspection payload by :mod:`dota_graphql_mcp.introspection`
and then handed to :class:`dota_graphql_mcp.index.SchemaIndex`.

Type references are a closed set of variants::

    NamedType("Player")                    -> Player
    ListType(NamedType("Match"))           -> [Match]
    NonNullType(ListType(NamedType("ID"))) -> [ID]!
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Union

ROOT_OPERATIONS = ("Query", "Mutation", "Subscription")
BUILTIN_SCALARS = frozenset({"String", "Int", "Float", "Boolean", "ID"})


class TypeKind(enum.Enum):
    SCALAR = "SCALAR"
    ENUM = "ENUM"
    OBJECT = "OBJECT"
    INTERFACE = "INTERFACE"
    UNION = "UNION"
    INPUT_OBJECT = "INPUT_OBJECT"

    @property
    def has_fields(self) -> bool:
        return self in (TypeKind.OBJECT, TypeKind.INTERFACE)


# ---------------------------------------------------------------------------
# Type references
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class NamedType:
    name: str


@dataclass(frozen=True, slots=True)
class ListType:
    of_type: TypeRef


@dataclass(frozen=True, slots=True)
class NonNullType:
    of_type: TypeRef


TypeRef = Union[NamedType, ListType, NonNullType]


def named_type(ref: TypeRef) -> str:
    """Strip List/NonNull wrappers and return the underlying type name."""
    while not isinstance(ref, NamedType):
        ref = ref.of_type
    return ref.name


def type_signature(ref: TypeRef) -> str:
    """Render a type reference in GraphQL notation, e.g. ``[String]!``."""
    if isinstance(ref, NonNullType):
        return f"{type_signature(ref.of_type)}!"
    if isinstance(ref, ListType):
        return f"[{type_signature(ref.of_type)}]"
    return ref.name


# ---------------------------------------------------------------------------
# Definitions
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ArgumentDef:
    name: str
    type: TypeRef
    default_value: str | None = None


@dataclass(frozen=True, slots=True)
class FieldDef:
    name: str
    type: TypeRef
    description: str | None = None
    args: tuple[ArgumentDef, ...] = ()


@dataclass(frozen=True, slots=True)
class TypeDef:
    name: str
    kind: TypeKind
    description: str | None = None
    fields: Mapping[str, FieldDef] = field(default_factory=lambda: MappingProxyType({}))
    enum_values: tuple[str, ...] = ()
    possible_types: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class SchemaDescriptor:
    """All named types of a schema plus its root operation type names."""

    types: Mapping[str, TypeDef]
    query_type: str | None = "Query"
    mutation_type: str | None = None
    subscription_type: str | None = None

    def get(self, type_name: str) -> TypeDef | None:
        return self.types.get(type_name)

    def root_types(self) -> list[tuple[str, TypeDef]]:
        """Return ``(operation, type)`` pairs for the root types that exist.

        The operation label (``Query``/``Mutation``/``Subscription``) is used as
        the first path segment even when the schema names its root type
        differently (``query_root`` etc.).
        """
        roots: list[tuple[str, TypeDef]] = []
        for label, name in zip(
            ROOT_OPERATIONS, (self.query_type, self.mutation_type, self.subscription_type)
        ):
            if name is None:
                continue
            type_def = self.types.get(name)
            if type_def is not None:
                roots.append((label, type_def))
        return roots


@dataclass(frozen=True, slots=True)
class FieldDescriptor:
    """One indexed occurrence of a field, reached via a specific path."""

    name: str
    type_name: str
    parent_type: str
    depth: int
    path: str
    description: str | None = None

    def to_dict(self) -> dict[str, object]:
        data: dict[str, object] = {
            "path": self.path,
            "typeName": self.type_name,
            "parentType": self.parent_type,
            "depth": self.depth,
        }
        if self.description:
            data["description"] = self.description
        return data
