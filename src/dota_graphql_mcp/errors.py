"""Exception hierarchy shared by the adapter, the index and the tool layer."""

from __future__ import annotations


class SchemaMCPError(Exception):
    """Base class for all errors raised by dota-graphql-mcp."""


class ConfigError(SchemaMCPError):
    """An environment variable holds an unusable value."""


# ---------------------------------------------------------------------------
# Index errors
# ---------------------------------------------------------------------------


class NotInitializedError(SchemaMCPError):
    """An index operation was attempted before a successful build."""

    def __init__(self, message: str = "Schema not initialized") -> None:
        super().__init__(message)


class EmptyIndexError(SchemaMCPError):
    """Indexing finished without a single field on any root operation type."""

    def __init__(
        self, message: str = "Schema indexing produced empty index - no fields found"
    ) -> None:
        super().__init__(message)


class TypeNotFoundError(SchemaMCPError):
    """The requested type name does not exist in the current schema."""

    def __init__(self, type_name: str) -> None:
        super().__init__(f"Type {type_name} not found")
        self.type_name = type_name


# ---------------------------------------------------------------------------
# Adapter / transport errors
# ---------------------------------------------------------------------------


class TransportError(SchemaMCPError):
    """The GraphQL endpoint could not be reached or answered with a non-2xx status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ProtocolError(SchemaMCPError):
    """The response (or file) is not well-formed introspection / GraphQL data."""


class NotFoundError(SchemaMCPError):
    """A local schema file is missing or unreadable."""


class QueryError(SchemaMCPError):
    """The GraphQL document is invalid or the server reported errors for it."""

    def __init__(self, message: str, errors: list[dict] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []
