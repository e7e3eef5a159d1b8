"""Shared pytest fixtures for dota-graphql-mcp test suite."""

from __future__ import annotations

from collections.abc import Callable

import pytest
from graphql import build_schema, introspection_from_schema

from dota_graphql_mcp import graphql_client, tools
from dota_graphql_mcp.index import SchemaIndex

STRATZ_SDL = '''
scalar Long
scalar Short

type Query {
  "Find a player by their 32-bit Steam account id"
  player(steamAccountId: Long!): PlayerType
  match(id: Long!): MatchType
  heroStats: HeroStatsQuery
  playerStats: Int
}

type PlayerType {
  steamAccount: SteamAccountType
  matchCount: Int
  winCount: Int
  "Recent matches played by the player"
  matches(take: Int): [MatchType]
}

type SteamAccountType {
  id: Long
  name: String
  avatar: String
}

type MatchType {
  id: Long!
  durationSeconds: Int
  didRadiantWin: Boolean
  gameMode: GameModeEnumType
  players: [MatchPlayerType!]!
}

enum GameModeEnumType {
  ALL_PICK
  CAPTAINS_MODE
  TURBO
}

type MatchPlayerType {
  heroId: Short
  kills: Int
  steamAccount: SteamAccountType
  hero: HeroType
}

type HeroType {
  id: Short
  displayName: String
}

type HeroStatsQuery {
  stats: [HeroStatsType]
}

type HeroStatsType {
  heroId: Short
  winCount: Int
}
'''


def payload_from_sdl(sdl: str) -> dict:
    """Introspection payload (``{"__schema": ...}``) for an SDL document."""
    return dict(introspection_from_schema(build_schema(sdl)))


@pytest.fixture
def build_payload() -> Callable[[str], dict]:
    return payload_from_sdl


@pytest.fixture
def stratz_payload() -> dict:
    return payload_from_sdl(STRATZ_SDL)


@pytest.fixture(autouse=True)
def isolated_state(monkeypatch, tmp_path):
    """Give every test a fresh schema index, an empty response cache and its own cache dir."""
    monkeypatch.setattr(tools, "schema_index", SchemaIndex())
    monkeypatch.setenv("CACHE_DIR", str(tmp_path / "cache"))
    for var in ("SCHEMA", "HEADERS", "STRATZ_API_TOKEN", "ALLOW_MUTATIONS", "ENDPOINT"):
        monkeypatch.delenv(var, raising=False)
    graphql_client.clear_response_cache()
    yield
    graphql_client.clear_response_cache()
