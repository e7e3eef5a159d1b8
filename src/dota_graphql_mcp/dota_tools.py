"""Hand-written Dota 2 tools backed by fixed STRATZ GraphQL queries, plus the
doc://dota reference resources and the analysis prompts.

Every tool answers with a JSON envelope::

    {"success": true, "timestamp": "...", ...data}
    {"success": false, "tool": "dota.player.profile", "error": "...", "timestamp": "..."}
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone

import httpx

from dota_graphql_mcp import examples, graphql_client
from dota_graphql_mcp.errors import SchemaMCPError
from dota_graphql_mcp.server import mcp

log = logging.getLogger("dota-graphql-mcp")

_MAX_ACCOUNT_ID = 2**32 - 1
_MAX_MATCHES = 20
_MAX_HEROES = 50
RANK_BRACKETS = (
    "HERALD",
    "GUARDIAN",
    "CRUSADER",
    "ARCHON",
    "LEGEND",
    "ANCIENT",
    "DIVINE",
    "IMMORTAL",
)

PLAYER_PROFILE_QUERY = """
query PlayerProfile($steamAccountId: Long!) {
  player(steamAccountId: $steamAccountId) {
    steamAccount { id name profileUri avatar }
    ranks { rank seasonRankId }
    winCount
    matchCount
    imp
    firstMatchDate
    lastMatchDate
  }
}
"""

PLAYER_MATCHES_QUERY = """
query PlayerMatches($steamAccountId: Long!, $request: PlayerMatchesRequestType!) {
  player(steamAccountId: $steamAccountId) {
    matches(request: $request) {
      id
      didRadiantWin
      durationSeconds
      startDateTime
      rank
      players {
        steamAccountId
        isRadiant
        heroId
        kills
        deaths
        assists
        networth
        level
        heroDamage
        towerDamage
      }
    }
  }
}
"""

PLAYER_HEROES_QUERY = """
query PlayerHeroes($steamAccountId: Long!, $request: PlayerHeroPerformanceMatchesRequestType!) {
  player(steamAccountId: $steamAccountId) {
    heroesPerformance(request: $request) {
      heroId
      matchCount
      winCount
      avgKills
      avgDeaths
      avgAssists
      goldPerMinute
      experiencePerMinute
      lastPlayedDateTime
    }
  }
}
"""

MATCH_SUMMARY_QUERY = """
query MatchSummary($matchId: Long!) {
  match(id: $matchId) {
    id
    didRadiantWin
    durationSeconds
    startDateTime
    endDateTime
    gameMode
    lobbyType
    rank
    series { id type }
    league { id displayName }
    radiantTeam { id name }
    direTeam { id name }
  }
}
"""

MATCH_PLAYERS_QUERY = """
query MatchPlayers($matchId: Long!) {
  match(id: $matchId) {
    players {
      steamAccountId
      steamAccount { name profileUri }
      isRadiant
      heroId
      position
      lane
      kills
      deaths
      assists
      networth
      goldPerMinute
      experiencePerMinute
      level
      heroDamage
      towerDamage
      heroHealing
      numLastHits
      numDenies
      item0Id
      item1Id
      item2Id
      item3Id
      item4Id
      item5Id
      neutral0Id
    }
  }
}
"""

HERO_STATS_QUERY = """
query HeroStats($bracketIds: [RankBracket]) {
  heroStats {
    stats(bracketIds: $bracketIds) {
      heroId
      matchCount
      winCount
    }
  }
}
"""

HERO_COUNTERS_QUERY = """
query HeroCounters($heroId: Short!) {
  heroStats {
    heroVsHeroMatchup(heroId: $heroId) {
      vs { heroId2 matchCount winCount winRate synergy }
      with { heroId2 matchCount winCount winRate synergy }
    }
  }
}
"""


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _success(data: dict) -> str:
    return json.dumps({**data, "success": True, "timestamp": _now()}, indent=2)


def _failure(tool: str, exc: Exception) -> str:
    return json.dumps(
        {"error": str(exc), "tool": tool, "timestamp": _now(), "success": False}, indent=2
    )


def _account_id(steam_account_id: int) -> int:
    """Accept 32-bit account ids and 64-bit Steam ids; return the 32-bit form."""
    account_id = examples.steam64_to_account_id(steam_account_id)
    if not 1 <= account_id <= _MAX_ACCOUNT_ID:
        raise ValueError(
            f"steamAccountId must be a 32-bit Steam account id (1..{_MAX_ACCOUNT_ID}), "
            f"got {steam_account_id}"
        )
    return account_id


def _match_id(match_id: int) -> int:
    if match_id < 1:
        raise ValueError(f"matchId must be a positive integer, got {match_id}")
    return match_id


async def _run(tool: str, query: str, variables: dict[str, object]) -> str:
    try:
        data = await graphql_client.execute(query, variables)
    except (SchemaMCPError, httpx.HTTPError, OSError) as exc:
        log.error("%s failed: %s", tool, exc)
        return _failure(tool, exc)
    return _success(data)


# ---------------------------------------------------------------------------
# Player tools
# ---------------------------------------------------------------------------


@mcp.tool(name="dota.player.profile")
async def player_profile(steam_account_id: int) -> str:
    """Get a player's profile: rank, IMP, total wins/matches, first/last match date.

    Args:
        steam_account_id: 32-bit Steam account id (64-bit Steam ids are converted).
    """
    tool = "dota.player.profile"
    try:
        account_id = _account_id(steam_account_id)
    except ValueError as exc:
        return _failure(tool, exc)
    return await _run(tool, PLAYER_PROFILE_QUERY, {"steamAccountId": account_id})


@mcp.tool(name="dota.player.matches")
async def player_matches(steam_account_id: int, take: int = 5) -> str:
    """Get a player's recent matches with KDA, net worth and damage per player.

    Args:
        steam_account_id: 32-bit Steam account id.
        take: Number of matches (1-20).
    """
    tool = "dota.player.matches"
    try:
        account_id = _account_id(steam_account_id)
    except ValueError as exc:
        return _failure(tool, exc)
    request = {"take": max(1, min(take, _MAX_MATCHES))}
    return await _run(
        tool, PLAYER_MATCHES_QUERY, {"steamAccountId": account_id, "request": request}
    )


@mcp.tool(name="dota.player.heroes")
async def player_heroes(steam_account_id: int, take: int = 10) -> str:
    """Get a player's most played heroes with win counts, average KDA and GPM/XPM.

    Args:
        steam_account_id: 32-bit Steam account id.
        take: Number of heroes (1-50).
    """
    tool = "dota.player.heroes"
    try:
        account_id = _account_id(steam_account_id)
    except ValueError as exc:
        return _failure(tool, exc)
    request = {"take": max(1, min(take, _MAX_HEROES))}
    return await _run(
        tool, PLAYER_HEROES_QUERY, {"steamAccountId": account_id, "request": request}
    )


# ---------------------------------------------------------------------------
# Match tools
# ---------------------------------------------------------------------------


@mcp.tool(name="dota.match.summary")
async def match_summary(match_id: int) -> str:
    """Get match basics: winner, duration, game mode, rank, league and teams."""
    tool = "dota.match.summary"
    try:
        checked = _match_id(match_id)
    except ValueError as exc:
        return _failure(tool, exc)
    return await _run(tool, MATCH_SUMMARY_QUERY, {"matchId": checked})


@mcp.tool(name="dota.match.players")
async def match_players(match_id: int) -> str:
    """Get detailed per-player statistics and item builds for a match."""
    tool = "dota.match.players"
    try:
        checked = _match_id(match_id)
    except ValueError as exc:
        return _failure(tool, exc)
    return await _run(tool, MATCH_PLAYERS_QUERY, {"matchId": checked})


# ---------------------------------------------------------------------------
# Meta tools
# ---------------------------------------------------------------------------


@mcp.tool(name="dota.meta.heroStats")
async def hero_stats(bracket: str | None = None) -> str:
    """Get current hero match and win counts, optionally for one rank bracket.

    Args:
        bracket: HERALD, GUARDIAN, CRUSADER, ARCHON, LEGEND, ANCIENT, DIVINE or IMMORTAL.
    """
    tool = "dota.meta.heroStats"
    variables: dict[str, object] = {}
    if bracket is not None:
        normalized = bracket.upper()
        if normalized not in RANK_BRACKETS:
            return _failure(
                tool, ValueError(f"bracket must be one of {', '.join(RANK_BRACKETS)}")
            )
        variables["bracketIds"] = [normalized]
    return await _run(tool, HERO_STATS_QUERY, variables)


@mcp.tool(name="dota.meta.counters")
async def hero_counters(hero_id: int) -> str:
    """Get matchup data for a hero: how it fares against (vs) and alongside (with) others.

    Args:
        hero_id: Hero id, e.g. 14 for Pudge (see the doc://dota/ids resource).
    """
    tool = "dota.meta.counters"
    if hero_id < 1:
        return _failure(tool, ValueError(f"heroId must be a positive integer, got {hero_id}"))
    return await _run(tool, HERO_COUNTERS_QUERY, {"heroId": hero_id})


# ---------------------------------------------------------------------------
# Reference documents
# ---------------------------------------------------------------------------


@mcp.resource("doc://dota/quickstart", name="dota-quickstart", mime_type="text/markdown")
def quickstart() -> str:
    """Authentication, tool workflows, Steam id format and common errors."""
    return examples.quickstart_doc()


@mcp.resource("doc://dota/ids", name="dota-ids", mime_type="text/markdown")
def id_reference() -> str:
    """Steam account id conversion and common hero / item ids."""
    return examples.ids_doc()


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------


@mcp.prompt(name="analyze-player", description="Analyze a Dota 2 player's performance")
def analyze_player(steam_account_id: int) -> str:
    steps = examples.TOOL_WORKFLOWS["Player Analysis"]
    return (
        f"Analyze player {steam_account_id}:\n"
        f"1. Use {steps[0]} to get basic info\n"
        f"2. Use {steps[1]} for recent performance\n"
        f"3. Use {steps[2]} for hero specialization\n"
        "4. Summarize strengths, weaknesses, and recommendations"
    )


@mcp.prompt(name="analyze-match", description="Analyze a specific Dota 2 match")
def analyze_match(match_id: int) -> str:
    steps = examples.TOOL_WORKFLOWS["Match Analysis"]
    return (
        f"Analyze match {match_id}:\n"
        f"1. Use {steps[0]} for basic info\n"
        f"2. Use {steps[1]} for detailed player stats\n"
        "3. Identify key moments and turning points\n"
        "4. Provide strategic insights"
    )
