"""Curated Dota 2 query examples, workflows and keyword suggestions."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

SEARCH_PATTERNS: dict[str, list[str]] = {
    "player": ["player", "steam", "account", "profile", "user"],
    "playerStats": ["winrate", "matches", "performance", "ranking", "mmr", "behavior"],
    "match": ["match", "game", "duration", "winner", "radiant", "dire"],
    "matchDetails": ["players", "heroes", "items", "builds", "picks", "bans"],
    "hero": ["hero", "character", "champion", "abilities", "talents"],
    "heroStats": ["winrate", "popularity", "meta", "performance", "counters"],
    "league": ["league", "tournament", "professional", "esports", "competition"],
    "leagueData": ["teams", "matches", "standings", "bracket", "schedule"],
}


@dataclass(frozen=True, slots=True)
class QueryExample:
    name: str
    description: str
    keywords: tuple[str, ...]
    query: str
    variables: str
    notes: str

    def render(self, with_notes: bool = True) -> str:
        text = f"{self.description}:\n{self.query}\nVariables: {self.variables}"
        if with_notes:
            text += f"\nNotes: {self.notes}"
        return text


TEMPLATES: tuple[QueryExample, ...] = (
    QueryExample(
        name="playerBasicInfo",
        description="Get basic player information and statistics",
        keywords=("player", "steam", "profile"),
        query="""query GetPlayer($steamId: Long!) {
  player(steamAccountId: $steamId) {
    steamAccount {
      name
      avatar
      profileUri
    }
    matchCount
    winCount
    imp
    # More fields available - use search-schema to discover
  }
}""",
        variables='{"steamId": 123456789}',
        notes="Replace steamId with actual Steam ID (32-bit format)",
    ),
    QueryExample(
        name="playerHeroPerformance",
        description="Analyze player performance with specific heroes",
        keywords=("player", "hero", "performance", "winrate"),
        query="""query GetPlayerHeroes($steamId: Long!, $take: Int = 10) {
  player(steamAccountId: $steamId) {
    heroesPerformance(take: $take) {
      hero {
        displayName
        shortName
      }
      matchCount
      winCount
      avgImp
      # Use introspect-type on HeroPerformanceType for more fields
    }
  }
}""",
        variables='{"steamId": 123456789, "take": 10}',
        notes="Shows top heroes by match count with win statistics",
    ),
    QueryExample(
        name="matchDetails",
        description="Get comprehensive match information",
        keywords=("match", "players", "heroes", "duration"),
        query="""query GetMatch($matchId: Long!) {
  match(id: $matchId) {
    durationSeconds
    didRadiantWin
    gameMode
    startDateTime
    players {
      steamAccount { name }
      hero { displayName }
      kills
      deaths
      assists
      networth
      level
      # Much more available - search for "player", "stats"
    }
  }
}""",
        variables='{"matchId": 7891234567}',
        notes="Use 64-bit match ID from match history",
    ),
    QueryExample(
        name="heroMetaStats",
        description="Get hero popularity and win rate statistics",
        keywords=("hero", "winrate", "popularity", "meta"),
        query="""query GetHeroStats($heroId: Short, $bracket: RankBracket) {
  heroStats {
    heroVsHeroMatchup(heroId: $heroId, bracket: $bracket) {
      hero { displayName }
      winCount
      matchCount
      # Search for "advantage", "matchup" for more fields
    }
  }
}""",
        variables='{"heroId": 1, "bracket": "DIVINE_IMMORTAL"}',
        notes="Analyze hero performance in different skill brackets",
    ),
    QueryExample(
        name="leagueMatches",
        description="List matches played in a professional league",
        keywords=("league", "tournament", "matches"),
        query="""query GetLeague($leagueId: Int!, $take: Int = 10) {
  league(id: $leagueId) {
    displayName
    tier
    matches(request: { take: $take }) {
      id
      didRadiantWin
      durationSeconds
    }
  }
}""",
        variables='{"leagueId": 15728, "take": 10}',
        notes="League ids are visible in match summaries (league.id)",
    ),
)

WORKFLOWS: dict[str, list[str]] = {
    "playerAnalysis": [
        'search-schema(keywords: ["player", "steam"])',
        "query-graphql(query: playerBasicInfo template)",
        'search-schema(keywords: ["player", "hero", "performance"])',
        "query-graphql(query: playerHeroPerformance template)",
    ],
    "matchAnalysis": [
        'search-schema(keywords: ["match", "duration", "players"])',
        "query-graphql(query: matchDetails template)",
        'search-schema(keywords: ["match", "items", "builds"])',
        'introspect-type(type_name: "MatchPlayerType", max_depth: 2)',
    ],
    "heroResearch": [
        'search-schema(keywords: ["hero", "stats", "winrate"])',
        'introspect-type(type_name: "HeroType", max_depth: 2)',
        'search-schema(keywords: ["hero", "matchup", "advantage"])',
        "query-graphql(query: heroMetaStats template)",
    ],
}

_GENERIC_WORKFLOW = [
    "search-schema(keywords: [relevant keywords for your query])",
    'introspect-type(type_name: "FoundType", max_depth: 2)',
    'query-graphql(query: "your GraphQL query here")',
]

STEAM_ID_NOTES = """
Steam ID Formats:
- Steam3 ID: [U:1:123456789] -> Use 123456789
- Steam64 ID: 76561198083722517 -> Convert to 32-bit: subtract 76561197960265728
- Steam Community URL: /profiles/76561198083722517/ -> Extract and convert
- Profile URL: /id/customname/ -> Need to resolve to Steam ID first
"""

COMMON_ERRORS: dict[str, str] = {
    "Player not found": "Check Steam ID format (use 32-bit account ID)",
    "Match not found": "Verify match ID is correct 64-bit format",
    "Field does not exist": "Use search-schema to find correct field names",
    "Authentication required": "Some data requires valid API token in headers",
}

COMMON_HERO_IDS: dict[str, int] = {
    "Anti-Mage": 1,
    "Crystal Maiden": 5,
    "Drow Ranger": 6,
    "Pudge": 14,
    "Sniper": 35,
    "Invoker": 74,
}

COMMON_ITEM_IDS: dict[str, int] = {
    "Boots of Speed": 29,
    "Magic Wand": 34,
    "Black King Bar": 116,
    "Divine Rapier": 133,
    "Aegis of the Immortal": 117,
}

TOOL_WORKFLOWS: dict[str, list[str]] = {
    "Player Analysis": ["dota.player.profile", "dota.player.matches", "dota.player.heroes"],
    "Match Analysis": ["dota.match.summary", "dota.match.players"],
    "Meta Research": ["dota.meta.heroStats", "dota.meta.counters"],
}

CATEGORIES = ("player", "match", "hero", "league", "workflow", "all")

_MAX_SUGGESTIONS = 8
_STEAM64_OFFSET = 76561197960265728


def steam64_to_account_id(steam_id: int) -> int:
    """Convert a 64-bit Steam ID to the 32-bit account id the API expects."""
    if steam_id > _STEAM64_OFFSET:
        return steam_id - _STEAM64_OFFSET
    return steam_id


def suggest_keywords(text: str) -> list[str]:
    """Suggest up to eight search keywords from every pattern group *text* touches."""
    lowered = text.lower()
    suggestions: list[str] = []
    for keywords in SEARCH_PATTERNS.values():
        if any(keyword in lowered for keyword in keywords):
            for keyword in keywords:
                if keyword not in suggestions:
                    suggestions.append(keyword)
    return suggestions[:_MAX_SUGGESTIONS]


def workflow_guidance(intent: str) -> list[str]:
    lowered = intent.lower()
    if "player" in lowered:
        return WORKFLOWS["playerAnalysis"]
    if "match" in lowered:
        return WORKFLOWS["matchAnalysis"]
    if "hero" in lowered:
        return WORKFLOWS["heroResearch"]
    return _GENERIC_WORKFLOW


def matching_templates(keywords: Iterable[str], limit: int = 2) -> list[QueryExample]:
    """Templates whose keywords occur in any of the search *keywords*."""
    lowered = [k.lower() for k in keywords]
    found = [
        template
        for template in TEMPLATES
        if any(tk in k for tk in template.keywords for k in lowered)
    ]
    return found[:limit]


def format_examples(category: str = "all") -> str:
    """Render workflows, templates, Steam ID notes and common errors for *category*.

    Raises:
        ValueError: *category* is not one of :data:`CATEGORIES`.
    """
    if category not in CATEGORIES:
        raise ValueError(f"Unknown category '{category}'. Expected one of: {', '.join(CATEGORIES)}")

    sections: list[str] = []
    if category in ("all", "workflow"):
        lines = ["=== Recommended Workflows ==="]
        for name, steps in WORKFLOWS.items():
            lines.append(f"\n{name.upper()}:")
            lines.extend(f"{i}. {step}" for i, step in enumerate(steps, start=1))
        sections.append("\n".join(lines))

    headings = {
        "player": "Player Analysis Examples",
        "match": "Match Analysis Examples",
        "hero": "Hero Research Examples",
        "league": "League Examples",
    }
    for key, heading in headings.items():
        if category not in ("all", key):
            continue
        examples = [t for t in TEMPLATES if key in t.keywords]
        if examples:
            body = "\n\n".join(t.render() for t in examples)
            sections.append(f"=== {heading} ===\n\n{body}")

    sections.append(f"=== Steam ID Notes ==={STEAM_ID_NOTES}")
    errors = "\n".join(f"- {error}: {fix}" for error, fix in COMMON_ERRORS.items())
    sections.append(f"=== Common Errors & Solutions ===\n{errors}")
    return "\n\n".join(sections)


def quickstart_doc() -> str:
    """Markdown quick start: authentication, tool workflows, ID format, common errors."""
    workflows = "\n".join(
        f"{i}. **{name}**: {' -> '.join(tools)}"
        for i, (name, tools) in enumerate(TOOL_WORKFLOWS.items(), start=1)
    )
    errors = "\n".join(f"- {error}: {fix}" for error, fix in COMMON_ERRORS.items())
    return (
        "# Dota 2 MCP Server Quick Start\n\n"
        "## Authentication\n"
        "Set the STRATZ_API_TOKEN environment variable to your STRATZ API token.\n\n"
        f"## Common Workflows\n{workflows}\n\n"
        "For anything else: search-schema -> introspect-type -> query-graphql.\n\n"
        "## Steam ID Format\n"
        "Use 32-bit Steam account ids, e.g. 86745912 (not 76561198046011640).\n\n"
        f"## Common Errors\n- 403: Missing or invalid STRATZ_API_TOKEN\n{errors}\n"
    )


def ids_doc() -> str:
    """Markdown reference for Steam account, hero and item ids."""
    heroes = "\n".join(f"- {name}: {hero_id}" for name, hero_id in COMMON_HERO_IDS.items())
    items = "\n".join(f"- {name}: {item_id}" for name, item_id in COMMON_ITEM_IDS.items())
    return (
        "# Dota 2 ID Reference\n\n"
        f"## Steam Account ID\n{STEAM_ID_NOTES.strip()}\n\n"
        f"## Hero IDs\n{heroes}\n\n"
        f"## Item IDs\n{items}\n\n"
        "## League IDs\n"
        "League ids change every season; read them from match summaries (league.id).\n"
    )
