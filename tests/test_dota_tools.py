"""Unit tests for the fixed-query Dota 2 tools."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, patch

import pytest

from dota_graphql_mcp import dota_tools, graphql_client
from dota_graphql_mcp.errors import TransportError


def _execute(return_value=None, side_effect=None):
    return patch.object(
        graphql_client,
        "execute",
        new_callable=AsyncMock,
        return_value=return_value,
        side_effect=side_effect,
    )


class TestPlayerTools:
    @pytest.mark.asyncio
    async def test_profile_success_envelope(self) -> None:
        with _execute({"player": {"winCount": 10}}) as execute:
            result = json.loads(await dota_tools.player_profile(123456789))

        assert result["success"] is True
        assert result["player"] == {"winCount": 10}
        assert "timestamp" in result
        assert execute.await_args.args[1] == {"steamAccountId": 123456789}

    @pytest.mark.asyncio
    async def test_profile_converts_steam64(self) -> None:
        with _execute({"player": None}) as execute:
            await dota_tools.player_profile(76561198083722517)
        assert execute.await_args.args[1] == {"steamAccountId": 123456789}

    @pytest.mark.asyncio
    async def test_profile_rejects_bad_id(self) -> None:
        with _execute() as execute:
            result = json.loads(await dota_tools.player_profile(0))

        assert result["success"] is False
        assert result["tool"] == "dota.player.profile"
        assert "32-bit Steam account id" in result["error"]
        execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_matches_clamps_take(self) -> None:
        with _execute({"player": {"matches": []}}) as execute:
            await dota_tools.player_matches(123456789, take=500)
        assert execute.await_args.args[1]["request"] == {"take": 20}

    @pytest.mark.asyncio
    async def test_heroes_clamps_take(self) -> None:
        with _execute({"player": {"heroesPerformance": []}}) as execute:
            await dota_tools.player_heroes(123456789, take=0)
        assert execute.await_args.args[1]["request"] == {"take": 1}

    @pytest.mark.asyncio
    async def test_failure_envelope(self) -> None:
        with _execute(side_effect=TransportError("HTTP 429", status_code=429)):
            result = json.loads(await dota_tools.player_heroes(123456789))

        assert result == {
            "error": "HTTP 429",
            "tool": "dota.player.heroes",
            "timestamp": result["timestamp"],
            "success": False,
        }


class TestMatchTools:
    @pytest.mark.asyncio
    async def test_summary(self) -> None:
        with _execute({"match": {"id": 7891234567}}) as execute:
            result = json.loads(await dota_tools.match_summary(7891234567))
        assert result["match"]["id"] == 7891234567
        assert execute.await_args.args[1] == {"matchId": 7891234567}

    @pytest.mark.asyncio
    async def test_players_rejects_bad_id(self) -> None:
        result = json.loads(await dota_tools.match_players(-1))
        assert result["success"] is False
        assert result["tool"] == "dota.match.players"


class TestHeroStats:
    @pytest.mark.asyncio
    async def test_without_bracket(self) -> None:
        with _execute({"heroStats": {"stats": []}}) as execute:
            result = json.loads(await dota_tools.hero_stats())
        assert result["success"] is True
        assert execute.await_args.args[1] == {}

    @pytest.mark.asyncio
    async def test_bracket_is_normalized(self) -> None:
        with _execute({"heroStats": {"stats": []}}) as execute:
            await dota_tools.hero_stats("divine")
        assert execute.await_args.args[1] == {"bracketIds": ["DIVINE"]}

    @pytest.mark.asyncio
    async def test_unknown_bracket(self) -> None:
        with _execute() as execute:
            result = json.loads(await dota_tools.hero_stats("TITAN"))
        assert result["success"] is False
        assert "HERALD" in result["error"]
        execute.assert_not_called()


class TestHeroCounters:
    @pytest.mark.asyncio
    async def test_counters(self) -> None:
        matchup = {"heroStats": {"heroVsHeroMatchup": {"vs": [], "with": []}}}
        with _execute(matchup) as execute:
            result = json.loads(await dota_tools.hero_counters(14))
        assert result["success"] is True
        assert result["heroStats"]["heroVsHeroMatchup"] == {"vs": [], "with": []}
        assert execute.await_args.args[1] == {"heroId": 14}

    @pytest.mark.asyncio
    async def test_rejects_bad_hero_id(self) -> None:
        with _execute() as execute:
            result = json.loads(await dota_tools.hero_counters(0))
        assert result["success"] is False
        assert result["tool"] == "dota.meta.counters"
        execute.assert_not_called()


class TestDocsAndPrompts:
    def test_quickstart(self) -> None:
        text = dota_tools.quickstart()
        assert text.startswith("# Dota 2 MCP Server Quick Start")
        assert "dota.meta.heroStats -> dota.meta.counters" in text
        assert "Player not found: Check Steam ID format" in text

    def test_id_reference(self) -> None:
        text = dota_tools.id_reference()
        assert "subtract 76561197960265728" in text
        assert "- Pudge: 14" in text
        assert "- Black King Bar: 116" in text

    def test_analyze_player_prompt(self) -> None:
        text = dota_tools.analyze_player(86745912)
        assert text.startswith("Analyze player 86745912:")
        assert "1. Use dota.player.profile" in text

    def test_analyze_match_prompt(self) -> None:
        text = dota_tools.analyze_match(7891234567)
        assert "2. Use dota.match.players" in text
