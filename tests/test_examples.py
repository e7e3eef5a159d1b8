"""Unit tests for the curated query examples."""

import pytest

from dota_graphql_mcp import examples


class TestSuggestKeywords:
    def test_expands_matching_groups(self) -> None:
        suggestions = examples.suggest_keywords("player winrate")
        assert suggestions[:5] == ["player", "steam", "account", "profile", "user"]
        assert len(suggestions) == 8

    def test_deduplicates(self) -> None:
        suggestions = examples.suggest_keywords("winrate")
        assert len(suggestions) == len(set(suggestions))

    def test_nothing_matches(self) -> None:
        assert examples.suggest_keywords("xyz123") == []


class TestWorkflowGuidance:
    def test_player(self) -> None:
        steps = examples.workflow_guidance("Analyze a player")
        assert steps == examples.WORKFLOWS["playerAnalysis"]

    def test_hero(self) -> None:
        assert examples.workflow_guidance("hero meta") == examples.WORKFLOWS["heroResearch"]

    def test_generic(self) -> None:
        steps = examples.workflow_guidance("something else")
        assert steps[0].startswith("search-schema")


class TestMatchingTemplates:
    def test_matches_by_keyword(self) -> None:
        found = examples.matching_templates(["Player"])
        assert [t.name for t in found] == ["playerBasicInfo", "playerHeroPerformance"]

    def test_limit(self) -> None:
        assert len(examples.matching_templates(["hero", "match", "player"], limit=1)) == 1

    def test_no_match(self) -> None:
        assert examples.matching_templates(["xyz"]) == []


class TestFormatExamples:
    def test_all_contains_every_section(self) -> None:
        text = examples.format_examples("all")
        assert "=== Recommended Workflows ===" in text
        assert "PLAYERANALYSIS:" in text
        assert "=== Player Analysis Examples ===" in text
        assert "=== Hero Research Examples ===" in text
        assert "=== Steam ID Notes ===" in text
        assert "Player not found" in text

    def test_single_category(self) -> None:
        text = examples.format_examples("match")
        assert "query GetMatch" in text
        assert "=== Recommended Workflows ===" not in text
        assert "query GetPlayer(" not in text

    def test_unknown_category(self) -> None:
        with pytest.raises(ValueError):
            examples.format_examples("items")


class TestSteamIds:
    def test_converts_steam64(self) -> None:
        assert examples.steam64_to_account_id(76561198083722517) == 123456789

    def test_keeps_account_id(self) -> None:
        assert examples.steam64_to_account_id(123456789) == 123456789
