"""Tests for self-play configuration and event models."""

from __future__ import annotations

import pytest

from gomokie.core.enums import ProfileKind
from gomokie.core.payload import PayloadError
from gomokie.core.ratings import LlmConfig, ProfileRating, RatingEntry
from gomokie.selfplay.models import SelfPlayConfig, SelfPlayProgress, SelfPlayReport


def _llm(profile_id: str, key_set: bool) -> ProfileRating:
    return ProfileRating(
        id=profile_id,
        name=profile_id,
        entry=RatingEntry(rating=1000.0, games=0),
        kind=ProfileKind.LLM,
        llm=LlmConfig(model="m", api_key_set=key_set),
    )


def _heuristic(profile_id: str) -> ProfileRating:
    return ProfileRating(
        id=profile_id, name=profile_id, entry=RatingEntry(rating=1000.0, games=0)
    )


class TestSelfPlayConfig:
    def test_defaults_to_args(self) -> None:
        assert SelfPlayConfig().to_args() == {
            "gamesPerPair": 30,
            "parallelism": 4,
            "includeLlm": False,
            "llmIds": [],
            "minLevel": 1,
            "maxLevel": 12,
        }

    def test_llm_ids_are_only_sent_with_llm_enabled(self) -> None:
        config = SelfPlayConfig(include_llm=False, llm_ids=("a",))

        assert config.to_args()["llmIds"] == []

    def test_enabling_llm_selects_profiles_with_credentials(self) -> None:
        profiles = [_llm("a", True), _llm("b", False), _heuristic("lvl-1")]

        config = SelfPlayConfig().with_include_llm(True, profiles)

        assert config.include_llm
        assert config.llm_ids == ("a",)
        assert config.to_args()["llmIds"] == ["a"]

    def test_disabling_llm_clears_selection(self) -> None:
        config = SelfPlayConfig(include_llm=True, llm_ids=("a", "b"))

        assert config.with_include_llm(False, []).llm_ids == ()

    def test_toggle_single_llm_id(self) -> None:
        config = SelfPlayConfig(include_llm=True, llm_ids=("a",))

        added = config.with_llm_id("b", True)
        assert added.llm_ids == ("a", "b")
        assert added.with_llm_id("b", True) is added
        assert added.with_llm_id("a", False).llm_ids == ("b",)


class TestEvents:
    def test_progress_from_payload(self) -> None:
        progress = SelfPlayProgress.from_payload(
            {"completed": 3, "total": 12, "percent": 25}
        )

        assert progress == SelfPlayProgress(completed=3, total=12, percent=25.0)

    def test_report_from_payload(self) -> None:
        report = SelfPlayReport.from_payload(
            {
                "gamesPerPair": 2,
                "totalGames": 12,
                "completedGames": 7,
                "stopped": True,
            }
        )

        assert report.stopped
        assert report.completed_games == 7

    def test_progress_rejects_missing_fields(self) -> None:
        with pytest.raises(PayloadError, match="total"):
            SelfPlayProgress.from_payload({"completed": 1, "percent": 2.0})
