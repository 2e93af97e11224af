"""Data models for background self-play calibration runs."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, replace
from typing import Any

from gomokie.core.payload import as_mapping, field
from gomokie.core.ratings import ProfileRating

MIN_LEVEL = 1
MAX_LEVEL = 12


@dataclass(frozen=True, slots=True)
class SelfPlayConfig:
    """Parameters of one calibration run."""

    games_per_pair: int = 30
    parallelism: int = 4
    include_llm: bool = False
    llm_ids: tuple[str, ...] = ()
    min_level: int = MIN_LEVEL
    max_level: int = MAX_LEVEL

    def to_args(self) -> dict[str, Any]:
        """Arguments for ``start_self_play``; LLM ids only when LLMs are included."""
        return {
            "gamesPerPair": self.games_per_pair,
            "parallelism": self.parallelism,
            "includeLlm": self.include_llm,
            "llmIds": list(self.llm_ids) if self.include_llm else [],
            "minLevel": self.min_level,
            "maxLevel": self.max_level,
        }

    def with_include_llm(
        self, include: bool, profiles: Iterable[ProfileRating]
    ) -> SelfPlayConfig:
        """Toggle LLM participants and recompute the default selection.

        Enabling selects every LLM profile whose credential is already
        provisioned; disabling clears the selection.
        """
        if not include:
            return replace(self, include_llm=False, llm_ids=())
        defaults = tuple(p.id for p in profiles if p.has_credential)
        return replace(self, include_llm=True, llm_ids=defaults)

    def with_llm_id(self, profile_id: str, selected: bool) -> SelfPlayConfig:
        if selected:
            if profile_id in self.llm_ids:
                return self
            return replace(self, llm_ids=(*self.llm_ids, profile_id))
        return replace(
            self, llm_ids=tuple(i for i in self.llm_ids if i != profile_id)
        )


@dataclass(frozen=True, slots=True)
class SelfPlayProgress:
    """Latest progress snapshot pushed by the running job."""

    completed: int
    total: int
    percent: float

    @classmethod
    def from_payload(cls, value: object) -> SelfPlayProgress:
        payload = as_mapping(value, "self-play progress")
        return cls(
            completed=field(payload, "completed", int),
            total=field(payload, "total", int),
            percent=field(payload, "percent", float),
        )


@dataclass(frozen=True, slots=True)
class SelfPlayReport:
    """Terminal summary of a run, produced exactly once."""

    games_per_pair: int
    total_games: int
    completed_games: int
    stopped: bool

    @classmethod
    def from_payload(cls, value: object) -> SelfPlayReport:
        payload = as_mapping(value, "self-play report")
        return cls(
            games_per_pair=field(payload, "gamesPerPair", int),
            total_games=field(payload, "totalGames", int),
            completed_games=field(payload, "completedGames", int),
            stopped=field(payload, "stopped", bool),
        )
