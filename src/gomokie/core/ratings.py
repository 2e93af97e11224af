"""Rating ladder and engine profile models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from gomokie.core.enums import ProfileKind
from gomokie.core.payload import (
    PayloadError,
    as_list,
    as_mapping,
    field,
    optional_field,
)

# Elo points credited to the side playing black when estimating odds.
BLACK_ADVANTAGE = 35


@dataclass(frozen=True, slots=True)
class RatingEntry:
    """Rating and record of one participant."""

    rating: float
    games: int
    wins: int = 0
    draws: int = 0
    losses: int = 0

    @classmethod
    def from_payload(cls, value: object) -> RatingEntry:
        payload = as_mapping(value, "rating entry")
        return cls(
            rating=field(payload, "rating", float),
            games=field(payload, "games", int),
            wins=optional_field(payload, "wins", int, 0),
            draws=optional_field(payload, "draws", int, 0),
            losses=optional_field(payload, "losses", int, 0),
        )


@dataclass(frozen=True, slots=True)
class AiConfig:
    """Search parameters of a heuristic engine profile."""

    depth: int
    max_candidates: int
    randomness: int
    max_nodes: int
    defense_weight: int

    @classmethod
    def from_payload(cls, value: object) -> AiConfig:
        payload = as_mapping(value, "ai config")
        return cls(
            depth=field(payload, "depth", int),
            max_candidates=field(payload, "maxCandidates", int),
            randomness=field(payload, "randomness", int),
            max_nodes=field(payload, "maxNodes", int),
            defense_weight=field(payload, "defenseWeight", int),
        )


@dataclass(frozen=True, slots=True)
class LlmConfig:
    """Connection settings of a language-model engine profile.

    ``api_key_set`` is reported by the engine; the key itself never
    leaves the engine's credential store.
    """

    model: str
    base_url: str = ""
    temperature: float = 0.4
    top_p: float = 1.0
    max_tokens: int = 128
    timeout_ms: int = 20_000
    candidate_limit: int = 12
    api_key_set: bool = False

    @classmethod
    def from_payload(cls, value: object) -> LlmConfig:
        payload = as_mapping(value, "llm config")
        return cls(
            model=field(payload, "model", str),
            base_url=optional_field(payload, "baseUrl", str, ""),
            temperature=optional_field(payload, "temperature", float, 0.4),
            top_p=optional_field(payload, "topP", float, 1.0),
            max_tokens=optional_field(payload, "maxTokens", int, 128),
            timeout_ms=optional_field(payload, "timeoutMs", int, 20_000),
            candidate_limit=optional_field(payload, "candidateLimit", int, 12),
            api_key_set=optional_field(payload, "apiKeySet", bool, False),
        )

    def to_payload(self) -> dict[str, Any]:
        return {
            "baseUrl": self.base_url,
            "model": self.model,
            "temperature": self.temperature,
            "topP": self.top_p,
            "maxTokens": self.max_tokens,
            "timeoutMs": self.timeout_ms,
            "candidateLimit": self.candidate_limit,
            "apiKeySet": self.api_key_set,
        }


@dataclass(frozen=True, slots=True)
class ProfileRating:
    """One engine opponent on the ladder."""

    id: str
    name: str
    entry: RatingEntry
    kind: ProfileKind = ProfileKind.HEURISTIC
    config: AiConfig | None = None
    llm: LlmConfig | None = None

    @property
    def rating(self) -> float:
        return self.entry.rating

    @property
    def has_credential(self) -> bool:
        return self.kind == ProfileKind.LLM and self.llm is not None and (
            self.llm.api_key_set
        )

    @classmethod
    def from_payload(cls, value: object) -> ProfileRating:
        payload = as_mapping(value, "profile")
        try:
            kind = ProfileKind(optional_field(payload, "kind", str, "heuristic"))
        except ValueError as exc:
            raise PayloadError(str(exc)) from exc
        config = payload.get("config")
        llm = payload.get("llm")
        return cls(
            id=field(payload, "id", str),
            name=field(payload, "name", str),
            entry=RatingEntry.from_payload(payload),
            kind=kind,
            config=None if config is None else AiConfig.from_payload(config),
            llm=None if llm is None else LlmConfig.from_payload(llm),
        )


@dataclass(frozen=True, slots=True)
class RatingsSnapshot:
    """Ladder state for the active user."""

    player: RatingEntry
    profiles: tuple[ProfileRating, ...]
    active_profile: str
    auto_match: bool
    match_offset: int

    @classmethod
    def from_payload(cls, value: object) -> RatingsSnapshot:
        payload = as_mapping(value, "ratings")
        return cls(
            player=RatingEntry.from_payload(payload.get("player")),
            profiles=tuple(
                ProfileRating.from_payload(p)
                for p in as_list(payload.get("profiles"), "profiles")
            ),
            active_profile=field(payload, "activeProfile", str),
            auto_match=field(payload, "autoMatch", bool),
            match_offset=field(payload, "matchOffset", int),
        )

    def profile(self, profile_id: str) -> ProfileRating | None:
        for profile in self.profiles:
            if profile.id == profile_id:
                return profile
        return None

    @property
    def active(self) -> ProfileRating | None:
        return self.profile(self.active_profile)


# ── Presentation helpers ─────────────────────────────────────────────────────


def expected_score(rating_a: float, rating_b: float) -> float:
    """Elo expected score of *rating_a* against *rating_b*."""
    return 1.0 / (1.0 + 10.0 ** ((rating_b - rating_a) / 400.0))


def format_record(wins: int, draws: int, losses: int) -> str:
    return f"{wins}-{draws}-{losses}"


def format_win_rate(wins: int, draws: int, losses: int) -> str:
    """Score percentage counting draws as half a point."""
    total = wins + draws + losses
    if total == 0:
        return "—"
    score = (wins + draws * 0.5) / total
    return f"{score * 100:.1f}%"
