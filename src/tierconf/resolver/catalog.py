"""Model tiers, the ranked catalog of known models, and tier selection.

Three tiers:
    strong  planning and spec writing (deep reasoning)
    medium  implementation, review, validation (balanced cost/quality)
    weak    read-only research and exploration (fast, cheap)

Each tier lists its known models best first.  Matching is a
case-insensitive substring test of a catalog pattern against the full
identifier, so ``github-copilot/claude-opus-4.6`` matches ``claude-opus-4.6``.
"""

from __future__ import annotations

import dataclasses
import enum
from collections.abc import Iterable, Mapping
from typing import Any


class ModelTier(str, enum.Enum):
    """Quality/cost class of a model, in priority order."""

    STRONG = "strong"
    MEDIUM = "medium"
    WEAK = "weak"


TIER_ORDER: tuple[ModelTier, ...] = (ModelTier.STRONG, ModelTier.MEDIUM, ModelTier.WEAK)


@dataclasses.dataclass(frozen=True)
class KnownModel:
    patterns: tuple[str, ...]
    display_name: str
    tier: ModelTier

    def matches(self, identifier: str) -> bool:
        lower = identifier.lower()
        return any(p.lower() in lower for p in self.patterns)


STRONG_MODELS: tuple[KnownModel, ...] = (
    KnownModel(("claude-opus-4.6", "claude-opus-4-6"), "Claude Opus 4.6", ModelTier.STRONG),
    KnownModel(
        ("gpt-5.3-codex", "gpt-5.3_codex", "gpt-53-codex"), "GPT-5.3 Codex", ModelTier.STRONG
    ),
    KnownModel(("gemini-3.1", "gemini-3-1"), "Gemini 3.1", ModelTier.STRONG),
)

MEDIUM_MODELS: tuple[KnownModel, ...] = (
    KnownModel(
        ("claude-sonnet-4.6", "claude-sonnet-4-6"), "Claude Sonnet 4.6", ModelTier.MEDIUM
    ),
    KnownModel(
        ("gpt-5.2-codex", "gpt-5.2_codex", "gpt-52-codex"), "GPT-5.2 Codex", ModelTier.MEDIUM
    ),
)

WEAK_MODELS: tuple[KnownModel, ...] = (
    KnownModel(("claude-haiku-4.5", "claude-haiku-4-5"), "Claude Haiku 4.5", ModelTier.WEAK),
    KnownModel(("grok-fast-1", "grok-fast1"), "Grok Fast 1", ModelTier.WEAK),
    KnownModel(
        ("gemini-flash-2.0", "gemini-flash-2-0", "gemini-2.0-flash", "gemini-2-0-flash"),
        "Gemini Flash 2.0",
        ModelTier.WEAK,
    ),
)

CATALOG: Mapping[ModelTier, tuple[KnownModel, ...]] = {
    ModelTier.STRONG: STRONG_MODELS,
    ModelTier.MEDIUM: MEDIUM_MODELS,
    ModelTier.WEAK: WEAK_MODELS,
}

ALL_KNOWN_MODELS: tuple[KnownModel, ...] = STRONG_MODELS + MEDIUM_MODELS + WEAK_MODELS

# Which tier backs each framework agent.
AGENT_TIER_MAP: Mapping[str, ModelTier] = {
    "j.planner": ModelTier.STRONG,
    "j.spec-writer": ModelTier.STRONG,
    "j.plan-reviewer": ModelTier.MEDIUM,
    "j.implementer": ModelTier.MEDIUM,
    "j.validator": ModelTier.MEDIUM,
    "j.reviewer": ModelTier.MEDIUM,
    "j.unify": ModelTier.MEDIUM,
    "j.explore": ModelTier.WEAK,
    "j.librarian": ModelTier.WEAK,
}


@dataclasses.dataclass(frozen=True)
class ResolvedConfig:
    """Model identifier chosen for each tier.

    All three fields empty is the "nothing resolved" condition callers must
    check for with :meth:`is_empty`.
    """

    strong: str = ""
    medium: str = ""
    weak: str = ""

    def for_tier(self, tier: ModelTier | str) -> str:
        return getattr(self, ModelTier(tier).value)

    def is_empty(self) -> bool:
        return not (self.strong or self.medium or self.weak)

    def is_complete(self) -> bool:
        return bool(self.strong and self.medium and self.weak)

    def to_dict(self) -> dict[str, str]:
        return {"strong": self.strong, "medium": self.medium, "weak": self.weak}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ResolvedConfig:
        return cls(
            strong=str(data.get("strong") or ""),
            medium=str(data.get("medium") or ""),
            weak=str(data.get("weak") or ""),
        )


# Used when no record exists and discovery is unavailable.
DEFAULT_MODELS = ResolvedConfig(
    strong="anthropic/claude-opus-4-6",
    medium="anthropic/claude-sonnet-4-6",
    weak="anthropic/claude-haiku-4-5",
)


@dataclasses.dataclass
class TierGroups:
    strong: list[str] = dataclasses.field(default_factory=list)
    medium: list[str] = dataclasses.field(default_factory=list)
    weak: list[str] = dataclasses.field(default_factory=list)
    unknown: list[str] = dataclasses.field(default_factory=list)

    def for_tier(self, tier: ModelTier | str) -> list[str]:
        return getattr(self, ModelTier(tier).value)


def classify(identifier: str) -> tuple[ModelTier, KnownModel] | None:
    """Return the tier and catalog entry *identifier* belongs to.

    The catalog is scanned in tier order, then preference order, so an
    identifier matching patterns of two tiers lands in the earlier tier.
    """
    for known in ALL_KNOWN_MODELS:
        if known.matches(identifier):
            return known.tier, known
    return None


def group_by_tier(identifiers: Iterable[str]) -> TierGroups:
    """Bucket *identifiers* by tier, keeping input order within each bucket."""
    groups = TierGroups()
    for identifier in identifiers:
        match = classify(identifier)
        if match is None:
            groups.unknown.append(identifier)
        else:
            groups.for_tier(match[0]).append(identifier)
    return groups


def _best_for_tier(identifiers: list[str], tier: ModelTier) -> str:
    for known in CATALOG[tier]:
        for identifier in identifiers:
            if known.matches(identifier):
                return identifier
    return ""


def select_best(identifiers: Iterable[str]) -> ResolvedConfig:
    """Pick the preferred available identifier for every tier.

    Tiers without a catalog match borrow from the others:
    strong from medium then weak, medium from strong then weak, weak from
    medium then strong.  Each step sees the result of the previous one.
    When nothing matches the catalog, every tier takes the first identifier.
    Only an empty input resolves to the empty config.
    """
    available = list(identifiers)
    strong = _best_for_tier(available, ModelTier.STRONG)
    medium = _best_for_tier(available, ModelTier.MEDIUM)
    weak = _best_for_tier(available, ModelTier.WEAK)

    if not strong:
        strong = medium or weak
    if not medium:
        medium = strong or weak
    if not weak:
        weak = medium or strong

    if not strong and available:
        strong = medium = weak = available[0]

    return ResolvedConfig(strong=strong, medium=medium, weak=weak)
