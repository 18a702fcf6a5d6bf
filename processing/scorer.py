"""
Candidate scorer — combines the similarity metrics into one score per name.

    score = 0.3 * token_set(query.spaced, name.spaced)
          + 0.3 * token_sort(query.spaced, name.spaced)
          + 0.2 * weighted(query.spaced, name.spaced)
          + 0.1 * partial(query.concatenated, name.concatenated)
          + 0.1 * ratio(query.spaced, name.spaced)

The primary (base) name is clamped to [0, 100]. The secondary (live/display)
name gets a one-point bonus and is clamped to [0, 101]. A candidate's final
score is the larger of the two.

Public API:
    score_name(query, name) → float
    score_secondary_name(query, name) → float
    build_candidate(record, query, supply_index) → ScoredCandidate
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Hashable, NamedTuple

from config.scoring import (
    CONCATENATED_METRICS,
    METRIC_WEIGHTS,
    PRIMARY_SCORE_CEILING,
    SECONDARY_NAME_BONUS,
    SECONDARY_SCORE_CEILING,
)
from processing.normalizer import NormalizedName, normalize
from utils.fuzzy_match import get_metric

logger = logging.getLogger(__name__)

PRIMARY_FIELD = "primary"
SECONDARY_FIELD = "secondary"


# ═══════════════════════════════════════════════════════════════════════════
# Data classes
# ═══════════════════════════════════════════════════════════════════════════

class CandidateRecord(NamedTuple):
    """
    One row from the candidate supply: a snapshot of an entity's identity
    and names, captured once per search.
    """

    primary_id: Hashable
    primary_name: str | None
    secondary_id: Hashable | None = None
    secondary_name: str | None = None


@dataclass(frozen=True)
class Query:
    """The search input with its canonical forms."""

    raw: str
    name: NormalizedName

    @classmethod
    def from_text(cls, raw: str | None) -> "Query":
        return cls(raw=raw or "", name=normalize(raw))


@dataclass
class ScoredCandidate:
    """A candidate with its per-field and final scores."""

    primary_id: Hashable
    primary_name: NormalizedName
    secondary_id: Hashable | None = None
    secondary_name: NormalizedName | None = None
    primary_score: float = 0.0
    secondary_score: float = 0.0
    supply_index: int = 0
    metric_breakdown: dict[str, dict[str, int]] = field(default_factory=dict)
    """field → metric name → raw metric value, for diagnostics."""

    @property
    def final_score(self) -> float:
        return max(self.primary_score, self.secondary_score)

    @property
    def matched_field(self) -> str:
        if self.secondary_name is not None and self.secondary_score > self.primary_score:
            return SECONDARY_FIELD
        return PRIMARY_FIELD

    @property
    def identifier(self) -> Hashable:
        """Live id when the secondary name won (and one exists), else the base id."""
        if self.matched_field == SECONDARY_FIELD and self.secondary_id is not None:
            return self.secondary_id
        return self.primary_id

    @property
    def matched_name(self) -> str:
        if self.matched_field == SECONDARY_FIELD:
            return self.secondary_name.raw
        return self.primary_name.raw


# ═══════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════

def validate_weights(weights: dict[str, float]) -> dict[str, float]:
    """
    Check that every weight names a known metric and that they sum to 1.0.

    Raises:
        ValueError: on an unknown metric or a bad total.
    """
    for metric_name in weights:
        get_metric(metric_name)
    total = sum(weights.values())
    if not math.isclose(total, 1.0, abs_tol=1e-9):
        raise ValueError(f"Metric weights must sum to 1.0, got {total}")
    return dict(weights)


_WEIGHTS = validate_weights(METRIC_WEIGHTS)


def metric_values(query: NormalizedName, name: NormalizedName) -> dict[str, int]:
    """Run every weighted metric on the pair, using the form each metric expects."""
    values: dict[str, int] = {}
    for metric_name in _WEIGHTS:
        metric = get_metric(metric_name)
        if metric_name in CONCATENATED_METRICS:
            values[metric_name] = metric(query.concatenated, name.concatenated)
        else:
            values[metric_name] = metric(query.spaced, name.spaced)
    return values


def combine(values: dict[str, int]) -> float:
    """Weighted sum of metric values. Not clamped."""
    return sum(_WEIGHTS[metric_name] * value for metric_name, value in values.items())


def score_name(
    query: str | NormalizedName | Query,
    name: str | NormalizedName,
) -> float:
    """
    Score a primary name against the query, clamped to [0, 100].

    Plain strings are normalized first. An empty side scores 0.
    """
    query_name, candidate_name = _as_normalized(query), _as_normalized(name)
    return _clamp(combine(metric_values(query_name, candidate_name)), PRIMARY_SCORE_CEILING)


def score_secondary_name(
    query: str | NormalizedName | Query,
    name: str | NormalizedName,
) -> float:
    """
    Score a live/display name: the same formula plus SECONDARY_NAME_BONUS,
    clamped to [0, 101]. A name with no surviving tokens scores 0.

    The bonus applies to every live-name score, not only to ties, so a
    weak live-name match sits one point higher against the threshold than
    the same name would as a base name.
    """
    query_name, candidate_name = _as_normalized(query), _as_normalized(name)
    return _secondary_score(
        query_name, candidate_name, metric_values(query_name, candidate_name)
    )


def build_candidate(
    record: CandidateRecord,
    query: Query,
    supply_index: int = 0,
) -> ScoredCandidate:
    """
    Normalize a supplied record's names and score them against *query*.

    A record without a secondary name keeps secondary_score at 0.
    """
    primary = normalize(record.primary_name)
    primary_values = metric_values(query.name, primary)
    candidate = ScoredCandidate(
        primary_id=record.primary_id,
        primary_name=primary,
        secondary_id=record.secondary_id,
        supply_index=supply_index,
        primary_score=_clamp(combine(primary_values), PRIMARY_SCORE_CEILING),
        metric_breakdown={PRIMARY_FIELD: primary_values},
    )

    if record.secondary_name is not None:
        secondary = normalize(record.secondary_name)
        secondary_values = metric_values(query.name, secondary)
        candidate.secondary_name = secondary
        candidate.secondary_score = _secondary_score(query.name, secondary, secondary_values)
        candidate.metric_breakdown[SECONDARY_FIELD] = secondary_values

    logger.debug(
        f"Scored {record.primary_id!r} '{record.primary_name}': "
        f"primary={candidate.primary_score:.2f}, "
        f"secondary={candidate.secondary_score:.2f}"
    )
    return candidate


# ═══════════════════════════════════════════════════════════════════════════
# Internal helpers
# ═══════════════════════════════════════════════════════════════════════════

def _as_normalized(value: str | NormalizedName | Query | None) -> NormalizedName:
    if isinstance(value, Query):
        return value.name
    if isinstance(value, NormalizedName):
        return value
    return normalize(value)


def _secondary_score(
    query_name: NormalizedName,
    candidate_name: NormalizedName,
    values: dict[str, int],
) -> float:
    if not query_name or not candidate_name:
        return 0.0
    return _clamp(combine(values) + SECONDARY_NAME_BONUS, SECONDARY_SCORE_CEILING)


def _clamp(score: float, ceiling: float) -> float:
    return min(max(score, 0.0), ceiling)
