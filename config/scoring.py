"""
Scoring constants for the fuzzy name matcher.

The weights and ceilings below are tuning choices the ranking depends on;
changing any of them changes which candidate wins near-ties.

Usage:
    from config.scoring import METRIC_WEIGHTS, DEFAULT_MIN_SCORE
"""

# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------
# Tokens shorter than this are dropped (articles, initials, "of", "jr").
MIN_TOKEN_LENGTH: int = 3

# ---------------------------------------------------------------------------
# Weighted formula
# ---------------------------------------------------------------------------
# Metric name → weight. Must sum to 1.0.
# "partial" is applied to the concatenated (no-space) forms, all others to
# the spaced forms.
METRIC_WEIGHTS: dict[str, float] = {
    "token_set": 0.3,
    "token_sort": 0.3,
    "weighted": 0.2,
    "partial": 0.1,
    "ratio": 0.1,
}

# Metrics compared on the concatenated forms instead of the spaced forms.
CONCATENATED_METRICS: frozenset[str] = frozenset({"partial"})

# ---------------------------------------------------------------------------
# Clamp bounds
# ---------------------------------------------------------------------------
PRIMARY_SCORE_CEILING: float = 100.0

# Live/display names may reach one point above the base-name ceiling so
# they win a tie against an identical base name.
SECONDARY_SCORE_CEILING: float = 101.0
SECONDARY_NAME_BONUS: float = 1.0

# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------
DEFAULT_MIN_SCORE: float = 50.0

# Below this many candidates a thread pool costs more than it saves.
PARALLEL_MIN_CANDIDATES: int = 256
