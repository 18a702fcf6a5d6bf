"""
Fuzzy string similarity metrics.

Wraps the thefuzz library behind one name per metric so the scorer can
look them up by the keys used in config.scoring.METRIC_WEIGHTS.

Every metric returns an int in [0, 100]; 0 when either side is empty,
100 for identical non-empty strings.
"""

from typing import Callable

from thefuzz import fuzz


Metric = Callable[[str, str], int]


def _guard_empty(scorer: Callable[[str, str], int]) -> Metric:
    """Empty strings score 0 regardless of how the underlying scorer treats them."""

    def metric(left: str, right: str) -> int:
        if not left or not right:
            return 0
        return scorer(left, right)

    metric.__name__ = scorer.__name__
    metric.__doc__ = scorer.__doc__
    return metric


def _token_set(left: str, right: str) -> int:
    """Unordered token sets; tolerant of reordering and extra shared words."""
    return fuzz.token_set_ratio(left, right)


def _token_sort(left: str, right: str) -> int:
    """Tokens sorted alphabetically, then a plain ratio."""
    return fuzz.token_sort_ratio(left, right)


def _weighted(left: str, right: str) -> int:
    """Best of ratio/partial/token ratios with length-based scaling (WRatio)."""
    return fuzz.WRatio(left, right)


def _partial(left: str, right: str) -> int:
    """Best-aligned substring match."""
    return fuzz.partial_ratio(left, right)


def _ratio(left: str, right: str) -> int:
    """Normalized edit-distance similarity over the full strings."""
    return fuzz.ratio(left, right)


token_set_ratio = _guard_empty(_token_set)
token_sort_ratio = _guard_empty(_token_sort)
weighted_ratio = _guard_empty(_weighted)
partial_ratio = _guard_empty(_partial)
simple_ratio = _guard_empty(_ratio)

METRICS: dict[str, Metric] = {
    "token_set": token_set_ratio,
    "token_sort": token_sort_ratio,
    "weighted": weighted_ratio,
    "partial": partial_ratio,
    "ratio": simple_ratio,
}


def get_metric(name: str) -> Metric:
    """
    Look up a metric by its config key.

    Raises:
        ValueError: if *name* is not a known metric.
    """
    try:
        return METRICS[name]
    except KeyError:
        raise ValueError(
            f"Unknown similarity metric '{name}'. Known: {sorted(METRICS)}"
        ) from None
