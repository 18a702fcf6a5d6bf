"""
Search entry point — the one operation the matcher exposes.

Takes a free-text query and a candidate supply, scores every candidate and
returns the identifier of the best match above the threshold, or None.

The candidate supply is either an iterable of rows or a zero-argument
callable returning one. Each row is a CandidateRecord or a plain tuple
(primary_id, primary_name), (primary_id, primary_name, secondary_name) or
(primary_id, primary_name, secondary_id, secondary_name). Nothing is cached
between calls; names can change from one search to the next.

An optional sink receives human-readable progress lines. It never affects
the result.

Public API:
    search(query, candidates, min_score, sink, workers) → identifier | None
    search_candidate(query, candidates, min_score, sink, workers) → ScoredCandidate | None
    rank_candidates(query, candidates, workers) → list[ScoredCandidate]
    score_table(query, candidates, top) → pd.DataFrame
"""

import logging
from typing import Callable, Hashable, Iterable, Union

import pandas as pd

from config.scoring import DEFAULT_MIN_SCORE
from processing.ranker import rank, score_candidates, select_best_candidate
from processing.scorer import CandidateRecord, Query, ScoredCandidate

logger = logging.getLogger(__name__)

Sink = Callable[[str], None]
CandidateRow = Union[CandidateRecord, tuple]
CandidateSupply = Union[Iterable[CandidateRow], Callable[[], Iterable[CandidateRow]]]

SCORE_TABLE_COLUMNS: list[str] = [
    "rank",
    "primary_id",
    "secondary_id",
    "primary_name",
    "secondary_name",
    "primary_score",
    "secondary_score",
    "final_score",
    "matched_field",
]


# ═══════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════

def search(
    query: str,
    candidates: CandidateSupply,
    min_score: float = DEFAULT_MIN_SCORE,
    sink: Sink | None = None,
    workers: int = 1,
) -> Hashable | None:
    """
    Find the candidate whose name best matches *query*.

    Args:
        query: Free-text search input. May be empty.
        candidates: Candidate supply (rows or a callable returning rows).
        min_score: Minimum final score for a match.
        sink: Optional callable receiving diagnostic lines.
        workers: Thread count for scoring; 1 scans sequentially.

    Returns:
        The winning identifier (the live one if the live name won), or None.
    """
    best = search_candidate(query, candidates, min_score, sink=sink, workers=workers)
    return best.identifier if best is not None else None


def search_candidate(
    query: str,
    candidates: CandidateSupply,
    min_score: float = DEFAULT_MIN_SCORE,
    sink: Sink | None = None,
    workers: int = 1,
) -> ScoredCandidate | None:
    """Like search(), but returns the scored candidate instead of its id."""
    emit = sink if sink is not None else _discard
    parsed_query = Query.from_text(query)
    records = coerce_records(candidates)

    emit(f"Searching {len(records)} candidates for '{query}'")
    scored = score_candidates(parsed_query, records, workers=workers, short_circuit=True)
    best = select_best_candidate(scored, min_score)

    if best is None:
        top_score = max((c.final_score for c in scored), default=0.0)
        emit(f"No match for '{query}' (best score {top_score:.2f}, threshold {min_score})")
        logger.info(
            f"No match for '{query}' among {len(records)} candidates "
            f"(best score {top_score:.2f}, threshold {min_score})"
        )
        return None

    emit(
        f"Best match: '{best.matched_name}' ({best.identifier!r}) "
        f"score {best.final_score:.2f} via {best.matched_field} name"
    )
    logger.info(
        f"Matched '{query}' → {best.identifier!r} '{best.matched_name}' "
        f"(score={best.final_score:.2f}, field={best.matched_field}, "
        f"scored {len(scored)}/{len(records)})"
    )
    return best


def rank_candidates(
    query: str,
    candidates: CandidateSupply,
    workers: int = 1,
) -> list[ScoredCandidate]:
    """Score every candidate and return them best first (supply order on ties)."""
    records = coerce_records(candidates)
    scored = score_candidates(Query.from_text(query), records, workers=workers)
    return rank(scored)


def score_table(
    query: str,
    candidates: CandidateSupply,
    top: int | None = None,
    workers: int = 1,
) -> pd.DataFrame:
    """
    The full ranking as a DataFrame, one row per candidate, best first.

    Args:
        top: Keep only the first *top* rows. None keeps all.
    """
    ranked = rank_candidates(query, candidates, workers=workers)
    if top is not None:
        ranked = ranked[:top]

    rows = [
        {
            "rank": position,
            "primary_id": candidate.primary_id,
            "secondary_id": candidate.secondary_id,
            "primary_name": candidate.primary_name.raw,
            "secondary_name": (
                candidate.secondary_name.raw if candidate.secondary_name is not None else None
            ),
            "primary_score": round(candidate.primary_score, 2),
            "secondary_score": round(candidate.secondary_score, 2),
            "final_score": round(candidate.final_score, 2),
            "matched_field": candidate.matched_field,
        }
        for position, candidate in enumerate(ranked, start=1)
    ]
    return pd.DataFrame(rows, columns=SCORE_TABLE_COLUMNS)


def coerce_records(candidates: CandidateSupply) -> list[CandidateRecord]:
    """
    Materialize a candidate supply into CandidateRecords, in supply order.

    Rows without a primary id, or that are not 2-4 element tuples, are
    skipped with a warning.
    """
    rows = candidates() if callable(candidates) else candidates
    if rows is None:
        return []

    records: list[CandidateRecord] = []
    for index, row in enumerate(rows):
        record = _to_record(row)
        if record is None:
            logger.warning(f"Skipping malformed candidate row {index}: {row!r}")
            continue
        records.append(record)
    return records


# ═══════════════════════════════════════════════════════════════════════════
# Internal helpers
# ═══════════════════════════════════════════════════════════════════════════

def _to_record(row: CandidateRow) -> CandidateRecord | None:
    if isinstance(row, CandidateRecord):
        record = row
    elif isinstance(row, (tuple, list)) and len(row) == 3:
        # Three fields carry a live name but no live id.
        primary_id, primary_name, secondary_name = row
        record = CandidateRecord(primary_id, primary_name, None, secondary_name)
    elif isinstance(row, (tuple, list)) and len(row) in (2, 4):
        record = CandidateRecord(*row)
    else:
        return None

    if record.primary_id is None:
        return None
    return record


def _discard(message: str) -> None:
    pass
