"""
Ranker / selector — scores every supplied candidate, orders them and picks
the single best one above a threshold.

Ordering is a stable sort on final score, descending: among equal scores
the candidate supplied first wins. Scoring can be fanned out over a thread
pool; the outcome is the same as the sequential scan.

Once a candidate reaches the highest attainable score no later candidate
can beat it, so the scan may stop there (short_circuit=True). Candidates
supplied before it are always scored, since one of them could tie and win
on supply order.

Public API:
    score_candidates(query, records, workers, short_circuit) → list[ScoredCandidate]
    rank(candidates) → list[ScoredCandidate]
    select_best_candidate(candidates, min_score) → ScoredCandidate | None
    select_best(candidates, min_score) → identifier | None
"""

import logging
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Hashable, Sequence

from config.scoring import (
    PARALLEL_MIN_CANDIDATES,
    PRIMARY_SCORE_CEILING,
    SECONDARY_SCORE_CEILING,
)
from processing.scorer import CandidateRecord, Query, ScoredCandidate, build_candidate

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════

def score_candidates(
    query: Query,
    records: Sequence[CandidateRecord],
    workers: int = 1,
    short_circuit: bool = False,
) -> list[ScoredCandidate]:
    """
    Score *records* against *query*.

    Args:
        query: Normalized search input.
        records: Candidate snapshots in supply order.
        workers: Thread count. 1 scans sequentially; larger values use a
                 pool once there are at least PARALLEL_MIN_CANDIDATES records.
        short_circuit: Stop scoring records that come after a candidate
                       at the highest attainable score.

    Returns:
        Scored candidates in supply order. With short_circuit, records that
        were never scored are absent.

    Raises:
        ValueError: if workers < 1.
    """
    if workers < 1:
        raise ValueError(f"workers must be at least 1, got {workers}")

    ceiling = _attainable_ceiling(records) if short_circuit else None

    if workers == 1 or len(records) < PARALLEL_MIN_CANDIDATES:
        return _score_sequential(query, records, ceiling)
    return _score_parallel(query, records, workers, ceiling)


def rank(candidates: Sequence[ScoredCandidate]) -> list[ScoredCandidate]:
    """Stable sort by final score, descending; supply order breaks ties."""
    return sorted(candidates, key=lambda candidate: -candidate.final_score)


def select_best_candidate(
    candidates: Sequence[ScoredCandidate],
    min_score: float,
) -> ScoredCandidate | None:
    """
    Return the top-ranked candidate, or None if there are none or the top
    final score is below *min_score*.
    """
    ranked = rank(candidates)
    if not ranked:
        logger.debug("No candidates to select from")
        return None

    best = ranked[0]
    if best.final_score < min_score:
        logger.debug(
            f"Best candidate {best.primary_id!r} scored {best.final_score:.2f}, "
            f"below threshold {min_score}"
        )
        return None
    return best


def select_best(
    candidates: Sequence[ScoredCandidate],
    min_score: float,
) -> Hashable | None:
    """
    Identifier of the best candidate above *min_score*, or None.

    The live (secondary) identifier is returned when the secondary name won.
    """
    best = select_best_candidate(candidates, min_score)
    return best.identifier if best is not None else None


# ═══════════════════════════════════════════════════════════════════════════
# Internal helpers
# ═══════════════════════════════════════════════════════════════════════════

def _attainable_ceiling(records: Sequence[CandidateRecord]) -> float:
    """Highest final score any record could reach."""
    if any(record.secondary_name is not None for record in records):
        return SECONDARY_SCORE_CEILING
    return PRIMARY_SCORE_CEILING


def _score_sequential(
    query: Query,
    records: Sequence[CandidateRecord],
    ceiling: float | None,
) -> list[ScoredCandidate]:
    scored: list[ScoredCandidate] = []
    for index, record in enumerate(records):
        candidate = build_candidate(record, query, supply_index=index)
        scored.append(candidate)
        if ceiling is not None and candidate.final_score >= ceiling:
            logger.debug(
                f"Candidate {record.primary_id!r} hit score {ceiling}; "
                f"skipping {len(records) - index - 1} remaining"
            )
            break
    return scored


def _score_chunk(
    query: Query,
    records: Sequence[CandidateRecord],
    offset: int,
) -> list[ScoredCandidate]:
    return [
        build_candidate(record, query, supply_index=offset + position)
        for position, record in enumerate(records)
    ]


def _score_parallel(
    query: Query,
    records: Sequence[CandidateRecord],
    workers: int,
    ceiling: float | None,
) -> list[ScoredCandidate]:
    """
    Score contiguous chunks on a thread pool.

    When a chunk contains a candidate at *ceiling*, chunks after it that
    have not started yet are cancelled. Chunks before it always finish.
    """
    chunk_size = max(1, -(-len(records) // (workers * 4)))
    offsets = range(0, len(records), chunk_size)

    results: dict[int, list[ScoredCandidate]] = {}
    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures: dict[Future, int] = {
            executor.submit(
                _score_chunk, query, records[offset:offset + chunk_size], offset
            ): offset
            for offset in offsets
        }
        pending = set(futures)
        stop_offset: int | None = None

        while pending:
            done, pending = wait(pending, return_when=FIRST_COMPLETED)
            for future in done:
                if future.cancelled():
                    continue
                offset = futures[future]
                chunk = future.result()
                results[offset] = chunk
                if ceiling is not None and any(c.final_score >= ceiling for c in chunk):
                    if stop_offset is None or offset < stop_offset:
                        stop_offset = offset

            if stop_offset is not None:
                for future in list(pending):
                    if futures[future] > stop_offset and future.cancel():
                        pending.discard(future)

    if stop_offset is not None:
        cancelled = len(futures) - len(results)
        logger.debug(f"Cancelled {cancelled} chunk(s) after a top score at offset {stop_offset}")

    return [candidate for offset in sorted(results) for candidate in results[offset]]
