"""
Tests for processing/search.py

Covers: the search entry point on the documented scenarios, candidate
supply forms (tuples, records, callables), malformed rows, the diagnostic
sink, the ranking report and the score table.
"""

import pandas as pd
import pytest

from processing.candidate_reader import CandidateCache
from processing.scorer import CandidateRecord
from processing.search import (
    SCORE_TABLE_COLUMNS,
    coerce_records,
    rank_candidates,
    score_table,
    search,
    search_candidate,
)


_CANDIDATES: list[tuple] = [
    (1, "Lydia"),
    (2, "Housecarl of Whiterun", None, "Lydia"),
    (3, "Jarl Balgruuf the Greater"),
    (4, "Irileth", "live-4", "Irileth"),
]


# ═══════════════════════════════════════════════════════════════════════════
# search
# ═══════════════════════════════════════════════════════════════════════════

class TestSearch:
    def test_live_name_selected(self):
        assert search("Lydia", _CANDIDATES, min_score=50) == 2

    def test_three_field_rows_carry_live_name(self):
        candidates = [(1, "Lydia", None), (2, "Housecarl of Whiterun", "Lydia")]
        assert search("Lydia", candidates, min_score=50) == 2

    def test_live_identifier_returned(self):
        assert search("irileth", _CANDIDATES, min_score=50) == "live-4"

    def test_partial_query_matches(self):
        assert search("Balgruuf", _CANDIDATES, min_score=50) == 3

    def test_unrelated_query_no_match(self):
        assert search("xyzzy", _CANDIDATES, min_score=50) is None

    def test_empty_candidates_no_match(self):
        assert search("Lydia", [], min_score=0) is None

    def test_empty_query_no_match(self):
        assert search("", _CANDIDATES, min_score=50) is None

    def test_empty_query_zero_threshold_returns_first(self):
        assert search("", _CANDIDATES, min_score=0) == 1

    def test_none_supply_no_match(self):
        assert search("Lydia", lambda: None) is None

    def test_exact_tie_first_supplied_wins(self):
        candidates = [("a", "Nazeem"), ("b", "Nazeem")]
        assert search("Nazeem", candidates) == "a"
        assert search("Nazeem", list(reversed(candidates))) == "b"

    def test_callable_supply(self):
        assert search("Lydia", lambda: iter(_CANDIDATES)) == 2

    def test_generator_supply(self):
        assert search("Lydia", (row for row in _CANDIDATES)) == 2

    def test_cached_supply_reflects_invalidation(self):
        names = {"value": "Lydia"}
        cache = CandidateCache(lambda: [CandidateRecord(1, "Base", "live-1", names["value"])])
        assert search("Lydia", cache) == "live-1"

        names["value"] = "Mjoll the Lioness"
        assert search("Mjoll", cache) != "live-1"
        cache.invalidate()
        assert search("Mjoll", cache) == "live-1"

    def test_parallel_workers_same_result(self):
        assert search("Lydia", _CANDIDATES, workers=4) == 2

    def test_search_candidate_returns_scores(self):
        best = search_candidate("Lydia", _CANDIDATES)
        assert best.primary_id == 2
        assert best.final_score == pytest.approx(101.0)
        assert best.matched_field == "secondary"


# ═══════════════════════════════════════════════════════════════════════════
# Diagnostic sink
# ═══════════════════════════════════════════════════════════════════════════

class TestSink:
    def test_messages_emitted_on_match(self):
        messages: list[str] = []
        search("Lydia", _CANDIDATES, sink=messages.append)
        assert messages[0] == "Searching 4 candidates for 'Lydia'"
        assert "Best match: 'Lydia'" in messages[-1]
        assert "101.00" in messages[-1]

    def test_messages_emitted_on_no_match(self):
        messages: list[str] = []
        search("xyzzy", _CANDIDATES, sink=messages.append)
        assert messages[-1].startswith("No match for 'xyzzy'")

    def test_sink_does_not_change_result(self):
        with_sink = search("Balgruuf", _CANDIDATES, sink=lambda message: None)
        without_sink = search("Balgruuf", _CANDIDATES)
        assert with_sink == without_sink


# ═══════════════════════════════════════════════════════════════════════════
# Candidate supply coercion
# ═══════════════════════════════════════════════════════════════════════════

class TestCoerceRecords:
    def test_tuples_padded(self):
        records = coerce_records([(1, "Lydia")])
        assert records == [CandidateRecord(1, "Lydia", None, None)]

    def test_records_passed_through(self):
        record = CandidateRecord(1, "Lydia", "live-1", "Lydia")
        assert coerce_records([record]) == [record]

    def test_malformed_rows_skipped(self, caplog):
        records = coerce_records([(1, "Lydia"), "Nazeem", (2,), (None, "Ghost"), (3, "Irileth")])
        assert [r.primary_id for r in records] == [1, 3]
        assert "Skipping malformed candidate row" in caplog.text

    def test_three_field_row_is_live_name_without_id(self):
        records = coerce_records([(2, "Housecarl of Whiterun", "Lydia")])
        assert records == [CandidateRecord(2, "Housecarl of Whiterun", None, "Lydia")]

    def test_three_field_row_with_no_live_name(self):
        assert coerce_records([(1, "Lydia", None)]) == [CandidateRecord(1, "Lydia")]

    def test_five_field_row_skipped(self):
        assert coerce_records([(1, "Lydia", None, None, "extra")]) == []

    def test_lists_accepted(self):
        assert coerce_records([[1, "Lydia"]])[0].primary_name == "Lydia"


# ═══════════════════════════════════════════════════════════════════════════
# Ranking report
# ═══════════════════════════════════════════════════════════════════════════

class TestRankCandidates:
    def test_all_candidates_ranked(self):
        ranked = rank_candidates("Lydia", _CANDIDATES)
        assert len(ranked) == 4
        assert [c.primary_id for c in ranked[:2]] == [2, 1]

    def test_scores_descending(self):
        scores = [c.final_score for c in rank_candidates("Jarl", _CANDIDATES)]
        assert scores == sorted(scores, reverse=True)


class TestScoreTable:
    def test_columns_and_rows(self):
        table = score_table("Lydia", _CANDIDATES)
        assert list(table.columns) == SCORE_TABLE_COLUMNS
        assert len(table) == 4
        assert table["rank"].tolist() == [1, 2, 3, 4]

    def test_top_limits_rows(self):
        table = score_table("Lydia", _CANDIDATES, top=2)
        assert table["primary_id"].tolist() == [2, 1]
        assert table.iloc[0]["matched_field"] == "secondary"
        assert table.iloc[0]["final_score"] == 101.0
        assert pd.isna(table.iloc[1]["secondary_name"])

    def test_empty_supply(self):
        table = score_table("Lydia", [])
        assert table.empty
        assert list(table.columns) == SCORE_TABLE_COLUMNS
