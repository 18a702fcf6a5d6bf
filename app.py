"""
Command-line entry point — fuzzy name search over a candidate file.

    python app.py "lydia" candidates.csv --min-score 60 --top 5 --mismatches

Reads the candidate table, runs the search with diagnostics printed to
stdout, and prints the winning identifier (or "No match").

Exit status: 0 on a match, 1 on no match, 2 when the file cannot be read.

Contains NO matching logic — only calls processing modules and prints results.
"""

import argparse
import logging
import sys
from pathlib import Path

from config.scoring import DEFAULT_MIN_SCORE
from processing.candidate_reader import find_name_mismatches, read_candidate_file
from processing.search import score_table, search

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(levelname).1s | %(name)s | %(message)s"

EXIT_MATCH = 0
EXIT_NO_MATCH = 1
EXIT_READ_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Fuzzy name search over a candidate table")
    parser.add_argument("query", help="Free-text name to search for")
    parser.add_argument("candidates", type=Path, help="Candidate table (.csv or .xlsx)")
    parser.add_argument(
        "--min-score",
        type=float,
        default=DEFAULT_MIN_SCORE,
        help=f"Minimum final score for a match (default {DEFAULT_MIN_SCORE})",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Threads used for scoring (default 1)",
    )
    parser.add_argument(
        "--top",
        type=int,
        default=0,
        help="Also print the top N ranked candidates",
    )
    parser.add_argument(
        "--mismatches",
        action="store_true",
        help="Also list candidates whose live name differs from the base name",
    )
    parser.add_argument("--log-level", default="WARNING", help="Python logging level")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format=LOG_FORMAT)

    read_result = read_candidate_file(args.candidates)
    if read_result.errors:
        for error in read_result.errors:
            print(f"Error: {error}", file=sys.stderr)
        return EXIT_READ_ERROR

    records = read_result.records

    if args.mismatches:
        mismatches = find_name_mismatches(records)
        print(f"{len(mismatches)} name mismatch(es):")
        for index, record in enumerate(mismatches):
            print(
                f"  [{index}] {record.secondary_id or record.primary_id}: "
                f"base '{record.primary_name}', live '{record.secondary_name}'"
            )

    if args.top > 0:
        table = score_table(args.query, records, top=args.top, workers=args.workers)
        print(table.to_string(index=False))

    identifier = search(
        args.query,
        records,
        min_score=args.min_score,
        sink=print,
        workers=args.workers,
    )
    if identifier is None:
        print("No match")
        return EXIT_NO_MATCH

    print(identifier)
    return EXIT_MATCH


if __name__ == "__main__":
    sys.exit(main())
