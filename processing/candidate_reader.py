"""
Candidate supply helpers — load candidate snapshots from files, report
live/base name mismatches and cache a supply between searches.

File format: a .csv or .xlsx table with the columns

    primary_id | primary_name | secondary_id | secondary_name

Headers are matched case-insensitively with surrounding whitespace ignored.
The two secondary columns are optional. All values are read as text so ids
like "0001A0D3" keep their leading zeros. Blank cells become None.

Public API:
    read_candidate_file(file_path) → CandidateReadResult
    find_name_mismatches(records) → list[CandidateRecord]
    CandidateCache(loader)
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable

import pandas as pd

from processing.scorer import CandidateRecord

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: list[str] = ["primary_id", "primary_name"]
OPTIONAL_COLUMNS: list[str] = ["secondary_id", "secondary_name"]

SUPPORTED_EXTENSIONS: set[str] = {".csv", ".xlsx"}


# ═══════════════════════════════════════════════════════════════════════════
# Data classes
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class CandidateReadResult:
    """Complete result of reading one candidate file."""

    records: list[CandidateRecord] = field(default_factory=list)
    total_rows_read: int = 0
    skipped_rows: list[dict] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


# ═══════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════

def read_candidate_file(file_path: Path) -> CandidateReadResult:
    """
    Read candidate snapshots from a .csv or .xlsx file.

    Args:
        file_path: Path to the candidate table.

    Returns:
        CandidateReadResult with the records in file order, rows skipped
        for having no primary_id, and any errors. A file that cannot be
        read yields no records and one error.
    """
    file_path = Path(file_path)
    result = CandidateReadResult()

    extension = file_path.suffix.lower()
    if extension not in SUPPORTED_EXTENSIONS:
        error_message = (
            f"Unsupported candidate file type '{extension}' for '{file_path.name}'. "
            f"Expected one of {sorted(SUPPORTED_EXTENSIONS)}"
        )
        logger.error(error_message)
        result.errors.append(error_message)
        return result

    # ------------------------------------------------------------------
    # 1. Load table
    # ------------------------------------------------------------------
    try:
        if extension == ".csv":
            dataframe = pd.read_csv(file_path, dtype=str, keep_default_na=False)
        else:
            dataframe = pd.read_excel(file_path, dtype=str, keep_default_na=False)
    except Exception as exc:
        error_message = f"Cannot open file '{file_path.name}': {exc}"
        logger.error(error_message)
        result.errors.append(error_message)
        return result

    # ------------------------------------------------------------------
    # 2. Resolve headers
    # ------------------------------------------------------------------
    column_lookup = {str(col).strip().lower(): col for col in dataframe.columns}
    missing = [col for col in REQUIRED_COLUMNS if col not in column_lookup]
    if missing:
        error_message = f"'{file_path.name}' is missing required column(s): {missing}"
        logger.error(error_message)
        result.errors.append(error_message)
        return result

    # ------------------------------------------------------------------
    # 3. Build records
    # ------------------------------------------------------------------
    result.total_rows_read = len(dataframe)
    for row_number, row in enumerate(dataframe.to_dict("records"), start=2):
        values = {
            name: _clean_cell(row.get(column_lookup[name])) if name in column_lookup else None
            for name in REQUIRED_COLUMNS + OPTIONAL_COLUMNS
        }
        if values["primary_id"] is None:
            result.skipped_rows.append({"row": row_number, "reason": "missing primary_id"})
            continue
        result.records.append(CandidateRecord(**values))

    logger.info(
        f"Read {len(result.records)} candidates from '{file_path.name}' "
        f"({len(result.skipped_rows)} rows skipped)"
    )
    return result


def find_name_mismatches(records: Iterable[CandidateRecord]) -> list[CandidateRecord]:
    """
    Records whose live name is present and differs from the base name.

    Comparison is on the raw strings, so a rename that only changes case
    or punctuation still counts.
    """
    mismatches = [
        record
        for record in records
        if record.secondary_name is not None
        and record.secondary_name != record.primary_name
    ]
    logger.debug(f"Found {len(mismatches)} base/live name mismatch(es)")
    return mismatches


class CandidateCache:
    """
    Loads a candidate supply once and hands out the same snapshot until
    invalidate() is called.

    Use it as the *candidates* argument of search(): it is callable.
    """

    def __init__(self, loader: Callable[[], Iterable[CandidateRecord]]):
        self._loader = loader
        self._records: tuple[CandidateRecord, ...] | None = None

    def __call__(self) -> tuple[CandidateRecord, ...]:
        if self._records is None:
            self._records = tuple(self._loader())
            logger.debug(f"Candidate cache loaded {len(self._records)} records")
        return self._records

    @property
    def is_loaded(self) -> bool:
        return self._records is not None

    def invalidate(self) -> None:
        """Drop the snapshot; the next call reloads from the loader."""
        self._records = None


# ═══════════════════════════════════════════════════════════════════════════
# Internal helpers
# ═══════════════════════════════════════════════════════════════════════════

def _clean_cell(value) -> str | None:
    if value is None or pd.isna(value):
        return None
    text = str(value).strip()
    return text or None
