"""
Tests for app.py (command-line entry point)

Covers: exit codes, printed identifier, ranking table, mismatch report and
unreadable files.
"""

from pathlib import Path

import pytest

from app import EXIT_MATCH, EXIT_NO_MATCH, EXIT_READ_ERROR, main


@pytest.fixture
def candidate_file(tmp_path: Path) -> Path:
    path = tmp_path / "candidates.csv"
    path.write_text(
        "primary_id,primary_name,secondary_id,secondary_name\n"
        "0001A696,Housecarl of Whiterun,00013BA1,Lydia\n"
        "00013BBD,Jarl Balgruuf the Greater,,\n"
        "00013BB8,Irileth,00013BB9,Irileth\n",
        encoding="utf-8",
    )
    return path


class TestMain:
    def test_match_prints_identifier(self, candidate_file, capsys):
        assert main(["Lydia", str(candidate_file)]) == EXIT_MATCH
        output = capsys.readouterr().out.splitlines()
        assert output[0] == "Searching 3 candidates for 'Lydia'"
        assert output[-1] == "00013BA1"

    def test_no_match(self, candidate_file, capsys):
        assert main(["xyzzy", str(candidate_file)]) == EXIT_NO_MATCH
        assert capsys.readouterr().out.splitlines()[-1] == "No match"

    def test_min_score_flag(self, candidate_file):
        assert main(["Balgruuf", str(candidate_file), "--min-score", "99"]) == EXIT_NO_MATCH

    def test_top_prints_table(self, candidate_file, capsys):
        main(["Lydia", str(candidate_file), "--top", "2"])
        output = capsys.readouterr().out
        assert "final_score" in output
        assert "Housecarl of Whiterun" in output

    def test_mismatches_listed(self, candidate_file, capsys):
        main(["Lydia", str(candidate_file), "--mismatches"])
        output = capsys.readouterr().out
        assert "1 name mismatch(es):" in output
        assert "base 'Housecarl of Whiterun', live 'Lydia'" in output

    def test_unreadable_file(self, tmp_path, capsys):
        assert main(["Lydia", str(tmp_path / "missing.csv")]) == EXIT_READ_ERROR
        assert "Cannot open file" in capsys.readouterr().err
