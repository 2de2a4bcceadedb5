"""Tests for CSV ingestion."""

from __future__ import annotations

from pathlib import Path

import pytest

from learnlens.core.errors import IngestError
from learnlens.ingest.csv_reader import list_csv_files, parse_bool, read_learner_records


class TestParseBool:
    @pytest.mark.parametrize("value", ["true", "TRUE", " yes ", "y", "1", 1, True])
    def test_true(self, value):
        assert parse_bool(value) is True

    @pytest.mark.parametrize("value", ["false", "0", "no", "", "maybe", 0, None, False])
    def test_false(self, value):
        assert parse_bool(value) is False


class TestReadLearnerRecords:
    def test_groups_rows_by_learner(self, csv_file):
        records = read_learner_records(csv_file)
        assert [r.learner_id for r in records] == ["L1", "L2", "L3"]
        assert [len(r.responses) for r in records] == [2, 2, 1]

    def test_parses_flags(self, csv_file):
        l1, l2, l3 = read_learner_records(csv_file)
        assert l1.responses[1].correct is True
        assert l2.responses[1].correct is True
        assert l2.responses[1].completed is True
        assert l3.responses[0].correct is False
        assert l3.responses[0].completed is False

    def test_ratings(self, csv_file):
        l1, l2, l3 = read_learner_records(csv_file)
        assert [item.rating for item in l1.responses] == [4.0, 5.0]
        assert l2.responses[1].rating is None
        # "not-a-number" is dropped, not fatal
        assert l3.responses[0].rating is None

    def test_header_variants(self, tmp_path):
        path = tmp_path / "export.csv"
        path.write_text(
            "Learner ID,Question ID,Answer,Correct,Completed,Rating,createdAt\n"
            "A-1,q1,B,Yes,Yes,5,2025-02-01T08:00:00Z\n",
            encoding="utf-8",
        )
        (record,) = read_learner_records(path)
        item = record.responses[0]
        assert record.learner_id == "A-1"
        assert item.question_id == "q1"
        assert item.correct is True
        assert item.timestamp == "2025-02-01T08:00:00Z"

    def test_blank_flag_reads_false(self, tmp_path):
        path = tmp_path / "ungraded.csv"
        path.write_text("learner_id,question_id,correct,Completed\nL1,q1,,\n", encoding="utf-8")
        (record,) = read_learner_records(path)
        assert record.responses[0].correct is False
        assert record.responses[0].completed is False

    def test_absent_flag_column_stays_unset(self, tmp_path):
        path = tmp_path / "no_flags.csv"
        path.write_text("learner_id,question_id\nL1,q1\n", encoding="utf-8")
        (record,) = read_learner_records(path)
        assert record.responses[0].correct is None
        assert record.responses[0].completed is None

    def test_byte_order_mark(self, tmp_path):
        path = tmp_path / "bom.csv"
        path.write_bytes("\ufefflearner_id,correct\nL1,true\n".encode("utf-8"))
        (record,) = read_learner_records(path)
        assert record.learner_id == "L1"

    def test_blank_rows_skipped(self, tmp_path):
        path = tmp_path / "blank.csv"
        path.write_text("learner_id,correct\n,\nL1,true\n\n", encoding="utf-8")
        assert len(read_learner_records(path)) == 1

    def test_header_only(self, tmp_path):
        path = tmp_path / "empty.csv"
        path.write_text("learner_id,correct\n", encoding="utf-8")
        assert read_learner_records(path) == []

    def test_missing_file(self, tmp_path):
        with pytest.raises(IngestError, match="Failed to read CSV file") as exc_info:
            read_learner_records(tmp_path / "missing.csv")
        assert exc_info.value.context.metadata["path"].endswith("missing.csv")

    def test_out_of_range_rating(self, tmp_path):
        path = tmp_path / "bad.csv"
        path.write_text("learner_id,rating\nL1,9\n", encoding="utf-8")
        with pytest.raises(IngestError, match="does not match expected format"):
            read_learner_records(path)


class TestListCsvFiles:
    def test_lists_sorted_csv_files(self, tmp_path):
        for name in ("b.csv", "a.csv", "notes.txt"):
            (tmp_path / name).write_text("learner_id\n", encoding="utf-8")
        files = list_csv_files(tmp_path)
        assert [Path(f).name for f in files] == ["a.csv", "b.csv"]
        assert all(Path(f).is_absolute() for f in files)

    def test_creates_missing_directory(self, tmp_path):
        directory = tmp_path / "data"
        assert list_csv_files(directory) == []
        assert directory.is_dir()
