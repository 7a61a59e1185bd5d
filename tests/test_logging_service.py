"""Tests for the plain-text error log and the YAML staging log."""
import yaml

from media_staging.services.logging_service import ErrorLog, StagingLog


class TestErrorLog:
    def test_appends_reports(self, tmp_path):
        log = ErrorLog(tmp_path / "logs")
        log.write("first failure", "detail")
        log.write("second failure")
        text = log.log_file_path.read_text(encoding="utf-8")
        assert text.index("first failure") < text.index("second failure")
        assert text.count("=" * 50) == 2

    def test_empty_write_creates_nothing(self, tmp_path):
        log = ErrorLog(tmp_path)
        log.write()
        assert not log.log_file_path.exists()

    def test_file_base_path_uses_parent(self, tmp_path):
        existing = tmp_path / "something.txt"
        existing.write_text("x")
        assert ErrorLog(existing).log_dir == tmp_path.resolve()


class TestStagingLog:
    def test_entries_are_indexed(self, tmp_path):
        log = StagingLog(tmp_path)
        log.write({"source": "a.jpg"})
        log.write({"source": "b.mov"})
        entries = yaml.safe_load(log.log_file_path.read_text(encoding="utf-8"))
        assert entries == [{"index": 1, "source": "a.jpg"}, {"index": 2, "source": "b.mov"}]

    def test_continues_existing_log(self, tmp_path):
        StagingLog(tmp_path).write({"source": "a.jpg"})
        log = StagingLog(tmp_path)
        log.write({"source": "b.jpg"})
        assert [e["index"] for e in log.read()] == [1, 2]

    def test_corrupt_log_restarts(self, tmp_path):
        log = StagingLog(tmp_path)
        log.log_file_path.write_text("{not: [valid", encoding="utf-8")
        assert log.read() == []
        log.write({"source": "a.jpg"})
        assert log.read() == [{"index": 1, "source": "a.jpg"}]

    def test_rejects_non_dict(self, tmp_path):
        log = StagingLog(tmp_path)
        log.write(["not", "a", "dict"])
        assert not log.log_file_path.exists()
