"""Tests for batch caption parsing"""
import json
from unittest.mock import patch

from batch_parse import parse_caption_file, run_batch
from failure_logger import FAILURES_DIR_NAME


GOOD_CAPTION = (
    "Easy weeknight pasta\n8 oz spaghetti\n2 tbsp butter\n3 cloves garlic\n"
    "Boil the pasta until tender.\nMelt the butter and toss everything together."
)


class TestParseCaptionFile:
    """Tests for parse_caption_file function"""

    def test_writes_json(self, tmp_path):
        """A parsed caption is written next to it as JSON"""
        caption = tmp_path / "pasta.txt"
        caption.write_text(GOOD_CAPTION, encoding="utf-8")

        result = parse_caption_file(caption, tmp_path)

        assert result["success"] is True
        data = json.loads((tmp_path / "pasta.json").read_text(encoding="utf-8"))
        assert data["ingredients"] == ["8 oz spaghetti", "2 tbsp butter", "3 cloves garlic"]

    def test_dry_run(self, tmp_path):
        """Dry run parses without writing"""
        caption = tmp_path / "pasta.txt"
        caption.write_text(GOOD_CAPTION, encoding="utf-8")

        result = parse_caption_file(caption, tmp_path, dry_run=True)

        assert result["success"] is True
        assert not (tmp_path / "pasta.json").exists()

    def test_empty_caption(self, tmp_path):
        """An empty caption is a failure"""
        caption = tmp_path / "empty.txt"
        caption.write_text("  \n", encoding="utf-8")

        result = parse_caption_file(caption, tmp_path)

        assert result["success"] is False
        assert result["error"] == "Empty caption"

    def test_undecodable_file(self, tmp_path):
        """A file that is not UTF-8 is a parsing failure"""
        caption = tmp_path / "binary.txt"
        caption.write_bytes(b"\xff\xfe\x00bad")

        result = parse_caption_file(caption, tmp_path)

        assert result["success"] is False
        assert result["_error_category"] == "parsing"


class TestRunBatch:
    """Tests for run_batch function"""

    def test_mixed_batch(self, tmp_path):
        """Good, low-confidence and empty captions are sorted and logged"""
        captions = tmp_path / "captions"
        captions.mkdir()
        (captions / "pasta.txt").write_text(GOOD_CAPTION, encoding="utf-8")
        (captions / "vibes.txt").write_text("Just vibes today", encoding="utf-8")
        (captions / "empty.txt").write_text("", encoding="utf-8")
        (captions / "notes.md").write_text("ignored", encoding="utf-8")

        summary = run_batch(captions, project_root=tmp_path)

        assert summary["total"] == 3
        assert summary["succeeded"] == ["pasta.txt", "vibes.txt"]
        assert [f["file"] for f in summary["low_confidence"]] == ["vibes.txt"]
        assert [f["file"] for f in summary["failed"]] == ["empty.txt"]
        assert summary["failed"][0]["error_category"] == "empty"
        assert (captions / "pasta.json").exists()

        log = json.loads(summary["failure_log"].read_text(encoding="utf-8"))
        assert summary["failure_log"].parent == tmp_path / FAILURES_DIR_NAME
        assert log["total_processed"] == 3
        assert log["total_failed"] == 2

    def test_output_dir(self, tmp_path):
        """Results go to the output directory when given"""
        captions = tmp_path / "captions"
        captions.mkdir()
        (captions / "pasta.txt").write_text(GOOD_CAPTION, encoding="utf-8")
        out = tmp_path / "out"

        run_batch(captions, output_dir=out, project_root=tmp_path)

        assert (out / "pasta.json").exists()
        assert not (captions / "pasta.json").exists()

    def test_clean_batch_writes_no_log(self, tmp_path):
        """No failure log is written when every caption parses well"""
        captions = tmp_path / "captions"
        captions.mkdir()
        (captions / "pasta.txt").write_text(GOOD_CAPTION, encoding="utf-8")

        summary = run_batch(captions, project_root=tmp_path)

        assert summary["failure_log"] is None
        assert not (tmp_path / FAILURES_DIR_NAME).exists()

    def test_dry_run_writes_nothing(self, tmp_path):
        """Dry run writes neither results nor logs"""
        captions = tmp_path / "captions"
        captions.mkdir()
        (captions / "vibes.txt").write_text("Just vibes today", encoding="utf-8")

        summary = run_batch(captions, dry_run=True, project_root=tmp_path)

        assert summary["failure_log"] is None
        assert not (captions / "vibes.json").exists()

    def test_parser_crash_is_logged(self, tmp_path):
        """An exception inside the parser is recorded with its category"""
        captions = tmp_path / "captions"
        captions.mkdir()
        (captions / "pasta.txt").write_text(GOOD_CAPTION, encoding="utf-8")

        with patch('batch_parse.parse_social_caption', side_effect=ValueError("bad caption")):
            summary = run_batch(captions, project_root=tmp_path)

        assert summary["failed"][0]["error"] == "bad caption"
        assert summary["failed"][0]["error_category"] == "parsing"
        assert "ValueError" in summary["failed"][0]["traceback"]
