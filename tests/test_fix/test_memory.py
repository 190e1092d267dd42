"""Tests for the persisted rejection memory."""

from __future__ import annotations

import json
from pathlib import Path

from literal_hell.core.models import create_fix_key
from literal_hell.fix.memory import RejectionMemory


class TestRejectionMemory:
    def test_missing_store_is_empty(self, memory: RejectionMemory):
        memory.load()
        assert len(memory) == 0

    def test_reject_and_save(self, memory: RejectionMemory):
        """Declined fixes are written as camelCase records keyed by location."""
        memory.reject("src/App.tsx", 12, 8, "Don't")
        assert memory.save() is True

        data = json.loads(memory.path.read_text(encoding="utf-8"))
        key = "src/App.tsx:12:8:Don't"
        assert list(data) == [key]
        record = data[key]
        assert record["filePath"] == "src/App.tsx"
        assert record["line"] == 12
        assert record["column"] == 8
        assert record["original"] == "Don't"
        assert "timestamp" in record
        assert "reason" not in record
        assert "autoSkipped" not in record

    def test_auto_skipped_record_fields(self, memory: RejectionMemory):
        memory.reject("a.js", 1, 0, "&:hover", reason="CSS pseudo-selector", auto_skipped=True)
        memory.save()

        record = json.loads(memory.path.read_text(encoding="utf-8"))["a.js:1:0:&:hover"]
        assert record["reason"] == "CSS pseudo-selector"
        assert record["autoSkipped"] is True

    def test_survives_reload(self, memory: RejectionMemory):
        memory.reject("a.js", 3, 4, 'say "hi"')
        memory.reject("b.js", 1, 0, "&", reason="Operator or bare ampersand", auto_skipped=True)
        memory.save()

        reloaded = RejectionMemory(memory.path)
        reloaded.load()

        assert len(reloaded) == 2
        assert create_fix_key("a.js", 3, 4, 'say "hi"') in reloaded
        record = reloaded.get("b.js:1:0:&")
        assert record is not None
        assert record.auto_skipped is True
        assert record.reason == "Operator or bare ampersand"

    def test_non_ascii_text_is_kept_readable(self, memory: RejectionMemory):
        memory.reject("a.js", 1, 0, "Café's")
        memory.save()
        assert "Café's" in memory.path.read_text(encoding="utf-8")

    def test_corrupt_store_resets(self, memory: RejectionMemory):
        memory.path.write_text("{not json", encoding="utf-8")
        memory.reject("a.js", 1, 0, "x'")

        memory.load()

        assert len(memory) == 0

    def test_non_object_store_resets(self, memory: RejectionMemory):
        memory.path.write_text("[1, 2, 3]", encoding="utf-8")
        memory.load()
        assert len(memory) == 0

    def test_record_missing_fields_resets(self, memory: RejectionMemory):
        memory.path.write_text(json.dumps({"k": {"line": 1}}), encoding="utf-8")
        memory.load()
        assert len(memory) == 0

    def test_save_failure_returns_false(self, tmp_path: Path):
        memory = RejectionMemory(tmp_path / "missing-dir" / ".literal-hell-wards")
        memory.reject("a.js", 1, 0, "x'")
        assert memory.save() is False

    def test_clear_removes_store(self, memory: RejectionMemory):
        memory.reject("a.js", 1, 0, "x'")
        memory.save()

        memory.clear()

        assert not memory.path.exists()
        assert len(memory) == 0

    def test_clear_without_store(self, memory: RejectionMemory):
        memory.clear()
        assert len(memory) == 0

    def test_is_rejected(self, memory: RejectionMemory):
        declined = memory.reject("a.js", 1, 0, "it's").key
        skipped = memory.reject("a.js", 2, 0, "&", auto_skipped=True).key

        assert memory.is_rejected(declined)
        assert memory.is_rejected(skipped)
        assert memory.is_rejected(declined, include_auto_skipped=False)
        assert not memory.is_rejected(skipped, include_auto_skipped=False)
        assert not memory.is_rejected("a.js:9:9:nothing")
