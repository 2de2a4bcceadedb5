"""Tests for the in-memory report store."""

from __future__ import annotations

from learnlens.core.reports import ReportStore


class TestReportStore:
    def test_save_and_get(self):
        store = ReportStore()
        store.save("s1", {"sessionId": "s1", "moduleId": "m1", "engagementRate": 0.5})
        assert store.get("s1")["engagementRate"] == 0.5
        assert store.get("missing") is None
        assert len(store) == 1

    def test_get_returns_copy(self):
        store = ReportStore()
        store.save("s1", {"moduleId": "m1"})
        store.get("s1")["moduleId"] = "changed"
        assert store.get("s1")["moduleId"] == "m1"

    def test_by_module_and_all(self):
        store = ReportStore()
        store.save("a", {"moduleId": "m1"})
        store.save("b", {"moduleId": "m2"})
        store.save("c", {"moduleId": "m1"})
        assert [r["moduleId"] for r in store.by_module("m1")] == ["m1", "m1"]
        assert len(store.all()) == 3

    def test_clear(self):
        store = ReportStore()
        store.save("a", {})
        store.clear()
        assert store.all() == []

    def test_contains(self):
        store = ReportStore()
        store.save("s1", {})
        assert "s1" in store
        assert "s2" not in store
