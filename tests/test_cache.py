"""Tests for the diskcache-backed analysis cache."""

from errorscope.analysis import AnalysisEngine
from errorscope.cache import AnalysisCache
from errorscope.config import AnalysisConfig

from conftest import make_record, write_tree


class TestAnalysisCache:
    def test_roundtrip(self, tmp_path):
        cache = AnalysisCache(cache_dir=str(tmp_path / "c"), ttl_hours=1)
        record = make_record()
        cache.set("k", [record])
        assert cache.get("k") == [record]
        assert cache.get("missing") is None
        assert cache.stats()["hits"] == 1
        assert cache.stats()["misses"] == 1
        cache.close()

    def test_disabled(self, tmp_path):
        cache = AnalysisCache(cache_dir=str(tmp_path / "c"), enabled=False)
        cache.set("k", [make_record()])
        assert cache.get("k") is None
        assert cache.stats() == {"enabled": False}

    def test_key_changes_with_content(self, tmp_path):
        path = tmp_path / "a.py"
        path.write_text("x = 1\n")
        first = AnalysisCache.file_key(path, "SyntaxAnalyzer", "h")
        path.write_text("x = 12345\n")
        assert AnalysisCache.file_key(path, "SyntaxAnalyzer", "h") != first
        assert AnalysisCache.file_key(path, "RuntimeAnalyzer", "h") != AnalysisCache.file_key(
            path, "SyntaxAnalyzer", "h"
        )

    def test_engine_serves_second_scan_from_cache(self, tmp_path):
        root = write_tree(tmp_path / "p", {"a.py": "try:\n    x()\nexcept:\n    pass\n"})
        config = AnalysisConfig(cache_enabled=True, cache_dir=str(tmp_path / "cache"))
        engine = AnalysisEngine.with_default_analyzers(config)

        first = engine.scan_project(root)
        second = engine.scan_project(root)

        assert {r.id for r in first.records} == {r.id for r in second.records}
        assert engine.cache.hits > 0
        engine.cache.close()
