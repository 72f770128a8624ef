"""
Tests for application configuration.
"""
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from portfolio_stats.config import AppConfig


class TestAppConfig:
    """Tests for environment overrides and derived paths."""

    def test_derived_dirs(self, tmp_path):
        cfg = AppConfig(data_dir=tmp_path)
        assert cfg.processed_dir == tmp_path / "processed"
        assert cfg.exports_dir == tmp_path / "exports"

    def test_env_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("DATA_DIR", str(tmp_path))
        monkeypatch.setenv("AT_RISK_LOOKAHEAD_DAYS", "14")
        cfg = AppConfig()
        assert cfg.data_dir == tmp_path
        assert cfg.at_risk_lookahead_days == 14

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("DATA_DIR", raising=False)
        monkeypatch.delenv("CACHE_TTL_SECONDS", raising=False)
        cfg = AppConfig()
        assert cfg.data_dir == Path("./data")
        assert cfg.cache_ttl_seconds == 3600
