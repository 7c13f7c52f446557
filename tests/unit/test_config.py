"""
Unit tests for league configuration.

Tests cover:
1. Defaults and the classic preset
2. Validation of cross-field constraints
3. Loading from environment and JSON
"""

import json
import os
import pytest
from decimal import Decimal

from cricauction.core.config import AuctionConfig, load_config
from cricauction.core.errors import ConfigError


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Run in an empty directory (no .env) without CRICAUCTION_* variables."""
    monkeypatch.chdir(tmp_path)
    for name in list(os.environ):
        if name.startswith("CRICAUCTION_"):
            monkeypatch.delenv(name)
    return tmp_path


class TestAuctionConfig:
    """Tests for AuctionConfig."""

    def test_defaults(self):
        """Defaults match the standard league."""
        config = AuctionConfig()
        assert config.purse == Decimal("120.00")
        assert config.roster_floor == 18
        assert config.roster_ceiling == 25
        assert config.overseas_ceiling == 8
        assert config.retention_enabled
        assert config.capped_tiers == tuple(Decimal(x) for x in (18, 14, 11, 18, 14))
        assert config.uncapped_price == Decimal("4")

    def test_classic_preset(self):
        """Classic league has a smaller purse and no retention."""
        config = AuctionConfig.classic()
        assert config.purse == Decimal("100.00")
        assert not config.retention_enabled

    def test_rejects_negative_purse(self):
        """Negative purse is invalid."""
        with pytest.raises(ConfigError):
            AuctionConfig(purse=Decimal("-1"))

    def test_rejects_unordered_delays(self):
        """Warnings must come before the auto-sell."""
        with pytest.raises(ConfigError):
            AuctionConfig(final_warning_delay=30.0, auto_sell_delay=25.0)

    def test_rejects_floor_above_ceiling(self):
        """Roster floor cannot exceed the ceiling."""
        with pytest.raises(ConfigError):
            AuctionConfig(roster_floor=30, roster_ceiling=25)

    def test_with_overrides_revalidates(self):
        """Overrides go through validation too."""
        with pytest.raises(ConfigError):
            AuctionConfig().with_overrides(ai_pass_chance=1.5)


class TestLoadConfig:
    """Tests for load_config."""

    def test_defaults_without_sources(self, clean_env):
        """No env, no file: defaults."""
        assert load_config() == AuctionConfig()

    def test_env_overrides(self, clean_env, monkeypatch):
        """CRICAUCTION_* variables override defaults."""
        monkeypatch.setenv("CRICAUCTION_PURSE", "100")
        monkeypatch.setenv("CRICAUCTION_RETENTION_ENABLED", "false")
        monkeypatch.setenv("CRICAUCTION_CAPPED_TIERS", "20,15")

        config = load_config()

        assert config.purse == Decimal("100.00")
        assert not config.retention_enabled
        assert config.capped_tiers == (Decimal("20.00"), Decimal("15.00"))

    def test_dotenv_file(self, clean_env):
        """A .env file in the working directory is honoured."""
        (clean_env / ".env").write_text("CRICAUCTION_ROSTER_FLOOR=15\n")
        try:
            assert load_config().roster_floor == 15
        finally:
            os.environ.pop("CRICAUCTION_ROSTER_FLOOR", None)

    def test_json_file(self, clean_env):
        """JSON file values override defaults."""
        path = clean_env / "league.json"
        path.write_text(json.dumps({"purse": 90, "ai_delay": 1.0}))

        config = load_config(str(path))

        assert config.purse == Decimal("90.00")
        assert config.ai_delay == 1.0

    def test_json_unknown_key(self, clean_env):
        """Unknown keys are rejected."""
        path = clean_env / "league.json"
        path.write_text(json.dumps({"salary_cap": 90}))
        with pytest.raises(ConfigError, match="salary_cap"):
            load_config(str(path))

    def test_invalid_env_value(self, clean_env, monkeypatch):
        """Non-numeric values raise ConfigError."""
        monkeypatch.setenv("CRICAUCTION_ROSTER_FLOOR", "lots")
        with pytest.raises(ConfigError):
            load_config()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
