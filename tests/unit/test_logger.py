"""
Unit tests for logging setup.

Tests cover:
1. Per-subsystem level parsing
2. Simulated-clock stamping
3. File logging and reset
"""

import logging
import pytest

from cricauction.core.timer import VirtualScheduler
from cricauction.utils.logger import AuctionLogger, ClockFilter, get_logger, parse_levels, setup_logging


@pytest.fixture(autouse=True)
def restore_logging():
    yield
    AuctionLogger.reset()


def make_record():
    return logging.LogRecord("cricauction.engine", logging.INFO, __file__, 1, "sold", None, None)


class TestParseLevels:
    """Tests for parse_levels."""

    def test_parses_entries(self):
        """Names map to numeric levels, case-insensitively."""
        assert parse_levels("ai=debug, timer=WARNING") == {"ai": logging.DEBUG, "timer": logging.WARNING}

    def test_empty(self):
        """No spec, no overrides."""
        assert parse_levels(None) == {}
        assert parse_levels("") == {}

    @pytest.mark.parametrize("spec", ["ai", "ai=LOUD", "=DEBUG"])
    def test_invalid(self, spec):
        """Malformed entries raise ValueError."""
        with pytest.raises(ValueError):
            parse_levels(spec)


class TestClockFilter:
    """Tests for ClockFilter."""

    def test_wall_clock(self):
        """Without a bound clock the stamp is a date and time."""
        record = make_record()
        assert ClockFilter().filter(record)
        assert len(record.clock) == len("2024-01-01 00:00:00")

    def test_simulated_clock(self):
        """A bound scheduler clock stamps virtual seconds."""
        scheduler = VirtualScheduler()
        scheduler.advance(25.0)
        clock_filter = ClockFilter()
        clock_filter.clock = scheduler.now
        record = make_record()
        clock_filter.filter(record)
        assert record.clock == "t=   25.0s"


class TestSetup:
    """Tests for AuctionLogger setup and reset."""

    def test_file_log_uses_bound_clock(self, tmp_path):
        """File records carry the simulated time."""
        setup_logging(log_dir=str(tmp_path), log_to_file=True)
        scheduler = VirtualScheduler()
        scheduler.advance(5.0)
        AuctionLogger.bind_clock(scheduler.now)

        get_logger("engine").info("Player 1 sold")
        AuctionLogger.reset()

        text = (tmp_path / "auction.log").read_text()
        assert "t=    5.0s [cricauction.engine] INFO" in text
        assert "Player 1 sold" in text

    def test_subsystem_override_and_reset(self):
        """Overrides apply to one subsystem and are cleared by reset."""
        setup_logging(level=logging.INFO, levels={"ai": logging.DEBUG})
        assert get_logger("ai").isEnabledFor(logging.DEBUG)
        assert not get_logger("engine").isEnabledFor(logging.DEBUG)

        AuctionLogger.reset()
        assert logging.getLogger("cricauction.ai").level == logging.NOTSET
        assert logging.getLogger("cricauction").handlers == []

    def test_setup_once(self):
        """A second setup without reset keeps the first handlers."""
        setup_logging()
        handlers = list(logging.getLogger("cricauction").handlers)
        AuctionLogger.setup(level=logging.DEBUG)
        assert logging.getLogger("cricauction").handlers == handlers


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
