"""
Unit tests for the bid increment ladder.

Tests cover:
1. Increment at every ladder boundary
2. Next-bid rounding
3. Non-Decimal input
"""

import pytest
from decimal import Decimal

from cricauction.core.auction import bid_increment, next_bid


class TestBidIncrement:
    """Tests for the stepped increment."""

    @pytest.mark.parametrize(
        "current, expected",
        [
            ("0.50", "0.05"),
            ("0.99", "0.05"),
            ("1.00", "0.10"),
            ("1.99", "0.10"),
            ("2.00", "0.20"),
            ("7.40", "0.20"),
        ],
    )
    def test_boundaries(self, current, expected):
        """Increment switches exactly at 1 and 2."""
        assert bid_increment(Decimal(current)) == Decimal(expected)

    def test_zero_bid(self):
        """A zero bid raises by the smallest step."""
        assert bid_increment(Decimal("0")) == Decimal("0.05")

    def test_float_input(self):
        """Floats are converted without binary noise."""
        assert bid_increment(1.1) == Decimal("0.10")


class TestNextBid:
    """Tests for next_bid."""

    def test_crosses_first_boundary(self):
        """0.95 + 0.05 lands exactly on 1.00."""
        assert next_bid(Decimal("0.95")) == Decimal("1.00")

    def test_crosses_second_boundary(self):
        """1.95 raises by 0.10, not 0.20."""
        assert next_bid(Decimal("1.95")) == Decimal("2.05")

    def test_top_step(self):
        """From 2.00 upward the step is 0.20."""
        assert next_bid(Decimal("2.00")) == Decimal("2.20")

    def test_two_places(self):
        """Result is always quantized to two places."""
        assert next_bid("1.5").as_tuple().exponent == -2


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
