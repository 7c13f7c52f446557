"""
Unit tests for retention pricing and selection.

Tests cover:
1. Positional tier pricing and repricing on deselect
2. Total, capped and uncapped limits
3. Confirmation and server-side resolution
"""

import pytest
from decimal import Decimal

from cricauction.core.catalog import Player, Role
from cricauction.core.config import AuctionConfig
from cricauction.core.errors import RuleViolation
from cricauction.core.retention import (
    RetentionSelection,
    check_limits,
    resolve_retention,
    retention_prices,
)


# =============================================================================
# Fixtures
# =============================================================================


def make_player(player_id, capped=True):
    return Player(
        id=player_id,
        name=f"Player {player_id}",
        role=Role.BATSMAN,
        nationality="Indian",
        base_price=Decimal("1.00"),
        rating=80,
        is_capped=capped,
    )


@pytest.fixture
def config():
    return AuctionConfig()


@pytest.fixture
def pool():
    """Players 1-7 capped, 8-10 uncapped."""
    return [make_player(i, capped=i <= 7) for i in range(1, 11)]


@pytest.fixture
def selection(pool, config):
    return RetentionSelection(team_id=8, pool=pool, config=config)


# =============================================================================
# Pricing
# =============================================================================


class TestRetentionPrices:
    """Tests for positional pricing."""

    def test_capped_tiers_in_order(self, pool, config):
        """Five capped picks pay 18, 14, 11, 18, 14."""
        prices = retention_prices(pool[:5], config)
        assert [prices[i] for i in range(1, 6)] == [Decimal(x) for x in (18, 14, 11, 18, 14)]
        assert sum(prices.values()) == Decimal("75")

    def test_total_independent_of_player(self, pool, config):
        """Which capped players are picked does not change the total."""
        a = retention_prices([pool[4], pool[0], pool[6], pool[2], pool[1]], config)
        b = retention_prices(pool[:5], config)
        assert sum(a.values()) == sum(b.values()) == Decimal("75")

    def test_uncapped_flat(self, pool, config):
        """Uncapped picks pay the flat price and do not consume a tier."""
        prices = retention_prices([pool[7], pool[0], pool[8], pool[1]], config)
        assert prices[8] == prices[9] == Decimal("4")
        assert prices[1] == Decimal("18")
        assert prices[2] == Decimal("14")

    def test_last_tier_repeats(self, pool):
        """More capped picks than tiers reuse the last tier."""
        config = AuctionConfig(
            capped_tiers=(Decimal("10"), Decimal("5")), retention_max_capped=4, retention_max_total=4
        )
        prices = retention_prices(pool[:4], config)
        assert [prices[i] for i in range(1, 5)] == [Decimal(x) for x in (10, 5, 5, 5)]


class TestCheckLimits:
    """Tests for check_limits."""

    def test_total_limit_first(self, pool, config):
        """Seven players break the total limit before the capped one."""
        with pytest.raises(RuleViolation, match="6 players total"):
            check_limits(pool[:7], config)

    def test_capped_limit(self, pool, config):
        """Six capped players break the capped limit."""
        with pytest.raises(RuleViolation, match="5 capped"):
            check_limits(pool[:6], config)

    def test_uncapped_limit(self, pool, config):
        """Three uncapped players break the uncapped limit."""
        with pytest.raises(RuleViolation, match="2 uncapped"):
            check_limits(pool[7:10], config)


# =============================================================================
# Selection
# =============================================================================


class TestRetentionSelection:
    """Tests for interactive selection."""

    def test_toggle_adds_and_removes(self, selection):
        """Toggling twice leaves the selection empty."""
        assert selection.toggle(1) == (True, "")
        assert selection.is_selected(1)
        assert selection.toggle(1) == (True, "")
        assert selection.selected_ids == ()

    def test_unknown_player(self, selection):
        """Players outside the pool cannot be toggled."""
        ok, err = selection.toggle(99)
        assert not ok
        assert "not eligible" in err

    def test_seventh_pick_rejected(self, selection):
        """After six picks a seventh is rejected without mutation."""
        for pid in (1, 2, 3, 4, 5, 8):
            assert selection.toggle(pid)[0]
        ok, err = selection.toggle(9)
        assert not ok
        assert err == "You can retain only 6 players total!"
        assert len(selection.selected_ids) == 6

    def test_third_uncapped_rejected(self, selection):
        """A third uncapped pick is rejected."""
        selection.toggle(8)
        selection.toggle(9)
        ok, err = selection.toggle(10)
        assert not ok
        assert err == "You can retain only 2 uncapped players!"
        assert selection.counts() == (0, 2)

    def test_sixth_capped_rejected(self, selection):
        """A sixth capped pick is rejected."""
        for pid in range(1, 6):
            selection.toggle(pid)
        ok, err = selection.toggle(6)
        assert not ok
        assert err == "You can retain only 5 capped players!"

    def test_violation_callback(self, pool, config):
        """Rejected toggles are reported to the callback."""
        messages = []
        selection = RetentionSelection(8, pool, config, on_violation=messages.append)
        for pid in (8, 9, 10):
            selection.toggle(pid)
        assert messages == ["You can retain only 2 uncapped players!"]

    def test_deselect_reprices(self, selection):
        """Removing the first capped pick moves the others up a tier."""
        for pid in (1, 2, 3):
            selection.toggle(pid)
        assert selection.prices[3] == Decimal("11")

        selection.toggle(1)

        assert selection.prices == {2: Decimal("18"), 3: Decimal("14")}
        assert selection.total_cost == Decimal("32")

    def test_available_funds(self, selection, config):
        """Funds are the purse less the current retention cost."""
        selection.toggle(1)
        selection.toggle(8)
        assert selection.available_funds == config.purse - Decimal("22")

    def test_confirm_empty(self, selection):
        """Confirming nothing is a rule violation."""
        with pytest.raises(RuleViolation, match="at least one"):
            selection.confirm()

    def test_confirm(self, selection):
        """Confirm returns ids in pick order with their prices."""
        selection.toggle(9)
        selection.toggle(2)
        ids, prices = selection.confirm()
        assert ids == (9, 2)
        assert prices == {9: Decimal("4"), 2: Decimal("18")}

    def test_clear(self, selection):
        """Clear drops every pick."""
        selection.toggle(1)
        selection.clear()
        assert selection.total_cost == Decimal("0")


# =============================================================================
# Resolution
# =============================================================================


class TestResolveRetention:
    """Tests for resolve_retention."""

    def test_resolves_with_prices(self, pool, config):
        """Matching prices resolve to (player, price) pairs."""
        result = resolve_retention(pool, [1, 8], {1: Decimal("18"), 8: Decimal("4")}, config, config.purse)
        assert [(p.id, price) for p, price in result] == [(1, Decimal("18")), (8, Decimal("4"))]

    def test_price_mismatch(self, pool, config):
        """Tampered prices are rejected."""
        with pytest.raises(RuleViolation, match="must be 18"):
            resolve_retention(pool, [1], {1: Decimal("1")}, config, config.purse)

    def test_garbage_price(self, pool, config):
        """Non-numeric prices are a mismatch, not a crash."""
        with pytest.raises(RuleViolation):
            resolve_retention(pool, [1], {1: "free"}, config, config.purse)

    def test_unknown_player(self, pool, config):
        """Players outside the pool are rejected."""
        with pytest.raises(RuleViolation, match="not eligible"):
            resolve_retention(pool, [42], {42: Decimal("4")}, config, config.purse)

    def test_over_budget(self, pool, config):
        """Retention cannot exceed the budget."""
        with pytest.raises(RuleViolation, match="exceeds budget"):
            resolve_retention(pool, [1, 2], {1: 18, 2: 14}, config, Decimal("20"))

    def test_limits_enforced(self, pool, config):
        """Limits are re-checked on resolution."""
        prices = {8: 4, 9: 4, 10: 4}
        with pytest.raises(RuleViolation, match="uncapped"):
            resolve_retention(pool, [8, 9, 10], prices, config, config.purse)

    def test_empty(self, pool, config):
        """Empty selections are rejected."""
        with pytest.raises(RuleViolation):
            resolve_retention(pool, [], {}, config, config.purse)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
