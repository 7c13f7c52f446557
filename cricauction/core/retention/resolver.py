"""
Retention Resolver - pre-auction retention of previously held players.

The human team may keep up to 6 of last season's players, at most 5 capped
and at most 2 uncapped. Prices are positional, not per player:
- the n-th capped pick pays the n-th capped tier (18, 14, 11, 18, 14),
  repeating the last tier if there are more capped picks than tiers
- every uncapped pick pays the flat uncapped price (4)

Prices are recomputed from scratch on every toggle by replaying the
selection in insertion order, so deselecting an early capped pick moves
every later capped pick up a tier.
"""

from decimal import Decimal
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from cricauction.core.catalog import Player
from cricauction.core.config import AuctionConfig
from cricauction.core.errors import RuleViolation
from cricauction.utils.logger import get_logger
from cricauction.utils.validation import to_money

logger = get_logger("retention")


def retention_prices(selection: Sequence[Player], config: AuctionConfig) -> Dict[int, Decimal]:
    """
    Price every selected player by replaying the selection in order.

    Args:
        selection: Selected players, in the order they were picked
        config: League configuration (tiers and uncapped price)

    Returns:
        player_id -> retention price
    """
    prices: Dict[int, Decimal] = {}
    tiers = config.capped_tiers
    capped_index = 0

    for player in selection:
        if player.is_capped:
            prices[player.id] = tiers[min(capped_index, len(tiers) - 1)]
            capped_index += 1
        else:
            prices[player.id] = config.uncapped_price

    return prices


def check_limits(selection: Sequence[Player], config: AuctionConfig) -> None:
    """
    Raise RuleViolation if ``selection`` breaks a retention limit.

    The total limit is checked first, then the capped, then the uncapped one.
    """
    capped = sum(1 for p in selection if p.is_capped)
    uncapped = len(selection) - capped

    if len(selection) > config.retention_max_total:
        raise RuleViolation(f"You can retain only {config.retention_max_total} players total!")
    if capped > config.retention_max_capped:
        raise RuleViolation(f"You can retain only {config.retention_max_capped} capped players!")
    if uncapped > config.retention_max_uncapped:
        raise RuleViolation(f"You can retain only {config.retention_max_uncapped} uncapped players!")


class RetentionSelection:
    """
    Interactive retention selection for one team.

    Toggling a player either adds it at the end of the selection or removes
    it. Additions that would break a limit are rejected without mutation.
    """

    def __init__(
        self,
        team_id: int,
        pool: Sequence[Player],
        config: Optional[AuctionConfig] = None,
        on_violation: Optional[Callable[[str], None]] = None,
    ):
        self.team_id = team_id
        self.config = config or AuctionConfig()
        self.pool: Tuple[Player, ...] = tuple(pool)
        self._by_id = {p.id: p for p in self.pool}
        self._selected: List[int] = []
        self._on_violation = on_violation

    # =========================================================================
    # Selection
    # =========================================================================

    @property
    def selected_ids(self) -> Tuple[int, ...]:
        return tuple(self._selected)

    @property
    def selected_players(self) -> List[Player]:
        return [self._by_id[pid] for pid in self._selected]

    def is_selected(self, player_id: int) -> bool:
        return player_id in self._selected

    def counts(self) -> Tuple[int, int]:
        """(capped, uncapped) counts of the current selection."""
        capped = sum(1 for p in self.selected_players if p.is_capped)
        return capped, len(self._selected) - capped

    def toggle(self, player_id: int) -> Tuple[bool, str]:
        """
        Select or deselect a player.

        Returns:
            (success, error_message)
        """
        player = self._by_id.get(player_id)
        if player is None:
            return False, f"Player {player_id} is not eligible for retention"

        if player_id in self._selected:
            self._selected.remove(player_id)
            logger.debug(f"Team {self.team_id} dropped {player.name} from retention")
            return True, ""

        try:
            check_limits(self.selected_players + [player], self.config)
        except RuleViolation as e:
            logger.warning(f"Retention rejected for team {self.team_id}: {e}")
            if self._on_violation:
                self._on_violation(str(e))
            return False, str(e)

        self._selected.append(player_id)
        logger.debug(f"Team {self.team_id} selected {player.name} for retention")
        return True, ""

    def clear(self) -> None:
        self._selected = []

    # =========================================================================
    # Pricing
    # =========================================================================

    @property
    def prices(self) -> Dict[int, Decimal]:
        return retention_prices(self.selected_players, self.config)

    @property
    def total_cost(self) -> Decimal:
        return sum(self.prices.values(), Decimal("0"))

    @property
    def available_funds(self) -> Decimal:
        return self.config.purse - self.total_cost

    def confirm(self) -> Tuple[Tuple[int, ...], Dict[int, Decimal]]:
        """
        Finalize the selection.

        Returns:
            (selected_ids, prices) ready for ``AuctionEngine.confirm_retention``

        Raises:
            RuleViolation: if nothing is selected
        """
        if not self._selected:
            raise RuleViolation("Please select at least one player to retain!")
        return self.selected_ids, self.prices


def resolve_retention(
    pool: Sequence[Player],
    selected_ids: Sequence[int],
    prices: Mapping[int, object],
    config: AuctionConfig,
    budget: Decimal,
) -> List[Tuple[Player, Decimal]]:
    """
    Validate a confirmed retention and return the players with their prices.

    The submitted prices must match a from-scratch replay of the selection.

    Raises:
        RuleViolation: empty selection, unknown players, broken limits,
            mismatched prices or insufficient budget
    """
    if not selected_ids:
        raise RuleViolation("Please select at least one player to retain!")

    by_id = {p.id: p for p in pool}
    missing = [pid for pid in selected_ids if pid not in by_id]
    if missing:
        raise RuleViolation(f"Players not eligible for retention: {missing}")

    selection = [by_id[pid] for pid in selected_ids]
    check_limits(selection, config)

    expected = retention_prices(selection, config)
    for pid, price in expected.items():
        submitted = prices.get(pid)
        try:
            matches = submitted is not None and to_money(submitted) == price
        except (ArithmeticError, TypeError, ValueError):
            matches = False
        if not matches:
            raise RuleViolation(
                f"Retention price for player {pid} must be {price}, got {submitted}"
            )

    total = sum(expected.values(), Decimal("0"))
    if total > budget:
        raise RuleViolation(f"Retention cost {total} exceeds budget {budget}")

    return [(player, expected[player.id]) for player in selection]
