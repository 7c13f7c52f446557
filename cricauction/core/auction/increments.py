"""
Bid increment ladder.

The raise applied to the current bid depends on its size:
0.05 below 1 Cr, 0.10 below 2 Cr, 0.20 from 2 Cr upward.
"""

from decimal import Decimal
from typing import Tuple, Union

from cricauction.utils.validation import to_money

Number = Union[Decimal, int, float, str]

# (upper bound exclusive, increment); the last step has no bound
INCREMENT_LADDER: Tuple[Tuple[Decimal, Decimal], ...] = (
    (Decimal("1"), Decimal("0.05")),
    (Decimal("2"), Decimal("0.10")),
)
TOP_INCREMENT = Decimal("0.20")


def bid_increment(current_bid: Number) -> Decimal:
    """Increment to add to ``current_bid`` for the next raise."""
    amount = to_money(current_bid)
    for bound, step in INCREMENT_LADDER:
        if amount < bound:
            return step
    return TOP_INCREMENT


def next_bid(current_bid: Number) -> Decimal:
    """The bid after one standard raise, rounded to two places."""
    amount = to_money(current_bid)
    return to_money(amount + bid_increment(amount))
