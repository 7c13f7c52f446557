"""
Auction state: increment ladder, teams, lot records, snapshots and events.
"""

from cricauction.core.auction.increments import (
    bid_increment,
    next_bid,
    INCREMENT_LADDER,
    TOP_INCREMENT,
)
from cricauction.core.auction.state import (
    AuctionPhase,
    AuctionEvent,
    AuctionSnapshot,
    EventKind,
    LotRecord,
    LotStatus,
    RosterSlot,
    Severity,
    Team,
    TeamSnapshot,
    TeamStats,
    UNSOLD_LABEL,
)

__all__ = [
    # Increments
    "bid_increment",
    "next_bid",
    "INCREMENT_LADDER",
    "TOP_INCREMENT",
    # State
    "AuctionPhase",
    "AuctionEvent",
    "AuctionSnapshot",
    "EventKind",
    "LotRecord",
    "LotStatus",
    "RosterSlot",
    "Severity",
    "Team",
    "TeamSnapshot",
    "TeamStats",
    "UNSOLD_LABEL",
]
