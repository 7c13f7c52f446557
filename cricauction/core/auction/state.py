"""
Auction state records.

Teams are mutable and owned by the engine; everything handed to callers
(team snapshots, lot records, the auction snapshot, events) is frozen.
"""

from collections import Counter
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum, IntEnum
from typing import Dict, FrozenSet, List, Optional, Tuple

from cricauction.core.catalog import Player, Role

UNSOLD_LABEL = "Unsold"


# =============================================================================
# Enums
# =============================================================================


class AuctionPhase(IntEnum):
    """Phase of the auction."""
    SETUP = 0       # Human team not chosen yet
    RETENTION = 1   # Human team choosing players to retain
    BIDDING = 2     # Lots under the hammer
    BLOCKED = 3     # Catalog exhausted, some squads below the floor
    ENDED = 4       # Terminal


class LotStatus(Enum):
    PENDING = "pending"
    SOLD = "sold"
    UNSOLD = "unsold"
    RETAINED = "retained"


class EventKind(Enum):
    """Notifications emitted to subscribers."""
    AUCTION_STARTED = "auction_started"
    RETENTION_OPENED = "retention_opened"
    RETENTION_CONFIRMED = "retention_confirmed"
    LOT_OPENED = "lot_opened"
    BID = "bid"
    PASS = "pass"
    SOLD = "sold"
    UNSOLD = "unsold"
    FAIR_WARNING = "fair_warning"
    FINAL_WARNING = "final_warning"
    RULE_VIOLATION = "rule_violation"
    ROSTER_INCOMPLETE = "roster_incomplete"
    ROSTER_MOVED = "roster_moved"
    AUCTION_ENDED = "auction_ended"


class Severity(Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"


# =============================================================================
# Teams
# =============================================================================


@dataclass(frozen=True)
class RosterSlot:
    """A player on a team, with the price paid."""
    player: Player
    price: Decimal


def _role_count(roster, role: Role) -> int:
    return sum(1 for slot in roster if slot.player.role == role)


def _overseas_count(roster, domestic_nationality: str) -> int:
    return sum(1 for slot in roster if slot.player.is_overseas(domestic_nationality))


@dataclass(frozen=True)
class TeamStats:
    """Dashboard figures for one team."""
    total_spent: Decimal
    overseas_players: int
    role_distribution: Dict[str, int]


@dataclass(frozen=True)
class TeamSnapshot:
    """Read-only view of a team."""
    id: int
    name: str
    budget: Decimal
    roster: Tuple[RosterSlot, ...]

    @property
    def size(self) -> int:
        return len(self.roster)

    def role_count(self, role: Role) -> int:
        return _role_count(self.roster, role)

    def overseas_count(self, domestic_nationality: str = "Indian") -> int:
        return _overseas_count(self.roster, domestic_nationality)

    def player_ids(self) -> List[int]:
        return [slot.player.id for slot in self.roster]


@dataclass
class Team:
    """
    A franchise taking part in the auction.

    Budget only ever decreases; the roster grows through retention or a
    won lot and may be reordered without losing anyone.
    """
    id: int
    name: str
    budget: Decimal
    roster: List[RosterSlot] = field(default_factory=list)

    @property
    def size(self) -> int:
        return len(self.roster)

    def can_afford(self, amount: Decimal) -> bool:
        return self.budget >= amount

    def acquire(self, player: Player, price: Decimal) -> None:
        """Add a player and debit the price. Caller checks affordability."""
        self.budget -= price
        self.roster.append(RosterSlot(player=player, price=price))

    def role_count(self, role: Role) -> int:
        return _role_count(self.roster, role)

    def overseas_count(self, domestic_nationality: str = "Indian") -> int:
        return _overseas_count(self.roster, domestic_nationality)

    def stats(self, purse: Decimal, domestic_nationality: str = "Indian") -> TeamStats:
        roles = Counter(slot.player.role.value for slot in self.roster)
        return TeamStats(
            total_spent=purse - self.budget,
            overseas_players=self.overseas_count(domestic_nationality),
            role_distribution=dict(roles),
        )

    def snapshot(self) -> TeamSnapshot:
        return TeamSnapshot(
            id=self.id,
            name=self.name,
            budget=self.budget,
            roster=tuple(self.roster),
        )


# =============================================================================
# Transaction log
# =============================================================================


@dataclass(frozen=True)
class LotRecord:
    """
    Outcome of one catalog player.

    Created pending at catalog load and replaced once when the lot resolves
    (or when the player is retained).
    """
    player_id: int
    player_name: str
    role: Role
    base_price: Decimal
    final_price: Decimal
    team_name: str = UNSOLD_LABEL
    team_id: Optional[int] = None
    status: LotStatus = LotStatus.PENDING

    @classmethod
    def pending(cls, player: Player) -> "LotRecord":
        return cls(
            player_id=player.id,
            player_name=player.name,
            role=player.role,
            base_price=player.base_price,
            final_price=player.base_price,
        )

    @property
    def resolved(self) -> bool:
        return self.status is not LotStatus.PENDING


# =============================================================================
# Snapshots and events
# =============================================================================


@dataclass(frozen=True)
class AuctionSnapshot:
    """Read-only view of the engine state."""
    phase: AuctionPhase
    current_index: int
    current_player: Optional[Player]
    current_bid: Decimal
    leader_id: Optional[int]
    withdrawn: FrozenSet[int]
    recent_bidders: Tuple[int, ...]
    human_team_id: Optional[int]

    @property
    def ended(self) -> bool:
        return self.phase is AuctionPhase.ENDED


@dataclass(frozen=True)
class AuctionEvent:
    """A user-facing notification."""
    kind: EventKind
    message: str
    severity: Severity = Severity.INFO
    team_id: Optional[int] = None
    player_id: Optional[int] = None
    amount: Optional[Decimal] = None
