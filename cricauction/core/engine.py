"""
Auction Engine - sequential player auction state machine.

Lots are auctioned in catalog order:

    AwaitingBid(p) -> AwaitingBid(p) [raise] -> Sold | Unsold
        -> AwaitingBid(next) -> ... -> Ended

The engine owns the only mutable auction state. Callers issue commands
(bid, pass_, resolve, confirm_retention, on_drag_reorder), read immutable
snapshots, and observe notifications through ``subscribe``.

Notifications are queued while a command runs and delivered in order once
the state change is complete. A listener may issue further commands; they
run after the current one and their notifications join the same queue.

Commands never raise for a rejected action: they return
``(success, error_message)`` and leave state untouched.

Every accepted bid or pass restarts the auto-resolution countdown and the
AI tick. Lot changes, the end of the auction and the retention phase cancel
both.
"""

import random
from collections import deque
from contextlib import contextmanager
from dataclasses import replace
from decimal import Decimal
from typing import Callable, Deque, Dict, List, Optional, Sequence, Set, Tuple

from cricauction.core.ai import AIAction, AIBiddingPolicy
from cricauction.core.auction import (
    AuctionEvent,
    AuctionPhase,
    AuctionSnapshot,
    EventKind,
    LotRecord,
    LotStatus,
    Severity,
    Team,
    TeamSnapshot,
    TeamStats,
    next_bid,
)
from cricauction.core.catalog import FRANCHISES, Player, PlayerCatalog, PreviousRoster
from cricauction.core.config import AuctionConfig
from cricauction.core.errors import (
    AuctionError,
    ConfigError,
    IncompleteRosterBlock,
    IneligibleAction,
    RuleViolation,
    UnknownTeamError,
)
from cricauction.core.retention import RetentionSelection, resolve_retention
from cricauction.core.timer import (
    AutoResolutionTimer,
    DebouncedCall,
    Scheduler,
    VirtualScheduler,
    WarningStage,
)
from cricauction.utils.logger import get_logger
from cricauction.utils.validation import MAX_TEAMS, validate_index, validate_selection, validate_team_id

logger = get_logger("engine")

Listener = Callable[[AuctionEvent], None]
Result = Tuple[bool, str]

ZERO = Decimal("0.00")


class AuctionEngine:
    """
    Owns teams, the current lot and the transaction log.

    Args:
        catalog: Players to auction, in order
        config: League configuration
        scheduler: Source of delayed callbacks (virtual clock by default)
        rng: Random source for the capacity rule and the default policy
        policy: Bidding policy for the computer-controlled teams
        franchises: (team_id, name) pairs
        previous_rosters: Retention pools by team id
    """

    def __init__(
        self,
        catalog: PlayerCatalog,
        config: Optional[AuctionConfig] = None,
        scheduler: Optional[Scheduler] = None,
        rng: Optional[random.Random] = None,
        policy: Optional[AIBiddingPolicy] = None,
        franchises: Sequence[Tuple[int, str]] = FRANCHISES,
        previous_rosters: Optional[Dict[int, PreviousRoster]] = None,
    ):
        self.config = config or AuctionConfig()
        self.catalog = catalog
        self.scheduler = scheduler or VirtualScheduler()
        self.rng = rng or random.Random()
        self.policy = policy or AIBiddingPolicy(self.config, self.rng)
        self.previous_rosters = dict(previous_rosters or {})

        self.teams: Dict[int, Team] = {}
        for team_id, name in franchises:
            if team_id in self.teams:
                raise ConfigError(f"Duplicate team id {team_id}")
            self.teams[team_id] = Team(id=team_id, name=name, budget=self.config.purse)
        if not self.teams:
            raise ConfigError("A league needs at least one team")
        if len(self.teams) > MAX_TEAMS:
            raise ConfigError(f"A league has at most {MAX_TEAMS} teams, got {len(self.teams)}")

        # One record per catalog player, replaced when the lot resolves
        self._log: List[LotRecord] = [LotRecord.pending(p) for p in catalog]
        self._log_pos: Dict[int, int] = {p.id: i for i, p in enumerate(catalog)}

        self._phase = AuctionPhase.SETUP
        self._index = 0
        self._current_bid = catalog[0].base_price if len(catalog) else ZERO
        self._leader: Optional[int] = None
        self._withdrawn: Set[int] = set()
        self._recent: Deque[int] = deque(maxlen=self.config.recent_bidders_limit)
        self._lots_resolved = 0
        self._epoch = 0

        self.human_team_id: Optional[int] = None
        self.retention: Optional[RetentionSelection] = None
        self._retention_done = False

        self._listeners: List[Listener] = []
        self._pending: Deque[AuctionEvent] = deque()
        self._depth = 0
        self._dispatching = False
        self._countdown = AutoResolutionTimer(
            self.scheduler,
            self._on_countdown,
            fair_warning_delay=self.config.fair_warning_delay,
            final_warning_delay=self.config.final_warning_delay,
            auto_sell_delay=self.config.auto_sell_delay,
        )
        self._ai_tick = DebouncedCall(self.scheduler, self.config.ai_delay, self._on_ai_tick)

    # =========================================================================
    # Subscription
    # =========================================================================

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a notification listener.

        Returns:
            Function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, kind: EventKind, message: str, severity: Severity = Severity.INFO, **details) -> None:
        self._pending.append(AuctionEvent(kind=kind, message=message, severity=severity, **details))
        if not self._depth:
            self._flush()

    def _flush(self) -> None:
        """Deliver queued events in order, unless an outer flush is already draining them."""
        if self._dispatching:
            return
        self._dispatching = True
        try:
            while self._pending:
                event = self._pending.popleft()
                for listener in list(self._listeners):
                    listener(event)
        finally:
            self._dispatching = False

    @contextmanager
    def _command(self):
        """Hold notifications until the outermost command has finished mutating state."""
        self._depth += 1
        try:
            yield
        finally:
            self._depth -= 1
        if not self._depth:
            self._flush()

    # =========================================================================
    # Queries
    # =========================================================================

    @property
    def phase(self) -> AuctionPhase:
        return self._phase

    @property
    def ended(self) -> bool:
        return self._phase is AuctionPhase.ENDED

    def get_current_player(self) -> Optional[Player]:
        if self._phase is AuctionPhase.ENDED or self._index >= len(self.catalog):
            return None
        return self.catalog[self._index]

    def get_auction_state(self) -> AuctionSnapshot:
        return AuctionSnapshot(
            phase=self._phase,
            current_index=self._index,
            current_player=self.get_current_player(),
            current_bid=self._current_bid,
            leader_id=self._leader,
            withdrawn=frozenset(self._withdrawn),
            recent_bidders=tuple(self._recent),
            human_team_id=self.human_team_id,
        )

    def get_teams(self) -> Tuple[TeamSnapshot, ...]:
        return tuple(team.snapshot() for team in self.teams.values())

    def get_team(self, team_id: int) -> TeamSnapshot:
        return self._team(team_id).snapshot()

    def get_transaction_log(self) -> Tuple[LotRecord, ...]:
        return tuple(self._log)

    def team_stats(self, team_id: int) -> TeamStats:
        return self._team(team_id).stats(self.config.purse, self.config.domestic_nationality)

    def active_team_ids(self) -> List[int]:
        """Teams still in contention for the current lot (not withdrawn, not leading)."""
        return [
            tid for tid in self.teams
            if tid not in self._withdrawn and tid != self._leader
        ]

    def retention_pool(self) -> Tuple[Player, ...]:
        if self.human_team_id is None:
            return ()
        roster = self.previous_rosters.get(self.human_team_id)
        return roster.players if roster else ()

    # =========================================================================
    # Command plumbing
    # =========================================================================

    def _team(self, team_id: int) -> Team:
        valid, err = validate_team_id(team_id, self.teams)
        if not valid:
            raise UnknownTeamError(err, team_id)
        return self.teams[team_id]

    def _require_phase(self, phase: AuctionPhase, message: str) -> None:
        if self._phase is not phase:
            raise IneligibleAction(message)

    def _guard(self, command: Callable[..., None], *args) -> Result:
        """Run a command, turning rejections into (False, message)."""
        with self._command():
            try:
                command(*args)
            except RuleViolation as e:
                logger.warning(f"Rule violation: {e}")
                self._emit(EventKind.RULE_VIOLATION, str(e), Severity.WARNING, team_id=e.team_id)
                return False, str(e)
            except AuctionError as e:
                logger.debug(f"Rejected {command.__name__}: {e}")
                return False, str(e)
        return True, ""

    def _token(self) -> Tuple[int, int]:
        return self._index, self._epoch

    def _touch(self) -> None:
        """Record a state change and restart the countdown and AI tick."""
        self._epoch += 1
        if self._phase is AuctionPhase.BIDDING:
            token = self._token()
            self._countdown.restart(token)
            self._ai_tick.trigger(token)

    def _cancel_timers(self) -> None:
        self._epoch += 1
        self._countdown.cancel()
        self._ai_tick.cancel()

    # =========================================================================
    # Setup and retention
    # =========================================================================

    def start(self, human_team_id: int) -> Result:
        """Choose the human team and open retention (or the first lot)."""
        return self._guard(self._start, human_team_id)

    def _start(self, human_team_id: int) -> None:
        self._require_phase(AuctionPhase.SETUP, "Auction already started")
        team = self._team(human_team_id)
        self.human_team_id = human_team_id
        logger.info(f"Auction started: human team is {team.name}, {len(self.catalog)} lots")
        self._emit(EventKind.AUCTION_STARTED, f"You are {team.name}", team_id=human_team_id)

        if self.config.retention_enabled and self.retention_pool():
            self._open_retention()
        else:
            self._open_lot(0)

    def _open_retention(self) -> None:
        self._cancel_timers()
        self._phase = AuctionPhase.RETENTION
        self.retention = RetentionSelection(
            self.human_team_id,
            self.retention_pool(),
            self.config,
            on_violation=lambda msg: self._emit(
                EventKind.RULE_VIOLATION, msg, Severity.WARNING, team_id=self.human_team_id
            ),
        )
        logger.info(f"Retention open: {len(self.retention.pool)} eligible players")
        self._emit(EventKind.RETENTION_OPENED, "Choose players to retain", team_id=self.human_team_id)

    def enter_retention(self) -> Result:
        """Reopen retention, allowed only before any bid on the first lot."""
        return self._guard(self._enter_retention)

    def _enter_retention(self) -> None:
        self._require_phase(AuctionPhase.BIDDING, "Retention can only be reopened during bidding")
        if not self.config.retention_enabled:
            raise IneligibleAction("Retention is disabled for this league")
        if self._retention_done:
            raise IneligibleAction("Retention has already been confirmed")
        if self._lots_resolved or self._leader is not None or self._withdrawn:
            raise IneligibleAction("Retention closes once the auction is under way")
        if not self.retention_pool():
            raise IneligibleAction("No players are eligible for retention")
        self._open_retention()

    def skip_retention(self) -> Result:
        """Close retention without keeping anyone."""
        return self._guard(self._skip_retention)

    def _skip_retention(self) -> None:
        self._require_phase(AuctionPhase.RETENTION, "Retention is not open")
        self.retention = None
        logger.info("Retention skipped")
        self._open_lot(0)

    def confirm_retention(
        self,
        team_id: int,
        selected_ids: Sequence[int],
        prices: Dict[int, Decimal],
    ) -> Result:
        """
        Apply the human team's retention.

        Debits the summed tier prices, adds the players to the roster and
        marks their lots as retained, then opens the first lot.
        """
        return self._guard(self._confirm_retention, team_id, selected_ids, prices)

    def _confirm_retention(self, team_id: int, selected_ids: Sequence[int], prices: Dict[int, Decimal]) -> None:
        self._require_phase(
            AuctionPhase.RETENTION, "Retention is only possible before the auction starts"
        )
        team = self._team(team_id)
        if team_id != self.human_team_id:
            raise IneligibleAction(f"{team.name} is not the human team", team_id)

        valid, err = validate_selection(selected_ids)
        if not valid:
            raise RuleViolation(err, team_id)

        try:
            retained = resolve_retention(
                self.retention_pool(), list(selected_ids), prices, self.config, team.budget
            )
        except RuleViolation as e:
            raise RuleViolation(str(e), team_id) from e

        for player, price in retained:
            team.acquire(player, price)
            self._record(player, LotStatus.RETAINED, price, team)

        total = sum((price for _, price in retained), ZERO)
        self._retention_done = True
        self.retention = None
        logger.info(f"{team.name} retained {len(retained)} players for {total} Cr")
        self._emit(
            EventKind.RETENTION_CONFIRMED,
            f"{team.name} retained {len(retained)} players for ₹{total}Cr",
            Severity.SUCCESS,
            team_id=team_id,
            amount=total,
        )
        self._open_lot(0)

    # =========================================================================
    # Bidding
    # =========================================================================

    def bid(self, team_id: int) -> Result:
        """Raise the current bid by one increment on behalf of ``team_id``."""
        return self._guard(self._place_bid, team_id)

    def _place_bid(self, team_id: int) -> None:
        self._require_phase(AuctionPhase.BIDDING, "Bidding is not open")
        team = self._team(team_id)
        if team_id == self._leader:
            raise IneligibleAction(f"{team.name} already holds the highest bid", team_id)
        if team_id in self._withdrawn:
            raise IneligibleAction(f"{team.name} has withdrawn from this lot", team_id)

        amount = next_bid(self._current_bid)
        if not team.can_afford(amount):
            raise RuleViolation(
                f"{team.name} cannot afford ₹{amount}Cr (budget ₹{team.budget}Cr)", team_id
            )

        self._current_bid = amount
        self._leader = team_id
        self._recent.appendleft(team_id)
        logger.debug(f"{team.name} bids {amount} Cr for {self.catalog[self._index].name}")
        self._emit(
            EventKind.BID,
            f"{team.name} bids ₹{amount}Cr",
            team_id=team_id,
            player_id=self.catalog[self._index].id,
            amount=amount,
        )
        self._touch()

    def pass_(self, team_id: int) -> Result:
        """Withdraw ``team_id`` from the current lot."""
        return self._guard(self._withdraw, team_id)

    def _withdraw(self, team_id: int) -> None:
        self._require_phase(AuctionPhase.BIDDING, "Bidding is not open")
        team = self._team(team_id)
        if team_id in self._withdrawn:
            raise IneligibleAction(f"{team.name} has already withdrawn", team_id)
        if team_id == self._leader:
            raise IneligibleAction(f"{team.name} holds the highest bid and cannot withdraw", team_id)

        self._withdrawn.add(team_id)
        self._recent.appendleft(team_id)
        if team_id == self.human_team_id:
            logger.info(f"{team.name} (human) withdrew from {self.catalog[self._index].name}")
        else:
            logger.debug(f"{team.name} withdrew from {self.catalog[self._index].name}")
        self._emit(EventKind.PASS, f"{team.name} passed!", Severity.WARNING, team_id=team_id)

        if not self.active_team_ids():
            self._resolve_lot()
        else:
            self._touch()

    # =========================================================================
    # Resolution
    # =========================================================================

    def resolve(self) -> Result:
        """
        Close the current lot (sold to the leader, or unsold).

        Once the catalog is exhausted, calling this again re-runs the
        minimum-squad check.
        """
        if self._phase is AuctionPhase.BLOCKED:
            with self._command():
                return self._finish()
        return self._guard(self._resolve_command)

    def _resolve_command(self) -> None:
        self._require_phase(AuctionPhase.BIDDING, "No lot is under the hammer")
        self._resolve_lot()

    def _capacity_reached(self) -> bool:
        rostered = sum(team.size for team in self.teams.values())
        return rostered >= len(self.teams) * self.config.roster_ceiling

    def _resolve_lot(self) -> None:
        cfg = self.config
        player = self.catalog[self._index]

        if (
            self._capacity_reached()
            and not player.is_important(cfg.important_rating, cfg.important_base_price)
            and self.rng.random() < cfg.capacity_unsold_chance
        ):
            self._record(player, LotStatus.UNSOLD, ZERO)
            logger.warning(f"{player.name} unsold: league roster capacity reached")
            self._emit(
                EventKind.UNSOLD,
                f"{player.name} remained UNSOLD (slots full)",
                Severity.WARNING,
                player_id=player.id,
            )
        elif self._leader is not None:
            team = self.teams[self._leader]
            price = self._current_bid
            team.acquire(player, price)
            self._record(player, LotStatus.SOLD, price, team)
            logger.info(f"{player.name} sold to {team.name} for {price} Cr")
            self._emit(
                EventKind.SOLD,
                f"{player.name} SOLD to {team.name} for ₹{price}Cr",
                Severity.SUCCESS,
                team_id=team.id,
                player_id=player.id,
                amount=price,
            )
        else:
            self._record(player, LotStatus.UNSOLD, ZERO)
            logger.info(f"{player.name} unsold")
            self._emit(EventKind.UNSOLD, f"{player.name} went UNSOLD", player_id=player.id)

        self._lots_resolved += 1
        self._open_lot(self._index + 1)

    def _record(self, player: Player, status: LotStatus, price: Decimal, team: Optional[Team] = None) -> None:
        pos = self._log_pos.get(player.id)
        if pos is None:
            return
        self._log[pos] = replace(
            self._log[pos],
            final_price=price,
            team_name=team.name if team else self._log[pos].team_name,
            team_id=team.id if team else None,
            status=status,
        )

    def _open_lot(self, index: int) -> None:
        """Move to the first unclaimed lot at or after ``index``."""
        self._cancel_timers()
        while index < len(self.catalog) and self._log[index].status is LotStatus.RETAINED:
            index += 1

        self._index = index
        self._leader = None
        self._withdrawn.clear()
        self._recent.clear()

        if index >= len(self.catalog):
            self._current_bid = ZERO
            self._finish()
            return

        player = self.catalog[index]
        self._phase = AuctionPhase.BIDDING
        self._current_bid = player.base_price
        logger.debug(f"Lot {index + 1}/{len(self.catalog)}: {player.name} at {player.base_price} Cr")
        self._emit(
            EventKind.LOT_OPENED,
            f"Now bidding: {player.name} ({player.role.value}), base ₹{player.base_price}Cr",
            player_id=player.id,
            amount=player.base_price,
        )
        self._touch()

    # =========================================================================
    # Ending
    # =========================================================================

    def _check_rosters(self) -> None:
        short = [t for t in self.teams.values() if t.size < self.config.roster_floor]
        if short:
            raise IncompleteRosterBlock(short)

    def _finish(self) -> Result:
        """End the auction if every squad meets the floor, else block."""
        try:
            self._check_rosters()
        except IncompleteRosterBlock as e:
            self._phase = AuctionPhase.BLOCKED
            for team in e.short_teams:
                logger.warning(f"{team.name} has {team.size} players, needs {self.config.roster_floor}")
                self._emit(
                    EventKind.ROSTER_INCOMPLETE,
                    f"{team.name} has less than {self.config.roster_floor} players! "
                    f"Add more before ending auction.",
                    Severity.WARNING,
                    team_id=team.id,
                )
            return False, str(e)

        self._end()
        return True, ""

    def force_end(self) -> Result:
        """End a blocked auction even though some squads are short."""
        return self._guard(self._force_end)

    def _force_end(self) -> None:
        self._require_phase(
            AuctionPhase.BLOCKED, "The auction can only be force-ended once every lot is done"
        )
        short = [t.name for t in self.teams.values() if t.size < self.config.roster_floor]
        logger.warning(f"Auction force-ended with short squads: {', '.join(short)}")
        self._end()

    def _end(self) -> None:
        self._cancel_timers()
        self._phase = AuctionPhase.ENDED
        sold = sum(1 for r in self._log if r.status is LotStatus.SOLD)
        logger.info(f"Auction ended: {sold}/{len(self._log)} lots sold")
        self._emit(EventKind.AUCTION_ENDED, "Auction Ended", Severity.SUCCESS)

    # =========================================================================
    # Timers
    # =========================================================================

    def _is_stale(self, token) -> bool:
        return self._phase is not AuctionPhase.BIDDING or token != self._token()

    def _on_countdown(self, stage: WarningStage, token) -> None:
        if self._is_stale(token):
            logger.debug(f"Ignoring stale {stage.name}")
            return

        if stage is WarningStage.FAIR_WARNING:
            self._emit(EventKind.FAIR_WARNING, "Any more bids? Fair warning!", Severity.WARNING)
        elif stage is WarningStage.FINAL_WARNING:
            self._emit(EventKind.FINAL_WARNING, "Last chance for bidding! Make it count!", Severity.WARNING)
        else:
            logger.info(f"Countdown expired for {self.catalog[self._index].name}")
            self.resolve()

    def _on_ai_tick(self, token) -> None:
        if self._is_stale(token):
            logger.debug("Ignoring stale AI tick")
            return

        decision = self.policy.decide(self.get_auction_state(), self.get_teams())
        if decision.action is AIAction.RESOLVE:
            ok, err = self.resolve()
        elif decision.action is AIAction.PASS:
            ok, err = self.pass_(decision.team_id)
        else:
            ok, err = self.bid(decision.team_id)

        if not ok:
            logger.warning(f"AI {decision.action.value} rejected: {err}")

    # =========================================================================
    # Roster reordering
    # =========================================================================

    def on_drag_reorder(
        self,
        source_team_id: int,
        source_index: int,
        dest_team_id: int,
        dest_index: int,
    ) -> Result:
        """
        Move a roster slot within or between teams.

        Budgets are untouched and no player is duplicated or lost.
        """
        return self._guard(self._move_slot, source_team_id, source_index, dest_team_id, dest_index)

    def _move_slot(self, source_team_id: int, source_index: int, dest_team_id: int, dest_index: int) -> None:
        source = self._team(source_team_id)
        dest = self._team(dest_team_id)

        valid, err = validate_index(source_index, "source_index", source.size)
        if not valid:
            raise IneligibleAction(err, source_team_id)

        dest_length = dest.size - 1 if dest is source else dest.size
        valid, err = validate_index(dest_index, "dest_index", dest_length, allow_end=True)
        if not valid:
            raise IneligibleAction(err, dest_team_id)

        slot = source.roster.pop(source_index)
        dest.roster.insert(dest_index, slot)
        logger.info(
            f"Moved {slot.player.name} from {source.name}[{source_index}] to {dest.name}[{dest_index}]"
        )
        self._emit(
            EventKind.ROSTER_MOVED,
            f"{slot.player.name} moved to {dest.name}",
            team_id=dest.id,
            player_id=slot.player.id,
        )
