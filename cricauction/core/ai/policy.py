"""
AI Bidding Policy - decides which computer-controlled team acts next.

On every tick:
1. Eligible teams: can afford the next raise, are not leading, are not the
   human team and have not withdrawn from this lot.
2. No eligible team: the lot is resolved.
3. Otherwise each eligible team is scored:
       score = budget
             - 50  if it already holds >= 8 players of the lot's role
             - 50  if the lot is overseas and it holds >= 8 overseas players
             + 20  if the lot is rated >= 90
   then multiplied by a uniform jitter in [0.9, 1.1).
4. The top scorer withdraws with 20% probability, otherwise it bids.

The policy holds no state between ticks; all randomness comes from the
injected random source.
"""

import random
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from cricauction.core.auction.increments import next_bid
from cricauction.core.auction.state import AuctionSnapshot, TeamSnapshot
from cricauction.core.catalog import Player
from cricauction.core.config import AuctionConfig
from cricauction.utils.logger import get_logger

logger = get_logger("ai")


class AIAction(Enum):
    BID = "bid"
    PASS = "pass"
    RESOLVE = "resolve"


@dataclass(frozen=True)
class AIDecision:
    """Outcome of one policy tick."""
    action: AIAction
    team_id: Optional[int] = None
    scores: Tuple[Tuple[int, float], ...] = ()


class AIBiddingPolicy:
    """Budget-weighted bidding policy for the computer-controlled teams."""

    def __init__(self, config: Optional[AuctionConfig] = None, rng: Optional[random.Random] = None):
        self.config = config or AuctionConfig()
        self.rng = rng or random.Random()

    def eligible_teams(
        self,
        state: AuctionSnapshot,
        teams: Sequence[TeamSnapshot],
    ) -> List[TeamSnapshot]:
        """Teams allowed to act on the current lot."""
        required = next_bid(state.current_bid)
        return [
            team for team in teams
            if team.budget >= required
            and team.id != state.leader_id
            and team.id != state.human_team_id
            and team.id not in state.withdrawn
        ]

    def base_score(self, team: TeamSnapshot, player: Player) -> float:
        """Score before jitter."""
        cfg = self.config
        score = float(team.budget)

        if team.role_count(player.role) >= cfg.role_ceiling:
            score -= cfg.role_penalty

        if (
            player.is_overseas(cfg.domestic_nationality)
            and team.overseas_count(cfg.domestic_nationality) >= cfg.overseas_ceiling
        ):
            score -= cfg.overseas_penalty

        if player.is_star(cfg.star_rating):
            score += cfg.star_bonus

        return score

    def _jitter(self) -> float:
        low, high = self.config.ai_jitter_low, self.config.ai_jitter_high
        return low + self.rng.random() * (high - low)

    def decide(self, state: AuctionSnapshot, teams: Sequence[TeamSnapshot]) -> AIDecision:
        """
        Choose the next computer action for the current lot.

        Args:
            state: Current auction snapshot (must have a current player)
            teams: Snapshots of every team in the league
        """
        player = state.current_player
        if player is None:
            return AIDecision(action=AIAction.RESOLVE)

        eligible = self.eligible_teams(state, teams)
        if not eligible:
            logger.debug(f"No eligible bidders for {player.name}, resolving")
            return AIDecision(action=AIAction.RESOLVE)

        scores = tuple(
            (team.id, self.base_score(team, player) * self._jitter())
            for team in eligible
        )
        best_id, best_score = max(scores, key=lambda item: item[1])
        logger.debug(f"AI scores for {player.name}: {[(t, round(s, 2)) for t, s in scores]}")

        if self.rng.random() < self.config.ai_pass_chance:
            return AIDecision(action=AIAction.PASS, team_id=best_id, scores=scores)

        return AIDecision(action=AIAction.BID, team_id=best_id, scores=scores)
