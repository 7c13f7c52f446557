"""
Unit tests for the AI bidding policy.

Tests cover:
1. Eligibility (budget, leader, human team, withdrawn)
2. Scoring penalties and bonus
3. Decisions: resolve, pass, bid
"""

import random
import pytest
from decimal import Decimal

from cricauction.core.ai import AIAction, AIBiddingPolicy
from cricauction.core.auction import AuctionPhase, AuctionSnapshot, RosterSlot, TeamSnapshot
from cricauction.core.catalog import Player, Role
from cricauction.core.config import AuctionConfig


# =============================================================================
# Fixtures
# =============================================================================


def make_player(player_id=1, role=Role.BATSMAN, nationality="Indian", rating=70, base="1.00"):
    return Player(
        id=player_id,
        name=f"Player {player_id}",
        role=role,
        nationality=nationality,
        base_price=Decimal(base),
        rating=rating,
    )


def make_team(team_id, budget, roster=()):
    return TeamSnapshot(
        id=team_id,
        name=f"Team {team_id}",
        budget=Decimal(budget),
        roster=tuple(RosterSlot(player=p, price=Decimal("1")) for p in roster),
    )


def make_state(player, bid="1.00", leader=None, withdrawn=(), human=None):
    return AuctionSnapshot(
        phase=AuctionPhase.BIDDING,
        current_index=0,
        current_player=player,
        current_bid=Decimal(bid),
        leader_id=leader,
        withdrawn=frozenset(withdrawn),
        recent_bidders=(),
        human_team_id=human,
    )


@pytest.fixture
def policy():
    return AIBiddingPolicy(AuctionConfig(ai_pass_chance=0.0), random.Random(0))


# =============================================================================
# Eligibility
# =============================================================================


class TestEligibility:
    """Tests for eligible_teams."""

    def test_excludes_leader_human_withdrawn(self, policy):
        """Leader, human team and withdrawn teams never act."""
        teams = [make_team(i, "50") for i in range(1, 6)]
        state = make_state(make_player(), leader=1, withdrawn={2}, human=3)
        assert [t.id for t in policy.eligible_teams(state, teams)] == [4, 5]

    def test_requires_next_bid(self, policy):
        """A team must afford the raised bid, not just the current one."""
        teams = [make_team(1, "2.10"), make_team(2, "2.20")]
        state = make_state(make_player(), bid="2.00")
        assert [t.id for t in policy.eligible_teams(state, teams)] == [2]


# =============================================================================
# Scoring
# =============================================================================


class TestScoring:
    """Tests for base_score."""

    def test_budget_is_base(self, policy):
        """Without modifiers the score is the budget."""
        assert policy.base_score(make_team(1, "80"), make_player()) == 80.0

    def test_role_penalty(self, policy):
        """Eight players of the lot's role cost 50 points."""
        roster = [make_player(i, role=Role.BOWLER) for i in range(10, 18)]
        team = make_team(1, "80", roster)
        assert policy.base_score(team, make_player(role=Role.BOWLER)) == 30.0
        assert policy.base_score(team, make_player(role=Role.BATSMAN)) == 80.0

    def test_overseas_penalty(self, policy):
        """Eight overseas players cost 50 points on an overseas lot."""
        roster = [make_player(i, nationality="Australian", role=Role.BATSMAN) for i in range(10, 18)]
        team = make_team(1, "80", roster)
        overseas = make_player(nationality="English", role=Role.BOWLER)
        domestic = make_player(role=Role.BOWLER)
        assert policy.base_score(team, overseas) == 30.0
        assert policy.base_score(team, domestic) == 80.0

    def test_star_bonus(self, policy):
        """Rated 90 or more adds 20 points."""
        assert policy.base_score(make_team(1, "80"), make_player(rating=90)) == 100.0
        assert policy.base_score(make_team(1, "80"), make_player(rating=89)) == 80.0

    def test_jitter_bounds(self, policy):
        """Jitter stays within [0.9, 1.1]."""
        for _ in range(1000):
            assert 0.9 <= policy._jitter() <= 1.1


# =============================================================================
# Decisions
# =============================================================================


class TestDecide:
    """Tests for decide."""

    def test_resolve_without_player(self, policy):
        """No current player means resolve."""
        state = make_state(None)
        assert policy.decide(state, [make_team(1, "50")]).action is AIAction.RESOLVE

    def test_resolve_without_eligible(self, policy):
        """No eligible team means resolve."""
        state = make_state(make_player(), leader=1, human=2)
        decision = policy.decide(state, [make_team(1, "50"), make_team(2, "50")])
        assert decision.action is AIAction.RESOLVE
        assert decision.team_id is None

    def test_richer_team_always_wins(self):
        """Budget gap larger than the jitter range always favours the richer team."""
        teams = [make_team(1, "50"), make_team(2, "80"), make_team(3, "100")]
        state = make_state(make_player(base="1.50"), bid="1.50", human=3)
        for seed in range(200):
            policy = AIBiddingPolicy(AuctionConfig(ai_pass_chance=0.0), random.Random(seed))
            decision = policy.decide(state, teams)
            assert decision.action is AIAction.BID
            assert decision.team_id == 2

    def test_always_pass(self):
        """Pass chance 1.0 always withdraws the top scorer."""
        policy = AIBiddingPolicy(AuctionConfig(ai_pass_chance=1.0), random.Random(5))
        decision = policy.decide(make_state(make_player()), [make_team(1, "50"), make_team(2, "80")])
        assert decision.action is AIAction.PASS
        assert decision.team_id == 2

    def test_scores_reported(self, policy):
        """Every eligible team is scored."""
        decision = policy.decide(make_state(make_player()), [make_team(1, "50"), make_team(2, "80")])
        assert [tid for tid, _ in decision.scores] == [1, 2]

    def test_pass_rate(self):
        """Roughly 20% of decisions are passes with the default chance."""
        policy = AIBiddingPolicy(AuctionConfig(), random.Random(11))
        state = make_state(make_player())
        teams = [make_team(1, "50"), make_team(2, "80")]
        passes = sum(
            policy.decide(state, teams).action is AIAction.PASS for _ in range(2000)
        )
        assert 300 < passes < 500


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
