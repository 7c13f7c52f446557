"""
Auction errors.

Commands raise these internally; the engine's public commands catch them
and report ``(success, error_message)`` plus a notification event, so a
rejected action never escapes to the caller as an exception.

CatalogError and ConfigError are raised directly by the loaders.
"""

from typing import Optional


class AuctionError(Exception):
    """Base class for auction-specific errors."""

    def __init__(self, message: str = "", team_id: Optional[int] = None):
        super().__init__(message)
        self.team_id = team_id


class RuleViolation(AuctionError):
    """A league rule would be broken (retention limits, budget)."""


class IneligibleAction(AuctionError):
    """The acting team may not take this action right now."""


class IncompleteRosterBlock(AuctionError):
    """The catalog is exhausted but some teams are below the roster floor."""

    def __init__(self, short_teams):
        self.short_teams = list(short_teams)
        names = ", ".join(team.name for team in self.short_teams)
        super().__init__(f"Teams below roster floor: {names}")


class UnknownTeamError(AuctionError):
    """A team id that is not part of the league."""


class CatalogError(AuctionError):
    """A catalog or previous-roster file could not be loaded."""


class ConfigError(AuctionError):
    """Invalid auction configuration."""
