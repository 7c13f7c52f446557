"""
Roster catalog: player records, catalog generation and loading,
previous-season rosters.
"""

from cricauction.core.catalog.player import Player, Role
from cricauction.core.catalog.catalog import (
    PlayerCatalog,
    PreviousRoster,
    FRANCHISES,
    NATIONALITIES,
    DEFAULT_CATALOG_SIZE,
    generate_player,
    generate_catalog,
    generate_previous_rosters,
    load_previous_rosters,
    parse_previous_rosters,
)

__all__ = [
    "Player",
    "Role",
    "PlayerCatalog",
    "PreviousRoster",
    "FRANCHISES",
    "NATIONALITIES",
    "DEFAULT_CATALOG_SIZE",
    "generate_player",
    "generate_catalog",
    "generate_previous_rosters",
    "load_previous_rosters",
    "parse_previous_rosters",
]
