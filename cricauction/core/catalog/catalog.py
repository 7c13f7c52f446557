"""
Roster Catalog - the ordered, read-only list of draftable players.

Provides:
- The default ten-franchise league
- Seeded catalog generation with role-based career profiles
- JSON load/save for catalogs
- Previous-season rosters used as the retention pool
"""

import json
import random
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple, Union

from pydantic import ValidationError

from cricauction.core.catalog.player import Player, Role
from cricauction.core.errors import CatalogError
from cricauction.utils.logger import get_logger

logger = get_logger("catalog")


# =============================================================================
# Constants
# =============================================================================

FRANCHISES: Tuple[Tuple[int, str], ...] = (
    (1, "Chennai Super Kings"),
    (2, "Rajasthan Royals"),
    (3, "Kolkata Knight Riders"),
    (4, "Sunrisers Hyderabad"),
    (5, "Royal Challengers Bangalore"),
    (6, "Delhi Capitals"),
    (7, "Punjab Kings"),
    (8, "Mumbai Indians"),
    (9, "Gujarat Titans"),
    (10, "Lucknow Super Giants"),
)

NATIONALITIES = (
    "Indian",
    "Australian",
    "English",
    "South African",
    "New Zealander",
    "Sri Lankan",
    "Bangladeshi",
    "Pakistani",
    "West Indian",
    "Afghan",
)

DEFAULT_CATALOG_SIZE = 500

# Players with at least this many matches are flagged capped
CAPPED_MATCHES = 60

_FIRST_NAMES = (
    "Aarav", "Rohan", "Vikram", "Arjun", "Kabir", "Ishaan", "Dev", "Rahul",
    "Jack", "Liam", "Oliver", "Mitchell", "Glenn", "Kane", "Trent", "Quinton",
    "Kagiso", "Dasun", "Wanindu", "Shakib", "Mehidy", "Babar", "Shaheen",
    "Nicholas", "Andre", "Rashid", "Mujeeb", "Sam", "Harry", "Ben",
)
_LAST_NAMES = (
    "Sharma", "Patel", "Iyer", "Reddy", "Singh", "Kumar", "Chahar", "Pandya",
    "Smith", "Warner", "Root", "Buttler", "Williamson", "Boult", "de Kock",
    "Rabada", "Shanaka", "Hasaranga", "Hasan", "Miraz", "Azam", "Afridi",
    "Pooran", "Russell", "Khan", "Rahman", "Curran", "Brook", "Stokes", "Head",
)


# =============================================================================
# Generation
# =============================================================================


def _rand(rng: random.Random, low: float, high: float, decimals: int = 2) -> float:
    return round(rng.uniform(low, high), decimals)


def generate_player(player_id: int, rng: random.Random) -> Player:
    """Generate one player with a career profile matching its role."""
    role = rng.choice(list(Role))
    stats: Dict[str, Any] = {}

    if role is Role.BATSMAN:
        stats.update(
            runs=int(_rand(rng, 800, 6000, 0)),
            highest_score=int(_rand(rng, 10, 125, 0)),
            batting_average=_rand(rng, 25, 55),
            batting_strike_rate=_rand(rng, 110, 170),
        )
    elif role is Role.BOWLER:
        wickets = int(_rand(rng, 40, 250, 0))
        stats.update(
            wickets=wickets,
            best_bowling=f"{rng.randint(2, 6)}/{rng.randint(5, 40)}",
            bowling_average=_rand(rng, 18, 35),
            bowling_economy=_rand(rng, 5.5, 9.5),
            bowling_strike_rate=_rand(rng, 12, 45),
        )
    elif role is Role.ALL_ROUNDER:
        stats.update(
            runs=int(_rand(rng, 500, 4000, 0)),
            wickets=int(_rand(rng, 30, 180, 0)),
            batting_average=_rand(rng, 25, 45),
            batting_strike_rate=_rand(rng, 100, 150),
            bowling_average=_rand(rng, 20, 35),
            bowling_economy=_rand(rng, 6.0, 9.0),
            bowling_strike_rate=_rand(rng, 15, 40),
        )
    else:
        stats.update(
            runs=int(_rand(rng, 1000, 4500, 0)),
            batting_average=_rand(rng, 28, 48),
            batting_strike_rate=_rand(rng, 110, 160),
        )

    matches = int(_rand(rng, 20, 200, 0))
    return Player(
        id=player_id,
        name=f"{rng.choice(_FIRST_NAMES)} {rng.choice(_LAST_NAMES)}",
        role=role,
        nationality=rng.choice(NATIONALITIES),
        base_price=_rand(rng, 0.5, 5),
        rating=rng.randint(50, 99),
        is_capped=matches >= CAPPED_MATCHES,
        age=int(_rand(rng, 19, 38, 0)),
        matches=matches,
        image=f"/images/players/player{(player_id % 10) + 1}.png",
        **stats,
    )


def generate_catalog(
    count: int = DEFAULT_CATALOG_SIZE,
    seed: Optional[int] = None,
    rng: Optional[random.Random] = None,
) -> "PlayerCatalog":
    """
    Generate a catalog of ``count`` players with sequential ids from 1.

    Args:
        count: Number of players
        seed: Seed for a fresh random source (ignored when rng is given)
        rng: Random source to draw from
    """
    rng = rng or random.Random(seed)
    players = [generate_player(i, rng) for i in range(1, count + 1)]
    logger.info(f"Generated catalog of {count} players")
    return PlayerCatalog(players)


# =============================================================================
# Catalog
# =============================================================================


class PlayerCatalog:
    """
    Frozen, ordered collection of players.

    Auction order is catalog order. Player ids must be unique.
    """

    def __init__(self, players: Iterable[Player]):
        self._players: Tuple[Player, ...] = tuple(players)
        self._by_id: Dict[int, Player] = {}
        for player in self._players:
            if player.id in self._by_id:
                raise CatalogError(f"Duplicate player id {player.id}")
            self._by_id[player.id] = player

    def __len__(self) -> int:
        return len(self._players)

    def __iter__(self) -> Iterator[Player]:
        return iter(self._players)

    def __getitem__(self, index: int) -> Player:
        return self._players[index]

    def __contains__(self, player_id: object) -> bool:
        return player_id in self._by_id

    @property
    def players(self) -> Tuple[Player, ...]:
        return self._players

    def get(self, player_id: int) -> Optional[Player]:
        return self._by_id.get(player_id)

    # =========================================================================
    # Serialization
    # =========================================================================

    @classmethod
    def from_records(cls, records: Sequence[Dict[str, Any]]) -> "PlayerCatalog":
        """Build a catalog from plain dicts, validating every record."""
        players = []
        for i, record in enumerate(records):
            try:
                players.append(Player.model_validate(record))
            except ValidationError as e:
                raise CatalogError(f"Invalid player record #{i}: {e}") from e
        return cls(players)

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "PlayerCatalog":
        """Load a catalog from a JSON array of player objects."""
        data = _read_json(Path(path))
        if not isinstance(data, list):
            raise CatalogError(f"Catalog {path} must contain a JSON array")
        catalog = cls.from_records(data)
        logger.info(f"Loaded catalog of {len(catalog)} players from {path}")
        return catalog

    def to_records(self) -> List[Dict[str, Any]]:
        return [player.model_dump(mode="json") for player in self._players]

    def to_json(self, path: Union[str, Path]) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(self.to_records(), indent=2))
        logger.info(f"Saved catalog of {len(self)} players to {path}")


def _read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text())
    except (OSError, json.JSONDecodeError) as e:
        raise CatalogError(f"Cannot read {path}: {e}") from e


# =============================================================================
# Previous Rosters (retention pool)
# =============================================================================


@dataclass(frozen=True)
class PreviousRoster:
    """Players a team held last season, eligible for retention."""
    team_id: int
    players: Tuple[Player, ...]


def _flatten_rosters(node: Any, out: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Collect ``{teamId, players}`` objects from arbitrarily nested arrays."""
    if isinstance(node, list):
        for item in node:
            _flatten_rosters(item, out)
    elif isinstance(node, dict) and (node.get("teamId") or node.get("team_id")):
        out.append(node)
    return out


def parse_previous_rosters(data: Any) -> Dict[int, PreviousRoster]:
    """Validate nested previous-roster data into a team_id -> roster mapping."""
    rosters: Dict[int, PreviousRoster] = {}
    for record in _flatten_rosters(data, []):
        team_id = record.get("teamId") or record.get("team_id")
        try:
            players = tuple(Player.model_validate(p) for p in record.get("players", []))
        except ValidationError as e:
            raise CatalogError(f"Invalid previous roster for team {team_id}: {e}") from e
        rosters[int(team_id)] = PreviousRoster(team_id=int(team_id), players=players)
    return rosters


def load_previous_rosters(path: Union[str, Path]) -> Dict[int, PreviousRoster]:
    """Load previous-season rosters from JSON."""
    rosters = parse_previous_rosters(_read_json(Path(path)))
    logger.info(f"Loaded previous rosters for {len(rosters)} teams from {path}")
    return rosters


def generate_previous_rosters(
    catalog: PlayerCatalog,
    team_ids: Sequence[int],
    per_team: int = 8,
    seed: Optional[int] = None,
    rng: Optional[random.Random] = None,
) -> Dict[int, PreviousRoster]:
    """
    Deal disjoint previous-season rosters out of the catalog.

    Each team receives ``per_team`` players (fewer if the catalog runs out).
    """
    rng = rng or random.Random(seed)
    pool = list(catalog)
    rng.shuffle(pool)

    rosters = {}
    for team_id in team_ids:
        picked, pool = pool[:per_team], pool[per_team:]
        rosters[team_id] = PreviousRoster(team_id=team_id, players=tuple(picked))
    return rosters
