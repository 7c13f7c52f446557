"""
Player records.

Players are created once from the catalog and never mutated; teams hold
references to the same frozen instances.
"""

from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from cricauction.utils.validation import to_money


class Role(str, Enum):
    """Playing role of a cricketer."""
    BATSMAN = "Batsman"
    BOWLER = "Bowler"
    ALL_ROUNDER = "All-Rounder"
    WICKETKEEPER = "Wicketkeeper"


class Player(BaseModel):
    """A draftable player with fixed attributes and a base price."""

    id: int = Field(..., ge=1)
    name: str = Field(..., min_length=1)
    role: Role
    nationality: str = Field(..., min_length=1)
    base_price: Decimal = Field(..., ge=0)
    rating: Optional[int] = Field(default=None, ge=0, le=100)
    is_capped: bool = False

    # Career profile
    age: int = 0
    matches: int = 0
    runs: int = 0
    highest_score: int = 0
    wickets: int = 0
    best_bowling: str = "0/0"
    batting_average: float = 0.0
    batting_strike_rate: float = 0.0
    bowling_average: float = 0.0
    bowling_economy: float = 0.0
    bowling_strike_rate: float = 0.0
    image: str = ""

    # Accepts both snake_case and the camelCase keys of exported player sheets
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    @field_validator("base_price", mode="before")
    @classmethod
    def _two_places(cls, value):
        try:
            return to_money(value)
        except (ArithmeticError, TypeError) as e:
            raise ValueError(f"base_price must be numeric, got {value!r}") from e

    def is_overseas(self, domestic_nationality: str = "Indian") -> bool:
        return self.nationality != domestic_nationality

    def is_important(self, min_rating: int = 85, min_base_price: Decimal = Decimal("2")) -> bool:
        """Whether the lot is exempt from the capacity-pressure unsold rule."""
        if self.rating is not None and self.rating >= min_rating:
            return True
        return self.base_price >= min_base_price

    def is_star(self, star_rating: int = 90) -> bool:
        return self.rating is not None and self.rating >= star_rating
