"""
Input Validation - sanitization for commands coming from the UI layer.

Provides validation for every external input the engine accepts:
- Team identifiers
- Roster positions
- Money amounts
- Player id selections
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Optional, Tuple

# =============================================================================
# Constants
# =============================================================================

MAX_TEAMS = 32
MAX_SELECTION_LENGTH = 64
MAX_AMOUNT = Decimal("100000")
MONEY_QUANTUM = Decimal("0.01")


# =============================================================================
# Validation Functions
# =============================================================================


def validate_integer(
    value: Any,
    name: str,
    min_val: int = 0,
    max_val: Optional[int] = None,
) -> Tuple[bool, str]:
    """
    Validate integer within bounds.

    Args:
        value: Value to validate
        name: Field name for errors
        min_val: Minimum allowed value
        max_val: Maximum allowed value (inclusive), unbounded if None

    Returns:
        (is_valid, error_message)
    """
    # bool is an int subclass, but True is never a meaningful id
    if isinstance(value, bool) or not isinstance(value, int):
        return False, f"{name} must be int, got {type(value).__name__}"

    if value < min_val:
        return False, f"{name} must be >= {min_val}, got {value}"

    if max_val is not None and value > max_val:
        return False, f"{name} must be <= {max_val}, got {value}"

    return True, ""


def validate_team_id(team_id: Any, known_ids: Iterable[int]) -> Tuple[bool, str]:
    """Validate that a team id refers to a team in the league."""
    valid, err = validate_integer(team_id, "team_id", min_val=1)
    if not valid:
        return valid, err

    if team_id not in set(known_ids):
        return False, f"Unknown team {team_id}"

    return True, ""


def validate_index(index: Any, name: str, length: int, allow_end: bool = False) -> Tuple[bool, str]:
    """
    Validate a list position.

    Args:
        index: Position to validate
        name: Field name for errors
        length: Length of the list being indexed
        allow_end: Accept ``length`` itself (insertion at the end)
    """
    upper = length if allow_end else length - 1
    if upper < 0:
        return False, f"{name} out of range: list is empty"
    return validate_integer(index, name, 0, upper)


def to_money(value: Any) -> Decimal:
    """
    Convert a number to a two-place Decimal.

    Floats go through ``str`` so 1.1 becomes Decimal("1.10") rather than
    its binary expansion.
    """
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, float):
        amount = Decimal(str(value))
    else:
        amount = Decimal(value)
    return amount.quantize(MONEY_QUANTUM)


def validate_amount(value: Any, name: str = "amount") -> Tuple[bool, str]:
    """Validate a money amount (non-negative, bounded, numeric)."""
    if isinstance(value, bool):
        return False, f"{name} must be numeric, got bool"

    try:
        amount = to_money(value)
    except (InvalidOperation, TypeError, ValueError):
        return False, f"{name} must be numeric, got {value!r}"

    if not amount.is_finite():
        return False, f"{name} must be finite"

    if amount < 0:
        return False, f"{name} must be >= 0, got {amount}"

    if amount > MAX_AMOUNT:
        return False, f"{name} must be <= {MAX_AMOUNT}, got {amount}"

    return True, ""


def validate_selection(ids: Any, name: str = "selected_ids") -> Tuple[bool, str]:
    """
    Validate a list of player ids.

    Rejects non-lists, oversized lists, non-integer ids and duplicates.
    """
    if not isinstance(ids, (list, tuple)):
        return False, f"{name} must be list/tuple, got {type(ids).__name__}"

    if len(ids) > MAX_SELECTION_LENGTH:
        return False, f"{name} exceeds max length {MAX_SELECTION_LENGTH}, got {len(ids)}"

    for player_id in ids:
        valid, err = validate_integer(player_id, f"{name} entry")
        if not valid:
            return valid, err

    if len(set(ids)) != len(ids):
        return False, f"{name} contains duplicates"

    return True, ""
