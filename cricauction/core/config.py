"""
League configuration parameters for cricauction.

Defines purse, squad limits, retention pricing, bidding policy weights and
timer delays. One engine is parameterized by this structure instead of
separate engine variants per purse size.
"""

import json
import os
from dataclasses import dataclass, fields, replace
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from dotenv import load_dotenv

from cricauction.core.errors import ConfigError
from cricauction.utils.validation import to_money, validate_amount

ENV_PREFIX = "CRICAUCTION_"


@dataclass(frozen=True)
class AuctionConfig:
    """League-wide configuration parameters"""

    # Squad rules
    purse: Decimal = Decimal("120.00")  # Starting budget per team
    roster_floor: int = 18  # Minimum squad size to end the auction
    roster_ceiling: int = 25  # Per-team slots used for the capacity rule
    overseas_ceiling: int = 8  # Overseas players before the AI penalty applies
    role_ceiling: int = 8  # Players of one role before the AI penalty applies
    domestic_nationality: str = "Indian"

    # Retention
    retention_enabled: bool = True
    retention_max_total: int = 6
    retention_max_capped: int = 5
    retention_max_uncapped: int = 2
    capped_tiers: Tuple[Decimal, ...] = (
        Decimal("18"), Decimal("14"), Decimal("11"), Decimal("18"), Decimal("14"),
    )
    uncapped_price: Decimal = Decimal("4")

    # Lot importance (exempt from the capacity rule)
    important_rating: int = 85
    important_base_price: Decimal = Decimal("2")
    capacity_unsold_chance: float = 0.4

    # Bidding policy
    ai_pass_chance: float = 0.2
    ai_jitter_low: float = 0.9
    ai_jitter_high: float = 1.1
    star_rating: int = 90
    star_bonus: float = 20.0
    role_penalty: float = 50.0
    overseas_penalty: float = 50.0

    # Timers (seconds)
    ai_delay: float = 3.5
    fair_warning_delay: float = 5.0
    final_warning_delay: float = 15.0
    auto_sell_delay: float = 25.0

    # Display
    recent_bidders_limit: int = 2

    def __post_init__(self):
        valid, err = self.validate()
        if not valid:
            raise ConfigError(err)

    def validate(self) -> Tuple[bool, str]:
        """Check cross-field constraints. Returns (is_valid, error_message)."""
        for name in ("purse", "uncapped_price", "important_base_price"):
            valid, err = validate_amount(getattr(self, name), name)
            if not valid:
                return valid, err

        if not self.capped_tiers:
            return False, "capped_tiers must not be empty"

        if self.roster_floor < 0 or self.roster_ceiling < self.roster_floor:
            return False, "roster_ceiling must be >= roster_floor >= 0"

        if self.retention_max_capped + self.retention_max_uncapped < self.retention_max_total:
            return False, "retention category limits cannot fill retention_max_total"

        for name in ("capacity_unsold_chance", "ai_pass_chance"):
            chance = getattr(self, name)
            if not 0.0 <= chance <= 1.0:
                return False, f"{name} must be within [0, 1], got {chance}"

        if self.ai_jitter_low > self.ai_jitter_high:
            return False, "ai_jitter_low must be <= ai_jitter_high"

        if not 0 < self.fair_warning_delay < self.final_warning_delay < self.auto_sell_delay:
            return False, "timer delays must satisfy 0 < fair < final < auto_sell"

        if self.ai_delay <= 0:
            return False, "ai_delay must be > 0"

        return True, ""

    @classmethod
    def classic(cls, **overrides) -> "AuctionConfig":
        """Smaller-purse league without a retention phase."""
        base = {"purse": Decimal("100.00"), "retention_enabled": False}
        base.update(overrides)
        return cls(**base)

    def with_overrides(self, **overrides) -> "AuctionConfig":
        """Copy of this config with some fields replaced."""
        return replace(self, **overrides)


def _coerce(name: str, raw: Any, current: Any) -> Any:
    """Convert a raw env/JSON value to the type of the existing field value."""
    try:
        if isinstance(current, bool):
            if isinstance(raw, str):
                return raw.strip().lower() in ("1", "true", "yes", "on")
            return bool(raw)
        if isinstance(current, Decimal):
            return to_money(raw)
        if isinstance(current, int):
            return int(raw)
        if isinstance(current, float):
            return float(raw)
        if isinstance(current, tuple):
            items = raw.split(",") if isinstance(raw, str) else list(raw)
            return tuple(to_money(item) for item in items)
    except (ArithmeticError, TypeError, ValueError) as e:
        raise ConfigError(f"Invalid value for {name}: {raw!r}") from e
    return str(raw)


def _env_overrides(defaults: AuctionConfig) -> Dict[str, Any]:
    overrides = {}
    for f in fields(AuctionConfig):
        raw = os.environ.get(ENV_PREFIX + f.name.upper())
        if raw is not None:
            overrides[f.name] = _coerce(f.name, raw, getattr(defaults, f.name))
    return overrides


def load_config(config_path: Optional[str] = None, use_env: bool = True) -> AuctionConfig:
    """
    Load configuration from environment and optional JSON file.

    Precedence: JSON file over ``CRICAUCTION_*`` environment variables
    (a ``.env`` file is read first) over defaults.

    Args:
        config_path: Optional path to a JSON object of field overrides
        use_env: Whether to consult the environment

    Returns:
        AuctionConfig instance
    """
    defaults = AuctionConfig()
    overrides: Dict[str, Any] = {}

    if use_env:
        load_dotenv()
        overrides.update(_env_overrides(defaults))

    if config_path:
        path = Path(config_path)
        try:
            data = json.loads(path.read_text())
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Cannot read config {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Config {path} must contain a JSON object")

        known = {f.name for f in fields(AuctionConfig)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown config keys: {', '.join(unknown)}")

        for name, raw in data.items():
            overrides[name] = _coerce(name, raw, getattr(defaults, name))

    return replace(defaults, **overrides) if overrides else defaults
