"""
Retention: positional tier pricing and the pre-auction selection.
"""

from cricauction.core.retention.resolver import (
    RetentionSelection,
    retention_prices,
    check_limits,
    resolve_retention,
)

__all__ = [
    "RetentionSelection",
    "retention_prices",
    "check_limits",
    "resolve_retention",
]
