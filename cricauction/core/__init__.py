"""
Auction core: catalog, retention, engine, bidding policy and timers.
"""

from cricauction.core.config import AuctionConfig, load_config
from cricauction.core.engine import AuctionEngine
from cricauction.core.report import ReportRow, build_report, write_report

__all__ = [
    "AuctionConfig",
    "AuctionEngine",
    "ReportRow",
    "build_report",
    "load_config",
    "write_report",
]
