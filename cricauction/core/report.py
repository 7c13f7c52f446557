"""
Auction sheet export.

Flattens the transaction log into one row per catalog player, in catalog
order, for document generators (PDF, spreadsheets).
"""

import csv
import json
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import Iterable, List, Sequence, Union

from cricauction.core.auction import LotRecord
from cricauction.utils.logger import get_logger

logger = get_logger("report")

REPORT_COLUMNS = ("name", "role", "base_price", "final_price", "team")


@dataclass(frozen=True)
class ReportRow:
    name: str
    role: str
    base_price: Decimal
    final_price: Decimal
    team: str

    def as_dict(self) -> dict:
        return {
            "name": self.name,
            "role": self.role,
            "base_price": str(self.base_price),
            "final_price": str(self.final_price),
            "team": self.team,
        }


def build_report(log: Iterable[LotRecord]) -> List[ReportRow]:
    """One row per lot record, preserving order."""
    return [
        ReportRow(
            name=record.player_name,
            role=record.role.value,
            base_price=record.base_price,
            final_price=record.final_price,
            team=record.team_name,
        )
        for record in log
    ]


def write_csv(rows: Sequence[ReportRow], path: Union[str, Path]) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="", encoding="utf-8") as fh:
        writer = csv.DictWriter(fh, fieldnames=REPORT_COLUMNS)
        writer.writeheader()
        for row in rows:
            writer.writerow(row.as_dict())
    logger.info(f"Wrote {len(rows)} report rows to {path}")
    return path


def write_json(rows: Sequence[ReportRow], path: Union[str, Path]) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps([row.as_dict() for row in rows], indent=2, ensure_ascii=False))
    logger.info(f"Wrote {len(rows)} report rows to {path}")
    return path


def write_report(rows: Sequence[ReportRow], path: Union[str, Path]) -> Path:
    """Write CSV or JSON depending on the file suffix."""
    if Path(path).suffix.lower() == ".json":
        return write_json(rows, path)
    return write_csv(rows, path)
