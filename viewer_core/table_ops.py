# viewer_core/table_ops.py
from __future__ import annotations
import csv
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

import pandas as pd

from viewer_core.errors import ExportFailed

logger = logging.getLogger("table_ops")


@dataclass
class ResultTable:
    """Materialized query result: column names plus rows of string cells."""
    header: List[str]
    rows: List[List[str]] = field(default_factory=list)

    def __post_init__(self):
        width = len(self.header)
        for i, row in enumerate(self.rows):
            if len(row) != width:
                raise ValueError(f"row {i} has {len(row)} cells, expected {width}")

    def __len__(self) -> int:
        return len(self.rows)

    def column(self, index: int) -> List[str]:
        return [row[index] for row in self.rows]

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(self.rows, columns=self.header, dtype=str)


def render_lines(table: ResultTable, width: int = 15) -> List[str]:
    """Header line, a blank separator and one fixed-width line per row."""
    lines = ["".join(str(c).ljust(width) for c in table.header), " "]
    for row in table.rows:
        lines.append("".join(str(c).ljust(width) for c in row))
    return lines


def csv_path_for(path: str | Path) -> Path:
    p = str(path)
    if not p.endswith(".csv"):
        p += ".csv"
    return Path(p)


def export_csv(table: ResultTable, path: str | Path) -> Path:
    # every field quoted, embedded quotes doubled
    out = csv_path_for(path)
    try:
        table.to_frame().to_csv(
            out, index=False, quoting=csv.QUOTE_ALL,
            lineterminator="\n", encoding="utf-8",
        )
    except OSError as e:
        logger.warning("CSV export to %s failed: %s", out, e)
        raise ExportFailed(f"Failed to open file for writing: {out}") from e
    logger.info("Exported %d rows to %s", len(table), out)
    return out
