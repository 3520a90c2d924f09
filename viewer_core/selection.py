# viewer_core/selection.py
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional


class SelectionKind(Enum):
    NONE = "none"
    NAMED = "named"
    CUSTOM = "custom"


@dataclass(frozen=True)
class TableSelection:
    """What the table picker points at: nothing, a named table or a custom query result."""
    kind: SelectionKind = SelectionKind.NONE
    name: Optional[str] = None

    @classmethod
    def nothing(cls) -> "TableSelection":
        return cls()

    @classmethod
    def named(cls, name: str) -> "TableSelection":
        return cls(SelectionKind.NAMED, name)

    @classmethod
    def custom(cls) -> "TableSelection":
        return cls(SelectionKind.CUSTOM)

    @property
    def is_custom(self) -> bool:
        return self.kind is SelectionKind.CUSTOM


class PlotKind(Enum):
    HISTOGRAM = "Histogram"
    SCATTER = "Scatter"


@dataclass(frozen=True)
class PlotRequest:
    kind: PlotKind
    dims: int
    x_index: Optional[int]
    y_index: Optional[int] = None

    @classmethod
    def from_ui(cls, kind: PlotKind, dims: int, x_option: int, y_option: int) -> "PlotRequest":
        # option 0 is the blank entry, column i sits at option i + 1
        x = x_option - 1 if x_option > 0 else None
        y = y_option - 1 if (dims == 2 and y_option > 0) else None
        return cls(kind=kind, dims=dims, x_index=x, y_index=y)


def column_options(header: List[str]) -> List[str]:
    return [""] + list(header)
