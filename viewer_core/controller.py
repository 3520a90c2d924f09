# viewer_core/controller.py
from __future__ import annotations
import logging
import random
from pathlib import Path
from typing import Callable, Dict, List, Optional, Protocol, Tuple

from sqlalchemy.engine import Engine

from viewer_core.config import Settings
from viewer_core.db_ops import is_read_query, open_database as open_engine, run_query, select_all_sql
from viewer_core.errors import (
    MSG_NO_DATABASE, MSG_NO_EXPORT_DATA, MSG_READ_ONLY, ViewerError,
)
from viewer_core.history import QueryHistory
from viewer_core.plotting import Chart, PlotStyle, PlotWindowPool, build_figure
from viewer_core.selection import PlotKind, PlotRequest, TableSelection, column_options
from viewer_core.table_ops import ResultTable, export_csv as write_csv, render_lines

logger = logging.getLogger("controller")

SHOW_HINTS = "Show Examples"
HIDE_HINTS = "Hide Examples"


class ViewerView(Protocol):
    """What the controller needs from a window. The Qt window and test fakes implement it."""

    def show_lines(self, lines: List[str]) -> None: ...
    def show_message(self, text: str) -> None: ...
    def set_status(self, text: str) -> None: ...
    def set_db_label(self, text: str) -> None: ...
    def set_table_names(self, names: List[str]) -> None: ...
    def set_table_selection(self, selection: TableSelection) -> None: ...
    def set_column_options(self, options: List[str]) -> None: ...
    def set_y_enabled(self, enabled: bool) -> None: ...
    def set_history(self, items: List[str]) -> None: ...
    def set_hints(self, lines: List[str]) -> None: ...
    def set_hints_visible(self, visible: bool, button_label: str) -> None: ...
    def sql_text(self) -> str: ...
    def clear_sql(self) -> None: ...
    def plot_selection(self) -> Tuple[PlotKind, int, int]: ...
    def ask_open_path(self) -> Optional[str]: ...
    def ask_save_path(self) -> Optional[str]: ...
    def create_plot_window(self, figure, name: str, on_close: Callable) -> object: ...


def load_hints(path: Path) -> List[str]:
    try:
        return path.read_text(encoding="utf-8").splitlines()
    except OSError as e:
        logger.warning("Hint file %s not loaded: %s", path, e)
        return [f"Failed to load {path}"]


class ViewerController:
    def __init__(self, view: ViewerView, settings: Settings, rng: random.Random | None = None):
        self.view = view
        self.s = settings

        # database
        self.engine: Engine | None = None
        self.db_path: str | None = None

        # loaded data
        self.table: ResultTable | None = None
        self.selection = TableSelection.nothing()
        self.history = QueryHistory(settings.max_history)

        # plotting
        self.dims = 1
        self.style = PlotStyle()
        self.rng = rng or random.Random()
        self.pool = PlotWindowPool(settings.max_plots, self._make_plot_window)
        self.last_chart: Chart | None = None

        self.hints_visible = False

    # ---- wiring ----
    def handlers(self) -> Dict[str, Callable]:
        return {
            "change_file": self.change_file,
            "select_table": self.select_table,
            "run_sql": self.run_sql,
            "export_csv": self.export_csv,
            "toggle_hints": self.toggle_hints,
            "dimension_changed": self.set_dimensions,
            "plot": self.plot,
        }

    def _make_plot_window(self, figure, name: str):
        return self.view.create_plot_window(figure, name, self.pool.discard)

    # ---- lifecycle ----
    def start(self, initial_path: str | None = None) -> None:
        self.view.set_hints(load_hints(self.s.hints_path))
        self.view.set_hints_visible(False, SHOW_HINTS)
        self.view.set_history([])
        self.view.set_column_options(column_options([]))
        self.view.set_y_enabled(False)
        self.view.set_db_label("Database: (none)")

        path = initial_path or self.s.db_path
        if path:
            self.open_database(path)
        else:
            self.change_file()

    def shutdown(self) -> None:
        self.pool.close_all()
        if self.engine is not None:
            self.engine.dispose()
            self.engine = None

    # ---- database ----
    def change_file(self) -> None:
        path = self.view.ask_open_path()
        if not path:
            logger.info("No database file selected.")
            return
        self.open_database(path)

    def open_database(self, path: str) -> bool:
        try:
            engine, names = open_engine(path)
        except ViewerError as e:
            self.view.show_message(str(e))
            return False

        if self.engine is not None:
            self.engine.dispose()
        self.engine, self.db_path = engine, str(path)

        self.view.set_db_label(f"Database: {path}")
        self.view.set_table_names(names)
        self._set_selection(TableSelection.nothing())
        self._unload()
        self.view.set_status(f"{len(names)} tables")
        return True

    @property
    def has_database(self) -> bool:
        return self.engine is not None

    # ---- tables / queries ----
    def select_table(self, name: str) -> None:
        if not name or self.engine is None:
            return
        try:
            table = run_query(self.engine, select_all_sql(name))
        except ViewerError as e:
            self._fail(str(e))
            return
        self._load(table)
        self._set_selection(TableSelection.named(name))

    def run_sql(self) -> None:
        sql = self.view.sql_text()

        self.history.push(sql)
        self.view.set_history(self.history.items())

        if not is_read_query(sql):
            self._fail(MSG_READ_ONLY)
            return
        if self.engine is None:
            self._fail(MSG_NO_DATABASE)
            return
        try:
            table = run_query(self.engine, sql)
        except ViewerError as e:
            self._fail(str(e))
            return

        self._load(table)
        self._set_selection(TableSelection.custom())
        self.view.clear_sql()

    def _set_selection(self, selection: TableSelection) -> None:
        self.selection = selection
        self.view.set_table_selection(selection)

    def _load(self, table: ResultTable) -> None:
        self.table = table
        self.view.show_lines(render_lines(table, self.s.cell_width))
        self.view.set_column_options(column_options(table.header))
        self.view.set_status(f"{len(table)} rows")

    def _unload(self) -> None:
        self.table = None
        self.view.show_lines([])
        self.view.set_column_options(column_options([]))

    def _fail(self, message: str) -> None:
        # a failed load never leaves the previous result on screen or in the selectors
        self._unload()
        self._set_selection(TableSelection.nothing())
        self.view.show_message(message)

    # ---- export ----
    def export_csv(self) -> None:
        if self.table is None or not self.table.rows:
            self.view.set_status(MSG_NO_EXPORT_DATA)
            return
        path = self.view.ask_save_path()
        if not path:
            return
        try:
            out = write_csv(self.table, path)
        except ViewerError as e:
            self.view.set_status(str(e))
            return
        self.view.set_status(f"CSV export complete: {out}")

    # ---- hints ----
    def toggle_hints(self) -> None:
        self.hints_visible = not self.hints_visible
        self.view.set_hints_visible(self.hints_visible, HIDE_HINTS if self.hints_visible else SHOW_HINTS)

    # ---- plotting ----
    def set_dimensions(self, dims: int) -> None:
        self.dims = 2 if dims == 2 else 1
        self.view.set_y_enabled(self.dims == 2)

    def plot(self) -> None:
        self.last_chart = None
        kind, x_option, y_option = self.view.plot_selection()
        request = PlotRequest.from_ui(kind, self.dims, x_option, y_option)
        try:
            chart = build_figure(self.table, request, self.style)
        except ViewerError as e:
            logger.warning("Plot aborted: %s", e)
            self.view.show_message(str(e))
            return
        self.pool.open(chart.figure, f"canvas_{self.rng.randrange(10**9)}")
        self.last_chart = chart
