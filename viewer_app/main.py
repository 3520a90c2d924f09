# viewer_app/main.py
# PyQt5 SQLite viewer: browse tables, run SELECT queries, export CSV, plot columns.

from __future__ import annotations
import sys, traceback, argparse, logging
from typing import Callable, List, Optional, Tuple

from PyQt5.QtCore import Qt, QTimer
from PyQt5.QtGui import QFontDatabase
from PyQt5.QtWidgets import (
    QApplication, QWidget, QHBoxLayout, QVBoxLayout, QLabel, QPushButton,
    QFileDialog, QComboBox, QMessageBox, QPlainTextEdit, QGroupBox,
)
from matplotlib.backends.backend_qt5agg import FigureCanvasQTAgg as FigureCanvas
from matplotlib.backends.backend_qt5agg import NavigationToolbar2QT as NavigationToolbar

# --- core modules ---
from viewer_core.config import get_settings, setup_logging
from viewer_core.controller import ViewerController
from viewer_core.selection import PlotKind, SelectionKind, TableSelection

logger = logging.getLogger("app")


# -------- global excepthook --------
def _excepthook(et, ev, tb):
    msg = "".join(traceback.format_exception(et, ev, tb))[-4000:]
    print(msg, file=sys.stderr)
    try:
        QMessageBox.critical(None, "Unhandled Error", msg)
    except Exception:
        pass
sys.excepthook = _excepthook


# -------- plot window --------
class PlotWindow(QWidget):
    """Top-level window holding one matplotlib figure."""
    def __init__(self, figure, name: str, on_close: Callable | None = None):
        super().__init__(None)
        self.name = name
        self._on_close = on_close
        self.setObjectName(name)
        self.setWindowTitle("Plot")
        self.setAttribute(Qt.WA_DeleteOnClose)
        self.resize(800, 600)

        self.canvas = FigureCanvas(figure)
        lay = QVBoxLayout(self)
        lay.addWidget(NavigationToolbar(self.canvas, self))
        lay.addWidget(self.canvas, 1)
        self.canvas.draw()

    def closeEvent(self, e):
        if self._on_close is not None:
            self._on_close(self)
            self._on_close = None
        super().closeEvent(e)


# -------- main window --------
class ViewerWindow(QWidget):
    def __init__(self):
        super().__init__()
        self.setWindowTitle("SQLite Viewer")
        self.resize(1000, 700)
        self.controller: ViewerController | None = None

        mono = QFontDatabase.systemFont(QFontDatabase.FixedFont)
        main = QVBoxLayout(self)

        # file row
        file_row = QHBoxLayout()
        self.db_label = QLabel("Database: (none)")
        self.btn_change = QPushButton("Change File")
        file_row.addWidget(self.db_label); file_row.addWidget(self.btn_change); file_row.addStretch(1)
        main.addLayout(file_row)

        # table row
        table_row = QHBoxLayout()
        table_row.addWidget(QLabel("Table:"))
        self.table_box = QComboBox(); self.table_box.setMinimumWidth(200)
        table_row.addWidget(self.table_box); table_row.addStretch(1)
        main.addLayout(table_row)

        # results | plot controls
        middle = QHBoxLayout()
        result_col = QVBoxLayout()
        self.data_view = QPlainTextEdit(); self.data_view.setReadOnly(True)
        self.data_view.setLineWrapMode(QPlainTextEdit.NoWrap); self.data_view.setFont(mono)
        result_col.addWidget(self.data_view, 1)
        export_row = QHBoxLayout(); export_row.addStretch(1)
        self.btn_export = QPushButton("Save as CSV"); export_row.addWidget(self.btn_export)
        result_col.addLayout(export_row)
        middle.addLayout(result_col, 4)

        plot_col = QVBoxLayout()
        title = QLabel("Plot Controls"); title.setAlignment(Qt.AlignCenter)
        plot_col.addWidget(title)
        self.plot_type = self._combo_row(plot_col, "Plot Type:", [k.value for k in PlotKind])
        self.dim_box = self._combo_row(plot_col, "Dimensions:", ["1D", "2D"])
        self.x_box = self._combo_row(plot_col, "X Column:", [""])
        self.y_box = self._combo_row(plot_col, "Y Column:", [""])
        self.y_box.setEnabled(False)
        self.btn_plot = QPushButton("Plot Data")
        plot_col.addWidget(self.btn_plot); plot_col.addStretch(1)
        middle.addLayout(plot_col, 1)
        main.addLayout(middle, 1)

        # history
        hist_box = QGroupBox("Recent Queries")
        hl = QVBoxLayout(hist_box)
        self.history_view = QPlainTextEdit(); self.history_view.setReadOnly(True)
        self.history_view.setMaximumHeight(90); self.history_view.setFont(mono)
        hl.addWidget(self.history_view)
        main.addWidget(hist_box)

        # sql input
        main.addWidget(QLabel("Execute SQL:"))
        sql_row = QHBoxLayout()
        self.sql_box = QPlainTextEdit(); self.sql_box.setMaximumHeight(90); self.sql_box.setFont(mono)
        self.btn_run = QPushButton("Run")
        sql_row.addWidget(self.sql_box, 1); sql_row.addWidget(self.btn_run, 0, Qt.AlignTop)
        main.addLayout(sql_row)

        # hints
        self.btn_hints = QPushButton("Show Examples")
        main.addWidget(self.btn_hints, 0, Qt.AlignLeft)
        self.hint_box = QGroupBox("Example SQL Queries")
        hb = QVBoxLayout(self.hint_box)
        self.hint_view = QPlainTextEdit(); self.hint_view.setReadOnly(True)
        self.hint_view.setMaximumHeight(110); self.hint_view.setFont(mono)
        hb.addWidget(self.hint_view)
        main.addWidget(self.hint_box)
        self.hint_box.hide()

        self.status = QLabel("")
        main.addWidget(self.status)

    def _combo_row(self, parent: QVBoxLayout, label: str, items: List[str]) -> QComboBox:
        row = QHBoxLayout()
        row.addWidget(QLabel(label))
        box = QComboBox(); box.addItems(items); box.setMinimumWidth(120)
        row.addWidget(box, 1)
        parent.addLayout(row)
        return box

    # ---- event table ----
    def bind(self, controller: ViewerController):
        self.controller = controller
        h = controller.handlers()
        self.btn_change.clicked.connect(lambda: h["change_file"]())
        self.table_box.activated[int].connect(lambda i: h["select_table"](self.table_box.itemText(i)))
        self.btn_run.clicked.connect(lambda: h["run_sql"]())
        self.btn_export.clicked.connect(lambda: h["export_csv"]())
        self.btn_hints.clicked.connect(lambda: h["toggle_hints"]())
        self.dim_box.activated[int].connect(lambda i: h["dimension_changed"](i + 1))
        self.btn_plot.clicked.connect(lambda: h["plot"]())

    def closeEvent(self, e):
        if self.controller is not None:
            self.controller.shutdown()
        super().closeEvent(e)

    # ---- view interface ----
    def show_lines(self, lines: List[str]):
        self.data_view.setPlainText("\n".join(lines))

    def show_message(self, text: str):
        self.data_view.clear()
        self.data_view.setPlainText(text)

    def set_status(self, text: str):
        self.status.setText(text)

    def set_db_label(self, text: str):
        self.db_label.setText(text)

    def set_table_names(self, names: List[str]):
        self.table_box.blockSignals(True)
        self.table_box.clear()
        self.table_box.addItems(names)
        self.table_box.setCurrentIndex(-1)
        self.table_box.blockSignals(False)

    def set_table_selection(self, selection: TableSelection):
        idx = -1
        if selection.kind is SelectionKind.NAMED:
            idx = self.table_box.findText(selection.name, Qt.MatchExactly)
        self.table_box.blockSignals(True)
        self.table_box.setPlaceholderText("Custom" if selection.is_custom else "")
        self.table_box.setCurrentIndex(idx)
        self.table_box.blockSignals(False)

    def set_column_options(self, options: List[str]):
        for box in (self.x_box, self.y_box):
            box.blockSignals(True)
            box.clear()
            box.addItems(options)
            box.setCurrentIndex(0)
            box.blockSignals(False)

    def set_y_enabled(self, enabled: bool):
        if not enabled:
            self.y_box.setCurrentIndex(0)
        self.y_box.setEnabled(enabled)

    def set_history(self, items: List[str]):
        self.history_view.setPlainText("\n".join(items))

    def set_hints(self, lines: List[str]):
        self.hint_view.setPlainText("\n".join(lines))

    def set_hints_visible(self, visible: bool, button_label: str):
        self.hint_box.setVisible(visible)
        self.btn_hints.setText(button_label)

    def sql_text(self) -> str:
        return self.sql_box.toPlainText()

    def clear_sql(self):
        self.sql_box.clear()

    def plot_selection(self) -> Tuple[PlotKind, int, int]:
        return PlotKind(self.plot_type.currentText()), self.x_box.currentIndex(), self.y_box.currentIndex()

    def ask_open_path(self) -> Optional[str]:
        path, _ = QFileDialog.getOpenFileName(
            self, "Open SQLite database", ".", "SQLite files (*.sqlite *.sqlite3 *.db);;All files (*)")
        return path or None

    def ask_save_path(self) -> Optional[str]:
        path, _ = QFileDialog.getSaveFileName(self, "Save as CSV", ".", "CSV files (*.csv);;All files (*)")
        return path or None

    def create_plot_window(self, figure, name: str, on_close: Callable) -> PlotWindow:
        return PlotWindow(figure, name, on_close)


def parse_args(argv=None):
    ap = argparse.ArgumentParser(description="Browse and plot a SQLite database.")
    ap.add_argument("db_path", nargs="?", default=None, help="SQLite file to open at startup")
    ap.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING ...")
    return ap.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    s = get_settings()
    setup_logging(args.log_level or s.log_level)
    logger.info("Starting SQLite viewer")

    app = QApplication(sys.argv[:1])
    w = ViewerWindow()
    ctl = ViewerController(w, s)
    w.bind(ctl)
    w.show()
    # prompt for a file only once the window is on screen
    QTimer.singleShot(0, lambda: ctl.start(args.db_path))
    return app.exec_()


# entry
if __name__ == "__main__":
    sys.exit(main())
