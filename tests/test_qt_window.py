import os
import unittest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

try:
    from PyQt5.QtWidgets import QApplication
    from viewer_app.main import ViewerWindow
except ImportError:  # PyQt5 without a usable Qt platform
    QApplication = None

from viewer_core.selection import PlotKind, TableSelection


@unittest.skipIf(QApplication is None, "PyQt5 not available")
class TestViewerWindow(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.app = QApplication.instance() or QApplication([])

    def setUp(self):
        self.w = ViewerWindow()
        self.addCleanup(self.w.deleteLater)

    def test_custom_selection_highlights_nothing(self):
        self.w.set_table_names(["a", "b"])
        self.w.set_table_selection(TableSelection.named("b"))
        self.assertEqual(self.w.table_box.currentText(), "b")
        self.w.set_table_selection(TableSelection.custom())
        self.assertEqual(self.w.table_box.currentIndex(), -1)
        self.assertEqual(self.w.table_box.count(), 2)

    def test_column_options_replace_previous(self):
        self.w.set_column_options(["", "x", "y"])
        self.w.set_column_options(["", "z"])
        self.assertEqual([self.w.x_box.itemText(i) for i in range(self.w.x_box.count())], ["", "z"])
        self.assertEqual(self.w.y_box.count(), 2)

    def test_y_disabled_is_blank(self):
        self.w.set_column_options(["", "x", "y"])
        self.w.set_y_enabled(True)
        self.w.y_box.setCurrentIndex(2)
        self.w.set_y_enabled(False)
        self.assertFalse(self.w.y_box.isEnabled())
        self.assertEqual(self.w.y_box.currentIndex(), 0)

    def test_plot_selection(self):
        self.w.set_column_options(["", "x"])
        self.w.x_box.setCurrentIndex(1)
        self.w.plot_type.setCurrentIndex(1)
        self.assertEqual(self.w.plot_selection(), (PlotKind.SCATTER, 1, 0))

    def test_hint_toggle_label(self):
        self.w.set_hints_visible(True, "Hide Examples")
        self.assertEqual(self.w.btn_hints.text(), "Hide Examples")
        self.assertFalse(self.w.hint_box.isHidden())


if __name__ == "__main__":
    unittest.main()
