import unittest

import numpy as np

from viewer_core.errors import MSG_INVALID_X, MSG_NO_NUMERIC, MSG_RANGE_TOO_WIDE, PlotError
from viewer_core.plotting import MAX_BINS, build_figure, numeric_series, paired_series
from viewer_core.selection import PlotKind, PlotRequest
from viewer_core.table_ops import ResultTable


def sample_table():
    return ResultTable(
        header=["energy__MeV", "count", "name"],
        rows=[
            ["10", "1", "a"],
            ["", "2", "b"],
            ["12.5", "", "c"],
            ["abc", "4", "d"],
            ["30", "5", "e"],
            ["31", "6", "f"],
        ],
    )


class TestSeries(unittest.TestCase):
    def test_numeric_series_skips_empty_and_text(self):
        np.testing.assert_allclose(numeric_series(sample_table(), 0), [10, 12.5, 30, 31])

    def test_non_numeric_column_is_empty(self):
        self.assertEqual(numeric_series(sample_table(), 2).size, 0)

    def test_paired_series_keeps_rows_with_both_values(self):
        x, y = paired_series(sample_table(), 0, 1)
        np.testing.assert_allclose(x, [10, 30, 31])
        np.testing.assert_allclose(y, [1, 5, 6])


class TestBuildFigure(unittest.TestCase):
    def test_histogram_1d_labels(self):
        chart = build_figure(sample_table(), PlotRequest(PlotKind.HISTOGRAM, 1, 0))
        ax = chart.figure.axes[0]
        self.assertEqual(ax.get_title(), "energy (MeV)")
        self.assertEqual(ax.get_xlabel(), "energy (MeV)")
        self.assertEqual(ax.get_ylabel(), f"Entries / {chart.x_bins.width:g} MeV")
        self.assertGreaterEqual(chart.x_bins.count, 1)
        self.assertIsNone(chart.y_bins)

    def test_histogram_1d_without_unit(self):
        chart = build_figure(sample_table(), PlotRequest(PlotKind.HISTOGRAM, 1, 1))
        ax = chart.figure.axes[0]
        self.assertEqual(ax.get_xlabel(), "count")
        self.assertEqual(ax.get_ylabel(), "Entries")

    def test_histogram_2d(self):
        chart = build_figure(sample_table(), PlotRequest(PlotKind.HISTOGRAM, 2, 0, 1))
        ax = chart.figure.axes[0]
        self.assertEqual(chart.title, "2D Histogram of energy (MeV) vs count")
        self.assertEqual(ax.get_title(), chart.title)
        self.assertEqual(ax.get_ylabel(), "count")
        self.assertIsNotNone(chart.y_bins)
        # main axes plus colorbar
        self.assertEqual(len(chart.figure.axes), 2)

    def test_2d_without_y_falls_back_to_1d(self):
        chart = build_figure(sample_table(), PlotRequest(PlotKind.HISTOGRAM, 2, 0, None))
        self.assertEqual(chart.title, "energy (MeV)")
        self.assertIsNone(chart.y_bins)

    def test_scatter_1d_against_index(self):
        chart = build_figure(sample_table(), PlotRequest(PlotKind.SCATTER, 1, 0))
        ax = chart.figure.axes[0]
        line = ax.lines[0]
        np.testing.assert_allclose(line.get_xdata(), [0, 1, 2, 3])
        np.testing.assert_allclose(line.get_ydata(), [10, 12.5, 30, 31])
        self.assertEqual(ax.get_xlabel(), "Index")
        self.assertEqual(ax.get_ylabel(), "energy__MeV")
        self.assertEqual(ax.get_title(), "energy__MeV")

    def test_scatter_2d_pairs_rows(self):
        chart = build_figure(sample_table(), PlotRequest(PlotKind.SCATTER, 2, 0, 1))
        ax = chart.figure.axes[0]
        np.testing.assert_allclose(ax.lines[0].get_xdata(), [10, 30, 31])
        np.testing.assert_allclose(ax.lines[0].get_ydata(), [1, 5, 6])
        self.assertEqual(ax.get_title(), "2D Scatter Plot")

    def test_single_value_histogram(self):
        table = ResultTable(header=["v"], rows=[["4"]])
        chart = build_figure(table, PlotRequest(PlotKind.HISTOGRAM, 1, 0))
        self.assertEqual(chart.x_bins.count, 10)

    def test_missing_x_selection(self):
        with self.assertRaises(PlotError) as ctx:
            build_figure(sample_table(), PlotRequest(PlotKind.HISTOGRAM, 1, None))
        self.assertEqual(str(ctx.exception), MSG_INVALID_X)

    def test_out_of_range_x_selection(self):
        with self.assertRaises(PlotError) as ctx:
            build_figure(sample_table(), PlotRequest(PlotKind.SCATTER, 1, 3))
        self.assertEqual(str(ctx.exception), MSG_INVALID_X)

    def test_no_table_loaded(self):
        with self.assertRaises(PlotError) as ctx:
            build_figure(None, PlotRequest(PlotKind.HISTOGRAM, 1, 0))
        self.assertEqual(str(ctx.exception), MSG_INVALID_X)

    def test_text_column_has_nothing_to_plot(self):
        with self.assertRaises(PlotError) as ctx:
            build_figure(sample_table(), PlotRequest(PlotKind.HISTOGRAM, 1, 2))
        self.assertEqual(str(ctx.exception), MSG_NO_NUMERIC)

    def test_outlier_histogram_1d_is_capped(self):
        table = ResultTable(header=["v"], rows=[["0"]] * 50 + [["5e9"]])
        chart = build_figure(table, PlotRequest(PlotKind.HISTOGRAM, 1, 0))
        self.assertLessEqual(chart.x_bins.count, MAX_BINS)
        self.assertEqual(chart.x_bins.width, 5e6)

    def test_outlier_histogram_2d_is_capped(self):
        rows = [["0", "0"]] * 50 + [["5e9", "1e9"]]
        table = ResultTable(header=["x", "y"], rows=rows)
        chart = build_figure(table, PlotRequest(PlotKind.HISTOGRAM, 2, 0, 1))
        self.assertLessEqual(chart.x_bins.count, MAX_BINS)
        self.assertLessEqual(chart.y_bins.count, MAX_BINS)

    def test_overflowing_range_is_a_plot_error(self):
        table = ResultTable(header=["v"], rows=[["1e308"], ["-1e308"], ["0"]])
        with self.assertRaises(PlotError) as ctx:
            build_figure(table, PlotRequest(PlotKind.HISTOGRAM, 1, 0))
        self.assertEqual(str(ctx.exception), MSG_RANGE_TOO_WIDE)


class TestPlotRequestFromUi(unittest.TestCase):
    def test_option_zero_is_no_selection(self):
        req = PlotRequest.from_ui(PlotKind.HISTOGRAM, 1, 0, 0)
        self.assertIsNone(req.x_index)
        self.assertIsNone(req.y_index)

    def test_options_are_one_indexed(self):
        req = PlotRequest.from_ui(PlotKind.SCATTER, 2, 1, 3)
        self.assertEqual((req.x_index, req.y_index), (0, 2))

    def test_y_ignored_in_1d(self):
        req = PlotRequest.from_ui(PlotKind.SCATTER, 1, 2, 3)
        self.assertEqual((req.x_index, req.y_index), (1, None))


if __name__ == "__main__":
    unittest.main()
