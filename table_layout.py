import os

from logging_utils import get_logger
from row_builder import get_rows
from table_pane import ColumnSpec, TABLE_HEIGHT

log = get_logger("layout")

# room reserved for borders and cell padding
FIXED_PADDING = 20
BASELINE_SAMPLE_SIZE = 25
USEFUL_SAMPLE_SIZE = 1000
USEFUL_SLACK = 5
# lines used by everything drawn around the table
CHROME_HEIGHT = 12


class LayoutError(Exception):
    pass


def stderr_terminal_size():
    try:
        size = os.get_terminal_size(2)
    except OSError as exc:
        raise LayoutError(f"failed to get terminal size: {exc}") from exc
    return size.columns, size.lines


def calculate_column_widths(rows, num_columns):
    widths = [0] * num_columns
    for row in rows:
        for i, value in enumerate(row[:num_columns]):
            widths[i] = max(widths[i], len(value))
    return widths


def _has_data(rows):
    return bool(rows) and len(rows[0]) > 0


def grow_widths(widths, useful_widths, total_width, terminal_width):
    widths = list(widths)
    num_columns = len(widths)
    while total_width < terminal_width - num_columns:
        prev_total = total_width
        for i in range(num_columns):
            if widths[i] < useful_widths[i] + USEFUL_SLACK:
                widths[i] += 1
                total_width += 1
        if total_width == prev_total:
            break
    return widths, total_width


def shrink_widths(widths, total_width, terminal_width):
    """Take 2 columns at a time from the widest column until it all fits.

    Widths never drop below zero, so once every column is empty the padding
    alone may still be wider than the terminal.
    """
    widths = list(widths)
    while total_width > terminal_width and widths:
        largest = max(range(len(widths)), key=lambda i: (widths[i], -i))
        step = min(2, widths[largest])
        if step <= 0:
            break
        widths[largest] -= step
        total_width -= step
    return widths, total_width


class TableLayout:
    """Picks column widths for the results table.

    Owns the "useful width" sample: the widths of an unfiltered query over a
    large sample, computed on first use and reused for the rest of the
    process. Only the event loop thread calls into this object.
    """

    def __init__(self, engine, terminal_size=stderr_terminal_size, filter_duplicates=False):
        self.engine = engine
        self.terminal_size = terminal_size
        self.filter_duplicates = filter_duplicates
        self._useful_widths = None

    def useful_widths(self, column_names):
        if self._useful_widths is None:
            rows, _ = get_rows(
                self.engine,
                column_names,
                "",
                USEFUL_SAMPLE_SIZE,
                filter_duplicates=self.filter_duplicates,
            )
            self._useful_widths = calculate_column_widths(rows, len(column_names))
            log.debug("useful column widths: %s", self._useful_widths)
        return self._useful_widths

    def make_columns(self, column_names, rows, _fallback=True):
        # an initial query with no results still deserves a sensible layout
        if not _has_data(rows) and _fallback:
            baseline, _ = get_rows(
                self.engine,
                column_names,
                "",
                BASELINE_SAMPLE_SIZE,
                filter_duplicates=self.filter_duplicates,
            )
            return self.make_columns(column_names, baseline, _fallback=False)

        widths = calculate_column_widths(rows, len(column_names))
        total_width = FIXED_PADDING
        for i, name in enumerate(column_names):
            widths[i] = max(widths[i], len(name))
            total_width += widths[i]

        useful = self.useful_widths(column_names)
        terminal_width, _ = self.terminal_size()

        widths, total_width = grow_widths(widths, useful, total_width, terminal_width)
        widths, total_width = shrink_widths(widths, total_width, terminal_width)

        return [ColumnSpec(title=name, width=widths[i]) for i, name in enumerate(column_names)]

    def table_height(self):
        _, terminal_height = self.terminal_size()
        return max(1, min(TABLE_HEIGHT, terminal_height - CHROME_HEIGHT))
