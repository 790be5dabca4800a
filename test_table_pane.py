import pytest

from messages import KeyMsg, TickMsg
from table_pane import ColumnSpec, TableState


def _table(n_rows=50, height=10):
    return TableState.create(
        [ColumnSpec("Command", 10)], [(f"cmd {i}",) for i in range(n_rows)], height=height
    )


def _assert_viewport(table):
    assert table.offset <= table.cursor < table.offset + table.height
    assert 0 <= table.offset <= max(0, len(table.rows) - table.height)


@pytest.mark.parametrize(
    "keys",
    [
        ["down"] * 15,
        ["end", "up", "up"],
        ["pgdown", "pgdown", "pgup"],
        ["end", "home"],
        ["alt+OB"] * 3 + ["alt+OA"],
    ],
)
def test_scroll_offset_tracks_cursor(keys):
    table = _table()
    for key in keys:
        table = table.handle_key(key)
        _assert_viewport(table)


def test_set_cursor_clamps_into_rows():
    table = _table(n_rows=5)
    assert table.set_cursor(99).cursor == 4
    assert table.set_cursor(-3).cursor == 0


def test_shrinking_cursor_pulls_viewport_back():
    table = _table().handle_key("end")
    assert table.offset == 40
    table = table.set_cursor(2)
    assert table.offset == 2
    _assert_viewport(table)


def test_empty_table():
    table = TableState.create([ColumnSpec("Command", 7)], [])
    assert table.cursor == 0
    assert table.selected_row() is None
    assert table.handle_key("down").cursor == 0


def test_non_key_messages_leave_table_alone():
    table = _table()
    assert table.update(TickMsg()) is table
    assert table.update(KeyMsg("down")).cursor == 1


def test_visible_rows_match_height():
    table = _table(n_rows=50, height=10).handle_key("pgdown")
    assert len(table.visible_rows()) == 10
    assert table.selected_row() in table.visible_rows()


@pytest.mark.parametrize("key", ["end", "pgdown", "down", "alt+OB"])
def test_padding_rows_never_scroll_results_away(key):
    # five results padded out to fifty rows
    rows = [(c,) for c in "abcde"] + [()] * 45
    table = TableState.create([ColumnSpec("Command", 7)], rows, height=10, num_entries=5)
    for _ in range(3):
        table = table.handle_key(key)
    assert table.offset == 0
    assert table.cursor <= 4
    assert table.visible_rows()[0] == ("a",)


def test_scrolling_stops_at_last_result():
    rows = [(f"cmd {i}",) for i in range(30)] + [()] * 20
    table = TableState.create([ColumnSpec("Command", 7)], rows, height=10, num_entries=30)
    table = table.handle_key("end")
    assert (table.cursor, table.offset) == (29, 20)
    assert table.visible_rows()[-1] == ("cmd 29",)


def test_limit_to_pulls_cursor_and_viewport_back():
    table = _table(n_rows=50, height=10).handle_key("end")
    table = table.limit_to(3)
    assert (table.cursor, table.offset) == (2, 0)
    assert table.limit_to(0).selected_row() is None
