import unittest

from history_store import HistoryEntry, SearchError
from messages import (
    QUIT,
    BannerMsg,
    DownloadCompleteMsg,
    FatalErrorMsg,
    KeyMsg,
    OfflineMsg,
    ResizeMsg,
    SearchErrorMsg,
    TickMsg,
    all_message_types,
)
from search_model import HANDLERS, SearchContext, initial_state, update
from table_layout import LayoutError, TableLayout

COLUMNS = ["Hostname", "Command"]


def _entry(command):
    return HistoryEntry(
        local_username="user",
        hostname="host",
        command=command,
        current_working_directory="/tmp",
        home_directory="",
        exit_code=0,
        start_time=None,
        end_time=None,
    )


class FakeEngine:
    def __init__(self, commands):
        self.entries = [_entry(c) for c in commands]
        self.queries = []
        self.fail_with = None

    def search(self, query, limit):
        self.queries.append(query)
        if self.fail_with is not None:
            raise self.fail_with
        return [e for e in self.entries if query in e.command][:limit]


def _ctx(engine, terminal_size=lambda: (120, 40), num_rows=100):
    layout = TableLayout(engine, terminal_size=terminal_size)
    return SearchContext(engine=engine, column_names=COLUMNS, layout=layout, num_rows=num_rows)


def _type(state, ctx, text):
    for ch in text:
        state, _ = update(state, KeyMsg(ch, ch), ctx)
    return state


def _user_queries(engine):
    # layout sampling runs unfiltered queries with larger limits; ignore them
    return [q for q in engine.queries if q]


class DispatcherTests(unittest.TestCase):
    def setUp(self):
        self.engine = FakeEngine(["ls -la", "git status", "git push", "cd /srv", "make test"])
        self.ctx = _ctx(self.engine)
        self.state = initial_state(self.ctx, "")

    def test_every_message_type_has_a_handler(self):
        for msg_type in all_message_types():
            self.assertIn(msg_type, HANDLERS)

    def test_update_does_not_touch_previous_state(self):
        before = self.state
        after, _ = update(before, KeyMsg("g", "g"), self.ctx)
        self.assertEqual(before.query.value, "")
        self.assertEqual(before.last_query, "")
        self.assertEqual(after.query.value, "g")
        self.assertIsNot(before, after)

    def test_typing_narrows_results(self):
        state = _type(self.state, self.ctx, "git")
        self.assertEqual(state.num_entries, 2)
        self.assertEqual(state.last_query, "git")
        self.assertIsNone(state.pending_query)
        self.assertEqual(state.table.rows[0][1], "git status")

    def test_unchanged_query_does_not_search_again(self):
        state = _type(self.state, self.ctx, "git")
        state, _ = update(state, KeyMsg("down"), self.ctx)
        searches = len(self.engine.queries)
        cursor = state.cursor

        state, effects = update(state, KeyMsg("ctrl+e"), self.ctx)

        self.assertEqual(len(self.engine.queries), searches)
        self.assertEqual(state.cursor, cursor)
        self.assertEqual(effects, [])

    def test_navigation_keys_never_edit_query(self):
        for key in ("up", "down", "alt+OA", "alt+OB", "pgup", "pgdown", "home", "end"):
            state, _ = update(self.state, KeyMsg(key), self.ctx)
            self.assertEqual(state.query.value, "")
        self.assertEqual(_user_queries(self.engine), [])

    def test_cursor_clamped_to_result_count(self):
        for key in ("end", "pgdown", "down", "alt+OB"):
            state, _ = update(self.state, KeyMsg(key), self.ctx)
            self.assertGreaterEqual(state.cursor, 0)
            self.assertLess(state.cursor, state.num_entries)
        state, _ = update(self.state, KeyMsg("end"), self.ctx)
        self.assertEqual(state.cursor, 4)

    def test_jumping_to_the_end_keeps_every_result_visible(self):
        for key in ("end", "pgdown"):
            state, _ = update(self.state, KeyMsg(key), self.ctx)
            self.assertEqual(state.table.offset, 0)
            visible = state.table.visible_rows()
            self.assertEqual(
                [row[1] for row in visible[:5]],
                ["ls -la", "git status", "git push", "cd /srv", "make test"],
            )

    def test_cursor_in_bounds_after_results_shrink(self):
        state, _ = update(self.state, KeyMsg("end"), self.ctx)
        state = _type(state, self.ctx, "make")
        self.assertEqual(state.num_entries, 1)
        self.assertEqual(state.cursor, 0)

    def test_confirm_selects_and_quits(self):
        state, _ = update(self.state, KeyMsg("down"), self.ctx)
        state, effects = update(state, KeyMsg("enter"), self.ctx)
        self.assertTrue(state.selected)
        self.assertEqual(effects, [QUIT])
        self.assertEqual(state.table.selected_row()[1], "git status")

    def test_cancel_quits(self):
        for key in ("esc", "ctrl+c"):
            state, effects = update(self.state, KeyMsg(key), self.ctx)
            self.assertTrue(state.quitting)
            self.assertFalse(state.selected)
            self.assertEqual(effects, [QUIT])

    def test_resize_rebuilds_columns(self):
        narrow_ctx = _ctx(self.engine, terminal_size=lambda: (40, 40))
        state, effects = update(self.state, ResizeMsg(40, 40), narrow_ctx)
        self.assertEqual(effects, [])
        total = sum(c.width for c in state.table.columns) + 20
        self.assertLessEqual(total, 40)

    def test_resize_without_terminal_size_is_fatal(self):
        def broken():
            raise LayoutError("failed to get terminal size")

        state, _ = update(self.state, ResizeMsg(0, 0), _ctx(self.engine, terminal_size=broken))
        self.assertIsInstance(state.fatal_error, LayoutError)

    def test_search_error_is_recoverable(self):
        state = _type(self.state, self.ctx, "git")
        rows = state.table.rows
        self.engine.fail_with = SearchError("no such column")

        state = _type(state, self.ctx, "x")

        self.assertIsInstance(state.search_error, SearchError)
        self.assertIsNone(state.fatal_error)
        self.assertEqual(state.table.rows, rows)

        self.engine.fail_with = None
        searches = len(self.engine.queries)
        # back to the last query that ran: nothing to re-run, warning stays
        state, _ = update(state, KeyMsg("backspace"), self.ctx)
        self.assertEqual(len(self.engine.queries), searches)
        self.assertIsNotNone(state.search_error)

        state = _type(state, self.ctx, " ")
        self.assertIsNone(state.search_error)
        self.assertEqual(state.last_query, "git ")
        self.assertEqual(state.num_entries, 2)

    def test_fatal_error_blocks_input_except_cancel(self):
        state, _ = update(self.state, FatalErrorMsg(RuntimeError("boom")), self.ctx)
        state, effects = update(state, KeyMsg("g", "g"), self.ctx)
        self.assertEqual(state.query.value, "")
        self.assertEqual(effects, [])
        state, effects = update(state, KeyMsg("enter"), self.ctx)
        self.assertFalse(state.selected)
        state, effects = update(state, KeyMsg("esc"), self.ctx)
        self.assertEqual(effects, [QUIT])

    def test_background_events(self):
        state, _ = update(self.state, OfflineMsg(), self.ctx)
        self.assertTrue(state.offline)
        self.assertIsNone(state.fatal_error)
        state, _ = update(state, BannerMsg("maintenance tonight"), self.ctx)
        self.assertEqual(state.banner, "maintenance tonight")
        state, _ = update(state, SearchErrorMsg(SearchError("x")), self.ctx)
        self.assertIsNotNone(state.search_error)
        state, _ = update(state, DownloadCompleteMsg(), self.ctx)
        self.assertFalse(state.loading)

    def test_tick_advances_spinner_only_while_loading(self):
        state, _ = update(self.state, TickMsg(), self.ctx)
        self.assertEqual(state.spinner_frame, 1)
        state, _ = update(state, DownloadCompleteMsg(), self.ctx)
        state, _ = update(state, TickMsg(), self.ctx)
        self.assertEqual(state.spinner_frame, 1)

    def test_unknown_messages_are_treated_as_ticks(self):
        state, effects = update(self.state, object(), self.ctx)
        self.assertEqual(state.spinner_frame, 1)
        self.assertEqual(effects, [])


class EmptyDatasetTests(unittest.TestCase):
    def test_empty_dataset_renders_padded_rows_and_ignores_confirm(self):
        engine = FakeEngine([])
        ctx = _ctx(engine)
        state = initial_state(ctx, "")

        self.assertEqual(state.num_entries, 0)
        self.assertEqual(len(state.table.rows), 100)
        self.assertTrue(all(row == () for row in state.table.rows))

        after, effects = update(state, KeyMsg("enter"), ctx)
        self.assertEqual(effects, [])
        self.assertFalse(after.selected)
        self.assertFalse(after.quitting)
        self.assertEqual(after.cursor, 0)

    def test_initial_query_is_not_rerun_on_first_keystroke_without_change(self):
        engine = FakeEngine(["ls"])
        ctx = _ctx(engine)
        state = initial_state(ctx, "ls")
        before = len(engine.queries)
        state, _ = update(state, KeyMsg("left"), ctx)
        self.assertEqual(len(engine.queries), before)
        self.assertEqual(state.query.value, "ls")


if __name__ == "__main__":
    unittest.main()
