"""The event loop's dispatcher: ``update(state, msg, ctx) -> (state, effects)``.

``update`` never mutates the state it is given. Searches run synchronously
through ``ctx``; the only effect handed back to the runtime is ``QUIT``.
"""

from dataclasses import dataclass

from app_state import SessionState
from logging_utils import get_logger
from messages import (
    QUIT,
    BannerMsg,
    DownloadCompleteMsg,
    FatalErrorMsg,
    KeyMsg,
    OfflineMsg,
    ResizeMsg,
    SearchError,
    SearchErrorMsg,
    TickMsg,
)
from query_controller import run_query_and_update_table
from query_pane import QueryInput
from row_builder import RowBuildError, get_rows
from table_layout import LayoutError, TableLayout
from table_pane import NAVIGATION_KEYS, PADDED_NUM_ENTRIES, TableState

log = get_logger("model")

CANCEL_KEYS = frozenset({"esc", "ctrl+c"})
CONFIRM_KEYS = frozenset({"enter"})
# alt+ chords that still edit the query rather than scroll the table
ALT_EDIT_KEYS = frozenset({"alt+b", "alt+f", "alt+backspace"})


@dataclass
class SearchContext:
    engine: object
    column_names: list
    layout: TableLayout
    filter_duplicates: bool = False
    num_rows: int = PADDED_NUM_ENTRIES

    @classmethod
    def from_config(cls, engine, config, terminal_size=None):
        filter_duplicates = bool(config.get("FILTER_DUPLICATE_COMMANDS", False))
        kwargs = {"filter_duplicates": filter_duplicates}
        if terminal_size is not None:
            kwargs["terminal_size"] = terminal_size
        return cls(
            engine=engine,
            column_names=list(config["DISPLAYED_COLUMNS"]),
            layout=TableLayout(engine, **kwargs),
            filter_duplicates=filter_duplicates,
        )


def initial_state(ctx: SearchContext, initial_query: str) -> SessionState:
    """Run the first search and lay out the table; failures propagate."""
    rows, num_entries = get_rows(
        ctx.engine,
        ctx.column_names,
        initial_query,
        ctx.num_rows,
        filter_duplicates=ctx.filter_duplicates,
    )
    columns = ctx.layout.make_columns(ctx.column_names, rows)
    table = TableState.create(
        columns, rows, height=ctx.layout.table_height(), num_entries=num_entries
    )
    return SessionState(
        table=table,
        query=QueryInput.create(initial_query),
        num_entries=num_entries,
        last_query=initial_query,
    ).clamp_cursor()


STARTUP_ERRORS = (SearchError, RowBuildError, LayoutError)


def _is_navigation(key: str) -> bool:
    if key in NAVIGATION_KEYS:
        return True
    return key.startswith("alt+") and key not in ALT_EDIT_KEYS


def _after_query(state, err, ctx):
    if err is None:
        return state, []
    return update(state, err, ctx)


def _on_key(state, msg, ctx):
    key = msg.key
    if key in CANCEL_KEYS:
        return state.evolve(quitting=True), [QUIT]
    if state.fatal_error is not None:
        return state, []
    if key in CONFIRM_KEYS:
        if state.num_entries > 0:
            return state.evolve(selected=True), [QUIT]
        return state, []
    if _is_navigation(key):
        state = state.evolve(table=state.table.update(msg))
        return state.clamp_cursor(), []

    query = state.query.handle_key(key, msg.text)
    state = state.evolve(query=query, pending_query=query.value)
    state, err = run_query_and_update_table(state, ctx)
    return _after_query(state, err, ctx)


def _on_resize(state, msg, ctx):
    state, err = run_query_and_update_table(state, ctx, update_table=True)
    return _after_query(state, err, ctx)


def _on_fatal_error(state, msg, ctx):
    log.error("unrecoverable error: %s", msg.error)
    return state.evolve(fatal_error=msg.error), []


def _on_search_error(state, msg, ctx):
    return state.evolve(search_error=msg.error), []


def _on_offline(state, msg, ctx):
    return state.evolve(offline=True), []


def _on_banner(state, msg, ctx):
    return state.evolve(banner=msg.banner), []


def _on_download_complete(state, msg, ctx):
    return state.evolve(loading=False), []


def _on_other(state, msg, ctx):
    if state.loading:
        return state.evolve(spinner_frame=state.spinner_frame + 1), []
    return state.evolve(table=state.table.update(msg)).clamp_cursor(), []


HANDLERS = {
    KeyMsg: _on_key,
    ResizeMsg: _on_resize,
    FatalErrorMsg: _on_fatal_error,
    SearchErrorMsg: _on_search_error,
    OfflineMsg: _on_offline,
    BannerMsg: _on_banner,
    DownloadCompleteMsg: _on_download_complete,
    TickMsg: _on_other,
}


def update(state: SessionState, msg, ctx: SearchContext):
    handler = HANDLERS.get(type(msg), _on_other)
    return handler(state, msg, ctx)
