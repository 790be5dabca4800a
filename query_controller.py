from logging_utils import get_logger
from messages import FatalErrorMsg, SearchError, SearchErrorMsg
from row_builder import RowBuildError, get_rows
from table_layout import LayoutError
from table_pane import TableState

log = get_logger("query")


def should_run(state, update_table=False) -> bool:
    if update_table:
        return True
    return state.pending_query is not None and state.pending_query != state.last_query


def run_query_and_update_table(state, ctx, update_table=False):
    """Run the pending query if it changed, rebuilding the columns on request.

    Returns ``(state, msg)`` where ``msg`` is an error message for the caller
    to dispatch, or None. The cursor is clamped on every path.
    """
    if not should_run(state, update_table):
        return state.clamp_cursor(), None

    query = state.pending_query if state.pending_query is not None else state.last_query
    log.debug("running query %r (rebuild=%s)", query, update_table)
    try:
        rows, num_entries = get_rows(
            ctx.engine,
            ctx.column_names,
            query,
            ctx.num_rows,
            filter_duplicates=ctx.filter_duplicates,
        )
    except RowBuildError as exc:
        return state.clamp_cursor(), FatalErrorMsg(exc)
    except SearchError as exc:
        log.warning("search for %r failed: %s", query, exc)
        return state.clamp_cursor(), SearchErrorMsg(exc)

    table = state.table
    if update_table:
        try:
            columns = ctx.layout.make_columns(ctx.column_names, rows)
            height = ctx.layout.table_height()
        except (LayoutError, RowBuildError, SearchError) as exc:
            return state.clamp_cursor(), FatalErrorMsg(exc)
        table = TableState.create(
            columns, rows, height=height, num_entries=num_entries
        )
    else:
        table = table.with_rows(rows, num_entries=num_entries)

    state = state.evolve(
        table=table.set_cursor(0),
        num_entries=num_entries,
        last_query=query,
        pending_query=None,
        search_error=None,
    )
    return state.clamp_cursor(), None
