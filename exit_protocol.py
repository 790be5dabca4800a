import os

from config_paths import TERM_INTEGRATION_ENV
from row_builder import COMMAND_COLUMN


class MissingCommandColumnError(Exception):
    pass


def command_column_index(column_names) -> int:
    for i, name in enumerate(column_names):
        if name == COMMAND_COLUMN:
            return i
    raise MissingCommandColumnError(
        f"Table doesn't have a column named `{COMMAND_COLUMN}`?"
    )


def selected_command(state, column_names) -> str:
    idx = command_column_index(column_names)
    row = state.table.selected_row()
    if not row or idx >= len(row):
        return ""
    return row[idx]


def selection_output(state, column_names, initial_query, environ=None) -> str:
    """The single line to print once the session is over."""
    environ = os.environ if environ is None else environ
    output = ""
    if state is not None and state.selected and state.fatal_error is None:
        output = selected_command(state, column_names)
    if output == "" and environ.get(TERM_INTEGRATION_ENV):
        # hand the typed query back so the shell prompt isn't cleared
        output = initial_query
    return output
