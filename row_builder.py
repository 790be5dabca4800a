from dataclasses import replace

from history_store import HistoryEntry
from table_pane import PADDED_NUM_ENTRIES

COMMAND_COLUMN = "Command"
TIMESTAMP_FORMAT = "%b %d %Y %H:%M:%S %Z"


class RowBuildError(Exception):
    pass


def _format_duration(seconds: float) -> str:
    ms = int(round(seconds * 1000))
    if ms < 1000:
        return f"{ms}ms"
    hours, rem = divmod(ms, 3_600_000)
    minutes, rem = divmod(rem, 60_000)
    secs = f"{rem / 1000:g}s"
    if hours:
        return f"{hours}h{minutes}m{secs}"
    if minutes:
        return f"{minutes}m{secs}"
    return secs


def _format_cwd(entry: HistoryEntry) -> str:
    cwd = entry.current_working_directory
    home = entry.home_directory
    if home and (cwd == home or cwd.startswith(home.rstrip("/") + "/")):
        return "~" + cwd[len(home.rstrip("/")) :]
    return cwd


def _format_timestamp(entry: HistoryEntry) -> str:
    if entry.start_time is None:
        return ""
    return entry.start_time.to_pydatetime().astimezone().strftime(TIMESTAMP_FORMAT)


def _format_runtime(entry: HistoryEntry) -> str:
    if entry.start_time is None or entry.end_time is None:
        return "N/A"
    return _format_duration((entry.end_time - entry.start_time).total_seconds())


COLUMN_FORMATTERS = {
    "Hostname": lambda e: e.hostname,
    "CWD": _format_cwd,
    "Timestamp": _format_timestamp,
    "Runtime": _format_runtime,
    "Exit Code": lambda e: str(e.exit_code),
    COMMAND_COLUMN: lambda e: e.command,
    "User": lambda e: e.local_username,
}


def build_table_row(column_names, entry: HistoryEntry) -> tuple:
    row = []
    for name in column_names:
        formatter = COLUMN_FORMATTERS.get(name)
        if formatter is None:
            raise RowBuildError(f"table column {name!r} is not a known column")
        row.append(formatter(entry))
    return tuple(row)


def flatten_command(command: str) -> str:
    return command.replace("\n", " ")


def get_rows(engine, column_names, query, num_rows=PADDED_NUM_ENTRIES, filter_duplicates=False):
    """Search and return ``(rows, num_entries)``.

    ``rows`` always holds exactly ``num_rows`` rows, the tail padded with empty
    tuples; ``num_entries`` counts the real ones. Engine failures propagate
    unchanged, a row that can't be built raises RowBuildError.
    """
    data = engine.search(query, num_rows)
    rows = []
    last_command = None
    for entry in data:
        if len(rows) >= num_rows:
            break
        command = flatten_command(entry.command)
        if filter_duplicates and last_command is not None:
            if command.strip() == last_command.strip():
                continue
        try:
            row = build_table_row(column_names, _with_command(entry, command))
        except RowBuildError:
            raise
        except Exception as exc:
            raise RowBuildError(f"failed to build row for entry={entry!r}: {exc}") from exc
        rows.append(row)
        last_command = command
    num_entries = len(rows)
    while len(rows) < num_rows:
        rows.append(())
    return rows, num_entries


def _with_command(entry: HistoryEntry, command: str) -> HistoryEntry:
    if command == entry.command:
        return entry
    return replace(entry, command=command)
