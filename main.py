import curses
import os
import socket
import sys

# Make ESC snappy
os.environ.setdefault("ESCDELAY", "25")

from background import Mailbox, launch_background_tasks
from config_paths import LOG_PATH, ensure_config_dirs, load_config
from exit_protocol import MissingCommandColumnError, selection_output
from history_store import HistoryStore
from logging_utils import configure_file_logging, get_logger
from orchestrator import Orchestrator
from remote_sync import RemoteClient, is_offline_error
from search_model import STARTUP_ERRORS, SearchContext, initial_state

__version__ = "0.1.0"

USAGE = (
    "hsearch - interactive shell history search\n\n"
    "Usage:\n"
    "  hsearch [query...]\n"
    "  hsearch --debug [query...]\n"
    "  hsearch -v\n"
)

log = get_logger("main")


def parse_args(args):
    """Split argv into (initial query, debug flag)."""
    debug = False
    words = []
    for arg in args:
        if arg == "--debug":
            debug = True
        else:
            words.append(arg)
    return " ".join(words), debug


def run_with_stdout_on_stderr(fn, *args):
    """Run a curses session that draws on stderr, keeping stdout clean."""
    sys.stdout.flush()
    saved = os.dup(1)
    try:
        os.dup2(2, 1)
        return curses.wrapper(fn, *args)
    finally:
        os.dup2(saved, 1)
        os.close(saved)


def run_tui(state, ctx, mailbox):
    def curses_main(stdscr):
        return Orchestrator(stdscr, state, ctx, mailbox).run()

    return run_with_stdout_on_stderr(curses_main)


def main(argv=None):
    args = sys.argv[1:] if argv is None else list(argv)

    if "-v" in args or "-V" in args:
        print(__version__)
        return 0

    if "-h" in args or "--help" in args:
        print(USAGE)
        return 0

    initial_query, debug = parse_args(args)

    ensure_config_dirs()
    configure_file_logging(LOG_PATH, debug=debug)
    cfg = load_config()

    try:
        store = HistoryStore(cfg["HISTORY_PATH"])
    except (ValueError, OSError) as exc:
        print(f"Failed to load history: {exc}", file=sys.stderr)
        print(selection_output(None, cfg["DISPLAYED_COLUMNS"], initial_query))
        return 1

    ctx = SearchContext.from_config(store, cfg)
    try:
        state = initial_state(ctx, initial_query)
    except STARTUP_ERRORS as exc:
        log.error("startup failed: %s", exc)
        print(f"An unrecoverable error occurred: {exc}", file=sys.stderr)
        print(selection_output(None, ctx.column_names, initial_query))
        return 1

    client = RemoteClient(store, cfg["SERVER_URL"], device_id=socket.gethostname())
    mailbox = Mailbox()
    launch_background_tasks(mailbox, client, is_offline_error, __version__)

    try:
        final_state = run_tui(state, ctx, mailbox)
    except Exception as exc:
        log.exception("event loop crashed")
        print(f"An unrecoverable error occurred: {exc}", file=sys.stderr)
        print(selection_output(None, ctx.column_names, initial_query))
        return 1

    rc = 1 if final_state.fatal_error is not None else 0
    try:
        output = selection_output(final_state, ctx.column_names, initial_query)
    except MissingCommandColumnError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        output = ""
        rc = 1
    if final_state.fatal_error is not None:
        print(f"An unrecoverable error occurred: {final_state.fatal_error}", file=sys.stderr)
    print(output)
    return rc


if __name__ == "__main__":
    sys.exit(main())
