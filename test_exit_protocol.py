import pytest

from config_paths import TERM_INTEGRATION_ENV
from exit_protocol import MissingCommandColumnError, selection_output
from history_store import HistoryEntry
from messages import KeyMsg
from search_model import SearchContext, initial_state, update
from table_layout import TableLayout

COLUMNS = ["Hostname", "Exit Code", "Command"]


class FiveEntries:
    commands = ["ls", "vim notes.md", "git commit -m wip", "make", "htop"]

    def search(self, query, limit):
        return [
            HistoryEntry(
                local_username="user",
                hostname="box",
                command=c,
                current_working_directory="/tmp",
                home_directory="",
                exit_code=0,
                start_time=None,
                end_time=None,
            )
            for c in self.commands
            if query in c
        ][:limit]


@pytest.fixture
def session():
    engine = FiveEntries()
    ctx = SearchContext(
        engine=engine,
        column_names=COLUMNS,
        layout=TableLayout(engine, terminal_size=lambda: (100, 40)),
    )
    return ctx, initial_state(ctx, "")


def test_confirm_emits_highlighted_command(session):
    ctx, state = session
    state, _ = update(state, KeyMsg("down"), ctx)
    state, _ = update(state, KeyMsg("enter"), ctx)
    assert selection_output(state, COLUMNS, "", environ={}) == "vim notes.md"


def test_cancel_emits_empty_line(session):
    ctx, state = session
    state, _ = update(state, KeyMsg("down"), ctx)
    state, _ = update(state, KeyMsg("esc"), ctx)
    assert selection_output(state, COLUMNS, "", environ={}) == ""


def test_cancel_echoes_initial_query_for_term_integration(session):
    ctx, state = session
    state, _ = update(state, KeyMsg("ctrl+c"), ctx)
    env = {TERM_INTEGRATION_ENV: "1"}
    assert selection_output(state, COLUMNS, "git", environ=env) == "git"


def test_selection_wins_over_term_integration_fallback(session):
    ctx, state = session
    state, _ = update(state, KeyMsg("enter"), ctx)
    env = {TERM_INTEGRATION_ENV: "1"}
    assert selection_output(state, COLUMNS, "l", environ=env) == "ls"


def test_startup_failure_output():
    assert selection_output(None, COLUMNS, "ls", environ={}) == ""
    assert selection_output(None, COLUMNS, "ls", environ={TERM_INTEGRATION_ENV: "1"}) == "ls"


def test_missing_command_column_is_a_configuration_error(session):
    ctx, state = session
    state, _ = update(state, KeyMsg("enter"), ctx)
    with pytest.raises(MissingCommandColumnError):
        selection_output(state, ["Hostname", "Exit Code"], "", environ={})
