from dataclasses import dataclass, field, replace
from typing import Optional

from query_pane import QueryInput
from table_pane import TableState

SPINNER_FRAMES = ("⣾ ", "⣽ ", "⣻ ", "⢿ ", "⡿ ", "⣟ ", "⣯ ", "⣷ ")


@dataclass(frozen=True)
class SessionState:
    """Everything the event loop knows. Replaced, never mutated, per message."""

    table: TableState = field(default_factory=TableState)
    query: QueryInput = field(default_factory=QueryInput)
    num_entries: int = 0

    # the query to run, cleared once it has been run
    pending_query: Optional[str] = None
    last_query: str = ""

    # background sync still running; drives the spinner
    loading: bool = True
    spinner_frame: int = 0

    quitting: bool = False
    selected: bool = False

    fatal_error: Optional[BaseException] = None
    search_error: Optional[BaseException] = None
    offline: bool = False
    banner: str = ""

    @property
    def done(self) -> bool:
        return self.quitting or self.selected

    @property
    def cursor(self) -> int:
        return self.table.cursor

    def evolve(self, **changes) -> "SessionState":
        return replace(self, **changes)

    def spinner(self) -> str:
        return SPINNER_FRAMES[self.spinner_frame % len(SPINNER_FRAMES)]

    def clamp_cursor(self) -> "SessionState":
        table = self.table.limit_to(self.num_entries)
        limit = max(0, self.num_entries - 1)
        if table.cursor > limit:
            table = table.set_cursor(limit)
        if table is self.table:
            return self
        return self.evolve(table=table)
