from dataclasses import dataclass, field, replace
from typing import Optional

from messages import KeyMsg

TABLE_HEIGHT = 20
PADDED_NUM_ENTRIES = TABLE_HEIGHT * 5

# table key map: action -> keys that trigger it
KEY_MAP = {
    "line_up": ("up", "alt+OA"),
    "line_down": ("down", "alt+OB"),
    "page_up": ("pgup",),
    "page_down": ("pgdown",),
    "goto_top": ("home",),
    "goto_bottom": ("end",),
}
NAVIGATION_KEYS = frozenset(k for keys in KEY_MAP.values() for k in keys)


def action_for_key(key: str) -> Optional[str]:
    for action, keys in KEY_MAP.items():
        if key in keys:
            return action
    return None


@dataclass(frozen=True)
class ColumnSpec:
    title: str
    width: int


@dataclass(frozen=True)
class TableState:
    """Rows plus a cursor and a scroll offset over a fixed-height viewport.

    Only the first ``num_entries`` rows are selectable (all of them when it
    is None); the rest is padding. After every cursor change
    ``offset <= cursor < offset + height`` and
    ``0 <= offset <= max(0, selectable - height)``.
    """

    columns: tuple = ()
    rows: tuple = ()
    height: int = TABLE_HEIGHT
    cursor: int = 0
    offset: int = 0
    num_entries: Optional[int] = None
    focused: bool = field(default=True, compare=False)

    @classmethod
    def create(cls, columns, rows, height=TABLE_HEIGHT, num_entries=None):
        table = cls(
            columns=tuple(columns),
            rows=tuple(tuple(r) for r in rows),
            height=max(1, height),
            num_entries=num_entries,
        )
        return table.set_cursor(0)

    def with_rows(self, rows, num_entries=None):
        return replace(
            self, rows=tuple(tuple(r) for r in rows), num_entries=num_entries
        ).set_cursor(self.cursor)

    def limit_to(self, num_entries) -> "TableState":
        if num_entries == self.num_entries:
            return self
        return replace(self, num_entries=num_entries).set_cursor(self.cursor)

    @property
    def selectable(self) -> int:
        if self.num_entries is None:
            return len(self.rows)
        return max(0, min(self.num_entries, len(self.rows)))

    def set_cursor(self, n: int) -> "TableState":
        last = self.selectable - 1
        cursor = max(0, min(n, last)) if last >= 0 else 0
        offset = self.offset
        if cursor < offset:
            offset = cursor
        elif cursor >= offset + self.height:
            offset = cursor - self.height + 1
        offset = max(0, min(offset, max(0, self.selectable - self.height)))
        return replace(self, cursor=cursor, offset=offset)

    def move(self, delta: int) -> "TableState":
        return self.set_cursor(self.cursor + delta)

    def selected_row(self):
        if not self.selectable:
            return None
        return self.rows[self.cursor]

    def visible_rows(self):
        return self.rows[self.offset : self.offset + self.height]

    # ---------- input handling ----------
    def update(self, msg) -> "TableState":
        if isinstance(msg, KeyMsg):
            return self.handle_key(msg.key)
        return self

    def handle_key(self, key: str) -> "TableState":
        if not self.focused:
            return self
        action = action_for_key(key)
        if action == "line_up":
            return self.move(-1)
        if action == "line_down":
            return self.move(1)
        if action == "page_up":
            return self.move(-self.height)
        if action == "page_down":
            return self.move(self.height)
        if action == "goto_top":
            return self.set_cursor(0)
        if action == "goto_bottom":
            return self.set_cursor(self.selectable - 1)
        return self
