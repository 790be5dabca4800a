from dataclasses import dataclass
from typing import Optional

QUERY_PROMPT = "Search Query: > "
LOADING_TEXT = "Loading hsearch entries from other devices..."
OFFLINE_WARNING = (
    "Warning: failed to contact the hsearch backend (are you offline?), "
    "so some results may be stale"
)
QUERY_WIDTH = 50


@dataclass(frozen=True)
class Line:
    text: str
    # one of: normal, dim, warning, error, header, border, selected
    style: str = "normal"


@dataclass(frozen=True)
class Frame:
    lines: tuple
    # (row, col) of the query caret, None when no input is shown
    caret: Optional[tuple] = None


def fit(text: str, width: int) -> str:
    if width <= 0:
        return ""
    if len(text) > width:
        return text[: width - 1] + "…" if width > 1 else text[:width]
    return text.ljust(width)


def render_table(table) -> list:
    inner = [fit(col.title, col.width) for col in table.columns]
    inner_width = sum(len(cell) + 2 for cell in inner)
    lines = [Line("┌" + "─" * inner_width + "┐", "border")]
    lines.append(Line("│" + "".join(f" {cell} " for cell in inner) + "│", "header"))
    lines.append(Line("│" + "─" * inner_width + "│", "border"))
    for idx, row in enumerate(table.visible_rows()):
        cells = []
        for i, col in enumerate(table.columns):
            value = row[i] if i < len(row) else ""
            cells.append(f" {fit(value, col.width)} ")
        style = "selected" if table.offset + idx == table.cursor else "normal"
        lines.append(Line("│" + "".join(cells) + "│", style))
    lines.append(Line("└" + "─" * inner_width + "┘", "border"))
    return lines


def render(state) -> Frame:
    """Lay the session out as styled lines; pure so it can be tested headless."""
    if state.fatal_error is not None:
        return Frame((Line(f"An unrecoverable error occurred: {state.fatal_error}", "error"),))
    if state.selected or state.quitting:
        return Frame(())

    lines = [Line("")]
    if state.loading:
        lines.append(Line(f"{state.spinner()}{LOADING_TEXT}", "dim"))
    else:
        lines.append(Line(""))
    if state.offline:
        lines.append(Line(OFFLINE_WARNING, "warning"))
        lines.append(Line(""))
    if state.search_error is not None:
        lines.append(Line(f"Warning: failed to search: {state.search_error}", "warning"))
        lines.append(Line(""))
    if state.banner:
        lines.extend(Line(text) for text in state.banner.splitlines())

    visible, caret_col = state.query.view(QUERY_WIDTH)
    caret = (len(lines), len(QUERY_PROMPT) + caret_col)
    if state.query.value:
        lines.append(Line(QUERY_PROMPT + visible))
    else:
        lines.append(Line(QUERY_PROMPT + visible, "dim"))
    lines.append(Line(""))
    lines.extend(render_table(state.table))
    return Frame(tuple(lines), caret)
