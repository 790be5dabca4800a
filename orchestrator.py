import curses

from keys import decode_key
from logging_utils import get_logger
from messages import QUIT, ResizeMsg, TickMsg
from search_model import update
from view import render

log = get_logger("loop")


class Orchestrator:
    PAIR_SELECTED = 1
    PAIR_WARNING = 2
    PAIR_ERROR = 3
    PAIR_BORDER = 4
    TICK_MS = 100

    def __init__(self, stdscr, state, ctx, mailbox):
        self.stdscr = stdscr
        try:
            curses.curs_set(1)
        except curses.error:
            pass
        curses.raw()
        self.stdscr.keypad(True)
        self.stdscr.nodelay(False)
        self.stdscr.timeout(self.TICK_MS)

        self.state = state
        self.ctx = ctx
        self.mailbox = mailbox
        self.styles = self._init_styles()

    def _init_styles(self):
        styles = {
            "normal": curses.A_NORMAL,
            "dim": curses.A_DIM,
            "header": curses.A_BOLD,
            "border": curses.A_DIM,
            "selected": curses.A_REVERSE,
            "warning": curses.A_BOLD,
            "error": curses.A_BOLD,
        }
        try:
            curses.start_color()
            curses.use_default_colors()
            curses.init_pair(self.PAIR_SELECTED, curses.COLOR_YELLOW, curses.COLOR_BLUE)
            curses.init_pair(self.PAIR_WARNING, curses.COLOR_YELLOW, -1)
            curses.init_pair(self.PAIR_ERROR, curses.COLOR_RED, -1)
            curses.init_pair(self.PAIR_BORDER, curses.COLOR_WHITE, -1)
            styles["selected"] = curses.color_pair(self.PAIR_SELECTED)
            styles["warning"] = curses.color_pair(self.PAIR_WARNING)
            styles["error"] = curses.color_pair(self.PAIR_ERROR) | curses.A_BOLD
            styles["border"] = curses.color_pair(self.PAIR_BORDER) | curses.A_DIM
        except curses.error:
            pass
        return styles

    # ---------------- helpers ----------------

    def terminal_size(self):
        h, w = self.stdscr.getmaxyx()
        return w, h

    def _read_pending(self):
        self.stdscr.nodelay(True)
        try:
            return self.stdscr.get_wch()
        except curses.error:
            return -1
        finally:
            self.stdscr.nodelay(False)
            self.stdscr.timeout(self.TICK_MS)

    def _read_input(self):
        """Read one key (or time out) and post the result to the mailbox."""
        try:
            ch = self.stdscr.get_wch()
        except curses.error:
            self.mailbox.post(TickMsg())
            return
        if ch == curses.KEY_RESIZE:
            curses.update_lines_cols()
            self.mailbox.post(ResizeMsg(*self.terminal_size()))
            return
        self.mailbox.post(decode_key(ch, self._read_pending))

    # ---------------- UI ----------------

    def redraw(self):
        frame = render(self.state)
        self.stdscr.erase()
        h, w = self.stdscr.getmaxyx()
        for y, line in enumerate(frame.lines):
            if y >= h:
                break
            try:
                self.stdscr.addnstr(y, 0, line.text, max(0, w - 1), self.styles.get(line.style, 0))
            except curses.error:
                pass
        try:
            if frame.caret is not None and frame.caret[0] < h:
                curses.curs_set(1)
                self.stdscr.move(frame.caret[0], min(frame.caret[1], w - 1))
            else:
                curses.curs_set(0)
        except curses.error:
            pass
        self.stdscr.refresh()

    # ---------------- main loop ----------------

    def dispatch(self, msgs) -> bool:
        """Apply messages in arrival order; True once the session should end."""
        for msg in msgs:
            self.state, effects = update(self.state, msg, self.ctx)
            if QUIT in effects:
                return True
        return False

    def run(self):
        self.stdscr.clear()
        self.stdscr.refresh()
        # lay the table out against the real window once before the first key
        self.mailbox.post(ResizeMsg(*self.terminal_size()))

        done = False
        try:
            while not done:
                done = self.dispatch(self.mailbox.drain())
                self.redraw()
                if done:
                    break
                self._read_input()
        finally:
            self.mailbox.close()
        log.debug("loop finished (selected=%s)", self.state.selected)
        return self.state
