import curses

from messages import KeyMsg

ESC = 27

SPECIAL_KEYS = {
    curses.KEY_UP: "up",
    curses.KEY_DOWN: "down",
    curses.KEY_LEFT: "left",
    curses.KEY_RIGHT: "right",
    curses.KEY_PPAGE: "pgup",
    curses.KEY_NPAGE: "pgdown",
    curses.KEY_HOME: "home",
    curses.KEY_END: "end",
    curses.KEY_DC: "delete",
    curses.KEY_BACKSPACE: "backspace",
    curses.KEY_ENTER: "enter",
}

CONTROL_KEYS = {
    3: "ctrl+c",
    8: "ctrl+h",
    9: "tab",
    10: "enter",
    13: "enter",
    127: "backspace",
}

# ESC-prefixed cursor sequences some terminals send without keypad translation
ESCAPE_SEQUENCES = {
    ("O", "A"): "alt+OA",
    ("O", "B"): "alt+OB",
    ("[", "A"): "up",
    ("[", "B"): "down",
    ("[", "C"): "right",
    ("[", "D"): "left",
    ("[", "H"): "home",
    ("[", "F"): "end",
}


def _as_code(ch):
    if isinstance(ch, str):
        if len(ch) == 1 and (ord(ch) < 32 or ord(ch) == 127):
            return ord(ch)
        return None
    return ch


def _read_char(read_next):
    nxt = read_next()
    if nxt is None or nxt == -1:
        return None
    if isinstance(nxt, int):
        if 0 <= nxt < 256:
            return chr(nxt)
        return None
    return nxt


def decode_key(ch, read_next=lambda: -1):
    """Turn a getch/get_wch result into a KeyMsg.

    ``read_next`` must return the next pending input without blocking (-1 or
    None when nothing is queued); it is only consulted after ESC.
    """
    code = _as_code(ch)
    if code is None:
        # printable text from get_wch
        return KeyMsg(key=ch, text=ch)

    if code == ESC:
        first = _read_char(read_next)
        if first is None:
            return KeyMsg(key="esc")
        if first in ("O", "["):
            second = _read_char(read_next)
            if second is None:
                return KeyMsg(key=f"alt+{first}")
            name = ESCAPE_SEQUENCES.get((first, second))
            return KeyMsg(key=name or f"alt+{first}{second}")
        if first == "\x7f":
            return KeyMsg(key="alt+backspace")
        return KeyMsg(key=f"alt+{first}")

    if code in SPECIAL_KEYS:
        return KeyMsg(key=SPECIAL_KEYS[code])
    if code in CONTROL_KEYS:
        return KeyMsg(key=CONTROL_KEYS[code])
    if 1 <= code <= 26:
        return KeyMsg(key=f"ctrl+{chr(code + 96)}")
    if 32 <= code <= 126:
        return KeyMsg(key=chr(code), text=chr(code))
    return KeyMsg(key=f"code+{code}")
