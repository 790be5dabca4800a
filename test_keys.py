import curses

import pytest

from keys import decode_key


def _reader(*pending):
    queue = list(pending)

    def read_next():
        return queue.pop(0) if queue else -1

    return read_next


@pytest.mark.parametrize(
    "ch, expected",
    [
        (curses.KEY_UP, "up"),
        (curses.KEY_NPAGE, "pgdown"),
        (curses.KEY_HOME, "home"),
        (10, "enter"),
        ("\n", "enter"),
        (3, "ctrl+c"),
        (23, "ctrl+w"),
        (127, "backspace"),
    ],
)
def test_named_keys(ch, expected):
    assert decode_key(ch).key == expected


def test_lone_escape_is_esc():
    assert decode_key(27, _reader()).key == "esc"


@pytest.mark.parametrize(
    "pending, expected",
    [
        ((ord("O"), ord("A")), "alt+OA"),
        ((ord("O"), ord("B")), "alt+OB"),
        (("[", "A"), "up"),
        ((ord("b"),), "alt+b"),
        ((127,), "alt+backspace"),
    ],
)
def test_escape_sequences(pending, expected):
    assert decode_key(27, _reader(*pending)).key == expected


def test_printable_keys_carry_text():
    msg = decode_key(ord("g"))
    assert (msg.key, msg.text) == ("g", "g")
    msg = decode_key("é")
    assert (msg.key, msg.text) == ("é", "é")


def test_control_keys_carry_no_text():
    assert decode_key(1).text == ""
