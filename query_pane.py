from dataclasses import dataclass, replace

CHAR_LIMIT = 156
PLACEHOLDER = "ls"


@dataclass(frozen=True)
class QueryInput:
    buffer: str = ""
    cursor: int = 0

    @classmethod
    def create(cls, text=""):
        text = (text or "")[:CHAR_LIMIT]
        return cls(buffer=text, cursor=len(text))

    @property
    def value(self) -> str:
        return self.buffer

    def _with(self, buffer, cursor):
        cursor = max(0, min(cursor, len(buffer)))
        return replace(self, buffer=buffer, cursor=cursor)

    # ---------- word helpers ----------
    @staticmethod
    def _is_word_char(ch):
        return ch.isalnum() or ch == "_"

    def _word_boundary_left(self):
        i = self.cursor
        while i > 0 and not self._is_word_char(self.buffer[i - 1]):
            i -= 1
        while i > 0 and self._is_word_char(self.buffer[i - 1]):
            i -= 1
        return i

    def _word_boundary_right(self):
        i = self.cursor
        n = len(self.buffer)
        while i < n and not self._is_word_char(self.buffer[i]):
            i += 1
        while i < n and self._is_word_char(self.buffer[i]):
            i += 1
        return i

    # ---------- input handling ----------
    def handle_key(self, key: str, text: str = "") -> "QueryInput":
        buf, cur = self.buffer, self.cursor

        if key == "ctrl+w" or key == "alt+backspace":
            start = self._word_boundary_left()
            return self._with(buf[:start] + buf[cur:], start)
        if key == "ctrl+u":
            return self._with(buf[cur:], 0)
        if key == "ctrl+k":
            return self._with(buf[:cur], cur)
        if key == "backspace" or key == "ctrl+h":
            if cur == 0:
                return self
            return self._with(buf[: cur - 1] + buf[cur:], cur - 1)
        if key == "delete" or key == "ctrl+d":
            return self._with(buf[:cur] + buf[cur + 1 :], cur)
        if key == "left" or key == "ctrl+b":
            return self._with(buf, cur - 1)
        if key == "right" or key == "ctrl+f":
            return self._with(buf, cur + 1)
        if key == "ctrl+a":
            return self._with(buf, 0)
        if key == "ctrl+e":
            return self._with(buf, len(buf))
        if key == "alt+b":
            return self._with(buf, self._word_boundary_left())
        if key == "alt+f":
            return self._with(buf, self._word_boundary_right())

        if text and text.isprintable():
            room = CHAR_LIMIT - len(buf)
            if room <= 0:
                return self
            text = text[:room]
            return self._with(buf[:cur] + text + buf[cur:], cur + len(text))
        return self

    # ---------- rendering ----------
    def view(self, width: int) -> tuple[str, int]:
        """Visible slice of the buffer and the caret column inside it."""
        width = max(1, width)
        hscroll = max(0, self.cursor - width + 1)
        if not self.buffer:
            return PLACEHOLDER[:width], 0
        return self.buffer[hscroll : hscroll + width], self.cursor - hscroll
