from dataclasses import dataclass


class SearchError(Exception):
    """Raised by a query engine when a query can't be executed."""


class Msg:
    """Base for everything the event loop consumes."""


@dataclass(frozen=True)
class KeyMsg(Msg):
    key: str
    # printable text carried by the key, empty for control keys
    text: str = ""


@dataclass(frozen=True)
class ResizeMsg(Msg):
    width: int
    height: int


@dataclass(frozen=True)
class TickMsg(Msg):
    pass


@dataclass(frozen=True)
class FatalErrorMsg(Msg):
    error: BaseException


@dataclass(frozen=True)
class SearchErrorMsg(Msg):
    error: BaseException


@dataclass(frozen=True)
class OfflineMsg(Msg):
    pass


@dataclass(frozen=True)
class BannerMsg(Msg):
    banner: str


@dataclass(frozen=True)
class DownloadCompleteMsg(Msg):
    pass


class Effect:
    pass


class Quit(Effect):
    def __repr__(self):
        return "Quit()"

    def __eq__(self, other):
        return isinstance(other, Quit)

    def __hash__(self):
        return hash(Quit)


QUIT = Quit()


def all_message_types():
    return tuple(Msg.__subclasses__())
