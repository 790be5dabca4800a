import queue
import threading

from logging_utils import get_logger
from messages import (
    BannerMsg,
    DownloadCompleteMsg,
    FatalErrorMsg,
    OfflineMsg,
)

log = get_logger("background")


class Mailbox:
    """The event loop's only inbound channel.

    ``post`` never blocks and quietly drops messages once the loop has closed
    the mailbox, so late workers can't hurt a finished session.
    """

    def __init__(self):
        self._queue = queue.Queue()
        self._closed = threading.Event()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def post(self, msg) -> bool:
        if self._closed.is_set():
            log.debug("dropping %r posted after close", msg)
            return False
        self._queue.put_nowait(msg)
        return True

    def get(self, timeout=None):
        """Block up to ``timeout`` for one message; None when none arrived."""
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def drain(self):
        msgs = []
        while True:
            try:
                msgs.append(self._queue.get_nowait())
            except queue.Empty:
                return msgs

    def close(self):
        self._closed.set()


def _classify(err, is_offline_error):
    if is_offline_error(err):
        return OfflineMsg()
    return FatalErrorMsg(err)


def retrieve_entries_task(mailbox, client, is_offline_error):
    try:
        client.retrieve_remote_entries()
    except Exception as exc:
        log.warning("retrieving remote entries failed: %s", exc)
        mailbox.post(_classify(exc, is_offline_error))
    mailbox.post(DownloadCompleteMsg())


def deletion_requests_task(mailbox, client, is_offline_error):
    try:
        client.process_deletion_requests()
    except Exception as exc:
        log.warning("processing deletion requests failed: %s", exc)
        mailbox.post(_classify(exc, is_offline_error))


def banner_task(mailbox, client, is_offline_error, build_id):
    banner = ""
    try:
        banner = client.get_banner(build_id)
    except Exception as exc:
        log.warning("banner check failed: %s", exc)
        mailbox.post(_classify(exc, is_offline_error))
    mailbox.post(BannerMsg(banner=banner or ""))


def launch_background_tasks(mailbox, client, is_offline_error, build_id):
    """Start the sync, deletion and banner workers; returns their threads."""
    jobs = (
        ("retrieve-entries", retrieve_entries_task, (mailbox, client, is_offline_error)),
        ("deletion-requests", deletion_requests_task, (mailbox, client, is_offline_error)),
        ("banner", banner_task, (mailbox, client, is_offline_error, build_id)),
    )
    threads = []
    for name, target, args in jobs:
        t = threading.Thread(target=target, args=args, name=f"hsearch-{name}", daemon=True)
        t.start()
        threads.append(t)
    return threads
