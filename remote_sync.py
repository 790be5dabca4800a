import json
import socket
from urllib.error import URLError, HTTPError
from urllib.parse import urlencode
from urllib.request import urlopen, Request

from logging_utils import get_logger

log = get_logger("remote")

USER_AGENT = "hsearch-client"
DEFAULT_TIMEOUT = 5.0


class OfflineError(Exception):
    """The backend couldn't be reached at all (as opposed to a failing request)."""


def is_offline_error(err) -> bool:
    return isinstance(err, OfflineError)


class RemoteClient:
    """Talks to the optional sync server. Every call is a no-op without one."""

    def __init__(self, store, server_url=None, device_id="", timeout=DEFAULT_TIMEOUT):
        self.store = store
        self.server_url = server_url
        self.device_id = device_id
        self.timeout = timeout

    @property
    def enabled(self) -> bool:
        return bool(self.server_url)

    def _get(self, path: str, params: dict) -> bytes:
        url = f"{self.server_url}{path}"
        if params:
            url = f"{url}?{urlencode(params)}"
        request = Request(url, headers={"User-Agent": USER_AGENT})
        try:
            with urlopen(request, timeout=self.timeout) as resp:
                return resp.read()
        except HTTPError:
            raise
        except (URLError, TimeoutError, socket.timeout, ConnectionError) as exc:
            raise OfflineError(f"failed to reach {self.server_url}: {exc}") from exc

    def _get_json(self, path: str, params: dict):
        data = self._get(path, params).decode("utf-8", errors="replace")
        try:
            return json.loads(data)
        except json.JSONDecodeError as exc:
            raise ValueError(f"malformed response from {path}: {exc}") from exc

    def retrieve_remote_entries(self) -> None:
        if not self.enabled:
            return
        payload = self._get_json("/api/v1/query", {"device_id": self.device_id})
        if not isinstance(payload, list):
            raise ValueError("expected a list of entries from /api/v1/query")
        added = self.store.add_entries(item for item in payload if isinstance(item, dict))
        if added:
            self.store.save()

    def process_deletion_requests(self) -> None:
        if not self.enabled:
            return
        payload = self._get_json(
            "/api/v1/get-deletion-requests", {"device_id": self.device_id}
        )
        if not isinstance(payload, list):
            raise ValueError("expected a list of deletion requests")
        requests = []
        for item in payload:
            if not isinstance(item, dict):
                continue
            messages = item.get("messages")
            if isinstance(messages, list):
                requests.extend(m for m in messages if isinstance(m, dict))
            else:
                requests.append(item)
        removed = self.store.apply_deletions(requests)
        if removed:
            self.store.save()

    def get_banner(self, build_id: str) -> str:
        if not self.enabled:
            return ""
        data = self._get(
            "/api/v1/banner",
            {"commit_hash": build_id, "device_id": self.device_id},
        )
        text = data.decode("utf-8", errors="replace").strip()
        log.debug("banner: %r", text)
        return text
