import os
import shlex
import threading
from dataclasses import dataclass
from typing import Optional

import numpy as np
import pandas as pd

from logging_utils import get_logger
from messages import SearchError

log = get_logger("store")

COLUMNS = [
    "local_username",
    "hostname",
    "command",
    "current_working_directory",
    "home_directory",
    "exit_code",
    "start_time",
    "end_time",
    "device_id",
]
TIME_COLUMNS = ("start_time", "end_time")
# rows with the same identity are the same invocation, wherever they came from
IDENTITY_COLUMNS = ["device_id", "start_time", "end_time", "command"]
TEXT_SEARCH_COLUMNS = ("command", "hostname", "current_working_directory")


@dataclass(frozen=True)
class HistoryEntry:
    local_username: str
    hostname: str
    command: str
    current_working_directory: str
    home_directory: str
    exit_code: int
    start_time: Optional[pd.Timestamp]
    end_time: Optional[pd.Timestamp]
    device_id: str = ""


def _empty_frame() -> pd.DataFrame:
    df = pd.DataFrame({col: pd.Series(dtype="object") for col in COLUMNS})
    df["exit_code"] = df["exit_code"].astype("int64")
    for col in TIME_COLUMNS:
        df[col] = pd.to_datetime(df[col], utc=True)
    return df


def normalize_frame(df: pd.DataFrame) -> pd.DataFrame:
    """Coerce an arbitrary frame into the store's column set and dtypes."""
    df = df.copy()
    for col in COLUMNS:
        if col not in df.columns:
            df[col] = None
    df = df[COLUMNS]
    for col in COLUMNS:
        if col in TIME_COLUMNS or col == "exit_code":
            continue
        df[col] = df[col].fillna("").astype(str)
    df["exit_code"] = (
        pd.to_numeric(df["exit_code"], errors="coerce").fillna(0).astype("int64")
    )
    for col in TIME_COLUMNS:
        df[col] = pd.to_datetime(df[col], utc=True, errors="coerce")
    return df.reset_index(drop=True)


class HistoryStore:
    SUPPORTED_EXTENSIONS = {".csv", ".jsonl", ".json"}

    def __init__(self, path: Optional[str] = None, df: Optional[pd.DataFrame] = None):
        self.path = path
        self._lock = threading.Lock()
        if df is not None:
            self._df = normalize_frame(df)
        elif path:
            self._df = self._load(path)
        else:
            self._df = _empty_frame()

    # ---------- persistence ----------
    def _ext(self, path):
        _, ext = os.path.splitext(path)
        ext = ext.lower()
        if ext not in self.SUPPORTED_EXTENSIONS:
            raise ValueError(
                f"Unsupported history file type {ext!r} (use .csv or .jsonl)"
            )
        return ext

    def _load(self, path) -> pd.DataFrame:
        ext = self._ext(path)
        if not os.path.exists(path) or os.path.getsize(path) == 0:
            return _empty_frame()
        if ext == ".csv":
            try:
                df = pd.read_csv(path)
            except pd.errors.EmptyDataError:
                return _empty_frame()
        else:
            df = pd.read_json(path, lines=True)
        log.debug("loaded %d history entries from %s", len(df), path)
        return normalize_frame(df)

    def save(self) -> None:
        if not self.path:
            return
        ext = self._ext(self.path)
        with self._lock:
            df = self._df
        out = df.copy()
        for col in TIME_COLUMNS:
            out[col] = out[col].map(lambda t: "" if pd.isna(t) else t.isoformat())
        if ext == ".csv":
            out.to_csv(self.path, index=False)
        else:
            out.to_json(self.path, orient="records", lines=True)

    # ---------- mutation ----------
    def add_entries(self, records) -> int:
        """Merge raw entry dicts into the store and return how many were new."""
        incoming = normalize_frame(pd.DataFrame(list(records or [])))
        if incoming.empty:
            return 0
        with self._lock:
            before = len(self._df)
            if self._df.empty:
                merged = incoming
            else:
                merged = pd.concat([self._df, incoming], ignore_index=True)
            merged = merged.drop_duplicates(subset=IDENTITY_COLUMNS, keep="first")
            self._df = merged.reset_index(drop=True)
            added = len(self._df) - before
        log.info("merged %d new remote entries", added)
        return added

    def apply_deletions(self, requests) -> int:
        """Drop entries matching (device_id, end_time) pairs and return the count."""
        keys = set()
        for req in requests or []:
            if not isinstance(req, dict):
                continue
            end_time = pd.to_datetime(req.get("end_time"), utc=True, errors="coerce")
            if pd.isna(end_time):
                continue
            keys.add((str(req.get("device_id", "")), end_time))
        if not keys:
            return 0
        with self._lock:
            df = self._df
            doomed = np.array(
                [(d, t) in keys for d, t in zip(df["device_id"], df["end_time"])],
                dtype=bool,
            )
            self._df = df[~doomed].reset_index(drop=True)
            removed = int(doomed.sum())
        log.info("applied deletion requests, removed %d entries", removed)
        return removed

    def __len__(self):
        with self._lock:
            return len(self._df)

    # ---------- querying ----------
    def search(self, query: str, limit: int) -> list[HistoryEntry]:
        with self._lock:
            df = self._df
        try:
            tokens = shlex.split(query or "")
        except ValueError as exc:
            raise SearchError(str(exc)) from exc

        masks = [np.ones(len(df), dtype=bool)]
        for token in tokens:
            negate = token.startswith("-") and len(token) > 1
            if negate:
                token = token[1:]
            mask = self._token_mask(df, token)
            masks.append(~mask if negate else mask)
        matched = df[np.logical_and.reduce(masks)]
        matched = matched.sort_values(
            "end_time", ascending=False, kind="stable", na_position="last"
        )
        if limit > 0:
            matched = matched.head(limit)
        return [self._to_entry(row) for row in matched.itertuples(index=False)]

    def _token_mask(self, df, token) -> np.ndarray:
        field, sep, value = token.partition(":")
        if sep and field in ATOM_HANDLERS:
            return ATOM_HANDLERS[field](df, value)
        hits = [
            df[col].str.contains(token, case=False, regex=False).to_numpy(dtype=bool)
            for col in TEXT_SEARCH_COLUMNS
        ]
        return np.logical_or.reduce(hits)

    @staticmethod
    def _to_entry(row) -> HistoryEntry:
        return HistoryEntry(
            local_username=row.local_username,
            hostname=row.hostname,
            command=row.command,
            current_working_directory=row.current_working_directory,
            home_directory=row.home_directory,
            exit_code=int(row.exit_code),
            start_time=None if pd.isna(row.start_time) else row.start_time,
            end_time=None if pd.isna(row.end_time) else row.end_time,
            device_id=row.device_id,
        )


def _contains(col):
    def _mask(df, value):
        return df[col].str.contains(value, case=False, regex=False).to_numpy(dtype=bool)

    return _mask


def _exit_code_mask(df, value):
    try:
        code = int(value)
    except ValueError:
        raise SearchError(f"exit_code must be an integer, got {value!r}") from None
    return (df["exit_code"] == code).to_numpy(dtype=bool)


def _time_bound(after):
    def _mask(df, value):
        bound = pd.to_datetime(value, utc=True, errors="coerce")
        if pd.isna(bound):
            raise SearchError(f"failed to parse time {value!r}")
        ends = df["end_time"]
        result = ends > bound if after else ends < bound
        return result.fillna(False).to_numpy(dtype=bool)

    return _mask


ATOM_HANDLERS = {
    "hostname": _contains("hostname"),
    "cwd": _contains("current_working_directory"),
    "user": lambda df, value: (df["local_username"] == value).to_numpy(dtype=bool),
    "exit_code": _exit_code_mask,
    "before": _time_bound(after=False),
    "after": _time_bound(after=True),
}
