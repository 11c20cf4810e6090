"""JSON-file document store backing the unit of work.

Every collection lives in one ``store.json`` document inside a data
directory, so a commit is a single atomic rename.  A unit of work holds
the directory's lock from ``begin()`` to commit/rollback: a thread lock
for checkouts in this process and an exclusive ``flock`` on
``.store.lock`` for the CLI and the web server running side by side.
That serializes competing checkouts the way row locks would in a
relational store.
"""

from __future__ import annotations

import fcntl
import json
import os
import threading
from pathlib import Path
from typing import IO

COLLECTIONS = ("products", "carts", "orders", "wallets", "wallet_transactions")

DOCUMENT_FILE = "store.json"
LOCK_FILE = ".store.lock"

_locks: dict[Path, threading.Lock] = {}
_locks_guard = threading.Lock()


def _lock_for(data_dir: Path) -> threading.Lock:
    with _locks_guard:
        return _locks.setdefault(data_dir, threading.Lock())


class JsonDataStore:

    def __init__(self, data_dir: Path) -> None:
        self._data_dir = data_dir.resolve()
        self._lock = _lock_for(self._data_dir)
        self._lock_file: IO[str] | None = None
        self._ensure_document()

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    @property
    def path(self) -> Path:
        return self._data_dir / DOCUMENT_FILE

    @property
    def lock(self) -> threading.Lock:
        return self._lock

    def acquire(self) -> None:
        """Take the thread lock, then the cross-process file lock."""
        self._lock.acquire()
        try:
            lock_file = open(self._data_dir / LOCK_FILE, "w")
            try:
                fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX)
            except BaseException:
                lock_file.close()
                raise
        except BaseException:
            self._lock.release()
            raise
        self._lock_file = lock_file

    def release(self) -> None:
        lock_file, self._lock_file = self._lock_file, None
        try:
            if lock_file is not None:
                fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)
                lock_file.close()
        finally:
            self._lock.release()

    def load(self) -> dict[str, list[dict]]:
        data = json.loads(self.path.read_text(encoding="utf-8"))
        return {name: data.get(name, []) for name in COLLECTIONS}

    def write(self, document: dict[str, list[dict]]) -> None:
        """Replace the whole document atomically (write to temp, then rename)."""
        unknown = set(document) - set(COLLECTIONS)
        if unknown:
            raise KeyError(f"Unknown collections {sorted(unknown)}")
        tmp = self.path.with_suffix(".json.tmp")
        try:
            tmp.write_text(json.dumps(document, indent=2) + "\n", encoding="utf-8")
            os.replace(tmp, self.path)
        except BaseException:
            tmp.unlink(missing_ok=True)
            raise

    def _ensure_document(self) -> None:
        self._data_dir.mkdir(parents=True, exist_ok=True)
        if not self.path.exists():
            self.acquire()
            try:
                if not self.path.exists():
                    self.write({name: [] for name in COLLECTIONS})
            finally:
                self.release()
