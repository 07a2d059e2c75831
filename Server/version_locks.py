"""
VersionVault Server - Commit Lock Table

This module serializes commits per logical file. Each (directory, stem,
extension) key gets its own lock, so two uploads of report.pdf into the same
namespace run one after the other while uploads of different files proceed
in parallel.

Locks are threading locks: the HTTP layer runs blocking storage calls in
Starlette's threadpool.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Dict, Iterator, List

from models.infrastructure import VersionKey, VersionLock

logger = logging.getLogger(__name__)


class VersionLockTable:
    """
    Table of per-key commit locks

    Entries are reference counted and removed once no thread holds or waits
    for them, so the table only grows with the number of concurrent commits.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[VersionKey, VersionLock] = {}

    @contextmanager
    def Hold(self, key: VersionKey) -> Iterator[VersionLock]:
        """
        Hold the exclusive lock for key for the duration of the with block

        The lock is released on every exit path, including exceptions.
        """
        with self._guard:
            entry = self._locks.get(key)
            if entry is None:
                entry = VersionLock(key=key)
                self._locks[key] = entry
            entry.holders += 1

        entry.lock.acquire()
        entry.MarkAcquired()
        logger.debug(f"Commit lock acquired: {key}")
        try:
            yield entry
        finally:
            logger.debug(f"Commit lock released after {entry.ElapsedSeconds()}s: {key}")
            entry.locked_at_utc = None
            entry.lock.release()
            with self._guard:
                entry.holders -= 1
                if entry.holders == 0:
                    del self._locks[key]

    def ActiveKeys(self) -> List[VersionKey]:
        """Keys currently held or waited for"""
        with self._guard:
            return list(self._locks.keys())

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
