"""
VersionVault Server - Version Lock Model

Dataclass for one entry of the per-file commit lock table.
"""

import threading
from datetime import datetime, timezone
from dataclasses import dataclass, field
from typing import Optional, Tuple


# (namespace directory, stem, extension)
VersionKey = Tuple[str, str, str]


@dataclass
class VersionLock:
    """
    Exclusive commit lock for one logical file

    holders counts the thread holding the lock plus every thread waiting on it;
    the entry is dropped from the table when it reaches zero.
    """
    key: VersionKey
    lock: threading.Lock = field(default_factory=threading.Lock)
    holders: int = 0
    locked_at_utc: Optional[datetime] = None

    def MarkAcquired(self) -> None:
        """Record the time the lock was taken"""
        self.locked_at_utc = datetime.now(timezone.utc)

    def ElapsedSeconds(self) -> int:
        """Get elapsed time since lock was acquired"""
        if self.locked_at_utc is None:
            return 0
        now = datetime.now(timezone.utc)
        return int((now - self.locked_at_utc).total_seconds())
