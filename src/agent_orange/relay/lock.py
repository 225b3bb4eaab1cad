"""Pending lock written by the local terminal approval hook."""

import logging
from pathlib import Path

import psutil

from agent_orange.config.settings import DEFAULT_LOCK_FILE

logger = logging.getLogger(__name__)


class PendingLock:
    """
    Read-only view of a PID file owned by another process.

    The lock is live only while the file exists, holds an integer pid and
    that pid is still running. A stale or unreadable file counts as absent.
    """

    def __init__(self, path: Path = DEFAULT_LOCK_FILE) -> None:
        self.path = Path(path)

    def read_pid(self) -> int | None:
        try:
            raw = self.path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.debug("Could not read lock file %s: %s", self.path, e)
            return None
        try:
            return int(raw)
        except ValueError:
            logger.debug("Lock file %s does not hold a pid: %r", self.path, raw[:20])
            return None

    def is_live(self) -> bool:
        pid = self.read_pid()
        if pid is None or pid <= 0:
            return False
        return psutil.pid_exists(pid)
