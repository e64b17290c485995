"""Report cache with a time-to-live, keyed by organization and date range.

Each organization owns a single slot holding ``{key, timestamp, payload}``.
Asking for a different date range of the same organization finds the slot,
sees the key mismatch and drops it, so at most one report per organization is
ever kept.
"""

from __future__ import annotations

import json
import logging
import re
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any

from cachetools import TTLCache

from .models import DateRange, OrgReport

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 24 * 60 * 60
KEY_SEPARATOR = "|"
MEMORY_SLOTS = 128


def cache_key(org: str, date_range: DateRange | None = None) -> str:
    if date_range is None:
        return org
    return f"{org}{KEY_SEPARATOR}{date_range.cache_token()}"


def _slot_name(key: str) -> str:
    org = key.split(KEY_SEPARATOR, 1)[0]
    return re.sub(r"[^A-Za-z0-9._-]", "_", org.lower())


def _slot_path(directory: Path, slot: str) -> Path:
    return directory / f"{slot}.json"


def _is_entry(entry: Any) -> bool:
    if not isinstance(entry, dict):
        return False
    timestamp = entry.get("timestamp")
    return isinstance(timestamp, (int, float)) and not isinstance(timestamp, bool)


class ReportCache:
    """Stores assembled reports on disk (``directory``) or in memory.

    In memory the slots live in a ``TTLCache`` driven by the same clock, which
    drops entries nobody reads again once they are past their TTL.
    """

    def __init__(
        self,
        directory: str | Path | None = None,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self.directory = Path(directory).expanduser() if directory is not None else None
        self.ttl_seconds = ttl_seconds
        self._clock = clock or time.time
        # One second of slack: an entry exactly ttl_seconds old is still fresh.
        self._memory: TTLCache[str, dict[str, Any]] = TTLCache(
            maxsize=MEMORY_SLOTS, ttl=ttl_seconds + 1, timer=self._clock
        )

    def _read(self, slot: str) -> Any:
        if self.directory is None:
            self._memory.expire()
            return self._memory.get(slot)
        path = _slot_path(self.directory, slot)
        if not path.exists():
            return None
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable cache file %s: %s", path, e)
            return None

    def _write(self, slot: str, entry: dict[str, Any]) -> None:
        if self.directory is None:
            self._memory[slot] = entry
            return
        self.directory.mkdir(parents=True, exist_ok=True)
        _slot_path(self.directory, slot).write_text(
            json.dumps(entry, ensure_ascii=False), encoding="utf-8"
        )

    def _purge(self, slot: str) -> None:
        if self.directory is None:
            self._memory.pop(slot, None)
            return
        _slot_path(self.directory, slot).unlink(missing_ok=True)

    def get(self, key: str) -> OrgReport | None:
        slot = _slot_name(key)
        entry = self._read(slot)
        if entry is None:
            logger.debug("Cache MISS: %s", key)
            return None

        if not _is_entry(entry):
            logger.warning("Discarding malformed cache entry for %s", key)
            self._purge(slot)
            return None

        if entry.get("key") != key:
            logger.debug("Cache key mismatch for %s (stored %s), purging", key, entry.get("key"))
            self._purge(slot)
            return None

        age = self._clock() - entry["timestamp"]
        if age > self.ttl_seconds:
            logger.debug("Cache entry for %s expired (%.0fs old), purging", key, age)
            self._purge(slot)
            return None

        try:
            report = OrgReport.from_dict(entry["payload"])
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.warning("Discarding malformed cache entry for %s: %s", key, e)
            self._purge(slot)
            return None
        logger.debug("Cache HIT: %s", key)
        return report

    def save(self, key: str, report: OrgReport) -> None:
        entry = {"key": key, "timestamp": self._clock(), "payload": report.to_dict()}
        self._write(_slot_name(key), entry)
        logger.debug("Cached report for %s", key)

    def clear(self) -> None:
        self._memory.clear()
        if self.directory is not None and self.directory.exists():
            for path in self.directory.glob("*.json"):
                path.unlink(missing_ok=True)
