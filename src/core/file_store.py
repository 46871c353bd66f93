"""
src/core/file_store.py
=======================
Self-healing JSON collection file: the persistence layer under both the
product catalog and the credential vault.

One JsonFileStore owns one file holding a JSON array of objects. The file is
treated as "needs repair" when it is:
    - absent
    - zero-length (or whitespace only)
    - not parseable as JSON
    - parseable, but not an array of objects

Repair means: optionally move the unusable file aside
(<name>.corrupt-<UTC timestamp>), then write the seed collection in its place.
Cold start and crash recovery go through the same path.

Writes are atomic from a reader's point of view: the payload goes to a temp
file in the same directory, is fsync'ed, then os.replace()'d over the target.
A threading.RLock per store serializes read-modify-write cycles inside this
process (see transaction()). Separate processes writing the same file are
still last-writer-wins.
"""

from __future__ import annotations

import contextlib
import json
import logging
import os
import stat
import tempfile
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Iterator

from src.core.errors import FatalStartupError, StorageCorruptionError

logger = logging.getLogger(__name__)

SeedProducer = Callable[[], list[dict]]

_umask_lock = threading.Lock()


def _current_umask() -> int:
    """os.umask() can only be read by setting it, so set it back right away."""
    with _umask_lock:
        mask = os.umask(0o022)
        os.umask(mask)
    return mask


@dataclass
class LoadResult:
    """Records read from disk, and whether the read had to repair the file."""

    records:  list[dict]
    repaired: bool = False


class JsonFileStore:
    """
    Read / write / repair logic for one JSON array file.

    Args:
        path:           collection file location
        seed:           zero-argument callable producing the fallback collection;
                        only called when a repair actually happens
        label:          name used in log lines (defaults to the file name)
        backup_corrupt: rename a non-empty unusable file aside before reseeding
    """

    def __init__(
        self,
        path:           Path,
        seed:           SeedProducer,
        label:          str | None = None,
        backup_corrupt: bool = True,
    ) -> None:
        self.path            = Path(path)
        self.label           = label or self.path.name
        self._seed           = seed
        self._backup_corrupt = backup_corrupt
        self._lock           = threading.RLock()

    # ── public API ────────────────────────────────────────────────────────────

    def ensure(self) -> bool:
        """
        Make sure the file holds a valid collection. Called at startup.

        Returns True when the file had to be (re)created. Corruption never
        raises; only a failure to write the seed does, as FatalStartupError.
        """
        with self._lock:
            try:
                self._read()
                return False
            except StorageCorruptionError as exc:
                try:
                    self._repair()
                except OSError as write_err:
                    raise FatalStartupError(
                        f"Cannot create {self.label} at {self.path}: {write_err}"
                    ) from write_err
                logger.info("%s created/recovered with seed data (%s)", self.label, exc)
                return True

    def load(self) -> LoadResult:
        """Read the collection; repair and return the seed if it is unusable."""
        with self._lock:
            try:
                return LoadResult(self._read())
            except StorageCorruptionError as exc:
                logger.warning("%s invalid or empty, recreating from seed (%s)", self.label, exc)
                return LoadResult(self._repair(), repaired=True)

    def save(self, records: list[dict]) -> None:
        """Overwrite the whole collection."""
        with self._lock:
            self._write(records)

    @contextlib.contextmanager
    def transaction(self) -> Iterator["JsonFileStore"]:
        """Hold the store lock across a load() ... save() cycle."""
        with self._lock:
            yield self

    # ── internals (caller holds _lock) ────────────────────────────────────────

    def _read(self) -> list[dict]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise StorageCorruptionError("file missing")
        except (OSError, UnicodeDecodeError) as exc:
            raise StorageCorruptionError(f"unreadable: {exc}")

        if not raw.strip():
            raise StorageCorruptionError("file empty")

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise StorageCorruptionError(f"invalid JSON: {exc}")

        if not isinstance(data, list) or not all(isinstance(r, dict) for r in data):
            raise StorageCorruptionError("not a JSON array of objects")
        return data

    def _repair(self) -> list[dict]:
        if self._backup_corrupt:
            self._set_aside()
        records = self._seed()
        self._write(records)
        return records

    def _set_aside(self) -> None:
        """Rename a non-empty unusable file so its contents are not lost."""
        try:
            if not self.path.is_file() or self.path.stat().st_size == 0:
                return
        except OSError:
            return
        stamp  = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S%fZ")
        backup = self.path.with_name(f"{self.path.name}.corrupt-{stamp}")
        os.replace(self.path, backup)
        logger.warning("Unusable %s moved aside to %s", self.label, backup.name)

    def _target_mode(self) -> int:
        try:
            return stat.S_IMODE(self.path.stat().st_mode)
        except FileNotFoundError:
            return 0o666 & ~_current_umask()

    def _write(self, records: list[dict]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(records, indent=2, ensure_ascii=False)

        fd, tmp = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent,
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
                fh.flush()
                os.fsync(fh.fileno())
            # mkstemp creates 0600; keep the target's mode (or the umask default)
            os.chmod(tmp, self._target_mode())
            os.replace(tmp, self.path)
        except BaseException:
            with contextlib.suppress(FileNotFoundError):
                os.unlink(tmp)
            raise
