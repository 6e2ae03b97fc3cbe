"""
Content Watcher (jsonstub/data/content_watcher.py)

PURPOSE:
Reports files added, modified or removed under the content root while the
server runs, so the console shows when a stub response was edited on disk.

FEATURES:
- Recursive scan of the content root
- Polling-based (works on every filesystem, no native watcher dependency)
- Observation only: nothing is reloaded, because every request already
  reads from disk
"""

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContentChange:
    kind: str  # "created" | "modified" | "deleted"
    path: str  # relative to the content root, `/`-separated


class ContentWatcher:
    """Polls the content root and logs every change it detects."""

    def __init__(self, root: Path, poll_interval: float = 1.0):
        self.root = Path(root)
        self.poll_interval = poll_interval
        self._running = False
        self._task: Optional[asyncio.Task] = None
        self._file_mtimes: Dict[Path, float] = {}
        self._primed = False

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        if self._running:
            logger.warning("[ContentWatcher] Already running")
            return

        self._running = True
        self._task = asyncio.create_task(self._watch_loop())
        logger.info(f"[ContentWatcher] Started watching {self.root}")

    async def stop(self) -> None:
        if not self._running:
            return

        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        logger.info("[ContentWatcher] Stopped")

    async def _watch_loop(self) -> None:
        try:
            await asyncio.to_thread(self.scan_once)

            while self._running:
                await asyncio.sleep(self.poll_interval)
                for change in await asyncio.to_thread(self.scan_once):
                    logger.info(f"[ContentWatcher] {change.kind}: {change.path}")

        except asyncio.CancelledError:
            logger.debug("[ContentWatcher] Watch loop cancelled")
        except Exception as e:
            logger.error(f"[ContentWatcher] Watch loop error: {e}")

    def _current_files(self) -> Dict[Path, float]:
        found: Dict[Path, float] = {}
        if not self.root.is_dir():
            return found
        for path in self.root.rglob("*"):
            try:
                if path.is_file():
                    found[path] = path.stat().st_mtime
            except OSError as e:
                logger.warning(f"[ContentWatcher] Cannot stat {path}: {e}")
        return found

    def scan_once(self) -> List[ContentChange]:
        """
        Compare the tree against the previous scan.

        The first call only records the baseline and reports nothing.
        """
        current = self._current_files()
        if not self._primed:
            self._file_mtimes = current
            self._primed = True
            return []

        changes: List[ContentChange] = []
        for path, mtime in current.items():
            previous = self._file_mtimes.get(path)
            if previous is None:
                changes.append(ContentChange("created", self._rel(path)))
            elif mtime > previous:
                changes.append(ContentChange("modified", self._rel(path)))

        for path in set(self._file_mtimes) - set(current):
            changes.append(ContentChange("deleted", self._rel(path)))

        self._file_mtimes = current
        changes.sort(key=lambda c: (c.path, c.kind))
        return changes

    def _rel(self, path: Path) -> str:
        return path.relative_to(self.root).as_posix()
