"""
jsonstub/data/content_store.py

Access to the served JSON tree (the content root).

Every method takes operator- or request-supplied names and runs them through
path_guard before touching the disk. Blocking work is exposed through async
wrappers that use asyncio.to_thread so directory walks and file reads stay
off the event loop.
"""

from __future__ import annotations

import asyncio
import logging
import os
import shutil
from pathlib import Path
from typing import List, Optional, Tuple

from jsonstub.base.path_guard import is_safe_rel_path, is_safe_segment, require_segment
from jsonstub.errors import ErrorCode, StubError

logger = logging.getLogger(__name__)


class ContentStore:
    def __init__(self, root: Path):
        self.root = Path(root)

    def _file_path(self, rel_path: str) -> Path:
        if not is_safe_rel_path(rel_path):
            raise StubError(
                ErrorCode.PATH_UNSAFE,
                "Invalid file path",
                details={"path": rel_path},
            )
        return self.root.joinpath(*rel_path.split("/"))

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def read_bytes(self, rel_path: str) -> bytes:
        path = self._file_path(rel_path)
        try:
            return path.read_bytes()
        except FileNotFoundError as e:
            raise StubError(
                ErrorCode.CONTENT_NOT_FOUND,
                "File not found",
                details={"path": rel_path},
            ) from e
        except OSError as e:
            # Directories, permissions, ...
            raise StubError(
                ErrorCode.CONTENT_READ_FAILED,
                "File could not be read",
                details={"path": rel_path, "error": str(e)},
            ) from e

    async def read(self, rel_path: str) -> bytes:
        return await asyncio.to_thread(self.read_bytes, rel_path)

    async def read_or_fallback(self, rel_path: str, fallback: bytes) -> bytes:
        """Used by the built-in ping/refresh responses: any read failure -> fallback."""
        try:
            return await self.read(rel_path)
        except StubError:
            return fallback

    # ------------------------------------------------------------------
    # Listings (for the dashboard)
    # ------------------------------------------------------------------

    def list_files(self) -> List[str]:
        """Every regular file under the root as a `/`-separated relative path."""
        entries: List[str] = []
        if not self.root.is_dir():
            return entries

        for dirpath, _dirnames, filenames in os.walk(self.root, followlinks=False):
            for name in filenames:
                full = Path(dirpath) / name
                if full.is_symlink() or not full.is_file():
                    continue
                rel = full.relative_to(self.root).as_posix()
                if is_safe_rel_path(rel):
                    entries.append(rel)

        entries.sort()
        return entries

    def list_folders(self) -> List[str]:
        try:
            children = list(self.root.iterdir())
        except OSError:
            return []
        return sorted(c.name for c in children if c.is_dir() and is_safe_segment(c.name))

    def list_folder(self, folder: str) -> List[str]:
        """Files directly inside one folder, as `folder/name` paths."""
        folder = require_segment(folder, "folder")
        try:
            children = list((self.root / folder).iterdir())
        except OSError:
            return []
        return sorted(
            f"{folder}/{c.name}" for c in children if c.is_file() and is_safe_segment(c.name)
        )

    async def index(self) -> Tuple[List[str], List[str]]:
        """(files, folders) for the main page."""
        return await asyncio.to_thread(lambda: (self.list_files(), self.list_folders()))

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def _write_failed(self, action: str, target: str, e: OSError) -> StubError:
        logger.error(f"[ContentStore] {action} failed for {target}: {e}")
        return StubError(
            ErrorCode.CONTENT_WRITE_FAILED,
            f"{action} failed",
            details={"target": target, "error": str(e)},
        )

    def create_folder(self, name: Optional[str]) -> Path:
        name = require_segment(name)
        path = self.root / name
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise self._write_failed("Create folder", name, e) from e
        logger.info(f"[ContentStore] Created folder {name}")
        return path

    def delete_folder(self, name: Optional[str]) -> None:
        name = require_segment(name)
        try:
            shutil.rmtree(self.root / name)
        except FileNotFoundError as e:
            raise StubError(
                ErrorCode.CONTENT_NOT_FOUND,
                "Folder not found",
                details={"name": name},
            ) from e
        except OSError as e:
            raise self._write_failed("Delete folder", name, e) from e
        logger.info(f"[ContentStore] Deleted folder {name}")

    def rename_folder(self, source: Optional[str], target: Optional[str]) -> None:
        source = require_segment(source, "from")
        target = require_segment(target, "to")
        try:
            (self.root / source).rename(self.root / target)
        except FileNotFoundError as e:
            raise StubError(
                ErrorCode.CONTENT_NOT_FOUND,
                "Folder not found",
                details={"from": source},
            ) from e
        except OSError as e:
            raise self._write_failed("Rename folder", source, e) from e
        logger.info(f"[ContentStore] Renamed folder {source} -> {target}")

    def save_file(self, folder: str, filename: str, data: bytes) -> Path:
        folder = require_segment(folder, "folder")
        filename = require_segment(filename, "filename")
        directory = self.root / folder
        try:
            directory.mkdir(parents=True, exist_ok=True)
            path = directory / filename
            path.write_bytes(data)
        except OSError as e:
            raise self._write_failed("Upload", f"{folder}/{filename}", e) from e
        logger.info(f"[ContentStore] Saved {folder}/{filename} ({len(data)} bytes)")
        return path
