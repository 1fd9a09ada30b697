"""File moves and bookkeeping for the hot folder layout on the share."""

import logging
from typing import Optional

from ...core.exceptions import NameConflictError
from ...smb import AsyncShare, PathState, ResourceKind, paths
from ...utils.file_operations import (
    MAX_CONFLICT_ATTEMPTS,
    error_sidecar_name,
    numbered_variant,
)
from .hot_folder_config import HotFolderConfig


class HotFolderFileManager:
    def __init__(self, share: AsyncShare, config: HotFolderConfig):
        self._share = share
        self._config = config

    async def ensure_layout(self) -> None:
        """Create base/incoming, base/processing, base/success and base/errors when missing."""
        for name, folder in self._config.folders.items():
            await self._share.mkdir_p(folder)
            logging.debug(f"Hot folder '{name}' ready: {folder}")

    async def list_files(self, directory: str) -> list[str]:
        """Names of the plain files in ``directory``; subdirectories are ignored."""
        entries = await self._share.list_dir(directory)
        return [e.name for e in entries if e.kind == ResourceKind.FILE]

    async def file_size(self, path: str) -> Optional[int]:
        stats = await self._share.file_stats(path)
        if stats is None or stats.is_directory:
            return None
        return stats.size

    async def move(self, from_path: str, to_path: str) -> None:
        await self._share.move_file(from_path, to_path)

    async def unique_path(self, path: str) -> str:
        """``path`` itself when free, else the first free name_N.ext next to it."""
        if await self._share.exists(path) == PathState.NOT_FOUND:
            return path

        directory = paths.parent(path)
        name = paths.basename(path)
        for counter in range(1, MAX_CONFLICT_ATTEMPTS + 1):
            candidate = paths.join(directory, numbered_variant(name, counter))
            if await self._share.exists(candidate) == PathState.NOT_FOUND:
                return candidate

        raise NameConflictError(
            f"no free name after {MAX_CONFLICT_ATTEMPTS} attempts", path
        )

    async def move_unique(self, from_path: str, to_path: str) -> str:
        """Move without overwriting; returns the path actually used."""
        target = await self.unique_path(to_path)
        await self._share.move_file(from_path, target)
        if target != paths.join(to_path):
            logging.warning(f"Destination exists, saved as {paths.basename(target)}")
        return target

    async def write_error_sidecar(self, path: str, reason: str) -> str:
        sidecar = paths.join(paths.parent(path), error_sidecar_name(paths.basename(path)))
        await self._share.write_file(sidecar, (reason.rstrip("\n") + "\n").encode("utf-8"))
        return sidecar
