"""
AsyncShare - event-loop facade over the blocking operation handlers.

Every call runs on a worker thread so a slow round trip never stalls the
loop. Calls on the same connection still serialize on its lock.
"""

import asyncio
import logging
from typing import Optional

import aiofiles

from . import operations
from .connection import ShareConnection
from .models import DirEntry, FileStats, PathState, SimpleStat


class AsyncShare:
    def __init__(self, connection: ShareConnection):
        self._connection = connection
        self._logger = logging.getLogger("share_agent.async_share")

    @property
    def connection(self) -> ShareConnection:
        return self._connection

    @property
    def share_root(self) -> str:
        return self._connection.share_root

    async def read_file(self, path: str) -> bytes:
        return await asyncio.to_thread(operations.read_file, self._connection, path)

    async def write_file(self, path: str, data: bytes) -> int:
        await asyncio.to_thread(operations.write_file, self._connection, path, data)
        return len(data)

    async def list_dir(self, path: str = "") -> list[DirEntry]:
        return await asyncio.to_thread(operations.list_dir, self._connection, path)

    async def stat(self, path: str) -> SimpleStat:
        return await asyncio.to_thread(operations.stat, self._connection, path)

    async def file_stats(self, path: str) -> Optional[FileStats]:
        return await asyncio.to_thread(operations.file_stats, self._connection, path)

    async def mkdir(self, path: str) -> None:
        await asyncio.to_thread(operations.mkdir, self._connection, path)

    async def mkdir_p(self, path: str) -> None:
        await asyncio.to_thread(operations.mkdir_p, self._connection, path)

    async def rm(self, path: str) -> None:
        await asyncio.to_thread(operations.rm, self._connection, path)

    async def rename(self, from_path: str, to_path: str, replace_if_exists: bool = False) -> None:
        await asyncio.to_thread(
            operations.rename, self._connection, from_path, to_path, replace_if_exists
        )

    async def move_file(self, from_path: str, to_path: str) -> None:
        await asyncio.to_thread(operations.move_file, self._connection, from_path, to_path)

    async def exists(self, path: str) -> PathState:
        return await asyncio.to_thread(operations.exists, self._connection, path)

    async def upload_file(self, local_path: str, remote_path: str) -> int:
        """Copy a local file to the share. Returns bytes written."""
        async with aiofiles.open(local_path, "rb") as f:
            data = await f.read()
        written = await self.write_file(remote_path, data)
        self._logger.info(f"Uploaded {local_path} -> {remote_path} ({written} bytes)")
        return written

    async def download_file(self, remote_path: str, local_path: str) -> int:
        """Copy a remote file to the local disk. Returns bytes written."""
        data = await self.read_file(remote_path)
        async with aiofiles.open(local_path, "wb") as f:
            await f.write(data)
        self._logger.info(f"Downloaded {remote_path} -> {local_path} ({len(data)} bytes)")
        return len(data)

    async def close(self) -> None:
        await asyncio.to_thread(self._connection.close)
