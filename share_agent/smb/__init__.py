"""
SMB share adapter.

Path-addressed, synchronous file operations on a remote share:

- connect(): open one exclusive-access session to \\\\host\\share
- operations: read_file, write_file, list_dir, stat, file_stats, mkdir,
  mkdir_p, rm, rename, move_file, exists
- AsyncShare: the same operations run on worker threads for asyncio callers

Paths passed to the operations are always relative to the share root.
"""

from .async_share import AsyncShare
from .connection import ShareConnection, connect
from .models import DirEntry, FileStats, PathState, ResourceKind, SimpleStat
from .operations import (
    exists,
    file_stats,
    list_dir,
    mkdir,
    mkdir_p,
    move_file,
    read_file,
    rename,
    rm,
    stat,
    write_file,
)

__all__ = [
    "AsyncShare",
    "ShareConnection",
    "connect",
    "DirEntry",
    "FileStats",
    "PathState",
    "ResourceKind",
    "SimpleStat",
    "exists",
    "file_stats",
    "list_dir",
    "mkdir",
    "mkdir_p",
    "move_file",
    "read_file",
    "rename",
    "rm",
    "stat",
    "write_file",
]
