"""
Hot Folder Module

Polls a folder layout on an SMB share and hands new, stable files to a
handler one at a time.

Components:
- HotFolderService: polling loop, backoff, stats/status
- HotFolderConfig: layout, filters, polling and stability settings
- FileFilter: name/extension/size filters
- StabilityChecker: repeated size checks via file_stats
- HotFolderFileManager: layout creation, unique moves, error sidecars
- HandlerRunner: runs the handler with a timeout
"""

from .file_filter import FileFilter
from .file_manager import HotFolderFileManager
from .handler_runner import HandlerError, HandlerRunner, load_handler
from .hot_folder_config import HotFolderConfig
from .hot_folder_service import HotFolderService
from .stability_checker import StabilityChecker

__all__ = [
    "FileFilter",
    "HotFolderFileManager",
    "HandlerError",
    "HandlerRunner",
    "load_handler",
    "HotFolderConfig",
    "HotFolderService",
    "StabilityChecker",
]
