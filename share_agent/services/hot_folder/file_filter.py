import re
from typing import Optional

from .hot_folder_config import HotFolderConfig


class FileFilter:
    """Decides whether a file in the incoming folder should be picked up, by name and size."""

    def __init__(
        self,
        name_patterns: list[str],
        exclude_patterns: list[str],
        extensions: Optional[list[str]] = None,
        min_size: int = 0,
        max_size: Optional[int] = None,
    ):
        self._include = [re.compile(p) for p in name_patterns]
        self._exclude = [re.compile(p) for p in exclude_patterns]
        self._extensions = (
            {e.lower() if e.startswith(".") else f".{e.lower()}" for e in extensions}
            if extensions is not None
            else None
        )
        self._min_size = min_size
        self._max_size = max_size

    @classmethod
    def from_config(cls, config: HotFolderConfig) -> "FileFilter":
        return cls(
            name_patterns=config.name_patterns,
            exclude_patterns=config.exclude_patterns,
            extensions=config.extensions,
            min_size=config.min_size,
            max_size=config.max_size,
        )

    def matches(self, name: str, size: int) -> bool:
        return self.name_ok(name) and self.size_ok(size)

    def name_ok(self, name: str) -> bool:
        if self._include and not any(p.search(name) for p in self._include):
            return False
        if any(p.search(name) for p in self._exclude):
            return False
        if self._extensions is not None:
            dot = name.rfind(".")
            extension = name[dot:].lower() if dot > 0 else ""
            if extension not in self._extensions:
                return False
        return True

    def size_ok(self, size: int) -> bool:
        if size < self._min_size:
            return False
        return self._max_size is None or size <= self._max_size
