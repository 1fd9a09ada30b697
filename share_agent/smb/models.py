from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple


class ResourceKind(str, Enum):
    FILE = "file"
    DIRECTORY = "directory"


class PathState(str, Enum):
    """Result of an existence check."""

    FILE = "file"
    DIRECTORY = "directory"
    NOT_FOUND = "not_found"

    @classmethod
    def from_kind(cls, kind: "ResourceKind | None") -> "PathState":
        if kind is None:
            return cls.NOT_FOUND
        return cls(kind.value)


class DirEntry(NamedTuple):
    name: str
    kind: ResourceKind


class SimpleStat(NamedTuple):
    size: int
    is_directory: bool


@dataclass(frozen=True)
class FileStats:
    """
    Point-in-time metadata snapshot of a file or directory.

    Built from one basic-information and one standard-information query on
    the same handle. Times are whole Unix seconds, 0 when the server reports
    none. ``attributes`` is the raw FILE_ATTRIBUTE_* bitmask.
    """

    kind: ResourceKind
    size: int
    allocation_size: int
    link_count: int
    attributes: int
    mtime: int
    atime: int
    ctime: int
    btime: int

    @property
    def is_directory(self) -> bool:
        return self.kind == ResourceKind.DIRECTORY
