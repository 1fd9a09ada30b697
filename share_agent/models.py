from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from .smb.models import FileStats, PathState, ResourceKind


class HotFolderStatus(str, Enum):
    """Status for the hot folder processor."""

    STARTING = "starting"
    POLLING = "polling"  # Venter på næste poll
    PROCESSING = "processing"  # Handler kører for en fil
    ERROR = "error"  # Sidste poll eller flytning fejlede
    STOPPED = "stopped"


class HotFolderStats(BaseModel):
    files_processed: int = Field(default=0, description="Files handled and moved to success")
    files_failed: int = Field(default=0, description="Files moved to errors or left behind")
    current_status: HotFolderStatus
    current_file: Optional[str] = Field(None, description="File being processed, if any")
    uptime_ms: int = Field(..., description="Milliseconds since the processor started")
    last_poll: Optional[datetime] = Field(None, description="Time of the last completed poll")
    current_interval_ms: int = Field(..., description="Delay before the next poll")


class DirEntryResponse(BaseModel):
    name: str
    kind: ResourceKind


class DirectoryListing(BaseModel):
    path: str = Field(..., description="Share-relative path that was listed")
    entries: List[DirEntryResponse] = Field(default_factory=list)
    total_files: int = 0
    total_directories: int = 0

    @classmethod
    def build(cls, path: str, entries) -> "DirectoryListing":
        items = [DirEntryResponse(name=e.name, kind=e.kind) for e in entries]
        return cls(
            path=path,
            entries=items,
            total_files=sum(1 for e in items if e.kind == ResourceKind.FILE),
            total_directories=sum(1 for e in items if e.kind == ResourceKind.DIRECTORY),
        )


class ExistsResponse(BaseModel):
    path: str
    state: PathState


class SimpleStatResponse(BaseModel):
    path: str
    size: int
    is_directory: bool


class FileStatsResponse(BaseModel):
    path: str
    kind: ResourceKind
    size: int
    allocation_size: int
    link_count: int
    attributes: int = Field(..., description="Raw FILE_ATTRIBUTE_* bitmask")
    mtime: int = Field(..., description="Last write, Unix seconds")
    atime: int = Field(..., description="Last access, Unix seconds")
    ctime: int = Field(..., description="Last change, Unix seconds")
    btime: int = Field(..., description="Creation, Unix seconds")

    @classmethod
    def from_stats(cls, path: str, stats: FileStats) -> "FileStatsResponse":
        return cls(
            path=path,
            kind=stats.kind,
            size=stats.size,
            allocation_size=stats.allocation_size,
            link_count=stats.link_count,
            attributes=stats.attributes,
            mtime=stats.mtime,
            atime=stats.atime,
            ctime=stats.ctime,
            btime=stats.btime,
        )


class WriteResponse(BaseModel):
    path: str
    bytes_written: int


class MkdirRequest(BaseModel):
    path: str
    parents: bool = Field(default=False, description="Create missing parents, ignore existing")


class RenameRequest(BaseModel):
    from_path: str
    to_path: str
    replace_if_exists: bool = False
