"""
Protocol client contract used by the share adapter.

The adapter never speaks SMB itself. It talks to a ShareClient that can open
remote resources and to the RemoteHandle objects it returns. Flag values
mirror MS-SMB2 so implementations can pass them straight to the wire.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum, IntEnum, IntFlag
from typing import Iterable, Optional


class Access(IntFlag):
    DELETE = 0x00010000
    GENERIC_WRITE = 0x40000000
    GENERIC_READ = 0x80000000


class Disposition(IntEnum):
    SUPERSEDE = 0
    OPEN = 1
    CREATE = 2
    OPEN_IF = 3
    OVERWRITE = 4
    OVERWRITE_IF = 5


class CreateOption(IntFlag):
    NONE = 0
    DIRECTORY_FILE = 0x00000001
    NON_DIRECTORY_FILE = 0x00000040
    DELETE_ON_CLOSE = 0x00001000


class Attribute(IntFlag):
    NONE = 0
    READONLY = 0x00000001
    HIDDEN = 0x00000002
    SYSTEM = 0x00000004
    DIRECTORY = 0x00000010
    ARCHIVE = 0x00000020
    NORMAL = 0x00000080


class HandleKind(str, Enum):
    FILE = "file"
    DIRECTORY = "directory"
    OTHER = "other"


@dataclass(frozen=True)
class OpenRequest:
    access: Access
    disposition: Disposition
    options: CreateOption = CreateOption.NONE
    attributes: Attribute = Attribute.NONE

    @classmethod
    def open_existing(
        cls, access: Access, options: CreateOption = CreateOption.NONE
    ) -> "OpenRequest":
        return cls(access=access, disposition=Disposition.OPEN, options=options)

    @classmethod
    def directory(cls, disposition: Disposition) -> "OpenRequest":
        return cls(
            access=Access.GENERIC_READ | Access.GENERIC_WRITE,
            disposition=disposition,
            options=CreateOption.DIRECTORY_FILE,
            attributes=Attribute.DIRECTORY,
        )


@dataclass(frozen=True)
class BasicInfo:
    """FileBasicInformation. Times are raw FILETIME ticks."""

    creation_time: int
    last_access_time: int
    last_write_time: int
    change_time: int
    attributes: int


@dataclass(frozen=True)
class StandardInfo:
    """FileStandardInformation."""

    allocation_size: int
    end_of_file: int
    number_of_links: int
    delete_pending: bool
    directory: bool


@dataclass(frozen=True)
class DirectoryInfo:
    name: str
    attributes: int

    @property
    def is_directory(self) -> bool:
        return bool(self.attributes & Attribute.DIRECTORY)


class ShareClientError(Exception):
    """
    Failure reported by the protocol client.

    ``status`` carries the NTSTATUS code when the server supplied one.
    """

    def __init__(self, message: str, status: Optional[int] = None):
        self.status = status
        if status is not None:
            message = f"{message} (0x{status:08X})"
        super().__init__(message)


class EntryDecodeError(ShareClientError):
    """A single directory entry could not be decoded."""


class RawDirectoryEntry(ABC):
    """One undecoded record from a directory enumeration."""

    @abstractmethod
    def decode(self) -> DirectoryInfo:
        """Decode the record. Raises EntryDecodeError on a corrupt record."""
        pass


class RemoteHandle(ABC):
    """An open remote file or directory. Scoped to a single operation."""

    @property
    @abstractmethod
    def kind(self) -> HandleKind:
        pass

    @abstractmethod
    def read_all(self) -> bytes:
        """Read the whole file from offset 0."""
        pass

    @abstractmethod
    def write_all(self, data: bytes) -> int:
        """Write the whole payload from offset 0. Returns bytes written."""
        pass

    @abstractmethod
    def query_basic_info(self) -> BasicInfo:
        pass

    @abstractmethod
    def query_standard_info(self) -> StandardInfo:
        pass

    @abstractmethod
    def query_directory(self, pattern: str) -> Iterable[RawDirectoryEntry]:
        pass

    @abstractmethod
    def set_rename_info(
        self, new_name: str, replace_if_exists: bool, root_directory: int = 0
    ) -> None:
        """Rename the open object. ``new_name`` is share-relative."""
        pass

    @abstractmethod
    def close(self) -> None:
        pass

    def __enter__(self) -> "RemoteHandle":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class ShareClient(ABC):
    """One authenticated session to one share."""

    @abstractmethod
    def connect(self, share_unc: str, username: str, password: str) -> None:
        pass

    @abstractmethod
    def open(self, path: str, request: OpenRequest) -> RemoteHandle:
        """Open ``path`` (a full UNC path inside the connected share)."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        pass
