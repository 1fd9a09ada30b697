# share_agent/core/exceptions.py

from typing import Optional


class ShareError(Exception):
    """Base class for every classified failure raised by the share adapter."""

    def __init__(self, reason: str, path: Optional[str] = None):
        self.reason = reason
        self.path = path
        if path:
            super().__init__(f"{reason}: {path}")
        else:
            super().__init__(reason)


class BadAddressError(ShareError):
    """Raised when a share address is not a valid \\\\host\\share or smb:// address."""


class BadPathError(ShareError):
    """Raised when a relative path contains a '..' segment or is empty where a target is required."""


class ConnectError(ShareError):
    """Raised when the session to the share could not be established."""


class OpenError(ShareError):
    """Raised when a remote resource could not be opened."""


class NotAFileError(OpenError):
    """Raised when a path expected to be a file opened as something else."""

    def __init__(self, path: Optional[str] = None):
        super().__init__("not a file", path)


class NotADirError(OpenError):
    """Raised when a path expected to be a directory opened as something else."""

    def __init__(self, path: Optional[str] = None):
        super().__init__("not a directory", path)


class ReadError(ShareError):
    pass


class WriteError(ShareError):
    pass


class QueryError(ShareError):
    """Raised when a metadata query or directory enumeration fails."""


class CreateError(ShareError):
    """Raised when a directory could not be created."""


class AlreadyExistsError(CreateError):
    pass


class DeleteError(ShareError):
    pass


class DirectoryNotEmptyError(DeleteError):
    def __init__(self, path: Optional[str] = None):
        super().__init__("directory not empty", path)


class RenameOpenError(ShareError):
    """Raised when the rename source could not be opened as file or directory."""


class RenameError(ShareError):
    """Raised when the server rejected the rename itself."""


class NameConflictError(RenameError):
    """Raised when no free numbered variant of a destination name was found."""


class AllocError(ShareError):
    """Raised when the in-memory buffer for a whole-file read could not be allocated."""


class LockUnavailableError(ShareError):
    """
    Raised when a previous operation failed unexpectedly while holding the
    connection lock. The connection cannot be used again; connect anew.
    """

    def __init__(self, share: Optional[str] = None):
        super().__init__("connection lock unavailable, reconnect required", share)
