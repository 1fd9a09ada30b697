"""
Operation handlers for the share adapter.

One function per caller-visible action. Each resolves its path(s), takes the
connection lock for protocol calls, scopes every handle to the call and
either returns a plain value or raises a ShareError subclass.
"""

import logging
from typing import Optional

from ..core.exceptions import (
    AllocError,
    AlreadyExistsError,
    BadPathError,
    CreateError,
    DeleteError,
    DirectoryNotEmptyError,
    NotADirError,
    NotAFileError,
    OpenError,
    QueryError,
    ReadError,
    RenameError,
    RenameOpenError,
    WriteError,
)
from .client import (
    Access,
    Attribute,
    CreateOption,
    Disposition,
    EntryDecodeError,
    HandleKind,
    OpenRequest,
    RemoteHandle,
    ShareClient,
    ShareClientError,
)
from .connection import ShareConnection
from .models import DirEntry, FileStats, PathState, ResourceKind, SimpleStat
from .paths import join_unc, share_relative_name, split_segments
from .prober import probe
from .status_translator import DeleteOutcome, classify_delete_failure, is_name_collision
from .time_translator import filetime_to_unix_seconds

_READ = OpenRequest.open_existing(Access.GENERIC_READ)
_WRITE = OpenRequest(
    access=Access.GENERIC_READ | Access.GENERIC_WRITE,
    disposition=Disposition.OVERWRITE_IF,
    attributes=Attribute.NORMAL,
)
_DELETE_ACCESS = Access.DELETE | Access.GENERIC_READ | Access.GENERIC_WRITE

_logger = logging.getLogger("share_agent.operations")


def _kind_option(kind: ResourceKind) -> CreateOption:
    if kind == ResourceKind.DIRECTORY:
        return CreateOption.DIRECTORY_FILE
    return CreateOption.NON_DIRECTORY_FILE


def _target_path(connection: ShareConnection, relative_path: str) -> str:
    """Resolve a path that must name something below the share root."""
    segments = split_segments(relative_path)
    if not segments:
        raise BadPathError("empty path", relative_path)
    return join_unc(connection.share_root, segments)


def _open(client: ShareClient, path: str, request: OpenRequest) -> RemoteHandle:
    try:
        return client.open(path, request)
    except ShareClientError as e:
        raise OpenError(f"open failed: {e}", path) from e


def _read_whole(handle: RemoteHandle, path: str) -> bytes:
    try:
        return handle.read_all()
    except MemoryError as e:
        raise AllocError("could not allocate read buffer", path) from e
    except ShareClientError as e:
        raise ReadError(f"read failed: {e}", path) from e


def read_file(connection: ShareConnection, relative_path: str) -> bytes:
    path = connection.resolve(relative_path)
    with connection.session() as client:
        handle = _open(client, path, _READ)

    with handle:
        if handle.kind != HandleKind.FILE:
            raise NotAFileError(path)
        data = _read_whole(handle, path)

    _logger.debug(f"Read {len(data)} bytes from {path}")
    return data


def write_file(connection: ShareConnection, relative_path: str, data: bytes) -> None:
    """Replace the whole content of a remote file, creating it when missing."""
    path = connection.resolve(relative_path)
    with connection.session() as client:
        handle = _open(client, path, _WRITE)

    with handle:
        if handle.kind != HandleKind.FILE:
            raise NotAFileError(path)
        try:
            handle.write_all(bytes(data))
        except ShareClientError as e:
            raise WriteError(f"write failed: {e}", path) from e

    _logger.debug(f"Wrote {len(data)} bytes to {path}")


def list_dir(connection: ShareConnection, relative_path: str = "") -> list[DirEntry]:
    """
    List a directory in server enumeration order.

    '.' and '..' are never returned. Records that fail to decode are skipped
    without telling the caller.
    """
    path = connection.resolve(relative_path)
    with connection.session() as client:
        handle = _open(client, path, _READ)

    entries: list[DirEntry] = []
    with handle:
        if handle.kind != HandleKind.DIRECTORY:
            raise NotADirError(path)
        try:
            for raw in handle.query_directory("*"):
                try:
                    info = raw.decode()
                except EntryDecodeError as e:
                    _logger.debug(f"Skipping undecodable entry in {path}: {e}")
                    continue
                if info.name in (".", ".."):
                    continue
                kind = ResourceKind.DIRECTORY if info.is_directory else ResourceKind.FILE
                entries.append(DirEntry(info.name, kind))
        except ShareClientError as e:
            raise QueryError(f"directory query failed: {e}", path) from e

    return entries


def stat(connection: ShareConnection, relative_path: str) -> SimpleStat:
    """
    Size and directory flag. The size of a file is measured by reading it in
    full; anything that does not open as a file is reported as a directory.
    """
    path = connection.resolve(relative_path)
    with connection.session() as client:
        handle = _open(client, path, _READ)

    with handle:
        if handle.kind == HandleKind.FILE:
            return SimpleStat(size=len(_read_whole(handle, path)), is_directory=False)
    return SimpleStat(size=0, is_directory=True)


def file_stats(connection: ShareConnection, relative_path: str) -> Optional[FileStats]:
    """
    Metadata snapshot from the basic and standard information classes.

    Returns None when nothing exists at the path.
    """
    path = connection.resolve(relative_path)
    with connection.session() as client:
        kind = probe(client, path)
        if kind is None:
            return None
        handle = _open(client, path, OpenRequest.open_existing(Access.GENERIC_READ, _kind_option(kind)))

    with handle:
        if kind == ResourceKind.FILE and handle.kind != HandleKind.FILE:
            raise NotAFileError(path)
        if kind == ResourceKind.DIRECTORY and handle.kind != HandleKind.DIRECTORY:
            raise NotADirError(path)
        try:
            basic = handle.query_basic_info()
            standard = handle.query_standard_info()
        except ShareClientError as e:
            raise QueryError(f"metadata query failed: {e}", path) from e

    return FileStats(
        kind=kind,
        size=standard.end_of_file,
        allocation_size=standard.allocation_size,
        link_count=standard.number_of_links,
        attributes=basic.attributes,
        mtime=filetime_to_unix_seconds(basic.last_write_time),
        atime=filetime_to_unix_seconds(basic.last_access_time),
        ctime=filetime_to_unix_seconds(basic.change_time),
        btime=filetime_to_unix_seconds(basic.creation_time),
    )


def mkdir(connection: ShareConnection, relative_path: str) -> None:
    """Create one directory. Fails if anything already exists at the path."""
    path = _target_path(connection, relative_path)
    with connection.session() as client:
        try:
            handle = client.open(path, OpenRequest.directory(Disposition.CREATE))
        except ShareClientError as e:
            if is_name_collision(e):
                raise AlreadyExistsError("already exists", path) from e
            raise CreateError(f"mkdir failed: {e}", path) from e
        handle.close()

    _logger.info(f"Created directory {path}")


def mkdir_p(connection: ShareConnection, relative_path: str) -> None:
    """Create a directory and any missing parents. Existing ones are left alone."""
    segments = split_segments(relative_path)
    if not segments:
        return

    request = OpenRequest.directory(Disposition.OPEN_IF)
    with connection.session() as client:
        for depth in range(1, len(segments) + 1):
            path = join_unc(connection.share_root, segments[:depth])
            try:
                handle = client.open(path, request)
            except ShareClientError as e:
                raise CreateError(f"mkdir failed: {e}", path) from e
            handle.close()


def rm(connection: ShareConnection, relative_path: str) -> None:
    """
    Delete a file or an empty directory via delete-on-close.

    Succeeds when the path is already gone or already pending deletion. The
    object may stay visible until the server processes the close.
    """
    path = _target_path(connection, relative_path)
    with connection.session() as client:
        kind = probe(client, path)
        if kind is None:
            return

        request = OpenRequest.open_existing(
            _DELETE_ACCESS, CreateOption.DELETE_ON_CLOSE | _kind_option(kind)
        )
        try:
            handle = client.open(path, request)
        except ShareClientError as e:
            outcome = classify_delete_failure(e)
            if outcome == DeleteOutcome.ALREADY_GONE:
                return
            if outcome == DeleteOutcome.DIRECTORY_NOT_EMPTY:
                raise DirectoryNotEmptyError(path) from e
            raise DeleteError(f"delete failed: {e}", path) from e
        handle.close()

    _logger.info(f"Deleted {kind.value} {path}")


def rename(
    connection: ShareConnection,
    from_path: str,
    to_path: str,
    replace_if_exists: bool = False,
) -> None:
    """
    Rename a file or directory inside the share.

    ``to_path`` is share-relative. Whether an existing destination is
    replaced is left to the server, driven by ``replace_if_exists``.
    """
    source = _target_path(connection, from_path)
    new_name = share_relative_name(to_path)
    if not new_name:
        raise BadPathError("empty path", to_path)

    with connection.session() as client:
        try:
            handle = client.open(
                source, OpenRequest.open_existing(_DELETE_ACCESS, CreateOption.NON_DIRECTORY_FILE)
            )
        except ShareClientError as first_error:
            _logger.debug(f"{source} did not open as a file, retrying as directory: {first_error}")
            try:
                handle = client.open(
                    source, OpenRequest.open_existing(_DELETE_ACCESS, CreateOption.DIRECTORY_FILE)
                )
            except ShareClientError as e:
                raise RenameOpenError(f"open failed: {e}", source) from e

        with handle:
            try:
                handle.set_rename_info(new_name, replace_if_exists, root_directory=0)
            except ShareClientError as e:
                raise RenameError(f"rename to {new_name} failed: {e}", source) from e

    _logger.info(f"Renamed {source} -> {new_name}")


def move_file(connection: ShareConnection, from_path: str, to_path: str) -> None:
    """Rename without replacing an existing destination."""
    rename(connection, from_path, to_path, replace_if_exists=False)


def exists(connection: ShareConnection, relative_path: str) -> PathState:
    segments = split_segments(relative_path)
    if not segments:
        return PathState.DIRECTORY

    path = join_unc(connection.share_root, segments)
    with connection.session() as client:
        return PathState.from_kind(probe(client, path))
