"""
ShareClient implementation on top of the smbprotocol library.

All calls are blocking. Callers serialize access through ShareConnection.
"""

import logging
import uuid
from functools import wraps
from typing import Iterable, Iterator, Optional

from smbprotocol.connection import Connection
from smbprotocol.exceptions import SMBException, SMBResponseException
from smbprotocol.file_info import (
    FileBasicInformation,
    FileInformationClass,
    FileRenameInformation,
    FileStandardInformation,
)
from smbprotocol.header import NtStatus
from smbprotocol.open import (
    ImpersonationLevel,
    Open,
    ShareAccess,
    SMB2QueryInfoRequest,
    SMB2QueryInfoResponse,
    SMB2SetInfoRequest,
)
from smbprotocol.session import Session
from smbprotocol.tree import TreeConnect

from .client import (
    Attribute,
    BasicInfo,
    DirectoryInfo,
    EntryDecodeError,
    HandleKind,
    OpenRequest,
    RawDirectoryEntry,
    RemoteHandle,
    ShareClient,
    ShareClientError,
    StandardInfo,
)

_SHARE_ALL = (
    ShareAccess.FILE_SHARE_READ
    | ShareAccess.FILE_SHARE_WRITE
    | ShareAccess.FILE_SHARE_DELETE
)
_QUERY_OUTPUT_LENGTH = 65536

_logger = logging.getLogger("share_agent.smbprotocol_client")


def _translate_errors(func):
    """Re-raise smbprotocol failures as ShareClientError with a structured status."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except ShareClientError:
            raise
        except SMBResponseException as e:
            raise ShareClientError(str(e), status=e.status) from e
        except (SMBException, OSError, ValueError) as e:
            raise ShareClientError(str(e)) from e

    return wrapper


def _filetime_ticks(field) -> int:
    # IntField or DateTimeField depending on the smbprotocol release; both pack to raw ticks
    return int.from_bytes(field.pack(), "little")


class SmbDirectoryEntry(RawDirectoryEntry):
    def __init__(self, record):
        self._record = record

    def decode(self) -> DirectoryInfo:
        try:
            raw_name = self._record["file_name"].get_value()
            name = raw_name.decode("utf-16-le") if isinstance(raw_name, bytes) else str(raw_name)
            attributes = int(self._record["file_attributes"].get_value())
        except (UnicodeDecodeError, KeyError, TypeError, ValueError) as e:
            raise EntryDecodeError(f"corrupt directory entry: {e}") from e
        return DirectoryInfo(name=name.rstrip("\x00"), attributes=attributes)


class SmbHandle(RemoteHandle):
    def __init__(self, smb_open: Open, path: str):
        self._open = smb_open
        self._path = path
        self._closed = False

    @property
    def kind(self) -> HandleKind:
        attributes = self._open.file_attributes
        if attributes is None:
            return HandleKind.OTHER
        if attributes & Attribute.DIRECTORY:
            return HandleKind.DIRECTORY
        return HandleKind.FILE

    @_translate_errors
    def read_all(self) -> bytes:
        end_of_file = self._open.end_of_file or 0
        max_read = self._open.connection.max_read_size
        buffer = bytearray()
        offset = 0
        while offset < end_of_file:
            length = min(max_read, end_of_file - offset)
            try:
                chunk = self._open.read(offset, length)
            except SMBResponseException as e:
                if e.status == NtStatus.STATUS_END_OF_FILE:
                    break
                raise
            if not chunk:
                break
            buffer.extend(chunk)
            offset += len(chunk)
        return bytes(buffer)

    @_translate_errors
    def write_all(self, data: bytes) -> int:
        max_write = self._open.connection.max_write_size
        view = memoryview(data)
        offset = 0
        while offset < len(view):
            written = self._open.write(bytes(view[offset:offset + max_write]), offset)
            if written <= 0:
                raise ShareClientError(f"short write at offset {offset}: {self._path}")
            offset += written
        return offset

    def _query_info(self, info):
        request = SMB2QueryInfoRequest()
        request["info_type"] = info.INFO_TYPE
        request["file_info_class"] = info.INFO_CLASS
        request["output_buffer_length"] = _QUERY_OUTPUT_LENGTH
        request["file_id"] = self._open.file_id

        tree = self._open.tree_connect
        sent = self._open.connection.send(
            request, sid=tree.session.session_id, tid=tree.tree_connect_id
        )
        response = self._open.connection.receive(sent)

        query_response = SMB2QueryInfoResponse()
        query_response.unpack(response["data"].get_value())
        info.unpack(query_response["buffer"].get_value())
        return info

    @_translate_errors
    def query_basic_info(self) -> BasicInfo:
        info = self._query_info(FileBasicInformation())
        return BasicInfo(
            creation_time=_filetime_ticks(info["creation_time"]),
            last_access_time=_filetime_ticks(info["last_access_time"]),
            last_write_time=_filetime_ticks(info["last_write_time"]),
            change_time=_filetime_ticks(info["change_time"]),
            attributes=int(info["file_attributes"].get_value()),
        )

    @_translate_errors
    def query_standard_info(self) -> StandardInfo:
        info = self._query_info(FileStandardInformation())
        return StandardInfo(
            allocation_size=int(info["allocation_size"].get_value()),
            end_of_file=int(info["end_of_file"].get_value()),
            number_of_links=int(info["number_of_links"].get_value()),
            delete_pending=bool(info["delete_pending"].get_value()),
            directory=bool(info["directory"].get_value()),
        )

    @_translate_errors
    def query_directory(self, pattern: str) -> Iterable[RawDirectoryEntry]:
        records = []
        while True:
            try:
                batch = self._open.query_directory(
                    pattern,
                    FileInformationClass.FILE_ID_FULL_DIRECTORY_INFORMATION,
                )
            except SMBResponseException as e:
                if e.status == NtStatus.STATUS_NO_MORE_FILES:
                    break
                raise
            if not batch:
                break
            records.extend(batch)
        return _entries(records)

    @_translate_errors
    def set_rename_info(
        self, new_name: str, replace_if_exists: bool, root_directory: int = 0
    ) -> None:
        info = FileRenameInformation()
        info["replace_if_exists"] = replace_if_exists
        info["root_directory"] = root_directory
        info["file_name"] = new_name

        request = SMB2SetInfoRequest()
        request["info_type"] = info.INFO_TYPE
        request["file_info_class"] = info.INFO_CLASS
        request["file_id"] = self._open.file_id
        request["buffer"] = info

        tree = self._open.tree_connect
        sent = self._open.connection.send(
            request, sid=tree.session.session_id, tid=tree.tree_connect_id
        )
        self._open.connection.receive(sent)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._open.close(get_attributes=False)
        except SMBException as e:
            _logger.warning(f"Closing handle failed for {self._path}: {e}")


def _entries(records) -> Iterator[RawDirectoryEntry]:
    for record in records:
        yield SmbDirectoryEntry(record)


class SmbProtocolClient(ShareClient):
    """A single Connection/Session/TreeConnect triple bound to one share."""

    def __init__(
        self,
        port: int = 445,
        connect_timeout: int = 60,
        require_encryption: bool = False,
    ):
        self._port = port
        self._connect_timeout = connect_timeout
        self._require_encryption = require_encryption
        self._connection: Optional[Connection] = None
        self._session: Optional[Session] = None
        self._tree: Optional[TreeConnect] = None
        self._share_unc = ""

    @_translate_errors
    def connect(self, share_unc: str, username: str, password: str) -> None:
        host = share_unc.lstrip("\\").split("\\")[0]

        connection = Connection(uuid.uuid4(), host, self._port)
        connection.connect(timeout=self._connect_timeout)
        try:
            session = Session(
                connection,
                username=username or None,
                password=password or None,
                require_encryption=self._require_encryption,
            )
            session.connect()
            tree = TreeConnect(session, share_unc)
            tree.connect()
        except BaseException:
            connection.disconnect(True)
            raise

        self._connection = connection
        self._session = session
        self._tree = tree
        self._share_unc = share_unc.rstrip("\\")
        _logger.info(f"SMB session established: {self._share_unc}")

    def _share_path(self, path: str) -> str:
        if not path.lower().startswith(self._share_unc.lower()):
            raise ShareClientError(f"path is outside connected share {self._share_unc}: {path}")
        return path[len(self._share_unc):].lstrip("\\")

    @_translate_errors
    def open(self, path: str, request: OpenRequest) -> RemoteHandle:
        if self._tree is None:
            raise ShareClientError("not connected")

        smb_open = Open(self._tree, self._share_path(path))
        smb_open.create(
            ImpersonationLevel.Impersonation,
            int(request.access),
            int(request.attributes),
            _SHARE_ALL,
            int(request.disposition),
            int(request.options),
        )
        return SmbHandle(smb_open, path)

    def disconnect(self) -> None:
        tree, session, connection = self._tree, self._session, self._connection
        self._tree = self._session = self._connection = None
        try:
            if tree is not None:
                tree.disconnect()
            if session is not None:
                session.disconnect()
        except SMBException as e:
            _logger.warning(f"SMB logoff failed for {self._share_unc}: {e}")
        finally:
            if connection is not None:
                connection.disconnect(True)
        _logger.info(f"SMB session closed: {self._share_unc}")
