"""
ShareConnection - one exclusive-access session to one share.

Every protocol call goes through ``session()``, which holds the connection
lock for the duration of the call. An unexpected failure while the lock is
held poisons the connection: later calls raise LockUnavailableError and the
caller has to connect again.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Iterator, Optional

from ..core.exceptions import ConnectError, LockUnavailableError, ShareError
from .client import ShareClient, ShareClientError
from .paths import ShareAddress, parse_share_address, resolve


class ShareConnection:
    def __init__(self, client: ShareClient, address: ShareAddress):
        self._client = client
        self._address = address
        self._lock = threading.Lock()
        self._poisoned = False
        self._logger = logging.getLogger("share_agent.connection")

    @property
    def share_root(self) -> str:
        """Canonical \\\\host\\share identity of this connection."""
        return self._address.unc

    @property
    def address(self) -> ShareAddress:
        return self._address

    @property
    def is_poisoned(self) -> bool:
        return self._poisoned

    def resolve(self, relative_path: str) -> str:
        return resolve(self.share_root, relative_path)

    @contextmanager
    def session(self) -> Iterator[ShareClient]:
        """Hold the connection lock and yield the protocol client."""
        with self._lock:
            if self._poisoned:
                raise LockUnavailableError(self.share_root)
            try:
                yield self._client
            except (ShareError, ShareClientError):
                raise
            except BaseException as e:
                self._poisoned = True
                self._logger.error(
                    f"Connection to {self.share_root} poisoned by unexpected error: {e!r}"
                )
                raise

    def close(self) -> None:
        with self._lock:
            self._poisoned = True
            self._client.disconnect()
        self._logger.info(f"Connection closed: {self.share_root}")


def connect(
    address: str,
    username: str,
    password: str,
    *,
    client: Optional[ShareClient] = None,
    port: int = 445,
    timeout: int = 60,
    require_encryption: bool = False,
) -> ShareConnection:
    """
    Open a session to the share named by ``address``.

    Args:
        address: "\\\\host\\share" or "smb://host/share"
        username: account name, "DOMAIN\\user" accepted
        password: account password
        client: protocol client to use; defaults to the smbprotocol-backed one

    Raises:
        BadAddressError: malformed address (raised before any network I/O)
        ConnectError: the session could not be established
    """
    share = parse_share_address(address)

    if client is None:
        from .smbprotocol_client import SmbProtocolClient

        client = SmbProtocolClient(
            port=port, connect_timeout=timeout, require_encryption=require_encryption
        )

    try:
        client.connect(share.unc, username, password)
    except ShareClientError as e:
        raise ConnectError(f"connect failed: {e}", share.unc) from e

    logging.info(f"Connected to share {share.unc} as {username or '<guest>'}")
    if share.path:
        # Operation paths stay relative to the share root, not to this path
        logging.debug(f"Address path '{share.path}' kept on connection.address")
    return ShareConnection(client, share)
