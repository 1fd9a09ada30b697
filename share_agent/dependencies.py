import threading
from functools import lru_cache
from typing import Any, Dict, Optional

from .config import Settings
from .core.exceptions import ConnectError
from .services.hot_folder import HotFolderConfig, HotFolderService, load_handler
from .smb import AsyncShare, ShareConnection, connect

# Global singleton instances
_singletons: Dict[str, Any] = {}

# Guards get-or-create of the share connection; sync dependencies run on the threadpool
_connection_lock = threading.Lock()


@lru_cache
def get_settings() -> Settings:
    """Hent Settings singleton instance."""
    return Settings()


def set_share_connection(connection: ShareConnection) -> None:
    """Install an already established connection (used by startup and tests)."""
    _singletons["share_connection"] = connection
    _singletons["async_share"] = AsyncShare(connection)


def _current_connection() -> ShareConnection:
    # Caller holds _connection_lock
    connection: Optional[ShareConnection] = _singletons.get("share_connection")
    if connection is not None and not connection.is_poisoned:
        return connection
    if connection is not None:
        connection.close()

    settings = get_settings()
    if not settings.share_configured:
        raise ConnectError("no share configured (SHARE_ADDRESS is empty)")

    connection = connect(
        settings.share_address,
        settings.share_username,
        settings.share_password,
        port=settings.smb_port,
        timeout=settings.connect_timeout_seconds,
        require_encryption=settings.require_encryption,
    )
    set_share_connection(connection)
    return connection


def get_share_connection() -> ShareConnection:
    """
    The share connection, connecting on first use.

    A poisoned connection is replaced by a fresh one. Concurrent callers
    share a single session.

    Raises:
        ConnectError: no share is configured or the session failed
    """
    with _connection_lock:
        return _current_connection()


def get_async_share() -> AsyncShare:
    with _connection_lock:
        connection = _current_connection()
        share = _singletons.get("async_share")
        if share is None or share.connection is not connection:
            share = AsyncShare(connection)
            _singletons["async_share"] = share
        return share


def get_hot_folder() -> HotFolderService:
    if "hot_folder" not in _singletons:
        settings = get_settings()
        handler = load_handler(settings.hot_folder_handler)
        config = HotFolderConfig.from_settings(settings, handler=handler)
        _singletons["hot_folder"] = HotFolderService(
            get_async_share(), config, share_provider=get_async_share
        )
    return _singletons["hot_folder"]


def get_existing_hot_folder() -> Optional[HotFolderService]:
    """The hot folder service if one was created, without creating it."""
    return _singletons.get("hot_folder")


def reset_singletons() -> None:
    with _connection_lock:
        connection: Optional[ShareConnection] = _singletons.get("share_connection")
        if connection is not None:
            connection.close()
        _singletons.clear()
