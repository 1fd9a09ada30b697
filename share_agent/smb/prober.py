import logging
from typing import Optional

from .client import Access, HandleKind, OpenRequest, ShareClient, ShareClientError
from .models import ResourceKind

_PROBE_REQUEST = OpenRequest.open_existing(Access.GENERIC_READ)


def probe(client: ShareClient, path: str) -> Optional[ResourceKind]:
    """
    Find out whether ``path`` exists and whether it is a file or a directory.

    Opens the path for generic read without a directory option (servers open
    directories that way too) and classifies the handle. Any open failure
    counts as absent. The caller must hold the connection lock.
    """
    try:
        handle = client.open(path, _PROBE_REQUEST)
    except ShareClientError as e:
        logging.debug(f"Probe found nothing at {path}: {e}")
        return None

    with handle:
        if handle.kind == HandleKind.FILE:
            return ResourceKind.FILE
        if handle.kind == HandleKind.DIRECTORY:
            return ResourceKind.DIRECTORY
        return None
