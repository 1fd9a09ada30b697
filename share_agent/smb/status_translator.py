"""
Status Translator for the share adapter.

Pulls an NTSTATUS code out of a protocol error and maps the handful of codes
the adapter cares about to domain outcomes. Everything else stays a generic,
operation-tagged failure.
"""

import logging
import re
from enum import Enum
from typing import Optional

# NTSTATUS values used by the adapter
STATUS_OBJECT_NAME_NOT_FOUND = 0xC0000034
STATUS_OBJECT_NAME_COLLISION = 0xC0000035
STATUS_OBJECT_PATH_NOT_FOUND = 0xC000003A
STATUS_DELETE_PENDING = 0xC0000056
STATUS_DIRECTORY_NOT_EMPTY = 0xC0000101

_HEX_STATUS_PATTERN = re.compile(r"\(0x([0-9a-fA-F]{1,8})\)")

_logger = logging.getLogger("share_agent.status_translator")


class DeleteOutcome(str, Enum):
    """What a failed delete-on-close open means for the caller."""

    ALREADY_GONE = "already_gone"
    DIRECTORY_NOT_EMPTY = "directory_not_empty"
    FAILED = "failed"


def status_code_from_error(error: BaseException) -> Optional[int]:
    """
    Extract the NTSTATUS code carried by a protocol error.

    The structured ``status`` attribute wins. Errors without one fall back to
    the textual "(0xNNNNNNNN)" rendering; if neither is present the code is
    unknown and None is returned.
    """
    status = getattr(error, "status", None)
    if isinstance(status, int) and not isinstance(status, bool):
        return status & 0xFFFFFFFF

    match = _HEX_STATUS_PATTERN.search(str(error))
    if match is None:
        return None
    return int(match.group(1), 16)


def is_not_found(error: BaseException) -> bool:
    return status_code_from_error(error) in (
        STATUS_OBJECT_NAME_NOT_FOUND,
        STATUS_OBJECT_PATH_NOT_FOUND,
    )


def is_name_collision(error: BaseException) -> bool:
    return status_code_from_error(error) == STATUS_OBJECT_NAME_COLLISION


def classify_delete_failure(error: BaseException) -> DeleteOutcome:
    """Map a failed delete open to ALREADY_GONE, DIRECTORY_NOT_EMPTY or FAILED."""
    code = status_code_from_error(error)

    if code in (STATUS_OBJECT_NAME_NOT_FOUND, STATUS_DELETE_PENDING):
        _logger.debug(f"Delete treated as done (status 0x{code:08X})")
        return DeleteOutcome.ALREADY_GONE

    if code == STATUS_DIRECTORY_NOT_EMPTY:
        return DeleteOutcome.DIRECTORY_NOT_EMPTY

    return DeleteOutcome.FAILED
