"""
Path Resolver for the share adapter.

Callers always address files relative to the share root, with either '/' or
'\\' as separator. Everything that reaches the protocol client is a canonical
UNC path built here.
"""

import re
from dataclasses import dataclass
from urllib.parse import unquote, urlsplit

from ..core.exceptions import BadAddressError, BadPathError

SEPARATORS = "\\/"
_SPLIT_PATTERN = re.compile(r"[\\/]")


@dataclass(frozen=True)
class ShareAddress:
    """A parsed share address: host, share name and an optional path inside the share."""

    host: str
    share: str
    path: str = ""

    @property
    def unc(self) -> str:
        return f"\\\\{self.host}\\{self.share}"


def parse_share_address(address: str) -> ShareAddress:
    """
    Parse "\\\\host\\share[\\rest]" or "smb://host/share[/rest]".

    Raises:
        BadAddressError: when the host or share part is missing
    """
    text = (address or "").strip()

    if text.lower().startswith("smb://"):
        parts = urlsplit(text)
        host = parts.hostname
        if not host:
            raise BadAddressError("bad SMB url: host is missing", address)
        segments = [unquote(s) for s in parts.path.split("/") if s]
        if not segments:
            raise BadAddressError("bad SMB url: share is missing", address)
        return ShareAddress(host=host, share=segments[0], path="/".join(segments[1:]))

    if text.startswith("\\\\"):
        segments = text[2:].split("\\")
        if len(segments) < 2 or not segments[0] or not segments[1]:
            raise BadAddressError("bad UNC", address)
        rest = [s for s in segments[2:] if s]
        return ShareAddress(host=segments[0], share=segments[1], path="/".join(rest))

    raise BadAddressError("expected \\\\host\\share or smb://host/share", address)


def split_segments(relative_path: str) -> list[str]:
    """
    Split a share-relative path into its segments.

    Leading/trailing separators are ignored, empty and '.' segments dropped.

    Raises:
        BadPathError: if any segment is '..'
    """
    trimmed = (relative_path or "").strip(SEPARATORS)
    if not trimmed:
        return []

    segments = []
    for segment in _SPLIT_PATTERN.split(trimmed):
        if segment in ("", "."):
            continue
        if segment == "..":
            raise BadPathError("bad segment '..'", relative_path)
        segments.append(segment)
    return segments


def join_unc(share_root: str, segments: list[str]) -> str:
    base = share_root.rstrip("\\")
    if not segments:
        return base
    return base + "\\" + "\\".join(segments)


def resolve(share_root: str, relative_path: str) -> str:
    """Join a share root with a caller-supplied relative path into a canonical UNC path."""
    segments = split_segments(relative_path)
    if not segments:
        return share_root
    return join_unc(share_root, segments)


def share_relative_name(relative_path: str) -> str:
    """Share-relative name with backslash separators, as the rename request expects it."""
    return "\\".join(split_segments(relative_path))


def basename(relative_path: str) -> str:
    segments = split_segments(relative_path)
    return segments[-1] if segments else ""


def parent(relative_path: str) -> str:
    return "/".join(split_segments(relative_path)[:-1])


def join(*parts: str) -> str:
    """Join share-relative parts with '/'; the result is itself a relative path."""
    segments: list[str] = []
    for part in parts:
        segments.extend(split_segments(part))
    return "/".join(segments)
