from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from ...config import Settings
from ...smb import paths


@dataclass
class HotFolderConfig:
    """Configuration object for HotFolderService."""

    handler: Optional[Callable[[dict], Any]] = None
    handler_timeout_seconds: float = 300.0

    # Layout, relative to the share root
    base_path: str = "/"
    incoming: str = "incoming"
    processing: str = "processing"
    success: str = "success"
    errors: str = "errors"

    # Filters
    name_patterns: list[str] = field(default_factory=list)
    exclude_patterns: list[str] = field(default_factory=lambda: [r"^\.", r"~$"])
    extensions: Optional[list[str]] = None
    min_size: int = 0
    max_size: Optional[int] = None

    # Polling (milliseconds)
    poll_initial_ms: int = 2000
    poll_max_ms: int = 30000
    backoff_factor: float = 2.0

    # Stability: N identical sizes, interval apart
    stability_checks: int = 2
    stability_interval_ms: int = 1000

    def validate(self) -> "HotFolderConfig":
        if self.handler is None:
            raise ValueError("handler is required")
        if self.poll_initial_ms > self.poll_max_ms:
            raise ValueError("poll_initial_ms must be <= poll_max_ms")
        if self.stability_checks < 1:
            raise ValueError("stability_checks must be >= 1")
        return self

    def folder(self, name: str) -> str:
        """Share-relative path of one of the layout folders."""
        return paths.join(self.base_path, getattr(self, name))

    @property
    def folders(self) -> dict[str, str]:
        return {
            name: self.folder(name)
            for name in ("incoming", "processing", "success", "errors")
        }

    @classmethod
    def from_settings(
        cls, settings: Settings, handler: Optional[Callable[[dict], Any]] = None
    ) -> "HotFolderConfig":
        return cls(
            handler=handler,
            handler_timeout_seconds=settings.hot_folder_handler_timeout_seconds,
            base_path=settings.hot_folder_base_path,
            incoming=settings.hot_folder_incoming,
            processing=settings.hot_folder_processing,
            success=settings.hot_folder_success,
            errors=settings.hot_folder_errors,
            name_patterns=list(settings.hot_folder_name_patterns),
            exclude_patterns=list(settings.hot_folder_exclude_patterns),
            extensions=settings.hot_folder_extensions,
            min_size=settings.hot_folder_min_size,
            max_size=settings.hot_folder_max_size,
            poll_initial_ms=settings.hot_folder_poll_initial_ms,
            poll_max_ms=settings.hot_folder_poll_max_ms,
            backoff_factor=settings.hot_folder_poll_backoff_factor,
            stability_checks=settings.hot_folder_stability_checks,
            stability_interval_ms=settings.hot_folder_stability_interval_ms,
        )
