from pathlib import Path
from typing import Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Share forbindelse
    share_address: str = ""  # \\host\share or smb://host/share
    share_username: str = ""
    share_password: str = ""
    smb_port: int = 445
    connect_timeout_seconds: int = 60
    require_encryption: bool = False

    # Logging konfiguration
    log_level: str = "INFO"
    log_file_path: str = "logs/share_agent.log"
    log_retention_days: int = 30
    protocol_log_level: str = "WARNING"  # smbprotocol / spnego / uvicorn.access

    # Hot folder
    hot_folder_enabled: bool = False
    hot_folder_base_path: str = "/"
    hot_folder_incoming: str = "incoming"
    hot_folder_processing: str = "processing"
    hot_folder_success: str = "success"
    hot_folder_errors: str = "errors"

    # Filters (regular expressions, matched against the file name)
    hot_folder_name_patterns: list[str] = []
    hot_folder_exclude_patterns: list[str] = [r"^\.", r"~$"]
    hot_folder_extensions: Optional[list[str]] = None  # e.g. [".pdf", ".txt"]
    hot_folder_min_size: int = 0
    hot_folder_max_size: Optional[int] = None  # None = no upper limit

    # Polling / stability
    hot_folder_poll_initial_ms: int = 2000
    hot_folder_poll_max_ms: int = 30000
    hot_folder_poll_backoff_factor: float = 2.0
    hot_folder_stability_checks: int = 2
    hot_folder_stability_interval_ms: int = 1000

    # Handler: "package.module:function", called with the file info dict
    hot_folder_handler: str = ""
    hot_folder_handler_timeout_seconds: float = 300.0

    model_config = SettingsConfigDict(env_file="settings.env", extra="ignore")

    @model_validator(mode="after")
    def _check_poll_interval(self) -> "Settings":
        if self.hot_folder_poll_initial_ms > self.hot_folder_poll_max_ms:
            raise ValueError(
                "hot_folder_poll_initial_ms must be <= hot_folder_poll_max_ms"
            )
        return self

    @property
    def log_directory(self) -> Path:
        """Returnerer log directory som Path objekt"""
        return Path(self.log_file_path).parent

    @property
    def share_configured(self) -> bool:
        return bool(self.share_address)
