import asyncio
import logging
import time
from datetime import datetime
from typing import Callable, Optional

from ...core.exceptions import ShareError
from ...models import HotFolderStats, HotFolderStatus
from ...smb import AsyncShare, paths
from .file_filter import FileFilter
from .file_manager import HotFolderFileManager
from .handler_runner import HandlerError, HandlerRunner
from .hot_folder_config import HotFolderConfig
from .stability_checker import StabilityChecker

MIN_INTERVAL_MS = 10


class HotFolderService:
    """
    Polls the incoming folder on a share and processes files one at a time.

    Flow per file: incoming -> processing (unique name) -> handler ->
    success (unique name on collision), or errors plus an .error.txt sidecar
    when the handler fails. The poll interval resets after work and backs off
    while the folder is idle or the share is failing.
    """

    def __init__(
        self,
        share: AsyncShare,
        config: HotFolderConfig,
        share_provider: Optional[Callable[[], AsyncShare]] = None,
    ):
        self._config = config.validate()
        self._share_provider = share_provider
        self._file_filter = FileFilter.from_config(config)
        self._bind_share(share)
        self._handler_runner = HandlerRunner(config.handler, config.handler_timeout_seconds)

        self._status = HotFolderStatus.STARTING
        self._current_file: Optional[str] = None
        self._current_interval_ms = config.poll_initial_ms
        self._last_poll: Optional[datetime] = None
        self._files_processed = 0
        self._files_failed = 0
        self._started_at = time.monotonic()

        self._is_running = False
        self._poll_task: Optional[asyncio.Task] = None
        self._wakeup = asyncio.Event()

        self._logger = logging.getLogger("share_agent.hot_folder")

    async def start(self) -> None:
        if self._is_running:
            self._logger.warning("Hot folder already running")
            return

        await self._file_manager.ensure_layout()
        self._is_running = True
        self._started_at = time.monotonic()
        self._poll_task = asyncio.create_task(self._polling_loop())
        self._logger.info(
            f"Hot folder started on {self._share.share_root} "
            f"(incoming: {self._config.folder('incoming')})"
        )

    async def stop(self) -> None:
        if not self._is_running:
            return

        self._is_running = False
        self._wakeup.set()

        if self._poll_task:
            self._poll_task.cancel()
            try:
                await self._poll_task
            except asyncio.CancelledError:
                pass

        self._status = HotFolderStatus.STOPPED
        self._logger.info("Hot folder stopped")

    def poll_now(self) -> None:
        """Skip the rest of the current wait and poll immediately."""
        self._wakeup.set()

    def get_status(self) -> HotFolderStatus:
        return self._status

    @property
    def current_file(self) -> Optional[str]:
        return self._current_file

    @property
    def is_running(self) -> bool:
        return self._is_running

    def get_stats(self) -> HotFolderStats:
        return HotFolderStats(
            files_processed=self._files_processed,
            files_failed=self._files_failed,
            current_status=self._status,
            current_file=self._current_file,
            uptime_ms=int((time.monotonic() - self._started_at) * 1000),
            last_poll=self._last_poll,
            current_interval_ms=self._current_interval_ms,
        )

    async def _polling_loop(self) -> None:
        while self._is_running:
            try:
                await self.poll_once()
            except Exception as e:
                self._logger.error(f"Unexpected error in hot folder loop: {e}")
                self._status = HotFolderStatus.ERROR
                self._current_interval_ms = self._next_interval()

            try:
                await asyncio.wait_for(
                    self._wakeup.wait(), timeout=self._current_interval_ms / 1000
                )
            except asyncio.TimeoutError:
                pass
            self._wakeup.clear()

    async def poll_once(self) -> bool:
        """Run one poll. Returns True if a file was processed."""
        now = datetime.now()

        try:
            await self._refresh_share()
            candidate = await self._discover_one()
        except ShareError as e:
            self._logger.warning(f"Poll error: {e}")
            self._last_poll = now
            self._status = HotFolderStatus.ERROR
            self._current_interval_ms = self._next_interval()
            return False

        self._last_poll = now
        if candidate is None:
            self._status = HotFolderStatus.POLLING
            self._current_interval_ms = self._next_interval()
            return False

        self._current_interval_ms = self._config.poll_initial_ms
        name, size, incoming_path = candidate
        await self._process_one(name, size, incoming_path)
        return True

    def _bind_share(self, share: AsyncShare) -> None:
        self._share = share
        self._stability_checker = StabilityChecker(
            share, self._config.stability_checks, self._config.stability_interval_ms
        )
        self._file_manager = HotFolderFileManager(share, self._config)

    async def _refresh_share(self) -> None:
        """Follow the provider to a replacement connection (e.g. after poisoning)."""
        if self._share_provider is None:
            return
        # The provider may open a new session, which blocks
        share = await asyncio.to_thread(self._share_provider)
        if share is not self._share:
            self._logger.info(f"Hot folder switched to new connection for {share.share_root}")
            self._bind_share(share)

    def _next_interval(self) -> int:
        current = self._current_interval_ms
        grown = max(MIN_INTERVAL_MS, round(current * self._config.backoff_factor))
        return min(self._config.poll_max_ms, grown)

    async def _discover_one(self) -> Optional[tuple[str, int, str]]:
        incoming = self._config.folder("incoming")
        for name in await self._file_manager.list_files(incoming):
            if not self._file_filter.name_ok(name):
                continue

            path = paths.join(incoming, name)
            size = await self._file_manager.file_size(path)
            if size is None or not self._file_filter.size_ok(size):
                continue

            # First candidate only; an unstable file is retried on the next poll
            if await self._stability_checker.is_stable(path):
                return name, size, path
            return None
        return None

    async def _process_one(self, name: str, size: int, incoming_path: str) -> None:
        self._status = HotFolderStatus.PROCESSING
        self._current_file = name

        try:
            processing_path = await self._file_manager.move_unique(
                incoming_path, paths.join(self._config.folder("processing"), name)
            )
        except ShareError as e:
            self._logger.warning(f"Move to processing failed for {name}: {e}")
            self._finish(HotFolderStatus.ERROR)
            return

        file_info = {"path": processing_path, "name": name, "size": size}
        try:
            await self._handler_runner.call(file_info)
        except HandlerError as e:
            await self._move_to_errors(name, processing_path, e.reason)
            return

        try:
            await self._file_manager.move_unique(
                processing_path, paths.join(self._config.folder("success"), name)
            )
        except ShareError as e:
            self._logger.warning(f"Move to success failed for {name}: {e}")
            self._files_failed += 1
            self._finish(HotFolderStatus.ERROR)
            return

        self._files_processed += 1
        self._logger.info(f"Processed {name} ({size} bytes)")
        self._finish(HotFolderStatus.POLLING)

    async def _move_to_errors(self, name: str, processing_path: str, reason: str) -> None:
        self._files_failed += 1
        try:
            error_path = await self._file_manager.move_unique(
                processing_path, paths.join(self._config.folder("errors"), name)
            )
            await self._file_manager.write_error_sidecar(error_path, reason)
        except ShareError as e:
            self._logger.warning(f"Move to errors failed for {name}: {e}")
            self._finish(HotFolderStatus.ERROR)
            return

        self._logger.warning(f"Handler failed for {name}, moved to {error_path}: {reason}")
        self._finish(HotFolderStatus.POLLING)

    def _finish(self, status: HotFolderStatus) -> None:
        self._status = status
        self._current_file = None
