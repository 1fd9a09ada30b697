import asyncio
import logging

from ...core.exceptions import ShareError
from ...smb import AsyncShare


class StabilityChecker:
    """A file is stable once its size reads the same ``checks`` times in a row."""

    def __init__(self, share: AsyncShare, checks: int, interval_ms: int):
        self._share = share
        self._checks = checks
        self._interval_seconds = interval_ms / 1000

    async def is_stable(self, path: str) -> bool:
        try:
            stats = await self._share.file_stats(path)
            if stats is None or stats.is_directory:
                return False

            for _ in range(self._checks - 1):
                await asyncio.sleep(self._interval_seconds)
                current = await self._share.file_stats(path)
                if current is None or current.size != stats.size:
                    logging.debug(f"File still changing: {path}")
                    return False
        except ShareError as e:
            logging.debug(f"Stability check failed for {path}: {e}")
            return False

        logging.info(f"File is stable and ready: {path} ({stats.size} bytes)")
        return True
