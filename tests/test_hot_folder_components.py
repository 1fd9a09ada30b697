"""
Tests for the hot folder building blocks: config, filter, stability checker,
file manager and handler runner.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from share_agent.core.exceptions import NameConflictError, QueryError, RenameError, ShareError
from share_agent.services.hot_folder import file_manager
from share_agent.services.hot_folder import (
    FileFilter,
    HandlerError,
    HandlerRunner,
    HotFolderConfig,
    HotFolderFileManager,
    StabilityChecker,
    load_handler,
)
from share_agent.smb.models import FileStats, PathState, ResourceKind


def _stats(size: int, kind: ResourceKind = ResourceKind.FILE) -> FileStats:
    return FileStats(
        kind=kind, size=size, allocation_size=0, link_count=1,
        attributes=0x20, mtime=0, atime=0, ctime=0, btime=0,
    )


def _noop(file_info):
    return None


class TestHotFolderConfig:
    def test_folders_under_base_path(self):
        config = HotFolderConfig(handler=_noop, base_path="/hot")

        assert config.folders == {
            "incoming": "hot/incoming",
            "processing": "hot/processing",
            "success": "hot/success",
            "errors": "hot/errors",
        }

    def test_root_base_path(self):
        assert HotFolderConfig(handler=_noop).folder("errors") == "errors"

    def test_handler_required(self):
        with pytest.raises(ValueError):
            HotFolderConfig().validate()

    def test_initial_interval_above_max(self):
        with pytest.raises(ValueError):
            HotFolderConfig(handler=_noop, poll_initial_ms=5000, poll_max_ms=1000).validate()

    def test_from_settings(self):
        from share_agent.config import Settings

        settings = Settings(
            _env_file=None,
            hot_folder_base_path="scans",
            hot_folder_extensions=[".pdf"],
            hot_folder_poll_initial_ms=100,
        )

        config = HotFolderConfig.from_settings(settings, handler=_noop)

        assert config.folder("incoming") == "scans/incoming"
        assert config.extensions == [".pdf"]
        assert config.poll_initial_ms == 100
        assert config.validate() is config


class TestFileFilter:
    def test_defaults_accept_plain_names(self):
        file_filter = FileFilter([], [r"^\.", r"~$"])

        assert file_filter.matches("report.pdf", 10)

    def test_default_excludes(self):
        file_filter = FileFilter([], [r"^\.", r"~$"])

        assert not file_filter.name_ok(".DS_Store")
        assert not file_filter.name_ok("draft.docx~")

    def test_include_patterns(self):
        file_filter = FileFilter([r"^scan_", r"^invoice_"], [])

        assert file_filter.name_ok("scan_001.tif")
        assert file_filter.name_ok("invoice_7.pdf")
        assert not file_filter.name_ok("other.pdf")

    def test_extensions_case_insensitive(self):
        file_filter = FileFilter([], [], extensions=["PDF", ".txt"])

        assert file_filter.name_ok("a.Pdf")
        assert file_filter.name_ok("b.TXT")
        assert not file_filter.name_ok("c.doc")
        assert not file_filter.name_ok("noextension")

    def test_size_bounds(self):
        file_filter = FileFilter([], [], min_size=10, max_size=100)

        assert not file_filter.size_ok(9)
        assert file_filter.size_ok(10)
        assert file_filter.size_ok(100)
        assert not file_filter.size_ok(101)

    def test_no_upper_bound(self):
        assert FileFilter([], []).size_ok(10**12)


@pytest.mark.asyncio
class TestStabilityChecker:
    async def test_stable_when_size_repeats(self):
        share = MagicMock()
        share.file_stats = AsyncMock(side_effect=[_stats(100), _stats(100), _stats(100)])

        checker = StabilityChecker(share, checks=3, interval_ms=1)

        assert await checker.is_stable("incoming/a.pdf")
        assert share.file_stats.await_count == 3

    async def test_growing_file_is_not_stable(self):
        share = MagicMock()
        share.file_stats = AsyncMock(side_effect=[_stats(100), _stats(200)])

        checker = StabilityChecker(share, checks=2, interval_ms=1)

        assert not await checker.is_stable("incoming/a.pdf")

    async def test_missing_file_is_not_stable(self):
        share = MagicMock()
        share.file_stats = AsyncMock(return_value=None)

        assert not await StabilityChecker(share, 2, 1).is_stable("incoming/a.pdf")

    async def test_file_vanishing_mid_check(self):
        share = MagicMock()
        share.file_stats = AsyncMock(side_effect=[_stats(100), None])

        assert not await StabilityChecker(share, 2, 1).is_stable("incoming/a.pdf")

    async def test_directory_is_not_stable(self):
        share = MagicMock()
        share.file_stats = AsyncMock(return_value=_stats(0, ResourceKind.DIRECTORY))

        assert not await StabilityChecker(share, 1, 1).is_stable("incoming/sub")

    async def test_share_error_is_not_stable(self):
        share = MagicMock()
        share.file_stats = AsyncMock(side_effect=QueryError("metadata query failed"))

        assert not await StabilityChecker(share, 2, 1).is_stable("incoming/a.pdf")

    async def test_single_check_needs_no_wait(self):
        share = MagicMock()
        share.file_stats = AsyncMock(return_value=_stats(5))

        assert await StabilityChecker(share, 1, 60_000).is_stable("incoming/a.pdf")
        assert share.file_stats.await_count == 1


@pytest.mark.asyncio
class TestHotFolderFileManager:
    @pytest.fixture
    def manager(self, share):
        return HotFolderFileManager(share, HotFolderConfig(handler=_noop, base_path="hot"))

    async def test_ensure_layout(self, manager, share):
        await manager.ensure_layout()
        await manager.ensure_layout()

        for name in ("incoming", "processing", "success", "errors"):
            assert await share.exists(f"hot/{name}") == PathState.DIRECTORY

    async def test_list_files_skips_directories(self, manager, fake_client):
        fake_client.add_file("hot/incoming/a.pdf", b"")
        fake_client.add_dir("hot/incoming/sub")

        assert await manager.list_files("hot/incoming") == ["a.pdf"]

    async def test_file_size(self, manager, fake_client):
        fake_client.add_file("hot/incoming/a.pdf", b"12345")
        fake_client.add_dir("hot/incoming/sub")

        assert await manager.file_size("hot/incoming/a.pdf") == 5
        assert await manager.file_size("hot/incoming/sub") is None
        assert await manager.file_size("hot/incoming/missing") is None

    async def test_move_never_replaces(self, manager, fake_client):
        fake_client.add_file("hot/processing/a.pdf", b"new")
        fake_client.add_file("hot/success/a.pdf", b"old")

        with pytest.raises(RenameError):
            await manager.move("hot/processing/a.pdf", "hot/success/a.pdf")

        assert fake_client.read("hot/success/a.pdf") == b"old"

    async def test_move_unique_free_target(self, manager, fake_client):
        fake_client.add_file("hot/processing/a.pdf", b"x")
        fake_client.add_dir("hot/success")

        target = await manager.move_unique("hot/processing/a.pdf", "hot/success/a.pdf")

        assert target == "hot/success/a.pdf"
        assert fake_client.read("hot/success/a.pdf") == b"x"

    async def test_move_unique_picks_numbered_name(self, manager, fake_client):
        fake_client.add_file("hot/processing/a.pdf", b"new")
        fake_client.add_file("hot/success/a.pdf", b"old")
        fake_client.add_file("hot/success/a_1.pdf", b"older")

        target = await manager.move_unique("hot/processing/a.pdf", "hot/success/a.pdf")

        assert target == "hot/success/a_2.pdf"
        assert fake_client.read("hot/success/a.pdf") == b"old"
        assert fake_client.read("hot/success/a_2.pdf") == b"new"

    async def test_unique_path_gives_up_with_share_error(self, manager, fake_client, monkeypatch):
        monkeypatch.setattr(file_manager, "MAX_CONFLICT_ATTEMPTS", 2)
        for name in ("a.pdf", "a_1.pdf", "a_2.pdf"):
            fake_client.add_file(f"hot/success/{name}", b"")

        with pytest.raises(NameConflictError) as exc_info:
            await manager.unique_path("hot/success/a.pdf")

        assert isinstance(exc_info.value, ShareError)
        assert exc_info.value.path == "hot/success/a.pdf"

    async def test_error_sidecar(self, manager, fake_client):
        fake_client.add_file("hot/errors/a.pdf", b"x")

        sidecar = await manager.write_error_sidecar("hot/errors/a.pdf", "ValueError('bad page')")

        assert sidecar == "hot/errors/a.pdf.error.txt"
        assert fake_client.read(sidecar) == b"ValueError('bad page')\n"


@pytest.mark.asyncio
class TestHandlerRunner:
    async def test_sync_handler(self):
        seen = []
        runner = HandlerRunner(lambda info: seen.append(info["name"]), timeout_seconds=5)

        await runner.call({"name": "a.pdf"})

        assert seen == ["a.pdf"]

    async def test_async_handler(self):
        handler = AsyncMock(return_value="done")
        runner = HandlerRunner(handler, timeout_seconds=5)

        assert await runner.call({"name": "a.pdf"}) == "done"

    async def test_handler_exception(self):
        def broken(info):
            raise ValueError("bad page")

        with pytest.raises(HandlerError) as exc_info:
            await HandlerRunner(broken, timeout_seconds=5).call({"name": "a.pdf"})

        assert exc_info.value.file_name == "a.pdf"
        assert "bad page" in exc_info.value.reason

    async def test_timeout(self):
        async def slow(info):
            await asyncio.sleep(10)

        with pytest.raises(HandlerError) as exc_info:
            await HandlerRunner(slow, timeout_seconds=0.01).call({"name": "a.pdf"})

        assert "timed out" in exc_info.value.reason


class TestLoadHandler:
    def test_loads_callable(self):
        handler = load_handler("os.path:basename")

        assert handler("a/b.txt") == "b.txt"

    @pytest.mark.parametrize("target", ["", "os.path", ":basename", "os.path:"])
    def test_malformed(self, target):
        with pytest.raises(ValueError):
            load_handler(target)

    def test_not_callable(self):
        with pytest.raises(ValueError):
            load_handler("os:sep")

    def test_missing_module(self):
        with pytest.raises(ImportError):
            load_handler("no_such_module_anywhere:run")
