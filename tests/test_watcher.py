"""Tests for the compile watcher."""

from __future__ import annotations

import time
from pathlib import Path
from unittest.mock import MagicMock

from watchdog.events import FileModifiedEvent

from packwright_core.compiler import Compiler, CompileWatcher
from packwright_core.compiler.watcher import _DebouncedCompileHandler

from conftest import FakeRunner


def _wait_for(predicate, timeout: float = 3.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.1)
    return False


# ── _DebouncedCompileHandler ─────────────────────────────────────────


class TestHandler:
    def test_debounces_bursts(self, tmp_path: Path):
        compiler = MagicMock(spec=Compiler)
        handler = _DebouncedCompileHandler(compiler, debounce_seconds=60, ignored_dirs=[])
        for _ in range(5):
            handler.on_any_event(FileModifiedEvent(str(tmp_path / "a.js")))
        compiler.compile.assert_not_called()
        assert handler.pending

        handler.flush()
        assert compiler.compile.call_count == 1
        assert handler.compile_count == 1
        assert not handler.pending

    def test_last_change_in_burst_is_compiled(self, make_config, project: Path):
        """A second save inside the window still ends in an up-to-date build."""
        runner = FakeRunner()
        compiler = Compiler(make_config(), runner=runner)
        handler = _DebouncedCompileHandler(compiler, debounce_seconds=60, ignored_dirs=[])
        source = project / "app" / "javascript" / "a.js"

        source.write_text("first")
        handler.on_any_event(FileModifiedEvent(str(source)))
        source.write_text("second")
        handler.on_any_event(FileModifiedEvent(str(source)))
        handler.flush()

        assert runner.calls == 1
        assert compiler.fresh()

    def test_fires_after_quiet_period(self, make_config, project: Path):
        runner = FakeRunner()
        compiler = Compiler(make_config(), runner=runner)
        handler = _DebouncedCompileHandler(compiler, debounce_seconds=0.2, ignored_dirs=[])
        source = project / "app" / "javascript" / "a.js"

        for content in ("one", "two", "three"):
            source.write_text(content)
            handler.on_any_event(FileModifiedEvent(str(source)))
            time.sleep(0.05)

        assert _wait_for(lambda: runner.calls >= 1), f"calls = {runner.calls}"
        assert _wait_for(lambda: not handler.pending)
        assert runner.calls == 1
        assert compiler.fresh()

    def test_cancel_drops_scheduled_compile(self, tmp_path: Path):
        compiler = MagicMock(spec=Compiler)
        handler = _DebouncedCompileHandler(compiler, debounce_seconds=60, ignored_dirs=[])
        handler.on_any_event(FileModifiedEvent(str(tmp_path / "a.js")))
        handler.cancel()
        handler.flush()
        compiler.compile.assert_not_called()

    def test_ignores_output_and_vcs_dirs(self, tmp_path: Path):
        compiler = MagicMock(spec=Compiler)
        handler = _DebouncedCompileHandler(compiler, debounce_seconds=60, ignored_dirs=[tmp_path / "public"])
        handler.on_any_event(FileModifiedEvent(str(tmp_path / "public" / "packs" / "app.js")))
        handler.on_any_event(FileModifiedEvent(str(tmp_path / "node_modules" / "x" / "index.js")))
        handler.on_any_event(FileModifiedEvent(str(tmp_path / ".git" / "index")))
        assert not handler.pending
        handler.flush()
        compiler.compile.assert_not_called()

    def test_compile_error_logged_not_raised(self, tmp_path: Path, caplog):
        compiler = MagicMock(spec=Compiler)
        compiler.compile.side_effect = PermissionError("denied")
        handler = _DebouncedCompileHandler(compiler, debounce_seconds=60, ignored_dirs=[])
        handler.on_any_event(FileModifiedEvent(str(tmp_path / "a.js")))
        handler.flush()
        assert any("failed" in r.getMessage() for r in caplog.records)


# ── CompileWatcher ───────────────────────────────────────────────────


class TestCompileWatcher:
    def test_recompiles_on_change(self, make_config, project: Path):
        runner = FakeRunner()
        compiler = Compiler(make_config(), runner=runner)
        compiler.compile()

        watcher = CompileWatcher(compiler, debounce_seconds=0.1)
        watcher.start()
        try:
            time.sleep(0.3)
            (project / "app" / "javascript" / "a.js").write_text("changed")
            assert _wait_for(lambda: runner.calls >= 2), f"calls = {runner.calls}"
        finally:
            watcher.stop()

    def test_cache_writes_do_not_trigger(self, make_config, project: Path):
        compiler = Compiler(make_config(), runner=FakeRunner())
        watcher = CompileWatcher(compiler, debounce_seconds=0.1)
        watcher.start()
        try:
            time.sleep(0.3)
            cache = project / "tmp" / "packwright"
            cache.mkdir(parents=True)
            (cache / "scratch").write_text("x")
            time.sleep(0.5)
            assert watcher.compile_count == 0
        finally:
            watcher.stop()

    def test_stop_is_idempotent(self, make_config):
        watcher = CompileWatcher(Compiler(make_config(), runner=FakeRunner()))
        watcher.stop()
        watcher.start()
        watcher.start()
        watcher.stop()
        watcher.stop()
