"""File watcher that recompiles when the project changes."""

from __future__ import annotations

import logging
import threading
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from packwright_core.compiler.compiler import Compiler

logger = logging.getLogger(__name__)

# Directory names never worth a recompile
_IGNORE_PARTS = {".git", "node_modules", "__pycache__"}


class _DebouncedCompileHandler(FileSystemEventHandler):
    """Compiles once the project has been quiet for the debounce window.

    Every relevant event restarts the timer, so the last change in a burst
    is always followed by a compile.
    """

    def __init__(
        self,
        compiler: Compiler,
        debounce_seconds: float,
        ignored_dirs: list[Path],
        root: Path | None = None,
    ) -> None:
        super().__init__()
        self._compiler = compiler
        self._root = root
        self._debounce = debounce_seconds
        self._ignored_dirs = ignored_dirs
        self._timer: threading.Timer | None = None
        self._trigger: str | None = None
        self._lock = threading.Lock()
        self.compile_count = 0

    def _should_ignore(self, path: str) -> bool:
        p = Path(path)
        parts = p.relative_to(self._root).parts if self._root and p.is_relative_to(self._root) else p.parts
        if any(part in _IGNORE_PARTS for part in parts):
            return True
        return any(p.is_relative_to(d) for d in self._ignored_dirs)

    @property
    def pending(self) -> bool:
        """True while a compile is scheduled but has not started."""
        with self._lock:
            return self._timer is not None

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory or event.event_type in ("opened", "closed", "closed_no_write"):
            return
        if self._should_ignore(event.src_path):
            return

        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._trigger = event.src_path
            self._timer = threading.Timer(self._debounce, self._fire)
            self._timer.daemon = True
            self._timer.start()

    def flush(self) -> None:
        """Run a scheduled compile now instead of waiting for the timer."""
        with self._lock:
            timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()
            self._compile()

    def cancel(self) -> None:
        """Drop a scheduled compile."""
        with self._lock:
            timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()

    def _fire(self) -> None:
        with self._lock:
            if self._timer is None or self._timer is not threading.current_thread():
                # Superseded by a newer event or flushed
                return
            self._timer = None
        self._compile()

    def _compile(self) -> None:
        with self._lock:
            self.compile_count += 1
            trigger = self._trigger
        try:
            self._compiler.compile()
        except Exception:
            logger.exception("Compile triggered by %s failed", trigger)


class CompileWatcher:
    """Watches the project root and calls ``Compiler.compile`` on change.

    The cache and public output directories are ignored so the bundler's own
    writes do not retrigger a build. ``compile`` itself decides whether the
    change touched the watched set.
    """

    def __init__(self, compiler: Compiler, debounce_seconds: float | None = None) -> None:
        cfg = compiler.config
        self._compiler = compiler
        self._root = cfg.root
        if debounce_seconds is None:
            debounce_seconds = cfg.watch.debounce_seconds
        self._handler = _DebouncedCompileHandler(
            compiler,
            debounce_seconds=debounce_seconds,
            ignored_dirs=[cfg.resolve(cfg.cache_path), cfg.resolve(cfg.public_output_path)],
            root=self._root,
        )
        self._observer: Observer | None = None

    @property
    def compile_count(self) -> int:
        """Number of compiles triggered by file events so far."""
        return self._handler.compile_count

    def start(self) -> None:
        """Begin watching the project root recursively."""
        if self._observer is not None:
            return
        self._observer = Observer()
        self._observer.schedule(self._handler, str(self._root), recursive=True)
        self._observer.start()
        logger.info("Watching %s for changes", self._root)

    def stop(self) -> None:
        """Stop watching and clean up."""
        if self._observer is None:
            return
        self._observer.stop()
        self._observer.join(timeout=5)
        self._observer = None
        self._handler.cancel()
        logger.info("Stopped watching %s", self._root)
