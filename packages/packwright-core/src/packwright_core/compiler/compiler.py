"""Staleness check and compile-once-per-change orchestration."""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Protocol

from packwright_core.compiler.runner import AssetHostResolver, BuildResult, BundlerRunner
from packwright_core.compiler.store import DigestStore
from packwright_core.config.models import PackwrightConfig
from packwright_core.fingerprint import compute_digest

logger = logging.getLogger(__name__)

_SLOW_SETUP_WARNING = """\
packwright compiler - Slow setup for development

Prepare assets with either:
1. Running the bundler's own dev server
2. Running `packwright watch` in a separate terminal"""

# One lock per environment name, shared by every Compiler in this process
_ENV_LOCKS: dict[str, threading.Lock] = {}
_ENV_LOCKS_GUARD = threading.Lock()


def _env_lock(env: str) -> threading.Lock:
    with _ENV_LOCKS_GUARD:
        return _ENV_LOCKS.setdefault(env, threading.Lock())


class Runner(Protocol):
    """Anything that can run the bundler once."""

    def run(self) -> BuildResult:
        ...


class Compiler:
    """Runs the bundler only when the watched files changed since the last attempt.

    The digest of the watched set is recorded after every build attempt,
    including failed ones: bundlers write output even when they fail, so the
    record tracks what was last attempted rather than what last succeeded.

    Calls are serialised per environment within this process. Separate
    processes are not coordinated and may both build.
    """

    def __init__(
        self,
        config: PackwrightConfig,
        resolver: AssetHostResolver | None = None,
        runner: Runner | None = None,
    ) -> None:
        self.config = config
        self.runner = runner if runner is not None else BundlerRunner(config, resolver)
        self.store = DigestStore(config.resolve(config.cache_path), config.env)

    @property
    def digest_path(self) -> Path:
        return self.store.path

    def compile(self) -> bool:
        """Build if stale. Returns False only when a build ran and failed."""
        with _env_lock(self.config.env):
            current = self.watched_files_digest()
            if self.last_compilation_digest() == current:
                logger.debug("Everything's up-to-date. Nothing to do")
                return True

            # If the bundler cannot be started the error propagates unrecorded
            result = self.runner.run()
            self.store.write(current)
            return result.success

    def fresh(self) -> bool:
        """True if the compiled packs are up to date with the watched files."""
        recorded = self.last_compilation_digest()
        return recorded is not None and recorded == self.watched_files_digest()

    def stale(self) -> bool:
        """True if the compiled packs are out of date with the watched files."""
        return not self.fresh()

    def last_compilation_digest(self) -> str | None:
        """The recorded digest, or None if absent or the manifest is missing."""
        manifest = self.config.public_manifest_path
        if manifest is not None and not self.config.resolve(manifest).is_file():
            return None
        return self.store.read()

    def watched_files_digest(self) -> str:
        if self.config.env == "development":
            logger.warning(_SLOW_SETUP_WARNING)
        if self.config.watched_paths:
            logger.warning(
                "watched_paths is deprecated. Set additional_paths in %s instead.",
                self.config.config_path,
            )
        return compute_digest(self.config.root, self.watched_patterns())

    def watched_patterns(self) -> list[str]:
        """Globs making up the watched set, relative to the project root."""
        cfg = self.config
        return [
            *cfg.additional_paths,
            *cfg.watched_paths,
            f"{cfg.source_path}/**/*",
            cfg.lockfile,
            cfg.package_manifest,
            f"{cfg.bundler_config_path}/**/*",
        ]
