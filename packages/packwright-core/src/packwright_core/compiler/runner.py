"""Bundler subprocess invocation and output reporting."""

from __future__ import annotations

import logging
import os
import subprocess
import sys
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from packwright_core.config.models import PackwrightConfig

logger = logging.getLogger(__name__)

ASSET_HOST_VAR = "PACKWRIGHT_ASSET_HOST"
RELATIVE_URL_ROOT_VAR = "PACKWRIGHT_RELATIVE_URL_ROOT"
CONFIG_VAR = "PACKWRIGHT_CONFIG"


class AssetHostResolver(Protocol):
    """Supplies asset-serving settings from a host web framework."""

    def asset_host(self) -> str | None:
        """Host (with scheme) assets are served from, if any."""
        ...

    def relative_url_root(self) -> str | None:
        """Sub-path the application is mounted under, if any."""
        ...


@dataclass(frozen=True)
class BuildResult:
    """Exit status and captured streams of one bundler run."""

    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def success(self) -> bool:
        return self.returncode == 0


class BundlerRunner:
    """Runs the configured bundler in the project root and logs what it printed."""

    def __init__(
        self,
        config: PackwrightConfig,
        resolver: AssetHostResolver | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self.config = config
        self.resolver = resolver
        self._environ = environ if environ is not None else os.environ

    # ------------------------------------------------------------------
    # Invocation parameters
    # ------------------------------------------------------------------

    def build_env(self) -> dict[str, str]:
        """Environment overrides passed to the bundler.

        Static ``bundler.env`` values come first; the asset host, relative
        URL root and config path are layered on top and win on conflicts.
        """
        env = dict(self.config.bundler.env)

        asset_host = self._environ.get(ASSET_HOST_VAR)
        if asset_host is None and self.resolver is not None:
            asset_host = self.resolver.asset_host()
        if asset_host is not None:
            env[ASSET_HOST_VAR] = asset_host

        url_root = self._environ.get(RELATIVE_URL_ROOT_VAR)
        if url_root is None and self.resolver is not None:
            url_root = self.resolver.relative_url_root()
        if url_root is not None:
            env[RELATIVE_URL_ROOT_VAR] = url_root

        env[CONFIG_VAR] = str(self.config.resolve(self.config.config_path))
        return env

    def command(self) -> list[str]:
        """Bundler argv, run through this interpreter if it is a Python script.

        A bare name such as ``npx`` is looked up on PATH unless a file of that
        name exists in the project root; anything with a path separator is
        resolved against the project root.
        """
        executable = self._executable()
        argv = [str(executable), *self.config.bundler.args]
        if isinstance(executable, Path) and _is_python_script(executable):
            argv.insert(0, sys.executable)
        return argv

    def _executable(self) -> Path | str:
        name = self.config.bundler.command
        local = self.config.resolve(name)
        if os.sep in name or "/" in name or local.is_file():
            return local
        return name

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    def run(self) -> BuildResult:
        """Run the bundler to completion and report its output.

        A non-zero exit is returned, not raised. Failing to start the
        process at all (missing executable, permissions) raises.
        """
        logger.info("Compiling...")
        proc = subprocess.run(
            self.command(),
            cwd=self.config.root,
            env={**self._environ, **self.build_env()},
            capture_output=True,
            text=True,
        )
        result = BuildResult(proc.returncode, proc.stdout or "", proc.stderr or "")
        self._report(result)
        return result

    def _report(self, result: BuildResult) -> None:
        if result.success:
            logger.info("Compiled all packs in %s", self.config.resolve(self.config.public_output_path))
            # Bundlers print warnings on stderr and still exit 0
            if result.stderr:
                logger.error("%s", result.stderr)
            if self.config.bundler.verbose_output and result.stdout:
                logger.info("%s", result.stdout)
            return

        streams = [s for s in (result.stdout, result.stderr) if s]
        logger.error(
            "\nCOMPILATION FAILED:\nEXIT STATUS: %d\nOUTPUTS:\n%s",
            result.returncode,
            "\n\n".join(streams),
        )


def _is_python_script(path: Path) -> bool:
    """True if *path* is a file whose shebang line mentions python."""
    if not path.is_file():
        return False
    with open(path, "rb") as f:
        first_line = f.readline(256)
    return first_line.startswith(b"#!") and b"python" in first_line
