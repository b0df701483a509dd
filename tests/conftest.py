"""Shared test fixtures for Packwright."""

from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from packwright_core.compiler.runner import BuildResult
from packwright_core.config.models import BundlerConfig, PackwrightConfig


class FakeRunner:
    """Stands in for BundlerRunner and records every run."""

    def __init__(self, returncode: int = 0) -> None:
        self.returncode = returncode
        self.calls = 0

    def run(self) -> BuildResult:
        self.calls += 1
        return BuildResult(self.returncode, stdout="built", stderr="")


# Writes what it saw to bundler-call.json and exits with $FAKE_BUNDLER_EXIT
FAKE_BUNDLER_SCRIPT = textwrap.dedent("""\
    #!/usr/bin/env python3
    import json
    import os
    import sys

    with open("bundler-call.json", "w") as f:
        json.dump({"cwd": os.getcwd(), "argv": sys.argv[1:], "env": dict(os.environ)}, f)
    print("bundled 2 packs")
    sys.stderr.write(os.environ.get("FAKE_BUNDLER_STDERR", ""))
    sys.exit(int(os.environ.get("FAKE_BUNDLER_EXIT", "0")))
    """)


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """A small frontend project with two source files and a lockfile."""
    src = tmp_path / "app" / "javascript"
    src.mkdir(parents=True)
    (src / "a.js").write_text("x")
    (src / "b.js").write_text("y")
    (tmp_path / "yarn.lock").write_text("# lock")
    (tmp_path / "package.json").write_text('{"name": "app"}')
    return tmp_path


@pytest.fixture
def make_config(project: Path):
    """Build a config rooted at the sample project."""

    def _make(**overrides) -> PackwrightConfig:
        overrides.setdefault("root_path", str(project))
        overrides.setdefault("env", "test")
        return PackwrightConfig(**overrides)

    return _make


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def fake_bundler(project: Path) -> BundlerConfig:
    """Install the recording bundler script at bin/packwright."""
    bin_dir = project / "bin"
    bin_dir.mkdir()
    (bin_dir / "packwright").write_text(FAKE_BUNDLER_SCRIPT)
    return BundlerConfig(command="bin/packwright")
