"""Compilation orchestration: staleness gate, bundler runs, digest records."""

from packwright_core.compiler.compiler import Compiler
from packwright_core.compiler.runner import (
    AssetHostResolver,
    BuildResult,
    BundlerRunner,
)
from packwright_core.compiler.store import DigestStore, digest_file_path
from packwright_core.compiler.watcher import CompileWatcher

__all__ = [
    "AssetHostResolver",
    "BuildResult",
    "BundlerRunner",
    "CompileWatcher",
    "Compiler",
    "DigestStore",
    "digest_file_path",
]
