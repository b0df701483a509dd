"""Packwright Core - watched-set fingerprints and compile-when-stale bundler orchestration."""

from packwright_core.compiler import Compiler, CompileWatcher
from packwright_core.config import PackwrightConfig, load_config
from packwright_core.fingerprint import compute_digest

__version__ = "0.1.0"

__all__ = [
    "CompileWatcher",
    "Compiler",
    "PackwrightConfig",
    "compute_digest",
    "load_config",
]
