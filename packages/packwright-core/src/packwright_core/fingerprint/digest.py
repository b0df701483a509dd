"""Watched-set digest: glob resolution, per-file hashing, and the combined hash."""

from __future__ import annotations

import glob
import hashlib
import logging
import os
from collections.abc import Iterable, Sequence
from pathlib import Path

from packwright_core.fingerprint.models import FileFingerprint

logger = logging.getLogger(__name__)

TOKEN_SEPARATOR = "/"
_CHUNK_SIZE = 64 * 1024


def compute_hash(content: bytes) -> str:
    """SHA-1 hex digest of *content*."""
    return hashlib.sha1(content).hexdigest()


def compute_file_hash(path: Path) -> str:
    """Stream a file from disk and return its SHA-1 hex digest."""
    h = hashlib.sha1()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(_CHUNK_SIZE), b""):
            h.update(chunk)
    return h.hexdigest()


def resolve_watched_files(root: Path, patterns: Iterable[str]) -> list[Path]:
    """Expand *patterns* against *root* into a sorted list of files.

    Absolute patterns are used as is. ``**`` matches recursively. Directories
    are dropped and a file matched by several patterns appears once.
    """
    root = Path(root)
    if not root.is_dir():
        raise FileNotFoundError(f"Project root does not exist: {root}")
    root = root.resolve()

    files: set[Path] = set()
    for pattern in patterns:
        expanded = os.path.join(glob.escape(str(root)), pattern)
        for match in glob.glob(expanded, recursive=True):
            p = Path(match)
            if p.is_dir():
                continue
            files.add(p)
    return sorted(files)


def _identifier(root: Path, path: Path) -> str:
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        # Watched via an absolute pattern outside the project
        return path.as_posix()


def fingerprint_files(root: Path, files: Sequence[Path]) -> list[FileFingerprint]:
    """Hash each file in order. Files deleted since enumeration are skipped."""
    root = Path(root).resolve()
    fingerprints: list[FileFingerprint] = []
    for path in files:
        try:
            content_hash = compute_file_hash(path)
        except FileNotFoundError:
            logger.debug("Watched file disappeared during scan: %s", path)
            continue
        fingerprints.append(FileFingerprint(_identifier(root, path), content_hash))
    return fingerprints


def combine_fingerprints(fingerprints: Iterable[FileFingerprint]) -> str:
    """Join the per-file tokens and hash the result."""
    joined = TOKEN_SEPARATOR.join(fp.token for fp in fingerprints)
    return compute_hash(joined.encode())


def compute_digest(root: Path, patterns: Iterable[str]) -> str:
    """Digest of every file under *root* matched by *patterns*.

    Deterministic for a given set of files and contents regardless of the
    order the filesystem lists them in. An empty match set is valid and
    digests the empty string.
    """
    root = Path(root)
    files = resolve_watched_files(root, patterns)
    return combine_fingerprints(fingerprint_files(root, files))
