"""Fingerprint engine: one digest over a set of watched globs."""

from packwright_core.fingerprint.digest import (
    combine_fingerprints,
    compute_digest,
    compute_file_hash,
    compute_hash,
    fingerprint_files,
    resolve_watched_files,
)
from packwright_core.fingerprint.models import FileFingerprint

__all__ = [
    "FileFingerprint",
    "combine_fingerprints",
    "compute_digest",
    "compute_file_hash",
    "compute_hash",
    "fingerprint_files",
    "resolve_watched_files",
]
