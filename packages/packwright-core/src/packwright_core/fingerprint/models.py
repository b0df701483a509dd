"""Data models for the fingerprint engine."""

from __future__ import annotations

import re
from dataclasses import dataclass

_SHA1_RE = re.compile(r"[a-f0-9]{40}")


@dataclass(frozen=True)
class FileFingerprint:
    """Content hash of one watched file, keyed by its project-relative path."""

    identifier: str
    content_hash: str

    def __post_init__(self) -> None:
        if not self.identifier:
            raise ValueError("identifier must not be empty")
        if not _SHA1_RE.fullmatch(self.content_hash):
            raise ValueError(f"content_hash must be 40-char hex, got {self.content_hash!r}")

    @property
    def token(self) -> str:
        return f"{self.identifier}/{self.content_hash}"
