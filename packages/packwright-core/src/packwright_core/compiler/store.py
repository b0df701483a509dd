"""Per-environment record of the last compiled watched-set digest."""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)

DIGEST_FILE_PREFIX = "last-compilation-digest-"


def digest_file_path(cache_dir: Path, env: str) -> Path:
    """Where the digest for *env* lives inside the cache directory."""
    return Path(cache_dir) / f"{DIGEST_FILE_PREFIX}{env}"


class DigestStore:
    """Reads and writes the plain-text digest file for one environment."""

    def __init__(self, cache_dir: Path, env: str) -> None:
        self.cache_dir = Path(cache_dir)
        self.env = env
        self.path = digest_file_path(self.cache_dir, env)

    def read(self) -> str | None:
        """Return the recorded digest, or None if nothing was recorded yet.

        Only "not found" style errors mean "never compiled"; anything else
        (permissions, I/O) propagates.
        """
        try:
            value = self.path.read_text().strip()
        except (FileNotFoundError, NotADirectoryError):
            return None
        return value or None

    def write(self, digest: str) -> None:
        """Overwrite the record with *digest*, creating the cache dir if needed."""
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        self.path.write_text(digest)
        logger.debug("Recorded compilation digest %s at %s", digest, self.path)
