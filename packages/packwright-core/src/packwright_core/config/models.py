from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class BundlerConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    command: str = "bin/packwright"
    args: list[str] = Field(default_factory=list)
    env: dict[str, str] = Field(default_factory=dict)
    verbose_output: bool = False


class WatchConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    debounce_seconds: float = Field(default=1.0, ge=0)


class PackwrightConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    root_path: str = "."
    source_path: str = "app/javascript"
    additional_paths: list[str] = Field(default_factory=list)
    # Deprecated: use additional_paths.
    watched_paths: list[str] = Field(default_factory=list)
    cache_path: str = "tmp/packwright"
    public_output_path: str = "public/packs"
    public_manifest_path: str | None = None
    lockfile: str = "yarn.lock"
    package_manifest: str = "package.json"
    bundler_config_path: str = "config/webpack"
    env: str = Field(default="development", min_length=1)
    config_path: str = "config/packwright.yml"
    bundler: BundlerConfig = Field(default_factory=BundlerConfig)
    watch: WatchConfig = Field(default_factory=WatchConfig)
    log_level: Literal["debug", "info", "warn", "error"] = "info"
    log_format: Literal["text", "json"] = "text"

    def resolve(self, path: str) -> Path:
        """Resolve *path* against the project root."""
        return self.root.joinpath(path)

    @property
    def root(self) -> Path:
        return Path(self.root_path).expanduser().resolve()
