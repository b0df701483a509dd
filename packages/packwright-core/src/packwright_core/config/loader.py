"""YAML config loading with env var expansion and per-environment sections."""

import os
import re
from pathlib import Path

import yaml
from pydantic import ValidationError

from .models import PackwrightConfig

ENV_VAR = "PACKWRIGHT_ENV"
DEFAULT_ENV = "development"


def load_config(cli_path: str | None = None, env: str | None = None) -> PackwrightConfig:
    """Load config with resolution order: CLI > config/packwright.yml > ./packwright.yml > defaults."""
    env_name = env or os.environ.get(ENV_VAR) or DEFAULT_ENV
    config_paths = [
        Path(cli_path) if cli_path else None,
        Path("./config/packwright.yml"),
        Path("./packwright.yml"),
    ]

    for path in config_paths:
        if path and path.exists():
            try:
                with open(path) as f:
                    raw = yaml.safe_load(f)
                if raw is None:
                    continue
                raw = _select_environment(_expand_env_vars(raw), env_name)
                raw["env"] = env_name
                raw.setdefault("config_path", str(path.resolve()))
                return PackwrightConfig(**raw)
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {path}: {e}") from e
            except ValidationError as e:
                raise ValueError(f"Invalid config in {path}: {e}") from e
            except ValueError as e:
                raise ValueError(f"Invalid config in {path}: {e}") from e

    return PackwrightConfig(env=env_name)


def _select_environment(raw: object, env_name: str) -> dict:
    """Merge the ``default`` section with the section named *env_name*.

    Nested mappings are merged key by key, so an environment section only
    needs the keys it changes. A file made only of environment sections
    must contain ``default`` or *env_name*; otherwise it is a flat config
    and is returned unchanged.
    """
    if not isinstance(raw, dict):
        raise ValueError(f"Config root must be a mapping, got {type(raw).__name__}")
    if "default" not in raw and not isinstance(raw.get(env_name), dict):
        if raw and not any(key in PackwrightConfig.model_fields for key in raw):
            raise ValueError(
                f"No '{env_name}' or 'default' section (found: {', '.join(sorted(map(str, raw)))})"
            )
        return dict(raw)
    return _deep_merge(raw.get("default") or {}, raw.get(env_name) or {})


def _deep_merge(base: dict, override: dict) -> dict:
    """Return *base* updated with *override*, recursing into nested mappings."""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _expand_env_vars(obj: object) -> object:
    """Recursively expand ${VAR} references in strings."""
    if isinstance(obj, str):
        return re.sub(r"\$\{(\w+)\}", lambda m: os.environ.get(m.group(1), ""), obj)
    elif isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(v) for v in obj]
    return obj


# Default YAML template for `packwright config init`
DEFAULT_CONFIG_TEMPLATE = """\
# config/packwright.yml

default:
  source_path: "app/javascript"
  # Extra globs to watch, relative to the project root
  additional_paths: []
  cache_path: "tmp/packwright"
  public_output_path: "public/packs"
  # public_manifest_path: "public/packs/manifest.json"
  lockfile: "yarn.lock"
  package_manifest: "package.json"
  bundler_config_path: "config/webpack"

  bundler:
    command: "bin/packwright"
    args: []
    env: {}
    verbose_output: false

  watch:
    debounce_seconds: 1.0

  # Logging
  log_level: "info"            # debug | info | warn | error
  log_format: "text"

# Environment sections are merged key by key over default
development:
  bundler:
    verbose_output: true

production:
  cache_path: "tmp/packwright"
  log_level: "warn"
"""
