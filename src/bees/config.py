"""
Bees - Configuration

Loads build settings from the project's ``.beesrc``:
  1. Defaults
  2. Root mapping of ``.beesrc`` (or ``.beesrc.yml`` / ``.beesrc.yaml``)
  3. ``env.<environment>`` block from the same file
  4. Environment variables (BEES_OUTPUT_PATH, BEES_BUNDLER)

The file is read with ``yaml.safe_load`` so both JSON and YAML documents work.
A missing file is not an error; ``use`` and ``style`` fall back to defaults
and are reported in ``BeesConfig.defaulted`` so the CLI can warn about them.
"""
from __future__ import annotations

import copy
import logging
import os
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

CONFIG_FILENAMES = (".beesrc", ".beesrc.yml", ".beesrc.yaml")

DEFAULT_USE = "react"
DEFAULT_STYLE = ["css", "less"]
DEFAULT_OUTPUT_PATH = "dist"
DEFAULT_BUNDLER = ["npx", "webpack"]
DEFAULT_SOURCE_PATH = "src"
DEFAULT_WATCH_INTERVAL = 0.2


class ConfigError(ValueError):
    """Raised when the config file cannot be parsed or has the wrong shape."""

    def __init__(self, message: str, path: Path | None = None):
        super().__init__(message)
        self.path = path


@dataclass
class BeesConfig:
    """Resolved build settings for one environment."""

    environment: str = "production"
    use: str = DEFAULT_USE
    style: list[str] = field(default_factory=lambda: list(DEFAULT_STYLE))
    output_path: str | None = None
    bundler: list[str] = field(default_factory=lambda: list(DEFAULT_BUNDLER))
    webpack_config: str | None = None
    source_path: str = DEFAULT_SOURCE_PATH
    watch_interval: float = DEFAULT_WATCH_INTERVAL
    source_file: Path | None = None
    # Field names that were absent and filled with defaults
    defaulted: list[str] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)

    def resolve_output_path(self, override: str | None = None) -> str:
        """Pick the output directory: CLI flag, then config, then ``dist``."""
        return override or self.output_path or DEFAULT_OUTPUT_PATH


def find_config_file(cwd: Path) -> Path | None:
    for name in CONFIG_FILENAMES:
        candidate = cwd / name
        if candidate.is_file():
            return candidate
    return None


def load_config(environment: str | None = None, cwd: Path | str | None = None) -> BeesConfig:
    """Load ``.beesrc`` from ``cwd`` for ``environment``.

    Raises:
        ConfigError: if the file is malformed.
    """
    environment = environment or os.environ.get("NODE_ENV") or "production"
    base = Path(cwd) if cwd is not None else Path.cwd()

    path = find_config_file(base)
    raw: dict[str, Any] = {}
    if path is not None:
        raw = _read_config_file(path)
        logger.debug("Loaded config from %s", path)
    else:
        logger.debug("No config file found in %s, using defaults", base)

    merged = _apply_environment(raw, environment, path)
    _apply_env_overrides(merged)

    config = _build_config(merged, environment, path)
    config.source_file = path
    return config


def _read_config_file(path: Path) -> dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Could not read {path}: {e}", path) from e
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(f"{path.name}: {e}", path) from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(
            f"{path.name}: expected a mapping at the top level, got {type(data).__name__}",
            path,
        )
    return data


def _merge(base: dict, override: dict) -> dict:
    """Deep merge override into base."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _merge(result[key], value)
        else:
            result[key] = value
    return result


def _apply_environment(raw: dict, environment: str, path: Path | None) -> dict:
    merged = copy.deepcopy(raw)
    env_blocks = merged.pop("env", None) or {}
    if not isinstance(env_blocks, dict):
        raise ConfigError("'env' must be a mapping of environment names", path)
    block = env_blocks.get(environment)
    if block is None:
        return merged
    if not isinstance(block, dict):
        raise ConfigError(f"'env.{environment}' must be a mapping", path)
    return _merge(merged, block)


def _apply_env_overrides(config: dict) -> None:
    """Apply explicit env var overrides after file loading."""
    output_path = os.environ.get("BEES_OUTPUT_PATH")
    if output_path:
        config["outputPath"] = output_path

    bundler = os.environ.get("BEES_BUNDLER")
    if bundler:
        config["bundler"] = bundler


def _build_config(data: dict, environment: str, path: Path | None) -> BeesConfig:
    config = BeesConfig(environment=environment)
    known = {"use", "style", "outputPath", "bundler", "webpackConfig", "sourcePath", "watchInterval"}

    if data.get("use"):
        config.use = _expect(data, "use", str, path)
    else:
        config.defaulted.append("use")

    if data.get("style"):
        style = data["style"]
        if isinstance(style, str):
            style = [style]
        if not isinstance(style, list) or not all(isinstance(s, str) for s in style):
            raise ConfigError("'style' must be a string or a list of strings", path)
        config.style = list(style)
    else:
        config.defaulted.append("style")

    if data.get("outputPath") is not None:
        config.output_path = _expect(data, "outputPath", str, path)

    if data.get("bundler"):
        bundler = data["bundler"]
        if isinstance(bundler, str):
            bundler = shlex.split(bundler)
        if not isinstance(bundler, list) or not all(isinstance(s, str) for s in bundler):
            raise ConfigError("'bundler' must be a command string or a list of strings", path)
        config.bundler = list(bundler)

    if data.get("webpackConfig") is not None:
        config.webpack_config = _expect(data, "webpackConfig", str, path)

    if data.get("sourcePath") is not None:
        config.source_path = _expect(data, "sourcePath", str, path)

    if data.get("watchInterval") is not None:
        interval = data["watchInterval"]
        if isinstance(interval, bool) or not isinstance(interval, (int, float)) or interval <= 0:
            raise ConfigError("'watchInterval' must be a positive number of seconds", path)
        config.watch_interval = float(interval)

    config.extra = {k: v for k, v in data.items() if k not in known}
    return config


def _expect(data: dict, key: str, kind: type, path: Path | None) -> Any:
    value = data[key]
    if not isinstance(value, kind):
        raise ConfigError(f"'{key}' must be a {kind.__name__}, got {type(value).__name__}", path)
    return value


__all__ = ["BeesConfig", "ConfigError", "load_config", "find_config_file", "CONFIG_FILENAMES"]
