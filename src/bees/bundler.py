"""Bundler invocation - runs webpack's CLI and reads its JSON stats.

A single compile is one coroutine returning a ``CompileResult``. Watch mode
is an async iterator of results: the first compile runs immediately, then
one more for every change detected in the source tree.
"""
from __future__ import annotations

import asyncio
import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, AsyncIterator, Protocol

from bees.config import BeesConfig
from bees.paths import ProjectPaths

logger = logging.getLogger(__name__)

# Directories never scanned for source changes
IGNORED_DIRS = {"node_modules", ".git", ".cache"}


@dataclass
class CompileResult:
    """Outcome of one bundler run.

    ``error`` is set when the bundler could not run at all; ``errors`` holds
    compiler-reported problems. Either one makes the build a failure.
    """
    error: str | None = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    time_ms: int = 0
    assets: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None and not self.errors

    @property
    def problems(self) -> list[str]:
        return [self.error] if self.error else list(self.errors)


class Bundler(Protocol):
    async def compile(self) -> CompileResult: ...

    def watch(self) -> AsyncIterator[CompileResult]: ...


def _message(entry: Any) -> str:
    if isinstance(entry, dict):
        return str(entry.get("message") or entry.get("details") or entry)
    return str(entry)


def resolve_webpack_config(config: BeesConfig, paths: ProjectPaths) -> Path | None:
    """Configured webpack config file, else a webpack.config.js in the project."""
    if config.webpack_config:
        return paths.resolve_app(config.webpack_config)
    if paths.webpack_config.is_file():
        return paths.webpack_config
    return None


def parse_stats(output: str) -> CompileResult:
    """Parse ``webpack --json`` output into a CompileResult.

    Text before and after the stats object (yarn banners, npx notices) is skipped.

    Raises:
        ValueError: if no JSON object can be found in ``output``.
    """
    start = output.find("{")
    if start < 0:
        raise ValueError("bundler produced no JSON stats")
    stats, _ = json.JSONDecoder().raw_decode(output, start)
    if not isinstance(stats, dict):
        raise ValueError("bundler stats must be a JSON object")

    assets = [a["name"] for a in stats.get("assets", []) if isinstance(a, dict) and a.get("name")]
    return CompileResult(
        errors=[_message(e) for e in stats.get("errors", [])],
        warnings=[_message(w) for w in stats.get("warnings", [])],
        time_ms=int(stats.get("time") or 0),
        assets=assets,
    )


class WebpackBundler:
    """Drive the webpack CLI as a subprocess.

    Example:
        bundler = WebpackBundler(config, paths, output_dir=Path("dist"))
        result = await bundler.compile()
    """

    def __init__(
        self,
        config: BeesConfig,
        paths: ProjectPaths,
        output_dir: Path,
        debug: bool = False,
    ):
        self.config = config
        self.paths = paths
        self.output_dir = Path(output_dir)
        self.debug = debug

    @property
    def mode(self) -> str:
        return "development" if self.debug else "production"

    def config_file(self) -> Path | None:
        return resolve_webpack_config(self.config, self.paths)

    def command(self) -> list[str]:
        cmd = list(self.config.bundler) + [
            "--mode", self.mode,
            "--output-path", str(self.output_dir),
            "--json",
        ]
        config_file = self.config_file()
        if config_file is not None:
            cmd += ["--config", str(config_file)]
        return cmd

    def environ(self) -> dict[str, str]:
        env = os.environ.copy()
        env["NODE_ENV"] = self.config.environment
        env["BEES_USE"] = self.config.use
        env["BEES_STYLE"] = ",".join(self.config.style)
        if self.config.extra:
            # Unrecognised .beesrc keys, for the project's webpack config to read
            env["BEES_OPTIONS"] = json.dumps(self.config.extra, default=str)
        return env

    async def compile(self) -> CompileResult:
        cmd = self.command()
        logger.debug("Running bundler: %s", cmd)
        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                cwd=str(self.paths.app_directory),
                env=self.environ(),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            return CompileResult(error=f"Could not start bundler {cmd[0]!r}: {e}")

        stdout, stderr = await proc.communicate()
        out = stdout.decode("utf-8", errors="replace")
        err = stderr.decode("utf-8", errors="replace").strip()
        try:
            result = parse_stats(out)
        except ValueError as e:
            detail = err or out.strip() or str(e)
            return CompileResult(error=f"Bundler exited with status {proc.returncode}: {detail}")

        if proc.returncode != 0 and result.ok:
            result.error = err or f"Bundler exited with status {proc.returncode}"
        return result

    def source_fingerprint(self) -> dict[str, tuple[int, int]]:
        """(mtime_ns, size) for every file under the source directory."""
        root = self.paths.resolve_app(self.config.source_path)
        fingerprint: dict[str, tuple[int, int]] = {}
        if not root.exists():
            return fingerprint
        output_dir = self.output_dir.resolve()
        for dirpath, dirnames, filenames in os.walk(root):
            current = Path(dirpath)
            dirnames[:] = [
                d for d in dirnames
                if d not in IGNORED_DIRS and (current / d).resolve() != output_dir
            ]
            for name in filenames:
                file_path = current / name
                try:
                    st = file_path.stat()
                except FileNotFoundError:
                    continue
                fingerprint[str(file_path)] = (st.st_mtime_ns, st.st_size)
        return fingerprint

    async def watch(self) -> AsyncIterator[CompileResult]:
        """Yield a result for the initial build and after each source change."""
        previous = self.source_fingerprint()
        yield await self.compile()
        while True:
            await asyncio.sleep(self.config.watch_interval)
            current = self.source_fingerprint()
            if current == previous:
                continue
            logger.debug("Source change detected under %s", self.config.source_path)
            previous = current
            yield await self.compile()


__all__ = ["Bundler", "CompileResult", "WebpackBundler", "parse_stats", "resolve_webpack_config"]
