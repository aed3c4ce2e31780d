"""Pytest configuration and fixtures for bees tests."""
from __future__ import annotations

import io
from pathlib import Path

import pytest
from rich.console import Console

from bees.bundler import CompileResult
from bees.config import BeesConfig


class FakeBundler:
    """Stands in for webpack: writes the given assets into the output dir.

    Each entry in ``builds`` is one compilation: a mapping of asset name to
    file contents, or a ready-made CompileResult for failures.
    """

    def __init__(self, output_dir: Path, builds: list, time_ms: int = 1234):
        self.output_dir = Path(output_dir)
        self.builds = list(builds)
        self.time_ms = time_ms
        self.calls = 0

    def _emit(self, build) -> CompileResult:
        self.calls += 1
        if isinstance(build, CompileResult):
            return build
        for name, contents in build.items():
            target = self.output_dir / name
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(contents)
        return CompileResult(time_ms=self.time_ms, assets=list(build))

    async def compile(self) -> CompileResult:
        return self._emit(self.builds[0])

    async def watch(self):
        for build in self.builds:
            yield self._emit(build)


@pytest.fixture
def tmp_app(tmp_path):
    """Create a temporary frontend project directory."""
    app = tmp_path / "app"
    app.mkdir()
    (app / "src").mkdir()
    (app / "src" / "index.js").write_text("console.log('hi')\n")
    return app


@pytest.fixture
def config():
    return BeesConfig(environment="production", use="react", style=["css"], bundler=["webpack"])


@pytest.fixture
def console():
    """Rich console writing plain text into a buffer."""
    return Console(file=io.StringIO(), width=200, color_system=None, force_terminal=False)


@pytest.fixture
def plain_gzip(monkeypatch):
    """Make gzip size equal raw length so sizes in tests are exact."""
    monkeypatch.setattr("bees.sizes.gzip_size", len)
    monkeypatch.setattr("bees.report.gzip_size", len)


def write_file(path: Path, contents: bytes | str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(contents, str):
        contents = contents.encode()
    path.write_bytes(contents)
    return path
