"""Build session - snapshot, clear, compile, diff and report.

All per-build state (config, output directory, previous sizes) lives on a
``BuildSession`` that is passed through each step.

States:
    IDLE -> SNAPSHOTTING -> CLEARING -> BUILDING -> DIFFING -> REPORTING -> DONE

In watch mode every further result moves WATCHING -> DIFFING -> REPORTING ->
WATCHING until the result stream ends. The previous-size map is taken once,
before the first build, and every rebuild is compared against it. Any compile
error or filesystem error ends in FAILED.
"""
from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from rich.console import Console

from bees.bundler import Bundler, CompileResult
from bees.config import BeesConfig, load_config
from bees.paths import ProjectPaths
from bees.report import AssetReport, collect_assets, print_errors, print_file_sizes, print_warnings
from bees.sizes import snapshot_sizes

logger = logging.getLogger(__name__)

COMPILE_FAILED = "Failed to compile."


class BuildState(str, Enum):
    IDLE = "idle"
    SNAPSHOTTING = "snapshotting"
    CLEARING = "clearing"
    BUILDING = "building"
    DIFFING = "diffing"
    REPORTING = "reporting"
    WATCHING = "watching"
    DONE = "done"
    FAILED = "failed"


class BuildFailed(RuntimeError):
    """A build attempt ended in the FAILED state."""

    def __init__(self, summary: str, errors: list[str] | None = None):
        super().__init__(summary)
        self.summary = summary
        self.errors = list(errors or [])


@dataclass
class BuildSession:
    """Everything one ``bees build`` invocation needs."""

    config: BeesConfig
    paths: ProjectPaths
    output_path: str
    debug: bool = False
    watch: bool = False
    previous_sizes: dict[str, int] = field(default_factory=dict)
    state: BuildState = BuildState.IDLE
    history: list[BuildState] = field(default_factory=list)
    builds: int = 0

    @classmethod
    def create(
        cls,
        cwd: Path | str | None = None,
        output_path: str | None = None,
        environment: str | None = None,
        debug: bool = False,
        watch: bool = False,
        config: BeesConfig | None = None,
    ) -> "BuildSession":
        paths = ProjectPaths.from_cwd(cwd)
        if config is None:
            config = load_config(environment, paths.app_directory)
        return cls(
            config=config,
            paths=paths,
            output_path=config.resolve_output_path(output_path),
            debug=debug,
            watch=watch,
        )

    @property
    def output_dir(self) -> Path:
        return self.paths.resolve_app(self.output_path)

    def transition(self, state: BuildState) -> None:
        logger.debug("Build state %s -> %s", self.state.value, state.value)
        self.state = state
        self.history.append(state)


def snapshot(session: BuildSession) -> dict[str, int]:
    """Record gzip sizes of the existing output so deltas can be shown later."""
    session.transition(BuildState.SNAPSHOTTING)
    session.previous_sizes = snapshot_sizes(session.output_dir)
    return session.previous_sizes


def clear_output(session: BuildSession) -> None:
    """Remove all content but keep the output directory itself."""
    session.transition(BuildState.CLEARING)
    output_dir = session.output_dir
    output_dir.mkdir(parents=True, exist_ok=True)
    for entry in output_dir.iterdir():
        if entry.is_dir() and not entry.is_symlink():
            shutil.rmtree(entry)
        else:
            entry.unlink()


def diff(session: BuildSession, result: CompileResult) -> list[AssetReport]:
    session.transition(BuildState.DIFFING)
    return collect_assets(
        result.assets,
        session.output_dir,
        session.output_path,
        session.previous_sizes,
    )


def report(session: BuildSession, result: CompileResult, assets: list[AssetReport], console: Console) -> None:
    session.transition(BuildState.REPORTING)
    if result.warnings:
        print_warnings(console, result.warnings)
    console.print(f"[green]Compiled successfully in {result.time_ms / 1000:.1f}s.[/green]")
    console.print()
    console.print("File sizes after gzip:")
    console.print()
    print_file_sizes(console, assets)
    console.print()


def fail(session: BuildSession, console: Console, summary: str, errors: list[str]) -> BuildFailed:
    session.transition(BuildState.FAILED)
    print_errors(console, summary, errors)
    return BuildFailed(summary, errors)


def handle_result(session: BuildSession, result: CompileResult, console: Console) -> list[AssetReport]:
    """DIFFING and REPORTING for one finished compile.

    Raises:
        BuildFailed: if the compile failed or an emitted asset can't be read.
    """
    session.builds += 1
    if not result.ok:
        raise fail(session, console, COMPILE_FAILED, result.problems)
    try:
        assets = diff(session, result)
    except OSError as e:
        raise fail(session, console, COMPILE_FAILED, [str(e)]) from e
    report(session, result, assets, console)
    return assets


def _announce(session: BuildSession, console: Console) -> None:
    if session.debug:
        console.print("Creating a development build without compression...")


async def _compile_once(session: BuildSession, bundler: Bundler, console: Console) -> CompileResult:
    if session.debug:
        return await bundler.compile()
    with console.status("Creating an optimized production build..."):
        return await bundler.compile()


async def run_build(
    session: BuildSession,
    bundler: Bundler,
    console: Console | None = None,
) -> list[AssetReport]:
    """Run one build (or a watch loop) for ``session``.

    Returns the assets of the last reported build. In watch mode this only
    returns when the bundler's result stream ends.

    Raises:
        BuildFailed: on filesystem errors or compile errors.
    """
    console = console or Console()

    try:
        snapshot(session)
        clear_output(session)
    except OSError as e:
        raise fail(session, console, COMPILE_FAILED, [str(e)]) from e

    session.transition(BuildState.BUILDING)
    _announce(session, console)

    if not session.watch:
        result = await _compile_once(session, bundler, console)
        last = handle_result(session, result, console)
        session.transition(BuildState.DONE)
        return last

    # Spinner covers the initial compile only; rebuilds report as they land
    status = None if session.debug else console.status("Creating an optimized production build...")
    if status is not None:
        status.start()
    assets: list[AssetReport] = []
    try:
        async for result in bundler.watch():
            if status is not None:
                status.stop()
                status = None
            assets = handle_result(session, result, console)
            session.transition(BuildState.WATCHING)
    finally:
        if status is not None:
            status.stop()
    session.transition(BuildState.DONE)
    return assets


__all__ = [
    "BuildFailed",
    "BuildSession",
    "BuildState",
    "COMPILE_FAILED",
    "clear_output",
    "handle_result",
    "run_build",
    "snapshot",
]
