"""Bees - production builds for frontend projects with gzip size reporting.

Public API:
    from bees import BuildSession, run_build
    from bees.bundler import WebpackBundler

    session = BuildSession.create(cwd=Path("."), output_path="dist")
    bundler = WebpackBundler(session.config, session.paths, session.output_dir)
    asyncio.run(run_build(session, bundler))
"""
from __future__ import annotations

__version__ = "0.3.0"

from bees.config import BeesConfig, ConfigError, load_config
from bees.session import BuildFailed, BuildSession, BuildState, run_build

__all__ = [
    "__version__",
    "BeesConfig",
    "ConfigError",
    "load_config",
    "BuildFailed",
    "BuildSession",
    "BuildState",
    "run_build",
]
