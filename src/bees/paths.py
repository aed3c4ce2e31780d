"""Project path resolution for a frontend app directory."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class ProjectPaths:
    """Well-known locations inside the project being built."""

    app_directory: Path

    @classmethod
    def from_cwd(cls, cwd: Path | str | None = None) -> "ProjectPaths":
        base = Path(cwd) if cwd is not None else Path.cwd()
        return cls(app_directory=base.resolve())

    def resolve_app(self, relative: str | Path) -> Path:
        """Resolve a path relative to the app directory (absolute paths pass through)."""
        return (self.app_directory / relative).resolve()

    @property
    def webpack_config(self) -> Path:
        return self.app_directory / "webpack.config.js"


__all__ = ["ProjectPaths"]
