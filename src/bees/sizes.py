"""Gzip size snapshots of build output and per-asset size deltas.

Before a build the output directory is scanned into an asset size map
(normalized asset key -> gzip size). After the build each emitted asset is
looked up in that map by the same key, so a file whose content hash changed
is still compared with its previous version.
"""
from __future__ import annotations

import gzip
import logging
import re
from enum import Enum
from pathlib import Path, PurePosixPath

logger = logging.getLogger(__name__)

FIFTY_KILOBYTES = 1024 * 50

# Files reported on: scripts and stylesheets only (excludes .js.map etc.)
ASSET_PATTERN = re.compile(r"\.(js|css)$")

# main.82be8.js -> main.js, vendor.min.4f1a.css -> vendor.min.css
# Hash segment: lowercase hex, 4+ chars, at least one digit
_HASHED_NAME = re.compile(r"^(.+?)(?:\.(?=[0-9a-f]*[0-9])[0-9a-f]{4,})+(\.(?:js|css))$")

_UNITS = ("B", "KB", "MB", "GB", "TB")


class SizeChange(str, Enum):
    """How an asset's gzip size moved since the previous build."""
    GREW_SIGNIFICANTLY = "grew_significantly"
    GREW_SLIGHTLY = "grew_slightly"
    SHRANK = "shrank"

    @property
    def style(self) -> str:
        return _CHANGE_STYLES[self]


_CHANGE_STYLES = {
    SizeChange.GREW_SIGNIFICANTLY: "red",
    SizeChange.GREW_SLIGHTLY: "yellow",
    SizeChange.SHRANK: "green",
}


def is_asset(name: str | Path) -> bool:
    return bool(ASSET_PATTERN.search(str(name)))


def gzip_size(contents: bytes) -> int:
    """Byte length of ``contents`` after gzip at the highest compression level."""
    return len(gzip.compress(contents, compresslevel=9))


def normalize_asset_key(path: str | Path, output_root: str | Path | None = None) -> str:
    """Turn an output file path into a hash-free key.

    Input:  /home/dan/app/dist/static/js/main.82be8.js (output_root=/home/dan/app/dist)
    Output: static/js/main.js

    Relative asset names (as reported by the bundler) are accepted as-is.
    Paths outside ``output_root`` keep their full path.
    """
    p = Path(path)
    if output_root is not None and p.is_absolute():
        try:
            p = p.relative_to(Path(output_root))
        except ValueError:
            pass
    key = p.as_posix().lstrip("/")

    posix = PurePosixPath(key)
    match = _HASHED_NAME.match(posix.name)
    if not match:
        return key
    name = match.group(1) + match.group(2)
    parent = posix.parent.as_posix()
    return name if parent in ("", ".") else f"{parent}/{name}"


def snapshot_sizes(output_dir: Path) -> dict[str, int]:
    """Build the asset size map for everything currently in ``output_dir``.

    A missing directory (first build) yields an empty map. Unreadable files
    raise ``OSError``; no partial snapshot is returned.
    """
    output_dir = Path(output_dir)
    if not output_dir.exists():
        logger.debug("No previous build at %s", output_dir)
        return {}

    sizes: dict[str, int] = {}
    for file_path in sorted(output_dir.rglob("*")):
        if not file_path.is_file() or not is_asset(file_path.name):
            continue
        key = normalize_asset_key(file_path, output_dir)
        sizes[key] = gzip_size(file_path.read_bytes())

    logger.debug("Snapshot of %s: %d assets", output_dir, len(sizes))
    return sizes


def format_size(num_bytes: int | float) -> str:
    """Human-readable binary size: 600 B, 1.6 KB, 50 KB, 1.2 MB. Keeps the sign."""
    sign = "-" if num_bytes < 0 else ""
    value = float(abs(num_bytes))
    unit = _UNITS[0]
    for unit in _UNITS:
        if value < 1024 or unit == _UNITS[-1]:
            break
        value /= 1024
    if unit == "B":
        return f"{sign}{int(value)} B"
    text = f"{value:.1f}".rstrip("0").rstrip(".")
    return f"{sign}{text} {unit}"


def classify_difference(current_size: int, previous_size: int | None) -> tuple[str, SizeChange | None]:
    """Label the change from ``previous_size`` to ``current_size``.

    Input:  1024, 2048
    Output: ("-1 KB", SizeChange.SHRANK)

    Returns ("", None) when there is no previous size or no change.
    """
    if previous_size is None:
        return "", None
    difference = current_size - previous_size
    if difference >= FIFTY_KILOBYTES:
        return f"+{format_size(difference)}", SizeChange.GREW_SIGNIFICANTLY
    if difference > 0:
        return f"+{format_size(difference)}", SizeChange.GREW_SLIGHTLY
    if difference < 0:
        return format_size(difference), SizeChange.SHRANK
    return "", None


__all__ = [
    "FIFTY_KILOBYTES",
    "SizeChange",
    "is_asset",
    "gzip_size",
    "normalize_asset_key",
    "snapshot_sizes",
    "format_size",
    "classify_difference",
]
