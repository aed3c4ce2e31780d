"""Console output for builds: the gzip size table and error summaries."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from rich.console import Console
from rich.text import Text

from bees.sizes import classify_difference, format_size, gzip_size, is_asset, normalize_asset_key


@dataclass
class AssetReport:
    """One emitted asset as shown in the size table."""
    folder: str
    name: str
    size: int
    size_label: Text | str


def size_label(size: int, previous_size: int | None) -> Text:
    """``1.6 KB (+600 B)`` with the difference colored by how much it moved."""
    difference, change = classify_difference(size, previous_size)
    label = Text(format_size(size))
    if difference:
        label.append(" (")
        label.append(difference, style=change.style if change else None)
        label.append(")")
    return label


def collect_assets(
    asset_names: list[str],
    output_dir: Path,
    output_path: str,
    previous_sizes: dict[str, int],
) -> list[AssetReport]:
    """Measure emitted assets and pair them with their previous sizes.

    Returned largest first. Raises ``OSError`` if an emitted asset can't be read.
    """
    assets = []
    for asset_name in asset_names:
        if not is_asset(asset_name):
            continue
        size = gzip_size((Path(output_dir) / asset_name).read_bytes())
        previous = previous_sizes.get(normalize_asset_key(asset_name))
        parent = PurePosixPath(asset_name).parent.as_posix()
        folder = output_path if parent == "." else os.path.join(output_path, parent)
        assets.append(AssetReport(
            folder=folder,
            name=PurePosixPath(asset_name).name,
            size=size,
            size_label=size_label(size, previous),
        ))
    assets.sort(key=lambda a: a.size, reverse=True)
    return assets


def visible_length(label: str | Text) -> int:
    """Printed width of ``label``, ignoring ANSI color sequences."""
    if isinstance(label, Text):
        return label.cell_len
    return Text.from_ansi(label).cell_len


def render_file_sizes(assets: list[AssetReport]) -> list[Text]:
    """One line per asset, size labels padded to the widest visible label."""
    labels = [
        a.size_label if isinstance(a.size_label, Text) else Text.from_ansi(a.size_label)
        for a in assets
    ]
    longest = max((visible_length(label) for label in labels), default=0)

    lines = []
    for asset, label in zip(assets, labels):
        padded = label.copy()
        padded.pad_right(longest - visible_length(label))
        lines.append(Text.assemble(
            padded,
            "  ",
            (asset.folder + os.sep, "dim"),
            (asset.name, "cyan"),
        ))
    return lines


def print_file_sizes(console: Console, assets: list[AssetReport]) -> None:
    for line in render_file_sizes(assets):
        console.print(line, highlight=False, soft_wrap=True)


def print_errors(console: Console, summary: str, errors: list[str]) -> None:
    console.print(Text(summary, style="red"))
    console.print()
    for err in errors:
        console.print(Text(str(err)), highlight=False, soft_wrap=True)
        console.print()


def print_warnings(console: Console, warnings: list[str]) -> None:
    console.print(Text("Compiled with warnings.", style="yellow"))
    console.print()
    for warning in warnings:
        console.print(Text(str(warning), style="yellow"), highlight=False, soft_wrap=True)
        console.print()


__all__ = [
    "AssetReport",
    "size_label",
    "collect_assets",
    "visible_length",
    "render_file_sizes",
    "print_file_sizes",
    "print_errors",
    "print_warnings",
]
