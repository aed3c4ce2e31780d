from __future__ import annotations

import io
import os
from pathlib import Path

from rich.console import Console
from rich.text import Text

from bees.report import (
    AssetReport,
    collect_assets,
    print_errors,
    print_file_sizes,
    render_file_sizes,
    size_label,
    visible_length,
)
from conftest import write_file

RED = "\x1b[31m"
YELLOW = "\x1b[33m"
BOLD_GREEN = "\x1b[1;32m"
RESET = "\x1b[0m"


def test_size_label_without_previous() -> None:
    assert size_label(1600, None).plain == "1.6 KB"


def test_size_label_with_growth() -> None:
    label = size_label(1600, 1000)
    assert label.plain == "1.6 KB (+600 B)"
    styles = {str(span.style) for span in label.spans}
    assert styles == {"yellow"}


def test_size_label_with_shrink_is_green() -> None:
    label = size_label(1000, 1600)
    assert label.plain == "1000 B (-600 B)"
    assert {str(span.style) for span in label.spans} == {"green"}


def test_visible_length_ignores_ansi_sequences() -> None:
    assert visible_length(f"1 KB ({RED}+60 KB{RESET})") == len("1 KB (+60 KB)")
    assert visible_length(f"{BOLD_GREEN}-1 KB{RESET}") == len("-1 KB")
    assert visible_length(Text("12 B")) == 4


def test_padding_uses_visible_width_only() -> None:
    assets = [
        AssetReport("dist/static/js", "main.js", 3000, f"2.9 KB ({RED}+60 KB{RESET})"),
        AssetReport("dist/static/js", "vendor.js", 2000, f"2 KB ({BOLD_GREEN}-1 KB{RESET})"),
        AssetReport("dist/static/css", "main.css", 100, "100 B"),
    ]

    lines = [line.plain for line in render_file_sizes(assets)]

    width = len("2.9 KB (+60 KB)")
    sep = os.sep
    assert lines[0] == f"2.9 KB (+60 KB)  dist/static/js{sep}main.js"
    assert lines[1] == f"{'2 KB (-1 KB)'.ljust(width)}  dist/static/js{sep}vendor.js"
    assert lines[2] == f"{'100 B'.ljust(width)}  dist/static/css{sep}main.css"
    columns = {line.index("dist") for line in lines}
    assert columns == {width + 2}


def test_render_empty_asset_list() -> None:
    assert render_file_sizes([]) == []


def test_collect_assets_sorts_and_pairs_previous(tmp_path: Path, plain_gzip) -> None:
    dist = tmp_path / "dist"
    write_file(dist / "static" / "js" / "main.bbb222.js", b"x" * 1600)
    write_file(dist / "static" / "css" / "main.ccc333.css", b"y" * 200)
    write_file(dist / "static" / "js" / "main.bbb222.js.map", b"{}")
    previous = {"static/js/main.js": 1000}

    assets = collect_assets(
        ["static/css/main.ccc333.css", "static/js/main.bbb222.js", "static/js/main.bbb222.js.map"],
        dist,
        "dist",
        previous,
    )

    assert [a.name for a in assets] == ["main.bbb222.js", "main.ccc333.css"]
    assert assets[0].folder == os.path.join("dist", "static/js")
    assert assets[0].size == 1600
    assert assets[0].size_label.plain == "1.6 KB (+600 B)"
    assert assets[1].size_label.plain == "200 B"


def test_collect_assets_top_level_folder(tmp_path: Path, plain_gzip) -> None:
    dist = tmp_path / "build"
    write_file(dist / "app.js", b"a" * 10)
    assets = collect_assets(["app.js"], dist, "build", {})
    assert assets[0].folder == "build"


def test_print_file_sizes_writes_one_line_per_asset(console: Console) -> None:
    assets = [
        AssetReport("dist", "a.js", 20, Text("20 B")),
        AssetReport("dist", "b.css", 10, Text("10 B")),
    ]
    print_file_sizes(console, assets)
    out = console.file.getvalue().splitlines()
    assert out == [f"20 B  dist{os.sep}a.js", f"10 B  dist{os.sep}b.css"]


def test_print_errors_layout() -> None:
    buf = io.StringIO()
    console = Console(file=buf, width=120, color_system=None)
    print_errors(console, "Failed to compile.", ["Module not found: ./App", "Syntax error"])
    assert buf.getvalue() == "Failed to compile.\n\nModule not found: ./App\n\nSyntax error\n\n"
