#!/usr/bin/env python3
"""Architecture boundary checks."""

from __future__ import annotations

from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
PACKAGE = ROOT / "src/ritobin_tools"


def _read(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def _assert_no_imports(path: Path, banned: list[str]) -> None:
    text = _read(path)
    for token in banned:
        if token in text:
            raise SystemExit(f"Architecture violation in {path}: found '{token}'")


def main(package: Path = PACKAGE) -> None:
    """Run repository architecture boundary checks."""
    _assert_no_imports(
        package / "cli/cli.py",
        [
            "ritobin_tools.bintree",
            "import httpx",
        ],
    )

    for path in (package / "application").glob("*.py"):
        _assert_no_imports(
            path,
            [
                "import typer",
                "from typer",
                "import httpx",
                "from rich",
                "ritobin_tools.bintree.",
            ],
        )

    for path in (package / "bintree").glob("*.py"):
        _assert_no_imports(
            path,
            [
                "ritobin_tools.application",
                "ritobin_tools.adapters",
                "ritobin_tools.errors",
                "from pydantic",
                "from rich",
            ],
        )

    print("Architecture checks passed.")


if __name__ == "__main__":
    main()
