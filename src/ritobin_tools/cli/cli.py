#!/usr/bin/env python3
"""
ritobin_tools.cli.cli

Typer-based CLI for converting and diffing League property-bin files.

Examples
--------
Convert a binary bin file to ritobin text (written beside it as ``.py``):

    ritobin-tools convert skin0.bin

Convert every text file under a directory back to binary:

    ritobin-tools convert data/ --recursive

Compare two files in any supported encoding:

    ritobin-tools diff old.bin new.py --context 5
"""

from __future__ import annotations

import traceback
from pathlib import Path
from typing import TYPE_CHECKING

import typer
from rich.console import Console
from rich.text import Text

from ritobin_tools.errors import RitobinToolsError
from ritobin_tools.logs import Verbosity, configure_logging

if TYPE_CHECKING:
    from ritobin_tools.infrastructure.config_store import ConfigStore
    from ritobin_tools.schemas import AppConfig

app = typer.Typer(
    name="ritobin-tools",
    help="Convert and diff League property-bin files (.bin <-> .py/.ritobin).",
    no_args_is_help=True,
)
config_app = typer.Typer(
    name="config",
    help="Show or edit config.toml.",
    no_args_is_help=True,
)
app.add_typer(config_app, name="config")


# -----------------------------
# Utilities
# -----------------------------
def _print_error(exc: Exception, debug: bool) -> int:
    """Print a user-friendly error.

    Parameters
    ----------
    exc : Exception
        Exception raised by the command.
    debug : bool
        Whether to include traceback details.

    Returns
    -------
    int
        Process exit code.
    """
    typer.echo(f"✗ {type(exc).__name__}: {exc}", err=True)
    if debug:
        typer.echo("\nTraceback:", err=True)
        typer.echo("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)), err=True)
    code = getattr(exc, "exit_code", None)
    if isinstance(code, int) and code > 0:
        return code
    return 1


def _state(ctx: typer.Context) -> dict[str, object]:
    return ctx.obj or {}


def _config_store(ctx: typer.Context) -> ConfigStore:
    from ritobin_tools.infrastructure.config_store import ConfigLocator, ConfigStore

    config_path = _state(ctx).get("config_path")
    if isinstance(config_path, Path):
        return ConfigStore(ConfigLocator(config_path))
    return ConfigStore(ConfigLocator.default())


def _run_config(ctx: typer.Context) -> AppConfig:
    """Effective config for convert/diff/download, honoring ``--hashtable-dir``."""
    from ritobin_tools.api import load_config

    state = _state(ctx)
    config_path = state.get("config_path")
    hashtable_dir = state.get("hashtable_dir")
    return load_config(
        config_path if isinstance(config_path, Path) else None,
        hashtable_dir if isinstance(hashtable_dir, Path) else None,
    )


def _fail(exc: Exception, ctx: typer.Context) -> typer.Exit:
    return typer.Exit(code=_print_error(exc, bool(_state(ctx).get("debug", False))))


# -----------------------------
# Global options
# -----------------------------
@app.callback()
def _main(
    ctx: typer.Context,
    debug: bool = typer.Option(False, "--debug", help="Show full tracebacks on error."),
    verbosity: Verbosity = typer.Option(
        Verbosity.INFO,
        "-L",
        "--verbosity",
        case_sensitive=False,
        help="Log level: error, warning, info, debug or trace.",
    ),
    config_path: Path | None = typer.Option(
        None, "--config", help="Config file to use instead of the one beside the executable."
    ),
    hashtable_dir: Path | None = typer.Option(
        None,
        "--hashtable-dir",
        metavar="DIR",
        help="Hashtable directory for this run; overrides the configured one.",
    ),
) -> None:
    """Initialize shared CLI state.

    Parameters
    ----------
    ctx : typer.Context
        Typer context object used to store shared state.
    debug : bool, default=False
        Whether to enable debug error output.
    verbosity : Verbosity
        Log level for the ``ritobin_tools`` loggers.
    config_path : Path | None
        Explicit config file path.
    hashtable_dir : Path | None
        One-off hashtable directory override.
    """
    configure_logging(verbosity)
    ctx.obj = {
        "debug": debug,
        "config_path": config_path,
        "hashtable_dir": hashtable_dir,
    }


# -----------------------------
# Commands
# -----------------------------
@app.command("convert")
def convert_cmd(
    ctx: typer.Context,
    input_path: Path = typer.Argument(
        ..., metavar="INPUT", help="File or directory; the extension picks the direction."
    ),
    output: Path | None = typer.Option(
        None, "-o", "--output", help="Output file (single-file input only)."
    ),
    recursive: bool = typer.Option(
        False, "-r", "--recursive", help="Descend into subdirectories of a directory input."
    ),
) -> None:
    """Convert .bin to .py text, or .py/.ritobin text to .bin."""
    try:
        from ritobin_tools.application.use_cases import convert

        convert(input_path, output, recursive, config=_run_config(ctx))
    except RitobinToolsError as exc:
        raise _fail(exc, ctx)
    except Exception as exc:
        # Unexpected crash: still show a clean message; debug prints traceback.
        raise _fail(exc, ctx)


@app.command("diff")
def diff_cmd(
    ctx: typer.Context,
    file1: Path = typer.Argument(..., help="Old file (.bin, .py or .ritobin)."),
    file2: Path = typer.Argument(..., help="New file (.bin, .py or .ritobin)."),
    context: int = typer.Option(
        3, "-C", "--context", min=0, help="Unchanged lines shown around each change."
    ),
    no_color: bool = typer.Option(False, "--no-color", help="Disable colored output."),
) -> None:
    """Show a unified diff of two files rendered as ritobin text."""
    try:
        from ritobin_tools.application.use_cases import diff_files
        from ritobin_tools.diffing import render_diff

        result = diff_files(file1, file2, config=_run_config(ctx), context_radius=context)
        console = Console(no_color=no_color, highlight=False)
        render_diff(result, file1, file2, console, color=not no_color)
    except RitobinToolsError as exc:
        raise _fail(exc, ctx)
    except Exception as exc:
        raise _fail(exc, ctx)


@app.command("download-hashes")
def download_hashes_cmd(ctx: typer.Context) -> None:
    """Download CommunityDragon hashtables into the hashtable directory."""
    try:
        from ritobin_tools.infrastructure.downloads import download_hashes

        config = _run_config(ctx)
        download_hashes(config.hashtable_dir, console=Console(stderr=True))
    except RitobinToolsError as exc:
        raise _fail(exc, ctx)
    except Exception as exc:
        raise _fail(exc, ctx)


# -----------------------------
# Config commands
# -----------------------------
def _path_line(name: str, value: str | None, exists: bool) -> Text:
    line = Text.assemble("  ", (f"{name}:", "bold"), " ")
    if value is None:
        line.append("(not set)", style="yellow")
        return line
    line.append(value, style="underline")
    line.append(" ")
    line.append("✓" if exists else "✗", style="green" if exists else "red")
    return line


@config_app.command("show")
def config_show_cmd(ctx: typer.Context) -> None:
    """Print the config file location and its values."""
    try:
        store = _config_store(ctx)
        config, path = store.load_or_create()
        console = Console(highlight=False)
        console.print()
        console.print(Text.assemble("  ", ("config_file:", "bold"), " ", str(path)), soft_wrap=True)
        dir_value = config.hashtable_dir
        console.print(
            _path_line("hashtable_dir", dir_value, dir_value is not None and Path(dir_value).exists()),
            soft_wrap=True,
        )
        console.print()
    except Exception as exc:
        raise _fail(exc, ctx)


@config_app.command("reset")
def config_reset_cmd(ctx: typer.Context) -> None:
    """Overwrite config.toml with defaults."""
    try:
        store = _config_store(ctx)
        store.reset()
        typer.echo("✓ Configuration reset to defaults")
        typer.echo("")
        typer.echo(f"  Config file: {store.path}")
    except Exception as exc:
        raise _fail(exc, ctx)


@config_app.command("set")
def config_set_cmd(
    ctx: typer.Context,
    key: str = typer.Argument(..., help="Config key, e.g. hashtable_dir."),
    value: str = typer.Argument(..., help="New value; true/false and numbers are typed."),
) -> None:
    """Set one config key after validating the whole document."""
    try:
        _config_store(ctx).set_value(key, value)
        typer.echo(f"✓ Set '{key}' = '{value}'")
    except Exception as exc:
        raise _fail(exc, ctx)


if __name__ == "__main__":
    app()
