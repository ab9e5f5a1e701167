"""Unit tests for CLI command behavior."""

from __future__ import annotations

import tomllib
from pathlib import Path

import pytest
from typer.testing import CliRunner

from ritobin_tools.application import use_cases
from ritobin_tools.application.results import BatchResult
from ritobin_tools.cli import cli as cli_module
from ritobin_tools.infrastructure import downloads
from ritobin_tools.schemas import AppConfig

runner = CliRunner()


class _Recorder:
    def __init__(self, result: object = None) -> None:
        self.result = result
        self.calls: list[tuple[tuple[object, ...], dict[str, object]]] = []

    def __call__(self, *args: object, **kwargs: object) -> object:
        self.calls.append((args, kwargs))
        return self.result


def _invoke(config_file: Path, *args: str):
    return runner.invoke(cli_module.app, ["--config", str(config_file), *args])


def test_help_shows_commands() -> None:
    """Ensure top-level help lists every subcommand."""
    result = runner.invoke(cli_module.app, ["--help"])
    assert result.exit_code == 0
    for command in ("convert", "diff", "download-hashes", "config"):
        assert command in result.output


def test_convert_forwards_arguments(
    tmp_path: Path, config_file: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Ensure convert passes paths, flags and the loaded config through."""
    recorder = _Recorder(BatchResult())
    monkeypatch.setattr(use_cases, "convert", recorder)

    result = _invoke(
        config_file, "convert", str(tmp_path / "in.bin"), "-o", str(tmp_path / "out.py"), "-r"
    )

    assert result.exit_code == 0, result.output
    args, kwargs = recorder.calls[0]
    assert args == (tmp_path / "in.bin", tmp_path / "out.py", True)
    assert kwargs["config"] == AppConfig()
    assert config_file.exists()


def test_hashtable_dir_flag_overrides_config(
    tmp_path: Path, config_file: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Ensure --hashtable-dir wins for this run without touching the file."""
    config_file.write_text('hashtable_dir = "/configured"\n', encoding="utf-8")
    recorder = _Recorder(BatchResult())
    monkeypatch.setattr(use_cases, "convert", recorder)
    override = tmp_path / "hashes"

    result = _invoke(
        config_file, "--hashtable-dir", str(override), "convert", str(tmp_path / "a.bin")
    )

    assert result.exit_code == 0, result.output
    assert recorder.calls[0][1]["config"].hashtable_dir == str(override)
    assert tomllib.loads(config_file.read_text(encoding="utf-8")) == {
        "hashtable_dir": "/configured"
    }


def test_convert_unsupported_extension_fails(tmp_path: Path, config_file: Path) -> None:
    """Ensure a bad extension prints a one-line error and exits 1."""
    source = tmp_path / "notes.txt"
    source.write_text("hello", encoding="utf-8")

    result = _invoke(config_file, "convert", str(source))

    assert result.exit_code == 1
    assert "✗ UnsupportedExtensionError: Unsupported file extension: .txt" in result.output
    assert "Traceback" not in result.output


def test_convert_batch_failure_exits_nonzero(tmp_path: Path, config_file: Path) -> None:
    """Ensure a directory run with a broken file reports the failure count."""
    (tmp_path / "data").mkdir()
    (tmp_path / "data" / "broken.bin").write_bytes(b"junk")

    result = _invoke(config_file, "convert", str(tmp_path / "data"))

    assert result.exit_code == 1
    assert "BatchConversionError: 1 file(s) failed to convert" in result.output


def test_debug_flag_prints_traceback(tmp_path: Path, config_file: Path) -> None:
    """Ensure --debug adds the traceback to the error output."""
    result = runner.invoke(
        cli_module.app,
        ["--debug", "--config", str(config_file), "convert", str(tmp_path / "x.txt")],
    )
    assert result.exit_code == 1
    assert "Traceback:" in result.output


def test_invalid_verbosity_is_usage_error(config_file: Path) -> None:
    """Ensure an unknown log level is rejected by option parsing."""
    result = _invoke(config_file, "-L", "loud", "config", "show")
    assert result.exit_code == 2


def test_diff_without_color(tmp_path: Path, config_file: Path) -> None:
    """Ensure diff prints headers, hunks and the summary."""
    (tmp_path / "a.py").write_text("a\nb\nc\n", encoding="utf-8")
    (tmp_path / "b.py").write_text("a\nx\nc\n", encoding="utf-8")

    result = _invoke(
        config_file, "diff", str(tmp_path / "a.py"), str(tmp_path / "b.py"), "--no-color"
    )

    assert result.exit_code == 0, result.output
    assert f"--- {tmp_path / 'a.py'}" in result.output
    assert "@@ -1,3 +1,3 @@" in result.output
    assert "-b\n+x\n" in result.output
    assert "Summary: 1 insertion(s), 1 deletion(s)" in result.output
    assert "\x1b[" not in result.output


def test_diff_identical_files(tmp_path: Path, config_file: Path) -> None:
    """Ensure identical inputs print a single message."""
    (tmp_path / "a.py").write_text("same\n", encoding="utf-8")
    (tmp_path / "b.ritobin").write_text("same\n", encoding="utf-8")

    result = _invoke(config_file, "diff", str(tmp_path / "a.py"), str(tmp_path / "b.ritobin"))

    assert result.exit_code == 0
    assert "Files are identical" in result.output


def test_diff_rejects_negative_context(tmp_path: Path, config_file: Path) -> None:
    """Ensure the context radius cannot be negative."""
    result = _invoke(config_file, "diff", "a.py", "b.py", "-C", "-1")
    assert result.exit_code == 2


def test_download_hashes_requires_directory(config_file: Path) -> None:
    """Ensure downloads fail cleanly without a hashtable directory."""
    result = _invoke(config_file, "download-hashes")
    assert result.exit_code == 1
    assert "No hashtable directory configured" in result.output


def test_download_hashes_uses_configured_directory(
    tmp_path: Path, config_file: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Ensure the configured directory is handed to the downloader."""
    recorder = _Recorder([])
    monkeypatch.setattr(downloads, "download_hashes", recorder)

    result = _invoke(config_file, "--hashtable-dir", str(tmp_path), "download-hashes")

    assert result.exit_code == 0, result.output
    assert recorder.calls[0][0] == (str(tmp_path),)


def test_config_set_then_show(tmp_path: Path, config_file: Path) -> None:
    """Ensure set persists a normalized path that show then reports."""
    hashes = tmp_path / "hashes"
    hashes.mkdir()

    set_result = _invoke(config_file, "config", "set", "hashtable_dir", str(hashes))
    show_result = _invoke(config_file, "config", "show")

    assert set_result.exit_code == 0, set_result.output
    assert f"✓ Set 'hashtable_dir' = '{hashes}'" in set_result.output
    assert show_result.exit_code == 0, show_result.output
    assert f"config_file: {config_file}" in show_result.output
    assert f"hashtable_dir: {hashes.as_posix()} ✓" in show_result.output


def test_config_show_unset_directory(config_file: Path) -> None:
    """Ensure an unset hashtable directory is reported as such."""
    result = _invoke(config_file, "config", "show")
    assert result.exit_code == 0
    assert "hashtable_dir: (not set)" in result.output


def test_config_set_rejects_unknown_key(config_file: Path) -> None:
    """Ensure schema violations exit 1 and leave no partial write."""
    result = _invoke(config_file, "config", "set", "colour", "blue")
    assert result.exit_code == 1
    assert "✗ ConfigValidationError: Invalid configuration for 'colour'" in result.output
    assert not config_file.exists()


def test_config_reset(config_file: Path) -> None:
    """Ensure reset rewrites the file and reports its location."""
    config_file.write_text('hashtable_dir = "/old"\n', encoding="utf-8")

    result = _invoke(config_file, "config", "reset")

    assert result.exit_code == 0
    assert "✓ Configuration reset to defaults" in result.output
    assert f"  Config file: {config_file}" in result.output
    assert config_file.read_text(encoding="utf-8") == ""
