"""Unit tests for hashtable downloads using a mocked HTTP transport."""

from __future__ import annotations

import io
from pathlib import Path

import httpx
import pytest
from rich.console import Console

from ritobin_tools.errors import ConfigError, HashDownloadError
from ritobin_tools.infrastructure import downloads
from ritobin_tools.infrastructure.downloads import HASH_FILES, download_file, download_hashes


class _Server:
    def __init__(self, failing: str | None = None) -> None:
        self.failing = failing
        self.requested: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requested.append(url)
        if self.failing is not None and url.endswith(self.failing):
            return httpx.Response(404, text="not found")
        name = url.rsplit("/", 1)[-1]
        return httpx.Response(200, content=f"00000001 {name}\n".encode())


def _client(server: _Server) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(server))


def test_hash_files_point_at_communitydragon() -> None:
    """Ensure the four hashtables are fetched from the binviewer mirror."""
    assert [name for name, _ in HASH_FILES] == [
        "hashes.binentries.txt",
        "hashes.binfields.txt",
        "hashes.binhashes.txt",
        "hashes.bintypes.txt",
    ]
    assert all(
        url == f"https://raw.communitydragon.org/binviewer/hashes/{name}"
        for name, url in HASH_FILES
    )


def test_download_all_files(tmp_path: Path) -> None:
    """Ensure every file is written into a freshly created directory."""
    server = _Server()
    target = tmp_path / "nested" / "hashes"

    with _client(server) as client:
        written = download_hashes(str(target), client=client)

    assert written == [target / name for name, _ in HASH_FILES]
    assert len(server.requested) == 4
    assert (target / "hashes.bintypes.txt").read_text() == "00000001 hashes.bintypes.txt\n"


def test_first_failure_aborts_remaining_downloads(tmp_path: Path) -> None:
    """Ensure a 404 stops the run before later files are requested."""
    server = _Server(failing="hashes.binfields.txt")

    with _client(server) as client, pytest.raises(HashDownloadError) as excinfo:
        download_hashes(str(tmp_path), client=client)

    assert excinfo.value.filename == "hashes.binfields.txt"
    assert "404" in str(excinfo.value)
    assert len(server.requested) == 2
    assert (tmp_path / "hashes.binentries.txt").exists()
    assert not (tmp_path / "hashes.binfields.txt").exists()
    assert not (tmp_path / "hashes.binhashes.txt").exists()


def test_transport_error_is_a_download_error(tmp_path: Path) -> None:
    """Ensure connection failures name the file and URL."""

    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with httpx.Client(transport=httpx.MockTransport(refuse)) as client:
        with pytest.raises(HashDownloadError, match="connection refused") as excinfo:
            download_file(client, "https://example.invalid/x.txt", "x.txt", tmp_path)

    assert excinfo.value.url == "https://example.invalid/x.txt"


def test_unconfigured_directory_is_a_config_error() -> None:
    """Ensure downloads refuse to run without a target directory."""
    with pytest.raises(ConfigError, match="No hashtable directory configured"):
        download_hashes(None)


def test_progress_is_drawn_on_console(tmp_path: Path) -> None:
    """Ensure a console enables the progress display."""
    buffer = io.StringIO()
    with _client(_Server()) as client:
        download_hashes(str(tmp_path), client=client, console=Console(file=buffer, width=120))
    assert "hashes.binentries.txt" in buffer.getvalue()


def test_owned_client_is_closed(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure a client created internally is closed after the run."""
    created: list[httpx.Client] = []
    real_client = httpx.Client

    def factory(**kwargs: object) -> httpx.Client:
        assert kwargs["follow_redirects"] is True
        client = real_client(transport=httpx.MockTransport(_Server()))
        created.append(client)
        return client

    monkeypatch.setattr(downloads.httpx, "Client", factory)
    download_hashes(str(tmp_path))

    assert len(created) == 1
    assert created[0].is_closed
