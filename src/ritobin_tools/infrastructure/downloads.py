"""Fetch CommunityDragon hashtables into the configured directory."""

from __future__ import annotations

import logging
from pathlib import Path

import httpx
from rich.console import Console
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    TextColumn,
    TransferSpeedColumn,
)

from ritobin_tools.adapters.resolvers import HASHTABLE_FILES
from ritobin_tools.errors import ConfigError, FileAccessError, HashDownloadError

logger = logging.getLogger(__name__)

HASHTABLE_BASE_URL = "https://raw.communitydragon.org/binviewer/hashes/"
HASH_FILES: tuple[tuple[str, str], ...] = tuple(
    (filename, HASHTABLE_BASE_URL + filename) for filename in HASHTABLE_FILES.values()
)
DOWNLOAD_CHUNK_SIZE = 64 * 1024


def _content_length(response: httpx.Response) -> int | None:
    raw = response.headers.get("content-length")
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


def download_file(
    client: httpx.Client,
    url: str,
    filename: str,
    target_dir: Path,
    progress: Progress | None = None,
) -> int:
    """Stream ``url`` into ``target_dir / filename`` and return the byte count.

    Raises
    ------
    HashDownloadError
        On HTTP status or transport failure.
    FileAccessError
        If the target file cannot be created or written.
    """
    target = target_dir / filename
    downloaded = 0
    try:
        with client.stream("GET", url) as response:
            response.raise_for_status()
            task = None
            if progress is not None:
                task = progress.add_task(filename, total=_content_length(response))
            try:
                with target.open("wb") as handle:
                    for chunk in response.iter_bytes(chunk_size=DOWNLOAD_CHUNK_SIZE):
                        handle.write(chunk)
                        downloaded += len(chunk)
                        if progress is not None and task is not None:
                            progress.update(task, completed=downloaded)
            except OSError as exc:
                raise FileAccessError("write", target, exc) from exc
    except httpx.HTTPError as exc:
        raise HashDownloadError(filename, url, str(exc)) from exc

    logger.info("Saved %s (%d bytes)", target, downloaded)
    return downloaded


def download_hashes(
    hashtable_dir: str | None,
    *,
    client: httpx.Client | None = None,
    console: Console | None = None,
) -> list[Path]:
    """Download every hashtable file, stopping at the first failure.

    Parameters
    ----------
    hashtable_dir : str | None
        Target directory from the active config; created when missing.
    client : httpx.Client | None
        HTTP client to use. A default client following redirects is created
        and closed when omitted.
    console : Console | None
        Console for the progress display; progress is hidden when ``None``.

    Returns
    -------
    list[Path]
        Paths written, in download order.
    """
    if hashtable_dir is None:
        raise ConfigError("No hashtable directory configured")
    target_dir = Path(hashtable_dir)
    try:
        target_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise FileAccessError("create directory", target_dir, exc) from exc

    logger.info("Downloading hashtables to %s", target_dir)
    owns_client = client is None
    client = client or httpx.Client(follow_redirects=True, timeout=httpx.Timeout(30.0))
    progress = (
        Progress(
            TextColumn("{task.description}"),
            BarColumn(bar_width=40),
            DownloadColumn(),
            TransferSpeedColumn(),
            console=console,
        )
        if console is not None
        else None
    )
    written: list[Path] = []
    try:
        if progress is not None:
            progress.start()
        for filename, url in HASH_FILES:
            download_file(client, url, filename, target_dir, progress)
            written.append(target_dir / filename)
    finally:
        if progress is not None:
            progress.stop()
        if owns_client:
            client.close()

    logger.info("Successfully downloaded all hashtables to %s", target_dir)
    return written
