"""Line-level unified diff of canonical ritobin text."""

from __future__ import annotations

import difflib
from collections.abc import Iterator
from pathlib import Path

from rich.console import Console
from rich.text import Text

from ritobin_tools.application.results import DiffLine, DiffResult, DiffTag, Hunk
from ritobin_tools.types import DEFAULT_CONTEXT_RADIUS

IDENTICAL_MESSAGE = "Files are identical"
NO_NEWLINE_MARKER = "\\ No newline at end of file"

_TAG_STYLES = {DiffTag.EQUAL: "", DiffTag.INSERT: "green", DiffTag.DELETE: "red"}


def split_lines(text: str) -> list[str]:
    """Split on ``\\n`` only, keeping each terminator."""
    if not text:
        return []
    lines = [line + "\n" for line in text.split("\n")]
    if text.endswith("\n"):
        lines.pop()
    else:
        lines[-1] = lines[-1][:-1]
    return lines


def _format_range(start: int, stop: int) -> str:
    beginning = start + 1
    length = stop - start
    if length == 1:
        return str(beginning)
    if length == 0:
        beginning -= 1
    return f"{beginning},{length}"


def _diff_line(tag: DiffTag, line: str) -> DiffLine:
    if line.endswith("\n"):
        return DiffLine(tag, line[:-1])
    return DiffLine(tag, line, missing_newline=True)


def compute_diff(
    text_a: str, text_b: str, context_radius: int = DEFAULT_CONTEXT_RADIUS
) -> DiffResult:
    """Compare two texts line by line.

    Parameters
    ----------
    text_a, text_b : str
        Old and new text.
    context_radius : int
        Unchanged lines kept around each change.

    Returns
    -------
    DiffResult
        Insertion/deletion totals over the whole text plus unified hunks.
        Identical inputs produce no hunks.
    """
    lines_a = split_lines(text_a)
    lines_b = split_lines(text_b)
    matcher = difflib.SequenceMatcher(None, lines_a, lines_b, autojunk=False)
    if matcher.ratio() == 1.0:
        return DiffResult()

    insertions = deletions = 0
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag in ("replace", "delete"):
            deletions += i2 - i1
        if tag in ("replace", "insert"):
            insertions += j2 - j1

    hunks: list[Hunk] = []
    for group in matcher.get_grouped_opcodes(max(context_radius, 0)):
        first, last = group[0], group[-1]
        header = (
            f"@@ -{_format_range(first[1], last[2])} "
            f"+{_format_range(first[3], last[4])} @@"
        )
        lines: list[DiffLine] = []
        for tag, i1, i2, j1, j2 in group:
            if tag == "equal":
                lines.extend(_diff_line(DiffTag.EQUAL, line) for line in lines_a[i1:i2])
                continue
            if tag in ("replace", "delete"):
                lines.extend(_diff_line(DiffTag.DELETE, line) for line in lines_a[i1:i2])
            if tag in ("replace", "insert"):
                lines.extend(_diff_line(DiffTag.INSERT, line) for line in lines_b[j1:j2])
        hunks.append(Hunk(header=header, lines=tuple(lines)))

    return DiffResult(insertions=insertions, deletions=deletions, hunks=tuple(hunks))


def iter_diff_text(result: DiffResult, path_a: Path | str, path_b: Path | str) -> Iterator[Text]:
    """Yield the styled output lines for ``result``."""
    if result.identical:
        yield Text(IDENTICAL_MESSAGE, style="green")
        return

    yield Text.assemble(("---", "red"), " ", (str(path_a), "red"))
    yield Text.assemble(("+++", "green"), " ", (str(path_b), "green"))
    for hunk in result.hunks:
        yield Text(hunk.header, style="cyan")
        for line in hunk.lines:
            yield Text(line.tag.value + line.text, style=_TAG_STYLES[line.tag])
            if line.missing_newline:
                yield Text(NO_NEWLINE_MARKER, style="yellow")
    yield Text("")
    yield Text.assemble(
        ("Summary:", "bold"),
        " ",
        (f"{result.insertions} insertion(s)", "green"),
        ", ",
        (f"{result.deletions} deletion(s)", "red"),
    )


def render_diff(
    result: DiffResult,
    path_a: Path | str,
    path_b: Path | str,
    console: Console,
    color: bool = True,
) -> None:
    """Print ``result`` to ``console``; ``color=False`` drops all styles."""
    for line in iter_diff_text(result, path_a, path_b):
        console.print(
            line if color else Text(line.plain),
            soft_wrap=True,
            highlight=False,
        )


def format_diff(result: DiffResult, path_a: Path | str, path_b: Path | str) -> str:
    """Plain-text rendering of ``result``."""
    return "".join(line.plain + "\n" for line in iter_diff_text(result, path_a, path_b))
