"""Shared text formatting helpers for pmbench.

Provides the duration format used on chart labels and the aligned
text table used for the end-of-run summary.
"""

from __future__ import annotations


def format_elapsed(elapsed_ms: int) -> str:
    """Format a duration in milliseconds for display.

    Durations of a second or more are shown in seconds with two
    decimals, shorter ones as whole milliseconds.

    Examples: ``'999 ms'``, ``'1.00 s'``, ``'1.50 s'``.
    """
    if elapsed_ms >= 1000:
        return f"{elapsed_ms / 1000:.2f} s"
    return f"{elapsed_ms} ms"


def format_status_marker(status: str) -> str:
    """Return the suffix appended to labels of non-ok results."""
    if status == "ok":
        return ""
    return f" ({status})"


def format_table(
    headers: list[str],
    rows: list[list[str]],
    *,
    alignments: list[str] | None = None,
    indent: int = 2,
) -> str:
    """Format a list of rows as an aligned text table.

    Auto-calculates column widths from content.  Right-aligns columns
    marked ``'r'`` in *alignments*.

    Args:
        headers: Column header strings.
        rows: List of rows, each a list of cell strings.
        alignments: Per-column alignment: ``'l'``, ``'r'``, or ``'c'``.
        indent: Number of leading spaces per line.

    Returns:
        The formatted table as a string.
    """
    if not headers:
        return ""

    ncols = len(headers)
    if alignments is None:
        alignments = ["l"] * ncols
    alignments = list(alignments) + ["l"] * (ncols - len(alignments))

    proc_rows: list[list[str]] = []
    for row in rows:
        padded = list(row) + [""] * (ncols - len(row))
        proc_rows.append(padded[:ncols])

    widths = [len(h) for h in headers]
    for row in proc_rows:
        for ci, cell in enumerate(row):
            widths[ci] = max(widths[ci], len(cell))

    prefix = " " * indent

    def _format_cell(text: str, width: int, align: str) -> str:
        if align == "r":
            return text.rjust(width)
        if align == "c":
            return text.center(width)
        return text.ljust(width)

    lines: list[str] = []
    header_line = "  ".join(
        _format_cell(headers[i], widths[i], alignments[i]) for i in range(ncols)
    )
    lines.append(prefix + header_line.rstrip())
    lines.append(prefix + "  ".join("-" * w for w in widths))

    for row in proc_rows:
        row_line = "  ".join(_format_cell(row[i], widths[i], alignments[i]) for i in range(ncols))
        lines.append(prefix + row_line.rstrip())

    return "\n".join(lines)
