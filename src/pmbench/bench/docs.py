"""Point the README's benchmark image at the latest chart."""

from __future__ import annotations

import logging
import re
from pathlib import Path

log = logging.getLogger("pmbench")

IMAGE_ALT = "Benchmark results"
_IMAGE_RE = re.compile(r"!\[" + re.escape(IMAGE_ALT) + r"\]\([^)\n]*\)")


def image_reference(image_relpath: str) -> str:
    """Markdown image reference for the chart at *image_relpath*."""
    return f"![{IMAGE_ALT}]({image_relpath})"


def replace_image_reference(text: str, image_relpath: str) -> str:
    """Return *text* with the benchmark image pointing at *image_relpath*.

    Every existing ``![Benchmark results](...)`` reference is rewritten.
    If there is none, one is appended on its own line.
    """
    new_ref = image_reference(image_relpath)
    if _IMAGE_RE.search(text):
        return _IMAGE_RE.sub(lambda _m: new_ref, text)
    if text and not text.endswith("\n"):
        text += "\n"
    separator = "\n" if text else ""
    return f"{text}{separator}{new_ref}\n"


def update_readme(readme_path: Path, image_path: Path) -> bool:
    """Rewrite the benchmark image reference in *readme_path*.

    The reference is made relative to the README's directory, with
    forward slashes so it renders on any host.

    Returns:
        True if the file changed.
    """
    try:
        rel = image_path.resolve().relative_to(readme_path.resolve().parent)
    except ValueError:
        rel = image_path
    image_relpath = rel.as_posix()

    original = readme_path.read_text(encoding="utf-8")
    updated = replace_image_reference(original, image_relpath)
    if updated == original:
        log.debug("%s already references %s", readme_path, image_relpath)
        return False

    readme_path.write_text(updated, encoding="utf-8")
    log.info("Updated %s to show %s", readme_path, image_relpath)
    return True
